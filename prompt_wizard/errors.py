# prompt_wizard/errors.py


class WizardError(Exception):
    """
    Base for every failure the wizard surfaces to its caller.
    `message` is safe to show to the end user.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(WizardError):
    """Missing credentials or configuration. Fatal: retrying will not help."""


class GatewayError(WizardError):
    """Transport failure or unusable reply from the text-generation service."""


class ParseError(WizardError):
    """The completion did not carry a well-formed structured object."""


class ValidationError(WizardError):
    """Local input problem (empty intent, required field unanswered)."""


class InvalidStateError(WizardError):
    """The operation is not allowed in the session's current state."""


class SessionBusyError(WizardError):
    """A generation call is already outstanding for this session."""


class GenerationFailure(WizardError):
    """The next question could not be produced. The session is unchanged."""


class SynthesisFailure(WizardError):
    """The final prompt could not be produced. The session is unchanged."""
