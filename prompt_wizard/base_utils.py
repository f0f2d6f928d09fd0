# prompt_wizard/base_utils.py


import logging
import re

import commentjson

from prompt_wizard.errors import ParseError

logger = logging.getLogger("prompt_wizard")


class BaseUtils():

    # -----------------------
    # General Utils
    # -----------------------

    def unsafe_string_format(self, dest_string, print_unused_keys_report=True, **kwargs):
        """
        Replaces {KEY} placeholders with the matching kwargs values.

        Unlike str.format, only the keys passed in kwargs are substituted: any other
        brace pair (e.g. literal JSON in a prompt template) is left untouched.
        """
        missing_keys = []

        def replacer(match):
            key = match.group(1)
            if key in kwargs:
                return str(kwargs[key])
            missing_keys.append(key)
            return match.group(0)

        pattern = re.compile(r'\{(\w+)\}')
        result = pattern.sub(replacer, dest_string)
        if missing_keys and print_unused_keys_report:
            logger.debug(f"Missing keys within string-to-format in unsafe_string_format: {', '.join(missing_keys)}")
        return result

    # -----------------------
    # Structured replies
    # -----------------------

    def extract_structured_object(self, text: str) -> dict:
        """
        Pull the embedded object out of a free-text completion: everything from the
        first '{' to the last '}' is parsed as one record. No repair, no second guess.
        """
        if not isinstance(text, str):
            raise ParseError("The response did not contain any text.")

        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end <= start:
            raise ParseError("The response did not contain a structured object.")

        candidate = text[start:end + 1]
        try:
            data = commentjson.loads(candidate)
        except Exception as e:
            logger.info(f"extract_structured_object: parse failed: {e}")
            raise ParseError("The response contained a malformed structured object.") from e

        if not isinstance(data, dict):
            raise ParseError("The response contained a malformed structured object.")
        return data
