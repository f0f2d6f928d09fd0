# prompt_wizard/google_helpers.py

import logging
import os

from dotenv import load_dotenv
from google.auth import default as google_auth_default
from google.auth.exceptions import DefaultCredentialsError
from google.oauth2 import service_account
from sqlalchemy import create_engine

from prompt_wizard.errors import ConfigurationError

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("prompt_wizard")

# --- Configuration ---
PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT", "your-project-id")
REGION = os.getenv("GOOGLE_CLOUD_REGION", "us-central1")

MODEL_NAME = os.getenv("WIZARD_MODEL_NAME", "gemini-2.0-flash")
LLM_TIMEOUT = float(os.getenv("WIZARD_LLM_TIMEOUT", "0")) or None

MAX_QUESTIONS = int(os.getenv("WIZARD_MAX_QUESTIONS", "15"))

# "memory" keeps snapshots in-process, "sql" keeps them in DATABASE_URL
SESSION_STORE = os.getenv("WIZARD_SESSION_STORE", "memory").lower()
SESSION_TTL_SECONDS = int(os.getenv("WIZARD_SESSION_TTL_SECONDS", str(24 * 3600)))
SESSION_KEY = "prompt-builder"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///wizard_sessions.db")


def build_creds():
    """
    Service-account file when GOOGLE_APPLICATION_CREDENTIALS points at one,
    application-default credentials otherwise.
    """
    key_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    scopes = ["https://www.googleapis.com/auth/cloud-platform"]
    try:
        if key_path and os.path.exists(key_path):
            return service_account.Credentials.from_service_account_file(key_path, scopes=scopes)
        creds, _ = google_auth_default(scopes=scopes)
    except (DefaultCredentialsError, ValueError, KeyError) as e:
        # malformed key files surface as ValueError/KeyError from google.oauth2
        raise ConfigurationError("Google credentials are not configured for the text-generation service.") from e
    return creds


def get_db_engine(url: str | None = None):
    url = url or DATABASE_URL
    if url.startswith("sqlite"):
        logger.info(f"[DB] Using SQLite URL: {url}")
        return create_engine(url, connect_args={"check_same_thread": False})

    logger.info("[DB] Connecting to %s", url.split("@")[-1])
    return create_engine(url, future=True, pool_pre_ping=True)
