import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# --- Auth ---
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
PASSWORD_HASH_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "12"))

# Role ids as stored in the roles table. Deployments seed
# "admin" first and "customer" second.
ADMIN_ROLE_ID = int(os.getenv("ADMIN_ROLE_ID", "1"))
INVOICING_ROLE_ID = int(os.getenv("INVOICING_ROLE_ID", "2"))

# --- Rate limiting ---
RATE_LIMIT_ENABLED = _flag("RATE_LIMIT_ENABLED", "true")
LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "5/minute")

# --- Persistence ---
DB_ECHO = _flag("DB_ECHO", "false")
TRANSACTION_ATTEMPTS = int(os.getenv("TRANSACTION_ATTEMPTS", "5"))
TRANSACTION_BACKOFF_SECONDS = float(os.getenv("TRANSACTION_BACKOFF_SECONDS", "0.05"))

# --- Observability ---
SERVICE_NAME = os.getenv("SERVICE_NAME", "invoicing")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")  # tracing is off unless this is set
