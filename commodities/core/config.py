import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{(DATA_DIR / 'database.sqlite').as_posix()}")

APP_NAME = "Slooze Commodities Management System"

# Sessions
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))
SESSION_BACKEND = os.getenv("SESSION_BACKEND", "memory").strip().lower()
if SESSION_BACKEND not in {"memory", "database"}:
    SESSION_BACKEND = "memory"

# Passwords
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "1" if IS_DEV else "0").strip().lower() in {
    "1",
    "true",
    "yes",
    "on",
}

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and not IS_PROD:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:5174",
    ]
