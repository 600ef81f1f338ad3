"""Application configuration.

Environment variables override all defaults. Company profile and catalog
are user data (see services.settings_service), not configuration.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load backend/.env for local development; real environment variables win
_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./billing.db")

    # Invoice numbering: first issued number is floor + 1
    INVOICE_NUMBER_FLOOR: int = int(os.getenv("INVOICE_NUMBER_FLOOR", "1404"))
    DEFAULT_EXTRA_CHARGES_LABEL: str = os.getenv("DEFAULT_EXTRA_CHARGES_LABEL", "Extra Charges")

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")


settings = Settings()
