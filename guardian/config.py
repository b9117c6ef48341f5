"""
Runtime configuration for LGPD Guardian.

Values are read from environment variables. A ``.env`` file at the project
root is loaded first so local development does not need exported variables.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# Values that mean "not configured" when copied from the example .env file
PLACEHOLDER_KEYS = {"", "undefined", "YOUR_KEY_HERE", "SUA_CHAVE_AQUI"}


class Config:
    APP_NAME = "LGPD Guardian"
    APP_VERSION = "1.0"

    # Generative model
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    AI_MODEL = os.getenv("AI_MODEL", "gemini-2.5-flash")
    CONTENT_LANGUAGE = os.getenv("CONTENT_LANGUAGE", "Brazilian Portuguese")

    # Web layer
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-key-change-in-production")
    ENVIRONMENT = os.getenv("FLASK_ENV", "development")
    MAX_WORKSPACES = int(os.getenv("MAX_WORKSPACES", "1000"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "logs")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def ai_configured(self) -> bool:
        return self.GEMINI_API_KEY not in PLACEHOLDER_KEYS


config = Config()
