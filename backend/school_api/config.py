"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    SQL_ECHO: bool
    DEFAULT_PAGE_LIMIT: int
    MAX_PAGE_LIMIT: int
    ALLOW_DEV_CORS: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'app.db'}")
        self.SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
        self.DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
        self.MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.DEFAULT_PAGE_LIMIT < 1:
            raise RuntimeError("DEFAULT_PAGE_LIMIT must be at least 1")
        if self.MAX_PAGE_LIMIT < self.DEFAULT_PAGE_LIMIT:
            raise RuntimeError("MAX_PAGE_LIMIT must not be lower than DEFAULT_PAGE_LIMIT")


settings = Settings()
