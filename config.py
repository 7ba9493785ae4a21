"""Environment-driven settings and logging setup for Flux."""
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings:
    """Read configuration from the environment (and a local .env file)."""

    def __init__(self) -> None:
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./flux.db")
        self.ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
        # Both must be present for real session enforcement
        self.REPL_ID = os.getenv("REPL_ID", "")
        self.ISSUER_URL = os.getenv("ISSUER_URL", "")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def auth_enforced(self) -> bool:
        return bool(self.REPL_ID and self.ISSUER_URL)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure root logging once and return the application logger.

    Unknown level names fall back to INFO.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    return logging.getLogger("flux")


settings = Settings()
