"""Configuration management for cloudleaf.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

PASSWORD_HASHERS = ("bcrypt", "plaintext")


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Config:
    """Application configuration."""

    # Database (":memory:" keeps all state for the process lifetime only)
    db_path: str

    # Lending
    loan_days: int
    sweep_interval: float  # seconds

    # Users
    default_trust_score: float
    password_hasher: str

    # Summaries
    gemini_api_key: Optional[str]
    summary_model: str
    summary_timeout: int  # seconds

    # Logging
    log_level: str

    default_wishlist: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            db_path=os.environ.get("CLOUDLEAF_DB_PATH", ":memory:"),
            loan_days=int(os.environ.get("CLOUDLEAF_LOAN_DAYS", "14")),
            sweep_interval=float(os.environ.get("CLOUDLEAF_SWEEP_INTERVAL", "60")),
            default_trust_score=float(
                os.environ.get("CLOUDLEAF_DEFAULT_TRUST_SCORE", "4.0")
            ),
            password_hasher=os.environ.get("CLOUDLEAF_PASSWORD_HASHER", "bcrypt").lower(),
            gemini_api_key=os.environ.get("GEMINI_API_KEY"),
            summary_model=os.environ.get("CLOUDLEAF_SUMMARY_MODEL", "gemini-2.5-flash"),
            summary_timeout=int(os.environ.get("CLOUDLEAF_SUMMARY_TIMEOUT", "30")),
            log_level=os.environ.get("CLOUDLEAF_LOG_LEVEL", "WARNING").upper(),
            default_wishlist=_split_csv(
                os.environ.get("CLOUDLEAF_DEFAULT_WISHLIST", "The Great Gatsby,1984")
            ),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.loan_days <= 0:
            errors.append(f"Loan period must be positive, got {self.loan_days}")
        if self.sweep_interval <= 0:
            errors.append(f"Sweep interval must be positive, got {self.sweep_interval}")
        if self.password_hasher not in PASSWORD_HASHERS:
            errors.append(
                f"Unknown password hasher '{self.password_hasher}' "
                f"(expected one of: {', '.join(PASSWORD_HASHERS)})"
            )

        return errors

    def has_summary_config(self) -> bool:
        """Check if the text-generation API key is present."""
        return bool(self.gemini_api_key)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
