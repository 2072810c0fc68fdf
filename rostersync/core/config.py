"""
Configuration management for the committee registry.
"""
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

# Width of the per-call signer bitset; committees can never be larger.
MAX_COMMITTEE_BITS = 255

SIGNING_SCHEMES = ("typed", "personal")
LOG_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Registry settings loaded from environment variables."""

    # Digest domain. Bumping the version invalidates every outstanding signature.
    protocol_name: str = "CommitteeSync"
    protocol_version: str = "1"
    signing_scheme: str = "typed"

    # Roster policy
    threshold_bps: int = 6000
    min_committee_size: int = 3
    max_committee_size: int = MAX_COMMITTEE_BITS

    # Host state
    state_file: Optional[str] = None

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("signing_scheme")
    @classmethod
    def validate_signing_scheme(cls, v):
        """Only the schemes the signer helpers know how to wrap are accepted."""
        v = v.lower()
        if v not in SIGNING_SCHEMES:
            raise ValueError(f"signing_scheme must be one of {SIGNING_SCHEMES}")
        return v

    @field_validator("threshold_bps")
    @classmethod
    def validate_threshold(cls, v):
        """Threshold is expressed in basis points of the committee size."""
        if not 1 <= v <= 10_000:
            raise ValueError("threshold_bps must be between 1 and 10000")
        return v

    @field_validator("min_committee_size")
    @classmethod
    def validate_min_size(cls, v):
        if v < 1:
            raise ValueError("min_committee_size must be positive")
        return v

    @field_validator("max_committee_size")
    @classmethod
    def validate_max_size(cls, v):
        """The signer bitset caps the committee length."""
        if not 1 <= v <= MAX_COMMITTEE_BITS:
            raise ValueError(f"max_committee_size must be between 1 and {MAX_COMMITTEE_BITS}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")
        return v

    @field_validator("protocol_name", "protocol_version")
    @classmethod
    def validate_domain_field(cls, v):
        if not v:
            raise ValueError("Domain name and version must be non-empty")
        return v

    @model_validator(mode="after")
    def validate_size_bounds(self):
        if self.min_committee_size > self.max_committee_size:
            raise ValueError("min_committee_size cannot exceed max_committee_size")
        return self

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "env_prefix": "ROSTERSYNC_",
        "extra": "ignore",
    }


# Create global settings instance
settings = Settings()


def get_settings():
    return settings
