"""
Configuration management.
"""

import os
from dataclasses import dataclass, field


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Upstream service intake API
    service_intake_api_url: str = field(
        default_factory=lambda: os.getenv("SERVICE_INTAKE_API_URL", "").strip().rstrip("/")
    )
    service_intake_api_key: str = field(
        default_factory=lambda: os.getenv("SERVICE_INTAKE_API_KEY", "").strip()
    )
    request_timeout: int = field(default_factory=lambda: int(os.getenv("REQUEST_TIMEOUT", "30")))

    # Submit retry policy
    max_retries: int = field(default_factory=lambda: int(os.getenv("MAX_RETRIES", "3")))
    retry_base_delay: float = field(
        default_factory=lambda: float(os.getenv("RETRY_BASE_DELAY", "0.5"))
    )
    retry_multiplier: float = field(
        default_factory=lambda: float(os.getenv("RETRY_MULTIPLIER", "2.0"))
    )

    # Drafts
    draft_dir: str = field(default_factory=lambda: os.getenv("DRAFT_DIR", "./data/drafts"))

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def is_upstream_configured(self) -> bool:
        return bool(self.service_intake_api_url and self.service_intake_api_key)

    def to_dict(self) -> dict:
        """Convert config to dictionary. The API key is never included."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "service_intake_api_url": self.service_intake_api_url,
            "upstream_configured": self.is_upstream_configured,
            "request_timeout": self.request_timeout,
            "max_retries": self.max_retries,
            "retry_base_delay": self.retry_base_delay,
            "retry_multiplier": self.retry_multiplier,
            "draft_dir": self.draft_dir,
        }
