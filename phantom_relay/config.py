"""
Configuration management for the PhantomBuster relay.
"""

from pydantic_settings import BaseSettings

DEFAULT_TITLES = [
    "Product Regulatory Manager",
    "Regulatory Compliance Director",
    "Product Stewardship Director",
    "Product Sustainability Director",
]


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # PhantomBuster
    phantombuster_api_key: str = ""
    phantombuster_agent_id: str = ""
    phantombuster_api_url: str = "https://api.phantombuster.com"
    request_timeout: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "*"
    search_rate_limit: str = "30/minute"
    log_level: str = "INFO"

    # Polling
    max_wait_seconds: float = 25.0
    poll_interval_seconds: float = 3.0
    max_results: int = 200

    # Launching
    launch_mode: str = "staggered"  # staggered/parallel
    launch_base_delay_seconds: float = 1.5
    launch_attempts: int = 3
    launch_backoff_factor: float = 2.0
    launch_jitter_seconds: float = 0.75
    launch_max_backoff_seconds: float = 30.0

    # Batch table (ttl 0 = keep for process lifetime)
    batch_ttl_seconds: float = 0
    batch_max_entries: int = 1000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars

    def missing_credentials(self) -> list[str]:
        """Names of required PhantomBuster variables that are not set."""
        missing = []
        if not self.phantombuster_api_key:
            missing.append("PHANTOMBUSTER_API_KEY")
        if not self.phantombuster_agent_id:
            missing.append("PHANTOMBUSTER_AGENT_ID")
        return missing


settings = Settings()
