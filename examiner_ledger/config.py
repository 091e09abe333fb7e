"""Application configuration."""

import os
from dataclasses import dataclass


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # API settings
    host: str = "0.0.0.0"
    port: int = 8000

    # speedrun.com API
    speedrun_api_url: str = "https://www.speedrun.com/api/v1"
    request_timeout: float = 30.0
    user_agent: str = "examiner-ledger/1.0"

    # Pagination: the API caps pages at 200 entries and allows roughly
    # 100 requests per rate-limit window
    page_size: int = 200
    max_pages: int = 100
    max_in_flight: int = 1

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            speedrun_api_url=os.getenv(
                "SPEEDRUN_API_URL",
                "https://www.speedrun.com/api/v1"
            ),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
            user_agent=os.getenv("USER_AGENT", "examiner-ledger/1.0"),
            page_size=int(os.getenv("PAGE_SIZE", "200")),
            max_pages=int(os.getenv("MAX_PAGES", "100")),
            max_in_flight=int(os.getenv("MAX_IN_FLIGHT", "1")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
