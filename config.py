"""Application configuration."""
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ProductApiConfig:
    """Connection settings for a product admin API."""

    base_url: str = "http://localhost:3000/api/v1/admin"
    api_key: str = ""  # Read from env or prompted
    timeout: int = 10
    spec_url: Optional[str] = None  # Overrides spec location discovery

    @classmethod
    def from_env(cls) -> "ProductApiConfig":
        """Load config from environment variables."""
        return cls(
            base_url=os.getenv("FRECKLE_API_URL", "http://localhost:3000/api/v1/admin"),
            api_key=os.getenv("FRECKLE_API_KEY", ""),
            timeout=int(os.getenv("FRECKLE_API_TIMEOUT", "10")),
            spec_url=os.getenv("FRECKLE_SPEC_URL") or None,
        )


@dataclass
class AppConfig:
    """Application configuration."""

    output_dir: str = "./output"
    cache_dir: str = "./.cache/specs"
    cache_ttl: int = 3600
    max_schema_depth: int = 10
    product_api: ProductApiConfig = None

    def __post_init__(self):
        """Fill defaults."""
        if self.product_api is None:
            self.product_api = ProductApiConfig.from_env()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            output_dir=os.getenv("FRECKLE_OUTPUT_DIR", "./output"),
            cache_dir=os.getenv("FRECKLE_CACHE_DIR", "./.cache/specs"),
            cache_ttl=int(os.getenv("FRECKLE_CACHE_TTL", "3600")),
            max_schema_depth=int(os.getenv("FRECKLE_MAX_SCHEMA_DEPTH", "10")),
            product_api=ProductApiConfig.from_env(),
        )


# Global instance
app_config = AppConfig.from_env()
