"""Product admin API client."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from config import ProductApiConfig

logger = logging.getLogger(__name__)


class ProductApiError(Exception):
    """The product answered with an error status or error envelope."""

    def __init__(self, status_code: int, error_code: str, message: str, endpoint: str):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"{error_code}: {message} ({status_code} on {endpoint})")


class ProductNetworkError(Exception):
    """The product could not be reached."""

    def __init__(self, endpoint: str, cause: Exception):
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(f"Network error on {endpoint}: {cause}")


@dataclass
class ClassifiedError:
    """User-facing description of a client error"""

    category: str  # "auth", "not_found", "validation", "rate_limited", "network", "server"
    user_message: str
    retryable: bool
    retry_after_ms: Optional[int] = None


def classify_error(error: Exception) -> ClassifiedError:
    """Map a client error to a category and user message."""
    if isinstance(error, ProductNetworkError):
        return ClassifiedError(
            category="network",
            user_message=(
                f"Could not reach the product at {error.endpoint}. "
                "It may be offline or experiencing issues."
            ),
            retryable=True,
            retry_after_ms=5000,
        )

    if isinstance(error, ProductApiError):
        path = urlparse(error.endpoint).path or error.endpoint
        if error.status_code in (401, 403):
            return ClassifiedError("auth", "Authentication failed. The API key may be invalid or rotated.", False)
        if error.status_code == 404:
            return ClassifiedError("not_found", f"The endpoint {path} was not found on this product.", False)
        if error.status_code == 429:
            return ClassifiedError("rate_limited", "The product is rate limiting requests. Try again shortly.", True, 30000)
        if 400 <= error.status_code < 500:
            return ClassifiedError("validation", f"The product rejected the request: {error.message}", False)

    return ClassifiedError("server", f"The product returned an error: {error}", True, 10000)


class ProductClient:
    """Client for a product's admin API."""

    def __init__(self, config: ProductApiConfig):
        """Initialize client."""
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.session = requests.Session()

        if config.api_key:
            self.session.headers.update({"Authorization": f"Bearer {config.api_key}"})

    def build_url(self, path: str) -> str:
        """Join an admin path (e.g. /stats) onto the base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET an admin endpoint and return its decoded body

        The ``{"success": ..., "data": ...}`` envelope is unwrapped when present.

        Raises:
            ProductApiError: On HTTP error status or a failed envelope
            ProductNetworkError: On connection errors and timeouts
        """
        url = self.build_url(path)
        try:
            response = self.session.get(url, params=params, timeout=self.config.timeout)
        except requests.exceptions.RequestException as e:
            raise ProductNetworkError(url, e) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            error = body.get("error") if isinstance(body, dict) else None
            error = error if isinstance(error, dict) else {}
            raise ProductApiError(
                response.status_code,
                error.get("code", "HTTP_ERROR"),
                error.get("message", response.reason or "Request failed"),
                url,
            )

        if isinstance(body, dict) and "success" in body:
            if not body["success"]:
                error = body.get("error")
                if isinstance(error, str) and error:
                    error = {"message": error}
                error = error if isinstance(error, dict) else {}
                raise ProductApiError(
                    response.status_code,
                    error.get("code", "UNKNOWN"),
                    error.get("message", "Request failed"),
                    url,
                )
            logger.debug(f"Unwrapped envelope from {url}")
            return body.get("data")

        return body
