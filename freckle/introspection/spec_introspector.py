"""
API Spec Introspector - Fetches a product's OpenAPI document.

Features:
- Discovery across well-known spec locations (or an explicit spec URL)
- JSON and YAML documents
- In-memory and file caching with TTL
- Bearer token authentication
"""

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests
import yaml

from freckle.introspection.schema_resolver import DEFAULT_MAX_DEPTH
from freckle.introspection.spec_parser import SpecParser
from freckle.schema.models import ParsedSpec

logger = logging.getLogger(__name__)


def decode_spec_document(text: str) -> Optional[Dict[str, Any]]:
    """
    Decode an OpenAPI document body

    Tries JSON first, then YAML. Returns None if the body is neither or does
    not decode to a mapping.
    """
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            logger.warning(f"Spec body is neither JSON nor YAML: {e}")
            return None
    return data if isinstance(data, dict) else None


def load_spec_file(path: Path) -> Dict[str, Any]:
    """
    Load an OpenAPI document from disk

    Raises:
        ValueError: If the file does not hold a JSON/YAML mapping
    """
    text = Path(path).read_text(encoding="utf-8")
    spec = decode_spec_document(text)
    if spec is None:
        raise ValueError(f"{path} does not contain an OpenAPI document")
    return spec


class ApiSpecIntrospector:
    """
    Fetches and parses the OpenAPI document of a product admin API

    Usage:
    ```python
    introspector = ApiSpecIntrospector(
        api_url="http://localhost:3000/api/v1/admin",
        api_key="secret",
    )
    parsed = introspector.get_parsed_spec("my-product")
    print(f"Found {len(parsed.all_operations)} operations")
    ```
    """

    # Common spec locations, tried against the base URL and then the origin
    SPEC_ENDPOINTS = [
        "/openapi.json",
        "/openapi.yaml",
        "/swagger.json",
        "/v1/swagger.json",
        "/api/swagger.json",
        "/docs/openapi.json",
        "/api-docs",
    ]

    # Cache TTL in seconds (1 hour)
    CACHE_TTL = 3600

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout: int = 30,
        cache_dir: Optional[Path] = None,
        cache_ttl: Optional[int] = None,
    ):
        """
        Initialize API Spec Introspector

        Args:
            api_url: Product admin base URL (e.g., http://host/api/v1/admin)
            api_key: Bearer token (optional)
            timeout: HTTP request timeout in seconds
            cache_dir: Directory for cached documents (optional)
            cache_ttl: Cache lifetime in seconds (defaults to CACHE_TTL)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.cache_ttl = self.CACHE_TTL if cache_ttl is None else cache_ttl
        self.cache_dir = Path(cache_dir) if cache_dir else Path(".cache/specs")

        self.session = requests.Session()
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

        # cache key -> (document, fetched at)
        self._specs: Dict[str, Tuple[Dict[str, Any], float]] = {}

    def candidate_urls(self, custom_url: Optional[str] = None) -> List[str]:
        """List the URLs tried for the spec, in order."""
        if custom_url:
            return [custom_url]

        parsed = urlparse(self.api_url)
        origin = f"{parsed.scheme}://{parsed.netloc}" if parsed.scheme and parsed.netloc else ""

        urls = [f"{self.api_url}{endpoint}" for endpoint in self.SPEC_ENDPOINTS]
        if origin and origin != self.api_url:
            urls.extend(f"{origin}{endpoint}" for endpoint in self.SPEC_ENDPOINTS)
        return urls

    def fetch_raw_spec(
        self, custom_url: Optional[str] = None, force_refresh: bool = False
    ) -> Dict[str, Any]:
        """
        Get the raw OpenAPI document, using caches when valid

        Args:
            custom_url: Explicit spec URL (skips location discovery)
            force_refresh: Bypass memory and file caches

        Returns:
            Decoded OpenAPI document

        Raises:
            RuntimeError: If no location returned a spec
        """
        cache_key = custom_url or self.api_url
        if not force_refresh and self._is_cache_valid(cache_key):
            logger.info("Using cached spec")
            return self._specs[cache_key][0]

        spec = None if force_refresh else self._try_load_file_cache(cache_key)
        if spec is not None:
            logger.info("Loaded spec from file cache")
        else:
            spec = self._fetch_from_api(custom_url)
            if spec is None:
                raise RuntimeError(
                    f"Could not fetch OpenAPI spec for {self.api_url}. "
                    f"Tried: {self.candidate_urls(custom_url)}"
                )
            self._save_file_cache(cache_key, spec)

        self._specs[cache_key] = (spec, time.time())
        return spec

    def get_parsed_spec(
        self,
        product_id: str,
        custom_url: Optional[str] = None,
        force_refresh: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> ParsedSpec:
        """
        Fetch the spec and build the product's resource tree

        Raises:
            RuntimeError: If no spec could be fetched
            ValueError: If the document is not an OpenAPI document
        """
        spec = self.fetch_raw_spec(custom_url, force_refresh)
        parsed = SpecParser(max_depth=max_depth).parse(spec, self.api_url, product_id)
        logger.info(f"Introspected {len(parsed.all_operations)} operations for {product_id}")
        return parsed

    def _fetch_from_api(self, custom_url: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Try every candidate URL until one returns a document"""
        for url in self.candidate_urls(custom_url):
            try:
                logger.debug(f"Trying spec endpoint: {url}")
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.exceptions.RequestException as e:
                logger.debug(f"Failed to fetch from {url}: {e}")
                continue

            spec = decode_spec_document(response.text)
            if spec is None or not ("openapi" in spec or "swagger" in spec):
                logger.warning(f"Response from {url} is not an OpenAPI document")
                continue

            logger.info(f"Successfully fetched spec from {url}")
            return spec

        logger.error("Could not fetch OpenAPI spec from any endpoint")
        return None

    def _try_load_file_cache(self, cache_key: str) -> Optional[Dict[str, Any]]:
        """Try to load a cached document from file"""
        cache_file = self._get_cache_file_path(cache_key)
        if not cache_file.exists():
            return None

        if time.time() - cache_file.stat().st_mtime > self.cache_ttl:
            logger.debug(f"Cache file expired: {cache_file}")
            return None

        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Error loading cache file: {e}")
            return None

    def _save_file_cache(self, cache_key: str, spec: Dict[str, Any]) -> None:
        """Save a document to the file cache"""
        cache_file = self._get_cache_file_path(cache_key)
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(cache_file, "w", encoding="utf-8") as f:
                json.dump(spec, f, indent=2, default=str)
            logger.debug(f"Saved spec to cache file: {cache_file}")
        except OSError as e:
            logger.warning(f"Error saving cache file: {e}")

    def _get_cache_file_path(self, cache_key: str) -> Path:
        """Get cache file path for a URL"""
        url_hash = hashlib.md5(cache_key.encode()).hexdigest()[:8]
        return self.cache_dir / f"spec_{url_hash}.json"

    def _is_cache_valid(self, cache_key: str) -> bool:
        """Check if the in-memory document for a location is still valid"""
        entry = self._specs.get(cache_key)
        if entry is None:
            return False
        return time.time() - entry[1] < self.cache_ttl
