"""
Spec Parser - Turns an OpenAPI document into a product resource tree.

Supports:
- OpenAPI 3.x documents (JSON or YAML, already decoded)
- Admin prefix detection and stripping
- Operation classification (list, detail, create, update, delete, ...)
- Dot-separated resource keys with parent/child nesting
- $ref resolution of request and response schemas
"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from freckle.introspection.schema_resolver import DEFAULT_MAX_DEPTH, resolve_schema
from freckle.schema.format import to_title_case
from freckle.schema.models import (
    ApiOperation,
    ApiResource,
    JsonSchema,
    OperationType,
    ParsedSpec,
)

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

PATH_PARAM_PATTERN = re.compile(r"\{([^}]+)\}")
API_PATH_PATTERN = re.compile(r"(/api/.+)")


def detect_admin_prefix(base_url: str) -> str:
    """
    Detect the admin API prefix from a product base URL

    "http://localhost:3000/api/v1/admin/" -> "/api/v1/admin"
    """
    parsed = urlparse(base_url or "")
    if parsed.scheme and parsed.netloc:
        return parsed.path.rstrip("/")
    match = API_PATH_PATTERN.search(base_url or "")
    return match.group(1).rstrip("/") if match else ""


def extract_path_parameters(path: str) -> List[str]:
    """
    Extract parameter names from a path template

    "/users/{userId}/credits/{creditId}" -> ["userId", "creditId"]
    """
    return PATH_PARAM_PATTERN.findall(path)


def path_to_resource_key(path: str) -> str:
    """
    Convert a path template to a dot-separated resource key

    "/users/{userId}/credits" -> "users.credits"; "/stats/trends" -> "stats.trends"
    """
    segments = [s for s in path.split("/") if s and not s.startswith("{")]
    return ".".join(segments) or "root"


def classify_operation(method: str, path: str) -> OperationType:
    """Classify an operation by HTTP method and path shape."""
    segments = [s for s in path.split("/") if s]
    last_segment = segments[-1] if segments else ""
    has_trailing_param = last_segment.startswith("{")
    param_count = sum(1 for s in segments if s.startswith("{"))
    resource_segments = [s for s in segments if not s.startswith("{")]
    is_sub_resource = param_count > 0 and len(resource_segments) > 1

    if method == "GET":
        if has_trailing_param:
            return OperationType.SUB_DETAIL if is_sub_resource else OperationType.DETAIL
        if param_count == 0:
            return OperationType.LIST
        return OperationType.SUB_LIST

    if method == "POST":
        if param_count == 0 and len(resource_segments) == 1:
            return OperationType.CREATE
        if param_count > 0:
            return OperationType.SUB_ACTION if is_sub_resource else OperationType.ACTION
        # e.g. POST /operations/run
        return OperationType.ACTION

    if method in ("PATCH", "PUT"):
        if has_trailing_param:
            return OperationType.SUB_ACTION if is_sub_resource else OperationType.UPDATE
        # e.g. PATCH /config or PUT /credits/config/tiers
        if is_sub_resource or param_count > 0:
            return OperationType.SUB_ACTION
        return OperationType.UPDATE

    if method == "DELETE":
        if has_trailing_param:
            return OperationType.SUB_ACTION if is_sub_resource else OperationType.DELETE
        return OperationType.SUB_ACTION if is_sub_resource else OperationType.ACTION

    return OperationType.CUSTOM


class SpecParser:
    """Parses OpenAPI documents into ParsedSpec resource trees"""

    RESPONSE_STATUSES = ("200", "201")
    JSON_CONTENT_TYPE = "application/json"

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize parser

        Args:
            max_depth: Depth limit handed to the schema resolver
        """
        self.max_depth = max_depth

    def parse(self, raw_spec: Dict[str, Any], base_url: str, product_id: str) -> ParsedSpec:
        """
        Parse an OpenAPI document

        Args:
            raw_spec: Decoded OpenAPI document
            base_url: Product admin base URL (its path is the admin prefix)
            product_id: Owning product identifier

        Returns:
            ParsedSpec with the resource tree and flat operation list

        Raises:
            ValueError: If the document is not an OpenAPI/Swagger document
        """
        if not isinstance(raw_spec, dict) or not ("openapi" in raw_spec or "swagger" in raw_spec):
            raise ValueError("Unknown spec format. Expected 'openapi' or 'swagger' key.")
        paths = raw_spec.get("paths")
        if not isinstance(paths, dict):
            raise ValueError("OpenAPI document has no 'paths' object")

        admin_prefix = detect_admin_prefix(base_url)
        components = (raw_spec.get("components") or {}).get("schemas") or {}

        operations = []
        for full_path, path_item in paths.items():
            if not full_path.startswith(admin_prefix) or not isinstance(path_item, dict):
                continue
            stripped_path = full_path[len(admin_prefix):] or "/"
            operations.extend(self._process_path(stripped_path, path_item, components))

        resources = self._build_resource_tree(operations)
        info = raw_spec.get("info") or {}

        logger.info(
            f"Parsed {len(operations)} operations into {len(resources)} top-level "
            f"resources for {product_id}"
        )
        return ParsedSpec(
            product_id=product_id,
            spec_version=str(raw_spec.get("openapi") or raw_spec.get("swagger")),
            api_title=info.get("title", "Unknown API"),
            api_version=str(info.get("version", "")),
            admin_prefix=admin_prefix,
            resources=resources,
            all_operations=operations,
            schemas=components,
        )

    def _process_path(
        self,
        path: str,
        path_item: Dict[str, Any],
        components: Dict[str, JsonSchema],
    ) -> List[ApiOperation]:
        """Process a single path and its methods"""
        operations = []
        path_params = extract_path_parameters(path)
        resource_key = path_to_resource_key(path)

        for method_key, raw_op in path_item.items():
            method = method_key.upper()
            # Skips shared "parameters", "summary", extensions, ...
            if method not in HTTP_METHODS or not isinstance(raw_op, dict):
                continue

            operations.append(ApiOperation(
                id=f"{method}:{path}",
                resource_key=resource_key,
                operation_type=classify_operation(method, path),
                http_method=method,
                path_template=path,
                path_parameters=list(path_params),
                summary=raw_op.get("summary"),
                description=raw_op.get("description"),
                request_body_schema=self._request_body_schema(raw_op, components),
                response_schema=self._response_schema(raw_op, components),
                tags=list(raw_op.get("tags") or []),
            ))

        return operations

    def _request_body_schema(
        self, raw_op: Dict[str, Any], components: Dict[str, JsonSchema]
    ) -> Optional[JsonSchema]:
        content = (raw_op.get("requestBody") or {}).get("content") or {}
        schema = (content.get(self.JSON_CONTENT_TYPE) or {}).get("schema")
        if not schema:
            return None
        return resolve_schema(schema, components, self.max_depth)

    def _response_schema(
        self, raw_op: Dict[str, Any], components: Dict[str, JsonSchema]
    ) -> Optional[JsonSchema]:
        responses = raw_op.get("responses") or {}
        for status in self.RESPONSE_STATUSES:
            # YAML loaders turn unquoted status codes into ints
            response = responses.get(status) or responses.get(int(status)) or {}
            content = response.get("content") or {}
            schema = (content.get(self.JSON_CONTENT_TYPE) or {}).get("schema")
            if schema:
                return resolve_schema(schema, components, self.max_depth)
        return None

    def _build_resource_tree(self, operations: List[ApiOperation]) -> List[ApiResource]:
        """Group operations by resource key and nest resources by key prefix"""
        all_keys: Dict[str, None] = {}
        for op in operations:
            parts = op.resource_key.split(".")
            for i in range(1, len(parts)):
                all_keys.setdefault(".".join(parts[:i]), None)
            all_keys.setdefault(op.resource_key, None)

        resource_map: Dict[str, ApiResource] = {}
        for key in all_keys:
            parts = key.split(".")
            segment = parts[-1]
            resource_map[key] = ApiResource(
                key=key,
                name=to_title_case(segment),
                path_segment=segment,
                parent_key=".".join(parts[:-1]) or None,
                requires_parent_id=self._requires_parent_id(key, operations),
                operations=[op for op in operations if op.resource_key == key],
            )

        top_level = []
        for resource in resource_map.values():
            parent = resource_map.get(resource.parent_key) if resource.parent_key else None
            if parent is not None:
                parent.children.append(resource)
            else:
                top_level.append(resource)

        self._sort_children(top_level)
        return top_level

    def _sort_children(self, resources: List[ApiResource]) -> None:
        resources.sort(key=lambda r: (r.key.casefold(), r.key))
        for resource in resources:
            self._sort_children(resource.children)

    @staticmethod
    def _requires_parent_id(key: str, operations: List[ApiOperation]) -> bool:
        """
        Check if a resource needs a parent entity id in its path

        "users.credits" (/users/{userId}/credits) -> True
        "credits.config.tiers" (/credits/config/tiers) -> False
        """
        last_part = key.split(".")[-1]
        own_ops = [op for op in operations if op.resource_key == key]

        if not own_ops:
            # Intermediate resource: infer from descendants
            for op in operations:
                if not op.resource_key.startswith(key + "."):
                    continue
                idx = op.path_template.find(f"/{last_part}")
                if idx >= 0 and PATH_PARAM_PATTERN.search(op.path_template[:idx]):
                    return True
            return False

        for op in own_ops:
            segments = [s for s in op.path_template.split("/") if s]
            if last_part not in segments:
                continue
            seg_index = segments.index(last_part)
            if any(s.startswith("{") for s in segments[:seg_index]):
                return True
        return False
