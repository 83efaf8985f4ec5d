"""
Schema Resolver - Dereferences $ref pointers in OpenAPI component schemas.

Supports:
- OpenAPI 3.x style references: #/components/schemas/Name
- Nested properties, array items, oneOf/anyOf/allOf, additionalProperties
- Circular reference protection (per-branch visited names)
- Depth limiting for pathological documents

Unresolvable references are left in place; nothing here raises.
"""

import logging
import re
from typing import Any, Dict, FrozenSet, Optional

from freckle.schema.models import JsonSchema

logger = logging.getLogger(__name__)

REF_PATTERN = re.compile(r"^#/components/schemas/(.+)$")

COMPOSITION_KEYWORDS = ("oneOf", "anyOf", "allOf")

DEFAULT_MAX_DEPTH = 10


def extract_ref_name(ref: Any) -> Optional[str]:
    """
    Extract the schema name from a reference string

    "#/components/schemas/Foo" -> "Foo"; any other form -> None
    """
    if not isinstance(ref, str):
        return None
    match = REF_PATTERN.match(ref)
    return match.group(1) if match else None


def resolve_schema(
    schema: Optional[JsonSchema],
    components: Dict[str, JsonSchema],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Optional[JsonSchema]:
    """
    Resolve all $ref pointers in a schema against the component schemas

    Args:
        schema: Schema node (may be None)
        components: The document's components.schemas table
        max_depth: Nesting depth after which nodes are returned as-is

    Returns:
        A new schema tree with refs replaced by their definitions, or None
        when no schema was given. Inputs are never mutated.
    """
    if schema is None:
        return None
    return _resolve(schema, components or {}, 0, max_depth, frozenset())


def _resolve(
    schema: JsonSchema,
    components: Dict[str, JsonSchema],
    depth: int,
    max_depth: int,
    visited: FrozenSet[str],
) -> JsonSchema:
    if depth > max_depth or not isinstance(schema, dict):
        return schema

    if "$ref" in schema:
        ref = schema["$ref"]
        ref_name = extract_ref_name(ref)
        if ref_name is None:
            logger.debug(f"Unsupported reference left unresolved: {ref}")
            return schema
        if ref_name in visited:
            logger.debug(f"Circular reference detected: {ref}")
            return schema
        target = components.get(ref_name)
        if target is None:
            logger.debug(f"Reference target not found: {ref}")
            return schema
        return _resolve(target, components, depth + 1, max_depth, visited | {ref_name})

    result = dict(schema)

    properties = result.get("properties")
    if isinstance(properties, dict):
        result["properties"] = {
            key: _resolve(prop, components, depth + 1, max_depth, visited)
            for key, prop in properties.items()
        }

    items = result.get("items")
    if isinstance(items, dict):
        result["items"] = _resolve(items, components, depth + 1, max_depth, visited)

    for keyword in COMPOSITION_KEYWORDS:
        variants = result.get(keyword)
        if isinstance(variants, list):
            result[keyword] = [
                _resolve(variant, components, depth + 1, max_depth, visited)
                for variant in variants
            ]

    # A boolean additionalProperties is not a schema
    additional = result.get("additionalProperties")
    if isinstance(additional, dict):
        result["additionalProperties"] = _resolve(
            additional, components, depth + 1, max_depth, visited
        )

    return result
