"""
Introspection Module

Turns a product's OpenAPI document into data the console can render generically.
Supports:
- Spec discovery and caching (JSON or YAML)
- $ref resolution with cycle and depth protection
- Resource tree building with operation classification
"""

from .schema_resolver import resolve_schema, extract_ref_name
from .spec_parser import SpecParser
from .spec_introspector import ApiSpecIntrospector, load_spec_file

__all__ = [
    "ApiSpecIntrospector",
    "SpecParser",
    "extract_ref_name",
    "load_spec_file",
    "resolve_schema",
]
