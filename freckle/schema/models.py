"""Models for parsed OpenAPI resource trees and introspection results."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

# JSON Schema nodes are kept as the plain dicts produced by json/yaml loading.
JsonSchema = Dict[str, Any]


class OperationType(str, Enum):
    """Role of an operation inside its resource."""

    LIST = "list"  # GET /resource
    DETAIL = "detail"  # GET /resource/{id}
    CREATE = "create"  # POST /resource
    UPDATE = "update"  # PATCH/PUT /resource/{id}
    DELETE = "delete"  # DELETE /resource/{id}
    ACTION = "action"  # POST /resource/{id}/verb or POST /a/b
    SUB_LIST = "sub-list"  # GET /resource/{id}/sub
    SUB_DETAIL = "sub-detail"  # GET /resource/{id}/sub/{subId}
    SUB_ACTION = "sub-action"  # writes on a sub-resource
    CUSTOM = "custom"
    OTHER = "other"  # set by tree builders that only know the basic types

    @classmethod
    def _missing_(cls, value):
        """Unknown type names from other tree builders become CUSTOM."""
        return cls.CUSTOM


@dataclass
class ApiOperation:
    """A single HTTP operation on a resource."""

    id: str  # "GET:/users/{userId}"
    resource_key: str
    operation_type: OperationType
    http_method: str
    path_template: str  # admin prefix stripped
    path_parameters: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    description: Optional[str] = None
    request_body_schema: Optional[JsonSchema] = None
    response_schema: Optional[JsonSchema] = None
    tags: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Normalize method and operation type given as plain strings."""
        self.operation_type = OperationType(self.operation_type)
        self.http_method = self.http_method.upper()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "resource_key": self.resource_key,
            "operation_type": self.operation_type.value,
            "http_method": self.http_method,
            "path_template": self.path_template,
            "path_parameters": self.path_parameters,
            "summary": self.summary,
            "description": self.description,
            "request_body_schema": self.request_body_schema,
            "response_schema": self.response_schema,
            "tags": self.tags,
        }


@dataclass
class ApiResource:
    """A navigable collection in a product's resource tree."""

    key: str  # "users", "users.credits"
    name: str  # "Users", "Credits"
    path_segment: str
    parent_key: Optional[str] = None
    requires_parent_id: bool = False
    operations: List[ApiOperation] = field(default_factory=list)
    children: List["ApiResource"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "name": self.name,
            "path_segment": self.path_segment,
            "parent_key": self.parent_key,
            "requires_parent_id": self.requires_parent_id,
            "operations": [op.to_dict() for op in self.operations],
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class ParsedSpec:
    """A product's OpenAPI document turned into a resource tree."""

    product_id: str
    spec_version: str
    api_title: str
    api_version: str
    admin_prefix: str
    resources: List[ApiResource] = field(default_factory=list)
    all_operations: List[ApiOperation] = field(default_factory=list)
    schemas: Dict[str, JsonSchema] = field(default_factory=dict)
    parsed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "product_id": self.product_id,
            "spec_version": self.spec_version,
            "api_title": self.api_title,
            "api_version": self.api_version,
            "admin_prefix": self.admin_prefix,
            "parsed_at": self.parsed_at.isoformat(),
            "total_operations": len(self.all_operations),
            "resources": [r.to_dict() for r in self.resources],
        }


@dataclass
class DiscoveredEndpoint:
    """A parameterless GET endpoint picked for dashboard assembly."""

    path: str
    resource_key: str
    resource_name: str
    priority: int  # lower = shown first
    is_entity_collection: bool = False
    response_schema: Optional[JsonSchema] = None
    operation_summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "resource_key": self.resource_key,
            "resource_name": self.resource_name,
            "priority": self.priority,
            "is_entity_collection": self.is_entity_collection,
            "operation_summary": self.operation_summary,
        }


@dataclass
class DashboardEndpoints:
    """Fixed stats/trends/activity lookup used by older dashboards."""

    stats_path: Optional[str] = None
    trends_path: Optional[str] = None
    activity_path: Optional[str] = None


@dataclass
class DetectedFields:
    """Semantic roles inferred for the fields of a record collection."""

    date_field: Optional[str] = None
    description_field: Optional[str] = None
    type_field: Optional[str] = None
    id_field: Optional[str] = None
    actor_field: Optional[str] = None
    metric_fields: List[str] = field(default_factory=list)
    all_fields: List[str] = field(default_factory=list)

    def singular_fields(self) -> Dict[str, Optional[str]]:
        """Return the single-valued role slots by role name."""
        return {
            "date": self.date_field,
            "description": self.description_field,
            "type": self.type_field,
            "id": self.id_field,
            "actor": self.actor_field,
        }

    def is_empty(self) -> bool:
        """Check if no role at all was detected"""
        return not self.metric_fields and all(
            value is None for value in self.singular_fields().values()
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "date_field": self.date_field,
            "description_field": self.description_field,
            "type_field": self.type_field,
            "id_field": self.id_field,
            "actor_field": self.actor_field,
            "metric_fields": list(self.metric_fields),
            "all_fields": list(self.all_fields),
        }
