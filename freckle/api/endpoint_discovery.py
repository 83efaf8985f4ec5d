"""Pick and rank the endpoints of a product's resource tree for dashboard assembly."""
import logging
import re
from typing import Iterable, List, Optional, Set

from freckle.schema.models import (
    ApiOperation,
    ApiResource,
    DashboardEndpoints,
    DiscoveredEndpoint,
    OperationType,
)

logger = logging.getLogger(__name__)


class EndpointDiscoverer:
    """Classifies parameterless GET endpoints into dashboard and entity endpoints."""

    # Resources better shown as aggregates than as entity tables
    DASHBOARD_PATTERN = re.compile(
        r"stats|analytics|trend|summary|overview|metric|report|activity|event|audit|health|dashboard",
        re.IGNORECASE,
    )

    # (pattern on resource key, priority) for dashboard-type resources, first match wins
    DASHBOARD_PRIORITIES = (
        (re.compile(r"^(?:stats|statistics|dashboard|summary|overview)$", re.IGNORECASE), 1),
        (re.compile(r"trend", re.IGNORECASE), 2),
        (re.compile(r"activity|event|audit", re.IGNORECASE), 3),
    )
    DASHBOARD_DEFAULT_PRIORITY = 4
    READ_ONLY_PRIORITY = 5
    ENTITY_PRIORITY = 10

    # Handled by the health check collaborator
    SKIPPED_KEYS = frozenset({"health"})

    CRUD_TYPES = frozenset({OperationType.CREATE, OperationType.UPDATE, OperationType.DELETE})
    LIST_TYPES = frozenset({OperationType.LIST, OperationType.SUB_LIST})

    # Legacy lookup tables, tried in order
    STATS_KEYS = ("stats", "statistics", "dashboard", "summary", "overview")
    TRENDS_KEYS = ("stats.trends", "trends", "statistics.trends", "analytics.trends")
    ACTIVITY_KEYS = ("analytics.activity", "activity", "events", "audit", "analytics.events")

    @staticmethod
    def discover_all_endpoints(resources: List[ApiResource]) -> List[DiscoveredEndpoint]:
        """
        Discover all parameterless GET endpoints of a resource tree.

        Args:
            resources: Top-level resources of the tree

        Returns:
            list: DiscoveredEndpoint sorted by priority, then resource key
        """
        endpoints = []

        for resource in flatten_resources(resources):
            if resource.requires_parent_id:
                logger.debug(f"Skipping {resource.key}: requires a parent id")
                continue
            if resource.key in EndpointDiscoverer.SKIPPED_KEYS:
                continue

            get_op = EndpointDiscoverer._find_parameterless_get(resource.operations)
            if get_op is None:
                logger.debug(f"Skipping {resource.key}: no parameterless GET")
                continue

            is_entity = EndpointDiscoverer.is_entity_collection(resource, get_op)
            priority = EndpointDiscoverer.get_priority(resource, is_entity)

            endpoints.append(DiscoveredEndpoint(
                path=get_op.path_template,
                resource_key=resource.key,
                resource_name=resource.name,
                priority=priority,
                is_entity_collection=is_entity,
                response_schema=get_op.response_schema,
                operation_summary=get_op.summary,
            ))

        endpoints.sort(key=lambda e: (e.priority, e.resource_key))
        logger.info(f"Discovered {len(endpoints)} dashboard endpoints")
        return endpoints

    @staticmethod
    def is_dashboard_type(resource: ApiResource) -> bool:
        """Check if the key or path segment names an aggregate view."""
        pattern = EndpointDiscoverer.DASHBOARD_PATTERN
        return bool(pattern.search(resource.key) or pattern.search(resource.path_segment))

    @staticmethod
    def is_entity_collection(resource: ApiResource, get_op: ApiOperation) -> bool:
        """Check if the resource is a list backed by CRUD or detail operations."""
        if get_op.operation_type not in EndpointDiscoverer.LIST_TYPES:
            return False
        types = {op.operation_type for op in resource.operations}
        return bool(types & EndpointDiscoverer.CRUD_TYPES) or OperationType.DETAIL in types

    @staticmethod
    def get_priority(resource: ApiResource, is_entity: bool) -> int:
        """
        Get display priority (lower = shown first).

        stats=1, trends=2, activity=3, other dashboards=4, read-only=5,
        entity collections=10.
        """
        if is_entity:
            return EndpointDiscoverer.ENTITY_PRIORITY
        if not EndpointDiscoverer.is_dashboard_type(resource):
            return EndpointDiscoverer.READ_ONLY_PRIORITY
        for pattern, priority in EndpointDiscoverer.DASHBOARD_PRIORITIES:
            if pattern.search(resource.key):
                return priority
        return EndpointDiscoverer.DASHBOARD_DEFAULT_PRIORITY

    @staticmethod
    def discover_dashboard_endpoints(resources: List[ApiResource]) -> DashboardEndpoints:
        """
        Look up stats, trends and activity paths by well-known resource keys.

        Prefer discover_all_endpoints(); this only knows fixed key names.
        """
        by_key = {r.key: r for r in flatten_resources(resources)}
        return DashboardEndpoints(
            stats_path=EndpointDiscoverer._first_get_path(by_key, EndpointDiscoverer.STATS_KEYS),
            trends_path=EndpointDiscoverer._first_get_path(by_key, EndpointDiscoverer.TRENDS_KEYS),
            activity_path=EndpointDiscoverer._first_get_path(by_key, EndpointDiscoverer.ACTIVITY_KEYS),
        )

    @staticmethod
    def _find_parameterless_get(operations: List[ApiOperation]) -> Optional[ApiOperation]:
        for op in operations:
            if op.http_method == "GET" and not op.path_parameters:
                return op
        return None

    @staticmethod
    def _first_get_path(by_key, keys: Iterable[str]) -> Optional[str]:
        for key in keys:
            resource = by_key.get(key)
            if resource is None:
                continue
            for op in resource.operations:
                if op.http_method == "GET":
                    return op.path_template
        return None


def flatten_resources(resources: List[ApiResource]) -> List[ApiResource]:
    """Flatten a resource tree in pre-order (parents before children)."""
    flat = []
    for resource in resources:
        flat.append(resource)
        flat.extend(flatten_resources(resource.children))
    return flat


def find_resource(resources: List[ApiResource], key: str) -> Optional[ApiResource]:
    """Find a resource anywhere in the tree by key."""
    for resource in resources:
        if resource.key == key:
            return resource
        found = find_resource(resource.children, key)
        if found is not None:
            return found
    return None


def collect_resource_keys(resources: List[ApiResource]) -> Set[str]:
    """Collect the keys of every resource in the tree."""
    return {resource.key for resource in flatten_resources(resources)}


discover_all_endpoints = EndpointDiscoverer.discover_all_endpoints
discover_dashboard_endpoints = EndpointDiscoverer.discover_dashboard_endpoints
