"""
Field Detector - Infers the semantic role of each field in a record collection.

Roles: date, id, type, actor, description (one field each) and metrics (many).

Passes run in order and only fill slots that are still empty:
1. Schema hints (format, description, enum)
2. Name patterns
3. Value heuristics (metrics)
4. Description fallback (longest average text)
5. Type fallback (low-cardinality column)
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from freckle.mapper.entity_fields import is_date_field
from freckle.schema.models import DetectedFields, JsonSchema

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


@dataclass(frozen=True)
class DetectionPolicy:
    """Tunable thresholds for value-based role inference"""

    sample_size: int = 10
    metric_ratio: float = 0.8
    min_description_length: float = 10
    max_enum_size: int = 20
    min_type_cardinality: int = 2
    max_type_cardinality: int = 20
    type_cardinality_ratio: float = 0.2


DEFAULT_POLICY = DetectionPolicy()


class FieldDetector:
    """Detects field roles from sample records and an optional response schema."""

    ID_PATTERN = re.compile(r"^id$|_id$|^uuid$|Id$")
    TYPE_PATTERN = re.compile(r"^(?:type|kind|category|status|event_type|event)$", re.IGNORECASE)
    DESCRIPTION_PATTERN = re.compile(r"description|message|text|summary|content", re.IGNORECASE)
    ACTOR_PATTERN = re.compile(r"^(?:actor|user|author|by|created_by|createdBy)$", re.IGNORECASE)

    SINGULAR_SLOTS = ("date_field", "description_field", "type_field", "id_field", "actor_field")

    def __init__(self, policy: DetectionPolicy = DEFAULT_POLICY):
        """Initialize detector with a threshold policy."""
        self.policy = policy

    def detect(self, items: List[Record], schema: Optional[JsonSchema] = None) -> DetectedFields:
        """
        Detect field roles

        Args:
            items: Normalized records (see extract_items)
            schema: Resolved response schema, either an object schema or an
                array schema whose items describe the records

        Returns:
            DetectedFields; every slot may be unset
        """
        if not items:
            return DetectedFields()

        sample = [item for item in items[: self.policy.sample_size] if isinstance(item, dict)]
        if not sample:
            return DetectedFields()

        result = DetectedFields(all_fields=self._collect_fields(sample))

        self._apply_schema_hints(result, schema)
        self._apply_name_patterns(result, sample)
        self._apply_metric_values(result, sample)
        if result.description_field is None:
            self._apply_description_fallback(result, sample)
        if result.type_field is None:
            self._apply_type_fallback(result, sample)

        logger.debug(f"Detected fields: {result.to_dict()}")
        return result

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _apply_schema_hints(self, result: DetectedFields, schema: Optional[JsonSchema]) -> None:
        properties = self._schema_properties(schema)
        if not properties:
            return

        for key, prop in properties.items():
            if key not in result.all_fields or not isinstance(prop, dict):
                continue

            if prop.get("format") == "date-time":
                self._assign(result, "date_field", key)

            description = prop.get("description")
            if isinstance(description, str) and "identifier" in description.lower():
                self._assign(result, "id_field", key)

            enum_values = prop.get("enum")
            if isinstance(enum_values, list) and len(enum_values) <= self.policy.max_enum_size:
                self._assign(result, "type_field", key)

    def _apply_name_patterns(self, result: DetectedFields, sample: List[Record]) -> None:
        first = sample[0]
        for key in result.all_fields:
            if is_date_field(key, first.get(key)):
                self._assign(result, "date_field", key)
            if self.ID_PATTERN.search(key):
                self._assign(result, "id_field", key)
            if self.TYPE_PATTERN.search(key):
                self._assign(result, "type_field", key)
            if self.DESCRIPTION_PATTERN.search(key):
                self._assign(result, "description_field", key)
            if self.ACTOR_PATTERN.search(key):
                self._assign(result, "actor_field", key)

    def _apply_metric_values(self, result: DetectedFields, sample: List[Record]) -> None:
        assigned = self._assigned(result)
        threshold = len(sample) * self.policy.metric_ratio
        for key in result.all_fields:
            if key in assigned:
                continue
            numeric_count = sum(1 for item in sample if _is_number(item.get(key)))
            if numeric_count >= threshold:
                result.metric_fields.append(key)

    def _apply_description_fallback(self, result: DetectedFields, sample: List[Record]) -> None:
        excluded = self._assigned(result) | set(result.metric_fields)
        longest_avg = 0.0
        longest_key = None

        for key in result.all_fields:
            if key in excluded:
                continue
            lengths = [
                len(item[key]) for item in sample
                if isinstance(item.get(key), str) and item[key]
            ]
            if not lengths:
                continue
            avg = sum(lengths) / len(lengths)
            if avg > longest_avg and avg > self.policy.min_description_length:
                longest_avg = avg
                longest_key = key

        if longest_key is not None:
            self._assign(result, "description_field", longest_key)

    def _apply_type_fallback(self, result: DetectedFields, sample: List[Record]) -> None:
        excluded = self._assigned(result) | set(result.metric_fields)
        max_by_ratio = len(sample) * self.policy.type_cardinality_ratio

        for key in result.all_fields:
            if key in excluded:
                continue
            distinct = {_stringify(item.get(key)) for item in sample}
            size = len(distinct)
            if (
                self.policy.min_type_cardinality <= size <= self.policy.max_type_cardinality
                and size <= max_by_ratio
            ):
                self._assign(result, "type_field", key)
                return

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _assign(self, result: DetectedFields, slot: str, key: str) -> bool:
        """Fill a slot unless it is taken or the field already has a role"""
        if getattr(result, slot) is not None or key in self._assigned(result):
            return False
        setattr(result, slot, key)
        return True

    def _assigned(self, result: DetectedFields) -> set:
        values = (getattr(result, slot) for slot in self.SINGULAR_SLOTS)
        return {value for value in values if value is not None}

    @staticmethod
    def _schema_properties(schema: Optional[JsonSchema]) -> Dict[str, Any]:
        if not isinstance(schema, dict):
            return {}
        properties = schema.get("properties")
        if isinstance(properties, dict):
            return properties
        items = schema.get("items")
        if isinstance(items, dict) and isinstance(items.get("properties"), dict):
            return items["properties"]
        return {}

    @staticmethod
    def _collect_fields(sample: List[Record]) -> List[str]:
        fields: Dict[str, None] = {}
        for item in sample:
            for key in item:
                fields.setdefault(key, None)
        return list(fields)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def detect_fields(
    items: List[Record],
    schema: Optional[JsonSchema] = None,
    policy: DetectionPolicy = DEFAULT_POLICY,
) -> DetectedFields:
    """Detect field roles with the given policy (see FieldDetector.detect)."""
    return FieldDetector(policy).detect(items, schema)
