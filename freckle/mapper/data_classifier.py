"""Classify an endpoint response into the visualization shape that suits it."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from freckle.mapper.field_detector import detect_fields
from freckle.parser.data_normalizer import extract_items
from freckle.schema.models import DetectedFields, JsonSchema


class DataShape(str, Enum):
    """Rendering shapes for endpoint data"""

    SUMMARY = "summary"
    TIME_SERIES = "time-series"
    EVENT_LOG = "event-log"
    LIST = "list"
    SCALAR = "scalar"
    EMPTY = "empty"


@dataclass
class ClassifiedData:
    """A response with its shape and detected field roles"""

    shape: DataShape
    data: Any
    fields: DetectedFields = field(default_factory=DetectedFields)
    items: Optional[List[Dict[str, Any]]] = None
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (data omitted)."""
        return {
            "shape": self.shape.value,
            "title": self.title,
            "item_count": len(self.items) if self.items is not None else None,
            "fields": self.fields.to_dict(),
        }


def classify_response(
    data: Any,
    schema: Optional[JsonSchema] = None,
    operation_summary: Optional[str] = None,
) -> ClassifiedData:
    """
    Classify a response for rendering

    Args:
        data: Decoded JSON body
        schema: Resolved response schema, if known
        operation_summary: Used as the display title

    Returns:
        ClassifiedData
    """
    if data is None or (isinstance(data, list) and not data):
        return ClassifiedData(shape=DataShape.EMPTY, data=data)

    if not isinstance(data, (dict, list)):
        return ClassifiedData(shape=DataShape.SCALAR, data=data)

    items = extract_items(data)

    if not items:
        if isinstance(data, dict):
            return ClassifiedData(shape=DataShape.SUMMARY, data=data, title=operation_summary)
        return ClassifiedData(shape=DataShape.EMPTY, data=data)

    # A single record out of an object reads better as a summary card
    if len(items) == 1 and isinstance(data, dict):
        return ClassifiedData(shape=DataShape.SUMMARY, data=data, title=operation_summary)

    fields = detect_fields(items, schema)

    if fields.date_field and fields.metric_fields:
        text_field_count = sum(
            1 for name in fields.all_fields
            if name != fields.date_field and name not in fields.metric_fields
        )
        if len(fields.metric_fields) >= text_field_count:
            return ClassifiedData(
                shape=DataShape.TIME_SERIES, data=data, fields=fields,
                items=items, title=operation_summary,
            )

    if fields.date_field and fields.description_field:
        return ClassifiedData(
            shape=DataShape.EVENT_LOG, data=data, fields=fields,
            items=items, title=operation_summary,
        )

    return ClassifiedData(
        shape=DataShape.LIST, data=data, fields=fields, items=items, title=operation_summary,
    )
