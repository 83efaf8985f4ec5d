"""JSON exporter."""
import json
from pathlib import Path
from datetime import datetime
from typing import List

from freckle.api.resource_icons import get_resource_icon
from freckle.schema.models import DiscoveredEndpoint, ParsedSpec


class JsonExporter:
    """Export introspection results to JSON."""

    def export(
        self,
        output_file: Path,
        parsed_spec: ParsedSpec,
        endpoints: List[DiscoveredEndpoint],
    ) -> None:
        """Export to JSON file."""
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "metadata": {
                "created_at": datetime.now().isoformat(),
                "product_id": parsed_spec.product_id,
                "api_title": parsed_spec.api_title,
                "api_version": parsed_spec.api_version,
                "total_operations": len(parsed_spec.all_operations),
                "total_endpoints": len(endpoints),
            },
            "spec": parsed_spec.to_dict(),
            "endpoints": [
                {**e.to_dict(), "icon": get_resource_icon(e.resource_key)}
                for e in endpoints
            ],
        }

        with open(output_file, "w") as f:
            json.dump(data, f, indent=2, default=str)
