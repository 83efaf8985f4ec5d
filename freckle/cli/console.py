"""Console front end for the introspection pipeline."""
from pathlib import Path
from typing import List, Optional

import click
from colorama import Fore, Style

from config import AppConfig, app_config
from freckle.api.endpoint_discovery import discover_all_endpoints, find_resource
from freckle.api.product_client import ProductApiError, ProductClient, ProductNetworkError, classify_error
from freckle.api.resource_icons import get_resource_icon
from freckle.exporter.json_exporter import JsonExporter
from freckle.introspection.spec_introspector import ApiSpecIntrospector, load_spec_file
from freckle.introspection.spec_parser import SpecParser, path_to_resource_key
from freckle.mapper.data_classifier import classify_response
from freckle.schema.format import format_date, format_date_short
from freckle.schema.models import DiscoveredEndpoint, ParsedSpec


class IntrospectionConsole:
    """Runs discovery and inspection against one product and prints the results."""

    def __init__(self, config: Optional[AppConfig] = None, product_id: str = "default"):
        """Initialize console."""
        self.config = config or app_config
        self.product_id = product_id

    def print_header(self, title: str):
        """Print a section header."""
        click.echo(f"\n{Fore.CYAN}{'━' * 45}")
        click.echo(f"{Fore.CYAN}{title}")
        click.echo(f"{Fore.CYAN}{'━' * 45}{Style.RESET_ALL}\n")

    def load_spec(self, spec_file: Optional[Path] = None, spec_url: Optional[str] = None) -> ParsedSpec:
        """
        Load and parse the product spec from a file or from the product.

        Raises:
            click.ClickException: If the spec cannot be fetched or parsed
        """
        api = self.config.product_api
        try:
            if spec_file:
                raw_spec = load_spec_file(spec_file)
                parser = SpecParser(max_depth=self.config.max_schema_depth)
                return parser.parse(raw_spec, api.base_url, self.product_id)

            introspector = ApiSpecIntrospector(
                api_url=api.base_url,
                api_key=api.api_key,
                timeout=api.timeout,
                cache_dir=Path(self.config.cache_dir),
                cache_ttl=self.config.cache_ttl,
            )
            return introspector.get_parsed_spec(
                self.product_id,
                custom_url=spec_url or api.spec_url,
                max_depth=self.config.max_schema_depth,
            )
        except (RuntimeError, ValueError, OSError) as e:
            raise click.ClickException(f"{Fore.RED}Could not load spec: {e}{Style.RESET_ALL}")

    def discover(
        self,
        spec_file: Optional[Path] = None,
        spec_url: Optional[str] = None,
        output: Optional[Path] = None,
    ) -> List[DiscoveredEndpoint]:
        """Discover and print ranked dashboard endpoints."""
        self.print_header("Endpoint Discovery")

        parsed = self.load_spec(spec_file, spec_url)
        click.echo(f"{Fore.GREEN}✅ {parsed.api_title} {parsed.api_version}")
        click.echo(f"{Fore.GREEN}   Admin prefix: {parsed.admin_prefix or '/'}")
        click.echo(f"{Fore.GREEN}   Operations: {len(parsed.all_operations)}")
        click.echo(f"{Fore.GREEN}   Parsed: {format_date_short(parsed.parsed_at.isoformat())}\n")

        endpoints = discover_all_endpoints(parsed.resources)
        if not endpoints:
            click.echo(f"{Fore.YELLOW}No dashboard endpoints found")
        for endpoint in endpoints:
            kind = "entity" if endpoint.is_entity_collection else "dashboard"
            icon = get_resource_icon(endpoint.resource_key)
            click.echo(
                f"{endpoint.priority:3d}  {endpoint.resource_key:30s} "
                f"{endpoint.path:35s} {kind:10s} [{icon}]"
            )

        if output:
            JsonExporter().export(output, parsed, endpoints)
            click.echo(f"\n{Fore.GREEN}✅ Exported to {output}")

        return endpoints

    def inspect(self, path: str, spec_file: Optional[Path] = None):
        """Fetch an endpoint and print its shape and detected field roles."""
        self.print_header(f"Inspect {path}")

        schema = None
        summary = None
        if spec_file:
            parsed = self.load_spec(spec_file)
            resource = find_resource(parsed.resources, path_to_resource_key(path))
            if resource is not None:
                for op in resource.operations:
                    if op.http_method == "GET" and op.path_template == path:
                        schema = op.response_schema
                        summary = op.summary
                        break

        client = ProductClient(self.config.product_api)
        try:
            data = client.get_json(path)
        except (ProductApiError, ProductNetworkError) as e:
            classified = classify_error(e)
            raise click.ClickException(f"{Fore.RED}{classified.user_message}{Style.RESET_ALL}")

        classified = classify_response(data, schema, summary)
        click.echo(f"Shape: {Fore.GREEN}{classified.shape.value}{Style.RESET_ALL}")
        if classified.items is not None:
            click.echo(f"Items: {len(classified.items)}")

        fields = classified.fields
        if fields.is_empty():
            click.echo(f"{Fore.YELLOW}Not enough data to detect field roles")
            return classified

        for role, name in fields.singular_fields().items():
            if name:
                click.echo(f"  {role:12s} → {name}")
        if fields.metric_fields:
            click.echo(f"  {'metrics':12s} → {', '.join(fields.metric_fields)}")

        records = [item for item in classified.items or [] if isinstance(item, dict)]
        if fields.date_field and records:
            first = records[0].get(fields.date_field)
            last = records[-1].get(fields.date_field)
            if isinstance(first, str) and isinstance(last, str):
                click.echo(f"  {'range':12s} → {format_date(first)} .. {format_date(last)}")
        return classified
