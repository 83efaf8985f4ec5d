"""
Unit tests for the OpenAPI spec parser

Tests:
- Metadata and admin prefix detection
- Operation extraction and classification
- Resource keys, tree building and parent-id detection
- Request/response schema resolution
"""

import pytest

from freckle.introspection.spec_parser import (
    SpecParser,
    classify_operation,
    detect_admin_prefix,
    extract_path_parameters,
    path_to_resource_key,
)
from freckle.schema.models import OperationType

BASE_URL = "http://localhost:3000/api/v1/admin"
PRODUCT_ID = "test-product"

OK = {"200": {"description": "OK"}}
USER_ID_PARAM = [{"name": "userId", "in": "path", "required": True, "schema": {"type": "string"}}]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def parser():
    """Create parser instance"""
    return SpecParser()


@pytest.fixture
def minimal_spec():
    """Users CRUD, a user sub-collection and a stats endpoint"""
    return {
        "openapi": "3.1.0",
        "info": {"title": "Test API", "version": "1.0.0"},
        "paths": {
            "/api/v1/admin/users": {
                "get": {"summary": "List users", "operationId": "listUsers", "tags": ["Users"], "responses": OK},
                "post": {
                    "summary": "Create user",
                    "operationId": "createUser",
                    "tags": ["Users"],
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {"name": {"type": "string"}, "email": {"type": "string"}},
                                    "required": ["name", "email"],
                                },
                            },
                        },
                    },
                    "responses": {"201": {"description": "Created"}},
                },
            },
            "/api/v1/admin/users/{userId}": {
                "get": {"summary": "Get user", "tags": ["Users"], "parameters": USER_ID_PARAM, "responses": OK},
                "patch": {"summary": "Update user", "tags": ["Users"], "parameters": USER_ID_PARAM, "responses": OK},
                "delete": {"summary": "Delete user", "tags": ["Users"], "parameters": USER_ID_PARAM, "responses": OK},
            },
            "/api/v1/admin/users/{userId}/credits": {
                "get": {"summary": "List user credits", "tags": ["Credits"], "parameters": USER_ID_PARAM, "responses": OK},
            },
            "/api/v1/admin/stats": {
                "get": {"summary": "Get stats", "tags": ["Stats"], "responses": OK},
            },
        },
    }


@pytest.fixture
def parsed(parser, minimal_spec):
    """Minimal spec parsed against the default base URL"""
    return parser.parse(minimal_spec, BASE_URL, PRODUCT_ID)


def single_path_spec(path, method, operation=None, components=None):
    """Build a spec holding one admin operation"""
    spec = {
        "openapi": "3.1.0",
        "info": {"title": "Test API", "version": "1.0.0"},
        "paths": {f"/api/v1/admin{path}": {method: operation or {"summary": "Op", "responses": OK}}},
    }
    if components is not None:
        spec["components"] = {"schemas": components}
    return spec


def find_op(parsed_spec, method, path):
    """Find an operation by method and stripped path"""
    for op in parsed_spec.all_operations:
        if op.http_method == method and op.path_template == path:
            return op
    return None


# ============================================================================
# TEST: SpecParser.parse
# ============================================================================


class TestParseMetadata:
    """Tests for document metadata and validation"""

    def test_metadata(self, parsed):
        """Test product id, versions and title"""
        assert parsed.product_id == "test-product"
        assert parsed.spec_version == "3.1.0"
        assert parsed.api_title == "Test API"
        assert parsed.api_version == "1.0.0"
        assert parsed.parsed_at is not None

    def test_admin_prefix(self, parsed):
        """Test the admin prefix is the base URL path"""
        assert parsed.admin_prefix == "/api/v1/admin"

    def test_trailing_slash_stripped(self, parser, minimal_spec):
        """Test a trailing slash on the base URL is ignored"""
        result = parser.parse(minimal_spec, "http://localhost:3000/api/v1/admin/", PRODUCT_ID)
        assert result.admin_prefix == "/api/v1/admin"

    def test_no_components_gives_empty_schemas(self, parsed):
        """Test schemas default to an empty table"""
        assert parsed.schemas == {}

    def test_missing_version_key_rejected(self, parser):
        """Test documents without openapi/swagger are rejected"""
        with pytest.raises(ValueError, match="Unknown spec format"):
            parser.parse({"info": {}, "paths": {}}, BASE_URL, PRODUCT_ID)

    def test_missing_paths_rejected(self, parser):
        """Test documents without a paths object are rejected"""
        with pytest.raises(ValueError):
            parser.parse({"openapi": "3.0.0"}, BASE_URL, PRODUCT_ID)

    def test_swagger_key_accepted(self, parser):
        """Test Swagger documents are read the same way"""
        result = parser.parse({"swagger": "2.0", "paths": {}}, BASE_URL, PRODUCT_ID)

        assert result.spec_version == "2.0"
        assert result.api_title == "Unknown API"
        assert result.all_operations == []

    def test_to_dict(self, parsed):
        """Test serialization of the parsed spec"""
        data = parsed.to_dict()

        assert data["total_operations"] == 7
        assert {r["key"] for r in data["resources"]} == {"stats", "users"}


class TestParseOperations:
    """Tests for operation extraction"""

    def test_operation_count(self, parsed):
        """Test users 5 + users.credits 1 + stats 1"""
        assert len(parsed.all_operations) == 7

    def test_operation_id(self, parsed):
        """Test ids are method:stripped-path"""
        assert find_op(parsed, "GET", "/users").id == "GET:/users"

    @pytest.mark.parametrize("method,path,expected", [
        ("GET", "/users", OperationType.LIST),
        ("POST", "/users", OperationType.CREATE),
        ("GET", "/users/{userId}", OperationType.DETAIL),
        ("PATCH", "/users/{userId}", OperationType.UPDATE),
        ("DELETE", "/users/{userId}", OperationType.DELETE),
        ("GET", "/users/{userId}/credits", OperationType.SUB_LIST),
    ])
    def test_classification(self, parsed, method, path, expected):
        """Test operation types of the minimal spec"""
        assert find_op(parsed, method, path).operation_type == expected

    def test_resource_keys(self, parsed):
        """Test path parameters are dropped from resource keys"""
        assert find_op(parsed, "GET", "/users").resource_key == "users"
        assert find_op(parsed, "GET", "/users/{userId}").resource_key == "users"
        assert find_op(parsed, "GET", "/users/{userId}/credits").resource_key == "users.credits"
        assert find_op(parsed, "GET", "/stats").resource_key == "stats"

    def test_path_parameters(self, parsed):
        """Test path parameters are extracted in order"""
        assert find_op(parsed, "GET", "/users/{userId}").path_parameters == ["userId"]
        assert find_op(parsed, "GET", "/users/{userId}/credits").path_parameters == ["userId"]
        assert find_op(parsed, "GET", "/users").path_parameters == []

    def test_tags_and_summary(self, parsed):
        """Test tags and summary are preserved"""
        op = find_op(parsed, "GET", "/users")

        assert op.tags == ["Users"]
        assert op.summary == "List users"

    def test_paths_outside_prefix_ignored(self, parser, minimal_spec):
        """Test non-admin paths are skipped"""
        minimal_spec["paths"]["/api/v1/public/health"] = {"get": {"summary": "Health", "responses": OK}}
        result = parser.parse(minimal_spec, BASE_URL, PRODUCT_ID)

        assert not any("health" in op.path_template for op in result.all_operations)

    def test_non_method_keys_ignored(self, parser, minimal_spec):
        """Test shared parameters and other keys are not operations"""
        minimal_spec["paths"]["/api/v1/admin/test"] = {
            "get": {"summary": "Test", "responses": OK},
            "parameters": [{"name": "shared", "in": "query"}],
            "x-internal": True,
        }
        result = parser.parse(minimal_spec, BASE_URL, PRODUCT_ID)
        test_ops = [op for op in result.all_operations if op.path_template == "/test"]

        assert len(test_ops) == 1
        assert test_ops[0].http_method == "GET"

    def test_no_matching_admin_paths(self, parser):
        """Test a spec without admin paths gives an empty tree"""
        spec = {
            "openapi": "3.1.0",
            "info": {"title": "Test", "version": "1.0.0"},
            "paths": {"/public/items": {"get": {"summary": "List", "responses": OK}}},
        }
        result = parser.parse(spec, BASE_URL, PRODUCT_ID)

        assert result.all_operations == []
        assert result.resources == []

    def test_relative_base_url(self, parser):
        """Test a bare path base URL falls back to the /api/ pattern"""
        result = parser.parse(single_path_spec("/items", "get"), "/api/v1/admin", PRODUCT_ID)

        assert result.admin_prefix == "/api/v1/admin"
        assert len(result.all_operations) == 1

    @pytest.mark.parametrize("path,method,expected", [
        ("/users/{userId}/deactivate", "post", OperationType.SUB_ACTION),
        ("/users/{userId}/credits/{creditId}", "get", OperationType.SUB_DETAIL),
        ("/users/{userId}/credits/{creditId}", "patch", OperationType.SUB_ACTION),
        ("/users/{userId}", "delete", OperationType.DELETE),
    ])
    def test_sub_resource_classification(self, parser, path, method, expected):
        """Test classification of sub-resource operations"""
        result = parser.parse(single_path_spec(path, method), BASE_URL, PRODUCT_ID)
        assert result.all_operations[0].operation_type == expected


class TestParseSchemas:
    """Tests for request and response schema extraction"""

    def test_inline_request_body(self, parsed):
        """Test an inline request body schema is kept"""
        schema = find_op(parsed, "POST", "/users").request_body_schema

        assert schema["type"] == "object"
        assert set(schema["properties"]) == {"name", "email"}
        assert schema["required"] == ["name", "email"]

    def test_request_body_ref_resolved(self, parser):
        """Test a $ref request body is replaced by its component"""
        operation = {
            "summary": "Create item",
            "requestBody": {
                "content": {"application/json": {"schema": {"$ref": "#/components/schemas/CreateItem"}}},
            },
            "responses": {"201": {"description": "Created"}},
        }
        components = {
            "CreateItem": {
                "type": "object",
                "properties": {"title": {"type": "string"}, "value": {"type": "number"}},
                "required": ["title"],
            },
        }
        result = parser.parse(single_path_spec("/items", "post", operation, components), BASE_URL, PRODUCT_ID)
        schema = result.all_operations[0].request_body_schema

        assert schema["type"] == "object"
        assert "title" in schema["properties"]
        assert result.schemas == components

    def test_response_schema_from_200(self, parser):
        """Test the 200 response schema is used"""
        operation = {
            "responses": {
                "200": {
                    "description": "OK",
                    "content": {
                        "application/json": {
                            "schema": {"type": "array", "items": {"type": "object", "properties": {"id": {"type": "string"}}}},
                        },
                    },
                },
            },
        }
        result = parser.parse(single_path_spec("/items", "get", operation), BASE_URL, PRODUCT_ID)
        assert result.all_operations[0].response_schema["type"] == "array"

    def test_response_schema_from_201(self, parser):
        """Test the 201 response is used when 200 has no schema"""
        operation = {
            "responses": {
                "200": {"description": "OK"},
                "201": {"content": {"application/json": {"schema": {"type": "object"}}}},
            },
        }
        result = parser.parse(single_path_spec("/items", "post", operation), BASE_URL, PRODUCT_ID)
        assert result.all_operations[0].response_schema == {"type": "object"}

    def test_integer_status_keys(self, parser):
        """Test status codes loaded as integers are found"""
        operation = {"responses": {200: {"content": {"application/json": {"schema": {"type": "string"}}}}}}
        result = parser.parse(single_path_spec("/items", "get", operation), BASE_URL, PRODUCT_ID)
        assert result.all_operations[0].response_schema == {"type": "string"}

    def test_missing_schemas_are_none(self, parsed):
        """Test operations without JSON bodies have no schemas"""
        op = find_op(parsed, "GET", "/stats")

        assert op.request_body_schema is None
        assert op.response_schema is None


class TestResourceTree:
    """Tests for resource tree building"""

    def test_top_level_resources(self, parsed):
        """Test top-level keys and names"""
        assert [r.key for r in parsed.resources] == ["stats", "users"]
        users = next(r for r in parsed.resources if r.key == "users")
        assert users.name == "Users"

    def test_children(self, parsed):
        """Test sub-resources nest under their parent"""
        users = next(r for r in parsed.resources if r.key == "users")
        credits = next(c for c in users.children if c.key == "users.credits")

        assert credits.parent_key == "users"
        assert credits.path_segment == "credits"
        assert credits.name == "Credits"

    def test_requires_parent_id(self, parsed):
        """Test only the sub-collection needs a parent id"""
        users = next(r for r in parsed.resources if r.key == "users")
        stats = next(r for r in parsed.resources if r.key == "stats")

        assert users.children[0].requires_parent_id is True
        assert users.requires_parent_id is False
        assert stats.requires_parent_id is False

    def test_resource_operations_grouped(self, parsed):
        """Test each resource holds only its own operations"""
        users = next(r for r in parsed.resources if r.key == "users")

        assert len(users.operations) == 5
        assert len(users.children[0].operations) == 1

    def test_children_sorted(self, parser):
        """Test children are ordered by key"""
        spec = {
            "openapi": "3.1.0",
            "info": {"title": "Test API", "version": "1.0.0"},
            "paths": {
                "/api/v1/admin/users": {"get": {"responses": OK}},
                "/api/v1/admin/users/{userId}/zebra": {"get": {"responses": OK}},
                "/api/v1/admin/users/{userId}/alpha": {"get": {"responses": OK}},
                "/api/v1/admin/users/{userId}/middle": {"get": {"responses": OK}},
            },
        }
        result = parser.parse(spec, BASE_URL, PRODUCT_ID)
        users = result.resources[0]

        assert [c.key for c in users.children] == ["users.alpha", "users.middle", "users.zebra"]

    def test_intermediate_resources_created(self, parser):
        """Test ancestors without operations still appear in the tree"""
        spec = single_path_spec("/credits/config/tiers", "put")
        result = parser.parse(spec, BASE_URL, PRODUCT_ID)

        credits = result.resources[0]
        config = credits.children[0]
        tiers = config.children[0]

        assert (credits.key, config.key, tiers.key) == ("credits", "credits.config", "credits.config.tiers")
        assert credits.operations == [] and config.operations == []
        assert config.name == "Config"
        assert tiers.requires_parent_id is False
        assert config.requires_parent_id is False

    def test_intermediate_parent_id_inferred(self, parser):
        """Test operation-less ancestors under a parameter need a parent id"""
        spec = single_path_spec("/orgs/{orgId}/teams/members", "get")
        result = parser.parse(spec, BASE_URL, PRODUCT_ID)

        orgs = result.resources[0]
        teams = orgs.children[0]

        assert orgs.requires_parent_id is False
        assert teams.key == "orgs.teams"
        assert teams.requires_parent_id is True
        assert teams.children[0].requires_parent_id is True

    def test_kebab_names(self, parser):
        """Test segment names are title-cased"""
        result = parser.parse(single_path_spec("/feature-flags", "get"), BASE_URL, PRODUCT_ID)
        assert result.resources[0].name == "Feature Flags"


# ============================================================================
# TEST: helpers
# ============================================================================


class TestHelpers:
    """Tests for module-level helpers"""

    @pytest.mark.parametrize("base_url,expected", [
        ("http://localhost:3000/api/v1/admin", "/api/v1/admin"),
        ("https://example.com/api/admin/", "/api/admin"),
        ("http://localhost:3000", ""),
        ("/api/v1/admin", "/api/v1/admin"),
        ("not a url", ""),
    ])
    def test_detect_admin_prefix(self, base_url, expected):
        """Test admin prefix detection"""
        assert detect_admin_prefix(base_url) == expected

    def test_extract_path_parameters(self):
        """Test parameter names are extracted in order"""
        assert extract_path_parameters("/users/{userId}/credits/{creditId}") == ["userId", "creditId"]
        assert extract_path_parameters("/users") == []

    @pytest.mark.parametrize("path,expected", [
        ("/users", "users"),
        ("/users/{userId}/credits", "users.credits"),
        ("/stats/trends", "stats.trends"),
        ("/", "root"),
        ("/{id}", "root"),
    ])
    def test_path_to_resource_key(self, path, expected):
        """Test resource key derivation"""
        assert path_to_resource_key(path) == expected

    @pytest.mark.parametrize("method,path,expected", [
        ("POST", "/operations/run", OperationType.ACTION),
        ("POST", "/users/{id}/ban", OperationType.SUB_ACTION),
        ("POST", "/users/{id}", OperationType.ACTION),
        ("PATCH", "/config", OperationType.UPDATE),
        ("PUT", "/credits/config/tiers", OperationType.UPDATE),
        ("PUT", "/users/{id}/settings", OperationType.SUB_ACTION),
        ("DELETE", "/cache", OperationType.ACTION),
        ("DELETE", "/users/{id}/sessions", OperationType.SUB_ACTION),
        ("HEAD", "/users", OperationType.CUSTOM),
    ])
    def test_classify_operation(self, method, path, expected):
        """Test classification of less common shapes"""
        assert classify_operation(method, path) == expected
