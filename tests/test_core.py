"""
Core tests for the schema, naming helpers, type conversion and configuration
"""

import json
from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional
from uuid import UUID

import pytest
from pydantic import BaseModel, Field

from apigen.core.config import ApigenConfig, load_apigen_config
from apigen.core.errors import GenerationError, SchemaConflictError, WriteError
from apigen.core.type_conversion import python_type_to_type_ref
from apigen.core.utils import to_pascal_case, to_camel_case, normalize_slashes, is_identifier
from apigen.core.schema import (
    API, Endpoint, PathParam, QueryParam, BaseType, TypeKind, PrimitiveType, CompositeType,
    CompositeField, ArrayType, OptionalType, AliasType, STRING, NUMBER, BOOLEAN, ANY,
)


class Status(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Profile(BaseModel):
    """User profile."""
    bio: str = Field(..., description="Short biography")
    display_name: str = Field(..., alias="displayName")
    website: Optional[str] = None


class TreeNode(BaseModel):
    label: str
    children: List["TreeNode"] = []


@dataclass
class Point:
    x: float
    y: float


def test_naming_helpers():
    """Test PascalCase/camelCase conversion and path normalization"""
    print("=== NAMING HELPER TESTS ===")

    assert to_pascal_case("get_user") == "GetUser"
    assert to_pascal_case("list-projects") == "ListProjects"
    assert to_pascal_case("getUser") == "GetUser"
    assert to_pascal_case("GetUser") == "GetUser"
    assert to_camel_case("GetUser") == "getUser"
    assert to_camel_case("list_buckets") == "listBuckets"

    assert normalize_slashes("/api//v0///users") == "/api/v0/users"
    assert is_identifier("user_id")
    assert is_identifier("$ref")
    assert not is_identifier("page-size")
    assert not is_identifier("1st")
    print("   ✅ PASS")


def test_endpoint_declaration():
    """Test Endpoint validation and derived names"""
    endpoint = Endpoint(name="GetUser", method="get", path="/users/{id}", path_params=[PathParam("id")])
    assert endpoint.method == "GET"
    assert endpoint.method_name == "getUser"
    assert endpoint.placeholders == ["id"]

    renamed = Endpoint(name="GetUser", typescript_name="fetchUser")
    assert renamed.method_name == "fetchUser"

    with pytest.raises(ValueError):
        Endpoint(name="Trace", method="TRACE", path="/trace")


def test_anonymous_payloads_are_named_after_endpoint():
    anonymous = CompositeType(name=None, fields=[CompositeField("name", STRING)])
    user = CompositeType(name="User", fields=[CompositeField("name", STRING)])

    endpoint = Endpoint(name="update_user", method="POST", request=anonymous, response=user)

    assert endpoint.request_type().name == "UpdateUserRequest"
    assert endpoint.response_type() is user
    assert Endpoint(name="Ping").request_type() is None


def test_query_param_key_defaults_to_name():
    assert QueryParam("cursor").key == "cursor"
    assert QueryParam("page_size", NUMBER, key="pageSize").key == "pageSize"


def test_api_groups_and_root_paths():
    """Test group declaration helpers and root path composition"""
    api = API()
    users = api.group("users", "/users/")
    assert users.prefix == "users"
    assert api.endpoint_base_path == "/api/v0"
    assert api.root_path_for(users) == "/api/v0/users"

    endpoint = users.get("/users/{id}", Endpoint(name="GetUser", path_params=[PathParam("id")]))
    assert endpoint.method == "GET"
    assert endpoint.path == "/users/{id}"

    users.delete("/users/{id}", Endpoint(name="DeleteUser", path_params=[PathParam("id")]))
    assert [e.method for e in users.endpoints] == ["GET", "DELETE"]
    assert api.find_group("users") is users
    assert api.find_group("projects") is None

    with pytest.raises(ValueError):
        api.group("people", "users")

    root = api.group("root", "")
    assert api.root_path_for(root) == "/api/v0"

    bare = API(version="v1", base_path="")
    assert bare.endpoint_base_path == "/v1"


def test_type_ref_equality():
    """Structural equality ignores descriptions"""
    first = CompositeType(name="User", fields=[CompositeField("name", STRING, description="a")])
    second = CompositeType(name="User", fields=(CompositeField("name", STRING, description="b"),))
    assert first == second
    assert hash(first) == hash(second)
    assert first.kind == TypeKind.COMPOSITE
    assert ArrayType(STRING).kind == TypeKind.ARRAY
    assert AliasType("ProjectID", STRING) != AliasType("BucketID", STRING)


def test_python_type_to_type_ref():
    """Test Python runtime type conversion"""
    print("=== TYPE CONVERSION TESTS ===")

    assert python_type_to_type_ref(int) == NUMBER
    assert python_type_to_type_ref(float) == NUMBER
    assert python_type_to_type_ref(str) == STRING
    assert python_type_to_type_ref(bool) == BOOLEAN
    assert python_type_to_type_ref(None) == PrimitiveType(BaseType.NULL)

    assert python_type_to_type_ref(Optional[str]) == OptionalType(STRING)
    assert python_type_to_type_ref(List[int]) == ArrayType(NUMBER)
    assert python_type_to_type_ref(Optional[List[str]]) == OptionalType(ArrayType(STRING))
    assert python_type_to_type_ref(Dict[str, int]) == ANY
    assert python_type_to_type_ref(Literal["a", "b"]) == STRING
    assert python_type_to_type_ref(Literal[1, 2]) == NUMBER

    assert python_type_to_type_ref(UUID) == STRING
    assert python_type_to_type_ref(datetime) == STRING
    assert python_type_to_type_ref(Decimal) == NUMBER

    assert python_type_to_type_ref(Status) == AliasType("Status", STRING)
    print("   ✅ PASS")


def test_pydantic_model_conversion():
    ref = python_type_to_type_ref(Profile)

    assert isinstance(ref, CompositeType)
    assert ref.name == "Profile"
    assert ref.description == "User profile."
    assert [f.name for f in ref.fields] == ["bio", "displayName", "website"]
    assert ref.fields[0].description == "Short biography"
    assert ref.fields[2].type == OptionalType(STRING)


def test_dataclass_conversion():
    ref = python_type_to_type_ref(Point)
    assert ref == CompositeType(name="Point", fields=[CompositeField("x", NUMBER), CompositeField("y", NUMBER)])
    assert ref.description is None


def test_recursive_model_is_rejected():
    with pytest.raises(SchemaConflictError) as exc_info:
        python_type_to_type_ref(TreeNode)
    assert "TreeNode -> TreeNode" in str(exc_info.value)


def test_error_hierarchy():
    error = WriteError("/tmp/client.ts", "Permission denied")
    assert isinstance(error, GenerationError)
    assert error.path == "/tmp/client.ts"
    assert str(error) == "Failed to write /tmp/client.ts: Permission denied"


def test_config_default_creation(tmp_path, capsys):
    """Test apigen.config.json creation and reload"""
    config = load_apigen_config(str(tmp_path))

    assert config == ApigenConfig()
    assert (tmp_path / "apigen.config.json").exists()
    assert "Created default apigen config" in capsys.readouterr().out

    with open(tmp_path / "apigen.config.json", 'r', encoding='utf-8') as f:
        saved = json.load(f)
    assert saved["output"]["path"] == "src/api/client.gen.ts"
    assert saved["httpClient"]["className"] == "HttpClient"

    reloaded = load_apigen_config(str(tmp_path))
    assert reloaded == config
    assert reloaded.get_output_location(str(tmp_path)) == str(tmp_path / "src/api/client.gen.ts")


def test_config_overrides(tmp_path):
    (tmp_path / "apigen.config.json").write_text(json.dumps({
        "version": "v2",
        "indent": 2,
        "output": {"path": "web/client.ts"},
        "httpClient": {"className": "ApiClient", "importPath": "./api"},
    }))

    config = load_apigen_config(str(tmp_path))
    assert config.version == "v2"
    assert config.basePath == "/api"
    assert config.indent == 2
    assert config.output.path == "web/client.ts"
    assert config.httpClient.className == "ApiClient"
    assert config.httpClient.importPath == "./api"


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"indent": 0}),
    json.dumps({"output": {"path": "client.js"}}),
    json.dumps({"httpClient": {"className": "Http-Client"}}),
    json.dumps([1, 2]),
    json.dumps({"output": "client.ts"}),
    json.dumps({"httpClient": []}),
    json.dumps({"output": {"path": 5}}),
    json.dumps({"version": 2}),
])
def test_invalid_config_raises(tmp_path, content):
    (tmp_path / "apigen.config.json").write_text(content)
    with pytest.raises(ValueError) as exc_info:
        load_apigen_config(str(tmp_path))
    assert "apigen.config.json" in str(exc_info.value)


def run_core_tests():
    """Run core tests that need no fixtures"""
    test_naming_helpers()
    test_endpoint_declaration()
    test_anonymous_payloads_are_named_after_endpoint()
    test_api_groups_and_root_paths()
    test_type_ref_equality()
    test_python_type_to_type_ref()
    test_pydantic_model_conversion()
    test_dataclass_conversion()
    test_recursive_model_is_rejected()
    print("Core tests completed")


if __name__ == "__main__":
    run_core_tests()
