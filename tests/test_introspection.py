"""
Introspection tests for FastAPI routes and Pydantic models
"""

from typing import List, Optional

from fastapi import Depends, FastAPI
from fastapi.routing import APIRoute
from pydantic import BaseModel

from apigen.core.integrator import integrate
from apigen.core.config import ApigenConfig, OutputConfig
from apigen.core.schema import (
    CompositeType, ArrayType, OptionalType, PathParam, STRING, NUMBER, ANY,
)
from apigen.introspection.routes import introspect_app, route_to_endpoints
from apigen.generators.typescript.pipeline import generate_typescript

from sample.app import app as sample_app


class Folder(BaseModel):
    name: str
    subfolders: List["Folder"] = []


def _route(app: FastAPI, path: str) -> APIRoute:
    for route in app.routes:
        if isinstance(route, APIRoute) and route.path == path:
            return route
    raise LookupError(path)


def test_sample_app_introspection(capsys):
    """Test API description built from the sample FastAPI app"""
    api = introspect_app(sample_app)

    print("=== FASTAPI INTROSPECTION TEST ===")
    for group, endpoint in api.all_endpoints():
        print(f"{group.name}: {endpoint.method} {endpoint.path} -> {endpoint.name}")

    assert api.description == "Sample API for apigen introspection"
    assert [group.name for group in api.endpoint_groups] == ["users", "projects", "files"]
    assert [group.prefix for group in api.endpoint_groups] == ["users", "projects", "files"]

    users = api.endpoint_groups[0]
    assert [(e.name, e.method) for e in users.endpoints] == [
        ("GetUser", "GET"),
        ("ListUsers", "GET"),
        ("CreateUser", "POST"),
        ("DeleteUser", "DELETE"),
    ]

    # Routes outside the API root are reported and skipped
    assert "Skipping route /health" in capsys.readouterr().out


def test_path_and_query_parameters():
    api = introspect_app(sample_app)
    get_user, list_users = api.endpoint_groups[0].endpoints[:2]

    assert get_user.path == "/users/{user_id}"
    assert get_user.path_params == [PathParam("user_id", NUMBER)]
    assert get_user.description == "Fetch a single user."

    assert [(p.name, p.key, p.type) for p in list_users.query_params] == [
        ("cursor", "cursor", STRING),
        ("page_size", "pageSize", NUMBER),
    ]
    assert list_users.description is None


def test_request_and_response_types():
    api = introspect_app(sample_app)
    get_user, list_users, create_user, delete_user = api.endpoint_groups[0].endpoints

    user = get_user.response
    assert isinstance(user, CompositeType)
    assert user.name == "User"
    assert user.description == "A registered user."
    assert [f.name for f in user.fields] == ["id", "name", "email"]
    assert user.fields[2].type == OptionalType(STRING)

    assert list_users.response == ArrayType(user)
    assert get_user.request is None

    assert create_user.request.name == "CreateUser"
    assert create_user.response == user

    assert delete_user.response is None

    list_buckets = api.endpoint_groups[1].endpoints[0]
    bucket = list_buckets.response.element
    assert bucket.name == "Bucket"
    assert bucket.fields[0].type == STRING
    assert bucket.fields[2].type == user


def test_multi_method_route():
    app = FastAPI()

    @app.api_route("/api/v0/items/{item_id}", methods=["PUT", "GET"])
    async def item(item_id: str) -> dict:
        return {}

    endpoints = route_to_endpoints(_route(app, "/api/v0/items/{item_id}"), "/items/{item_id}")

    assert [(e.name, e.method) for e in endpoints] == [("ItemGet", "GET"), ("ItemPut", "PUT")]
    assert all(e.response == ANY for e in endpoints)
    assert endpoints[0].path == "/items/{item_id}"


def test_path_convertors_are_stripped():
    """Starlette convertors like {file_path:path} become plain placeholders"""
    api = introspect_app(sample_app)
    read_file = api.endpoint_groups[2].endpoints[0]

    assert read_file.path == "/files/{file_path}"
    assert read_file.path_params == [PathParam("file_path", STRING)]

    result = generate_typescript(api)
    assert "public async readFile(file_path: string): Promise<string> {" in result
    assert "const fullPath = `${this.ROOT_PATH}/${file_path}`;" in result


def test_sub_dependency_parameters():
    """Parameters declared by dependencies belong to the endpoint signature"""
    app = FastAPI()

    def pagination(limit: int = 50, cursor: Optional[str] = None):
        return {"limit": limit, "cursor": cursor}

    def project_scope(project_id: str, tenant_id: str):
        return project_id, tenant_id

    @app.get("/api/v0/projects/{project_id}/members")
    async def list_members(
        project_id: str,
        page: dict = Depends(pagination),
        scope: tuple = Depends(project_scope)
    ) -> List[str]:
        return []

    endpoint = introspect_app(app).endpoint_groups[0].endpoints[0]

    assert endpoint.path_params == [PathParam("project_id", STRING)]
    assert [(p.name, p.type) for p in endpoint.query_params] == [
        ("limit", NUMBER),
        ("cursor", STRING),
        ("tenant_id", STRING),
    ]

    result = generate_typescript(introspect_app(app))
    assert "public async listMembers(project_id: string, limit: number, cursor: string, tenant_id: string)" in result
    assert "u.searchParams.set('tenant_id', tenant_id);" in result


def test_groups_without_tags():
    app = FastAPI()

    @app.get("/api/v0/reports/daily")
    async def daily_report() -> List[str]:
        return []

    @app.get("/api/v0/{slug}")
    async def by_slug(slug: str) -> str:
        return slug

    api = introspect_app(app)
    assert [(g.name, g.prefix) for g in api.endpoint_groups] == [("reports", "reports"), ("root", "")]

    result = generate_typescript(api)
    assert "export class ReportsHttpApiV0 {" in result
    assert "export class RootHttpApiV0 {" in result
    assert "private readonly ROOT_PATH: string = '/api/v0';" in result
    assert "const fullPath = `${this.ROOT_PATH}/${slug}`;" in result


def test_unconvertible_route_is_skipped(capsys):
    app = FastAPI()

    @app.get("/api/v0/folders/root", response_model=Folder)
    async def root_folder():
        return Folder(name="root")

    api = introspect_app(app)

    assert api.endpoint_groups == []
    assert "Warning: Failed to convert route /api/v0/folders/root" in capsys.readouterr().out


def test_version_and_base_path():
    api = introspect_app(sample_app, version="v1")
    assert api.endpoint_groups == []

    app = FastAPI()

    @app.get("/rpc/v2/status")
    async def status() -> bool:
        return True

    api = introspect_app(app, version="v2", base_path="/rpc")
    assert api.endpoint_base_path == "/rpc/v2"
    assert api.endpoint_groups[0].endpoints[0].path == "/status"


def test_generated_client_for_sample_app():
    """Test TypeScript generated from the sample app"""
    result = generate_typescript(introspect_app(sample_app))
    print(result)

    assert "export class UsersHttpApiV0 {" in result
    assert "export class ProjectsHttpApiV0 {" in result
    assert "public async getUser(user_id: number): Promise<User> {" in result
    assert "const fullPath = `${this.ROOT_PATH}/${user_id}`;" in result
    assert "public async listUsers(cursor: string, page_size: number): Promise<User[]> {" in result
    assert "u.searchParams.set('pageSize', String(page_size));" in result
    assert "public async createUser(request: CreateUser): Promise<User> {" in result
    assert "const response = await this.http.post(fullPath, JSON.stringify(request));" in result
    assert "public async deleteUser(user_id: number): Promise<void> {" in result
    assert "public async listBuckets(project_id: string): Promise<Bucket[]> {" in result
    assert "/** A registered user. */\nexport interface User {" in result
    assert "    /** Display name */\n    name: string;" in result
    assert "    email?: string;" in result
    assert result.count("export interface User {") == 1


def test_integrate_fastapi_app(tmp_path, capsys):
    """Test config-driven generation for a FastAPI app"""
    config = ApigenConfig(output=OutputConfig(path="web/client.ts"))

    api, content = integrate(sample_app, project_root=str(tmp_path), config=config)

    written = tmp_path / "web" / "client.ts"
    assert written.read_text(encoding='utf-8') == content
    assert len(api.endpoint_groups) == 3
    assert "apigen: Generated" in capsys.readouterr().out
    # An explicit config never touches apigen.config.json
    assert not (tmp_path / "apigen.config.json").exists()


def test_integrate_api_with_default_config(tmp_path):
    api = introspect_app(sample_app)

    returned, content = integrate(api, project_root=str(tmp_path), output="out.ts")

    assert returned is api
    assert (tmp_path / "apigen.config.json").exists()
    assert (tmp_path / "out.ts").read_text(encoding='utf-8') == content


def run_introspection_tests():
    """Run introspection tests that need no fixtures"""
    test_path_and_query_parameters()
    test_request_and_response_types()
    test_multi_method_route()
    test_path_convertors_are_stripped()
    test_sub_dependency_parameters()
    test_groups_without_tags()
    test_version_and_base_path()
    test_generated_client_for_sample_app()

    print("🎉 All introspection tests completed successfully!")


if __name__ == "__main__":
    run_introspection_tests()
