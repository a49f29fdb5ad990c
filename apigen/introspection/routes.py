"""
FastAPI Route Introspection

Builds an apigen API description from a FastAPI application using runtime
introspection: every APIRoute becomes one Endpoint per HTTP method, grouped
by the first path segment below the API root path.
"""

import re
import inspect
import typing
from typing import List, Optional, Tuple, Any

from fastapi import FastAPI
from fastapi.routing import APIRoute
from starlette.responses import Response

from apigen.core.utils import to_pascal_case
from apigen.core.type_conversion import python_type_to_type_ref
from apigen.core.schema import (
    API, Endpoint, EndpointGroup, PathParam, QueryParam, TypeRef, BaseType,
    PrimitiveType, CompositeType, CompositeField, OptionalType, SUPPORTED_METHODS,
)


# Starlette path convertors, e.g. {file_path:path}
CONVERTOR_PATTERN = re.compile(r"\{([A-Za-z_]\w*):\w+\}")


def introspect_app(app: FastAPI, version: str = "v0", base_path: str = "/api") -> API:
    """
    Convert a FastAPI application into an API description.

    Routes outside ``base_path/version`` and routes that cannot be converted
    are skipped with a warning.

    Args:
        app: FastAPI application instance to introspect
        version: API version, part of the root path and of class names
        base_path: Root path prefix shared by all routes

    Returns:
        API with one group per first path segment
    """
    api = API(version=version, base_path=base_path, description=app.description or None)
    root_path = api.endpoint_base_path.rstrip("/")

    for route in app.routes:
        if not isinstance(route, APIRoute) or not route.include_in_schema:
            continue

        relative_path = _relative_path(route.path, root_path)
        if relative_path is None:
            print(f"Warning: Skipping route {route.path}: outside API root path '{root_path or '/'}'")
            continue

        endpoints = route_to_endpoints(route, relative_path)
        if not endpoints:
            continue

        group = _group_for(api, route, relative_path)
        for endpoint in endpoints:
            group.add(endpoint)

    return api


def route_to_endpoints(route: APIRoute, path: Optional[str] = None) -> List[Endpoint]:
    """
    Convert a FastAPI route to one Endpoint per HTTP method.

    Args:
        route: FastAPI route object from app.routes
        path: Path relative to the API root (defaults to the route path)

    Returns:
        List of Endpoint objects, empty if conversion fails
    """
    try:
        methods = [m for m in SUPPORTED_METHODS if m in route.methods]
        type_hints = typing.get_type_hints(route.endpoint)
        path = _strip_convertors(path if path is not None else route.path)

        path_params = [
            PathParam(
                name=model_field.alias,
                type=_field_type(model_field, hints),
                description=model_field.field_info.description,
            )
            for model_field, hints in _collect_params(route.dependant, "path_params", type_hints)
        ]
        query_params = [
            QueryParam(
                name=model_field.name,
                key=model_field.alias,
                type=_strip_optional(_field_type(model_field, hints)),
                description=model_field.field_info.description,
            )
            for model_field, hints in _collect_params(route.dependant, "query_params", type_hints)
        ]
        request = _extract_request_type(_collect_params(route.dependant, "body_params", type_hints))
        response = _extract_response_type(route, type_hints)

        base_name = to_pascal_case(route.name)
        endpoints = []
        for method in methods:
            name = base_name if len(methods) == 1 else f"{base_name}{method.title()}"
            endpoints.append(Endpoint(
                name=name,
                method=method,
                path=path,
                request=request if method != "GET" else None,
                response=response,
                path_params=list(path_params),
                query_params=list(query_params),
                description=route.description or None,
            ))
        return endpoints

    except Exception as e:
        print(f"Warning: Failed to convert route {route.path}: {e}")
        return []


def _relative_path(path: str, root_path: str) -> Optional[str]:
    if not root_path:
        return path
    if path == root_path:
        return "/"
    if path.startswith(root_path + "/"):
        return path[len(root_path):]
    return None


def _group_for(api: API, route: APIRoute, relative_path: str) -> EndpointGroup:
    first_segment = relative_path.strip("/").split("/")[0]
    prefix = "" if first_segment.startswith("{") else first_segment

    group = api.find_group(prefix)
    if group is None:
        name = str(route.tags[0]) if route.tags else (prefix or "root")
        group = api.group(name, prefix)
    return group


def _field_type(model_field, type_hints: dict) -> TypeRef:
    py_type = type_hints.get(model_field.name)
    if py_type is None:
        py_type = model_field.field_info.annotation
    return python_type_to_type_ref(py_type)


def _strip_optional(type_ref: TypeRef) -> TypeRef:
    """Query values are sent as plain strings; ``Optional[T]`` is sent as ``T``."""
    if isinstance(type_ref, OptionalType):
        return type_ref.element
    return type_ref


def _extract_request_type(body_params: List[Tuple[Any, dict]]) -> Optional[TypeRef]:
    """
    Single body parameters are the request body itself; embedded or
    multiple body parameters are wrapped in an anonymous object keyed by alias.
    """
    if not body_params:
        return None

    for model_field, _ in body_params:
        kind = model_field.field_info.__class__.__name__
        if kind in ("Form", "File"):
            raise ValueError(f"{kind} parameter '{model_field.name}' cannot be sent as JSON")

    if len(body_params) == 1 and not getattr(body_params[0][0].field_info, 'embed', False):
        return _field_type(*body_params[0])

    return CompositeType(
        name=None,
        fields=tuple(
            CompositeField(
                name=model_field.alias,
                type=_field_type(model_field, hints),
                description=model_field.field_info.description,
            )
            for model_field, hints in body_params
        ),
    )


def _collect_params(dependant, kind: str, type_hints: dict) -> List[Tuple[Any, dict]]:
    """
    Parameters of one kind from the endpoint and all of its sub-dependencies.

    Endpoint parameters are typed from the endpoint's hints; parameters of
    sub-dependencies fall back to their field annotation. A parameter shared
    by several dependencies is sent once.
    """
    collected = []
    seen = set()
    pending = [(dependant, type_hints)]
    while pending:
        current, hints = pending.pop(0)
        for model_field in getattr(current, kind):
            if model_field.alias in seen:
                continue
            seen.add(model_field.alias)
            collected.append((model_field, hints))
        pending.extend((sub_dependant, {}) for sub_dependant in current.dependencies)
    return collected


def _strip_convertors(path: str) -> str:
    """``/files/{file_path:path}`` -> ``/files/{file_path}``."""
    return CONVERTOR_PATTERN.sub(r"{\1}", path)


def _extract_response_type(route: APIRoute, type_hints: dict) -> Optional[TypeRef]:
    """
    Extract response type, preferring the route's response_model over the
    return annotation.
    """
    if route.status_code == 204:
        return None

    py_type: Any = route.response_model
    if py_type is None:
        py_type = type_hints.get('return')
    if py_type is None or _is_response_class(py_type):
        return None

    type_ref = python_type_to_type_ref(py_type)
    if type_ref == PrimitiveType(BaseType.NULL):
        return None
    return type_ref


def _is_response_class(py_type: Any) -> bool:
    return inspect.isclass(py_type) and issubclass(py_type, Response)
