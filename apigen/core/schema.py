"""
apigen Data Models

Describes an HTTP API as an object graph (API -> EndpointGroup -> Endpoint)
together with the structural type system used for request, response and
parameter payloads. Instances are plain dataclasses so they can be built by
hand, through the declaration helpers on API/EndpointGroup, or by
FastAPI introspection.
"""

import re
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from apigen.core.utils import to_camel_case, to_pascal_case, normalize_slashes


# === TYPE SYSTEM === #

class BaseType(Enum):
    """Primitive TypeScript types for code generation."""
    ANY = "any"
    NULL = "null"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"


class TypeKind(Enum):
    """Closed set of TypeRef variants."""
    PRIMITIVE = "primitive"
    COMPOSITE = "composite"
    ARRAY = "array"
    OPTIONAL = "optional"
    ALIAS = "alias"


@dataclass(frozen=True)
class PrimitiveType:
    """Elementary value: string, number, boolean, ..."""
    base: BaseType

    @property
    def kind(self) -> TypeKind:
        return TypeKind.PRIMITIVE


@dataclass(frozen=True)
class CompositeField:
    """One named member of a composite type."""
    name: str
    type: 'TypeRef'
    description: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class CompositeType:
    """
    Object type with ordered fields.

    A composite without a name is anonymous; it is named from the context in
    which it is registered (e.g. ``GetUserResponse``).
    """
    name: Optional[str]
    fields: Tuple[CompositeField, ...] = ()
    description: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        # Accept lists for convenience; tuples keep the dataclass hashable
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, 'fields', tuple(self.fields))

    @property
    def kind(self) -> TypeKind:
        return TypeKind.COMPOSITE

    def with_name(self, name: str) -> 'CompositeType':
        return CompositeType(name=name, fields=self.fields, description=self.description)


@dataclass(frozen=True)
class ArrayType:
    """Array of element; named arrays get their own type alias."""
    element: 'TypeRef'
    name: Optional[str] = None

    @property
    def kind(self) -> TypeKind:
        return TypeKind.ARRAY


@dataclass(frozen=True)
class OptionalType:
    """Nullable element; as a composite field it also makes the field optional."""
    element: 'TypeRef'
    name: Optional[str] = None

    @property
    def kind(self) -> TypeKind:
        return TypeKind.OPTIONAL


@dataclass(frozen=True)
class AliasType:
    """Declared source name for another type, e.g. ``ProjectID = string``."""
    name: str
    target: 'TypeRef'

    @property
    def kind(self) -> TypeKind:
        return TypeKind.ALIAS


TypeRef = Union[PrimitiveType, CompositeType, ArrayType, OptionalType, AliasType]


STRING = PrimitiveType(BaseType.STRING)
NUMBER = PrimitiveType(BaseType.NUMBER)
BOOLEAN = PrimitiveType(BaseType.BOOLEAN)
ANY = PrimitiveType(BaseType.ANY)


# === PARAMETERS === #

@dataclass
class PathParam:
    """Parameter substituted into a ``{name}`` placeholder of the path."""
    name: str
    type: TypeRef = STRING
    description: Optional[str] = None


@dataclass
class QueryParam:
    """Parameter sent in the query string under ``key``."""
    name: str
    type: TypeRef = STRING
    key: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if self.key is None:
            self.key = self.name


# === ENDPOINTS === #

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")


@dataclass
class Endpoint:
    """
    One RPC operation: an HTTP method against a path template.

    ``name`` is the display name used to derive the client method identifier
    and the names of anonymous request/response types.
    """
    name: str
    method: str = "GET"
    path: str = ""
    request: Optional[TypeRef] = None
    response: Optional[TypeRef] = None
    path_params: List[PathParam] = field(default_factory=list)
    query_params: List[QueryParam] = field(default_factory=list)
    description: Optional[str] = None
    typescript_name: Optional[str] = None

    def __post_init__(self):
        self.method = self.method.upper()
        if self.method not in SUPPORTED_METHODS:
            raise ValueError(
                f"Unsupported HTTP method '{self.method}' for endpoint '{self.name}'. "
                f"Supported: {', '.join(SUPPORTED_METHODS)}"
            )

    @property
    def method_name(self) -> str:
        """Identifier of the generated client method."""
        return self.typescript_name or to_camel_case(self.name)

    @property
    def placeholders(self) -> List[str]:
        """Placeholder names in template order."""
        return PLACEHOLDER_PATTERN.findall(self.path)

    def request_type(self) -> Optional[TypeRef]:
        return _named_for(self.request, f"{to_pascal_case(self.name)}Request")

    def response_type(self) -> Optional[TypeRef]:
        return _named_for(self.response, f"{to_pascal_case(self.name)}Response")


def _named_for(type_ref: Optional[TypeRef], name: str) -> Optional[TypeRef]:
    if isinstance(type_ref, CompositeType) and type_ref.name is None:
        return type_ref.with_name(name)
    return type_ref


@dataclass
class EndpointGroup:
    """Endpoints sharing a URL prefix; rendered as one client class."""
    name: str
    prefix: str
    endpoints: List[Endpoint] = field(default_factory=list)
    description: Optional[str] = None

    def __post_init__(self):
        self.prefix = self.prefix.strip("/")

    def add(self, endpoint: Endpoint) -> Endpoint:
        self.endpoints.append(endpoint)
        return endpoint

    def get(self, path: str, endpoint: Endpoint) -> Endpoint:
        return self._bind("GET", path, endpoint)

    def post(self, path: str, endpoint: Endpoint) -> Endpoint:
        return self._bind("POST", path, endpoint)

    def put(self, path: str, endpoint: Endpoint) -> Endpoint:
        return self._bind("PUT", path, endpoint)

    def patch(self, path: str, endpoint: Endpoint) -> Endpoint:
        return self._bind("PATCH", path, endpoint)

    def delete(self, path: str, endpoint: Endpoint) -> Endpoint:
        return self._bind("DELETE", path, endpoint)

    def _bind(self, method: str, path: str, endpoint: Endpoint) -> Endpoint:
        endpoint.method = method
        endpoint.path = path
        return self.add(endpoint)


@dataclass
class API:
    """
    Complete API description for one generated module.

    The module-wide root path is ``base_path/version``; every group's
    class root path is composed under it.
    """
    version: str = "v0"
    base_path: str = "/api"
    endpoint_groups: List[EndpointGroup] = field(default_factory=list)
    description: Optional[str] = None

    @property
    def endpoint_base_path(self) -> str:
        return normalize_slashes("/" + "/".join(p for p in (self.base_path, self.version) if p))

    def group(self, name: str, prefix: str) -> EndpointGroup:
        """Create and attach a new endpoint group."""
        normalized = prefix.strip("/")
        for existing in self.endpoint_groups:
            if existing.prefix == normalized:
                raise ValueError(f"Endpoint group prefix '{normalized}' is already used by group '{existing.name}'")

        group = EndpointGroup(name=name, prefix=normalized)
        self.endpoint_groups.append(group)
        return group

    def find_group(self, prefix: str) -> Optional[EndpointGroup]:
        normalized = prefix.strip("/")
        for group in self.endpoint_groups:
            if group.prefix == normalized:
                return group
        return None

    def root_path_for(self, group: EndpointGroup) -> str:
        if not group.prefix:
            return self.endpoint_base_path.rstrip("/")
        return normalize_slashes(f"{self.endpoint_base_path}/{group.prefix}")

    def all_endpoints(self) -> List[Tuple[EndpointGroup, Endpoint]]:
        return [(group, endpoint) for group in self.endpoint_groups for endpoint in group.endpoints]
