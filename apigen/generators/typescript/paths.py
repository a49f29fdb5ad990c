"""
Path and query expansion for generated client methods.

Turns an endpoint's path template and declared parameters into the
signature parameter list, the template-literal path expression and the
ordered query-string bindings of the generated method.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional

from apigen.core.utils import is_identifier, normalize_slashes
from apigen.core.errors import TemplateMismatchError
from apigen.core.constants import HttpClientRuntime
from apigen.core.schema import PLACEHOLDER_PATTERN, Endpoint, EndpointGroup
from apigen.generators.typescript.registry import TypeRegistry
from apigen.generators.typescript.utils import quote_string


REQUEST_PARAMETER = "request"


class ParameterLocation(Enum):
    """Where a signature parameter ends up in the HTTP request."""
    BODY = "body"
    PATH = "path"
    QUERY = "query"


@dataclass
class SignatureParameter:
    """One argument of the generated method."""
    name: str
    type_name: str
    location: ParameterLocation
    description: Optional[str] = None

    def declaration(self) -> str:
        return f"{self.name}: {self.type_name}"


@dataclass
class QueryBinding:
    """Sets query-string ``key`` from a signature parameter."""
    key: str
    parameter: SignatureParameter

    def statement(self, url_variable: str = "u") -> str:
        value = self.parameter.name
        if self.parameter.type_name != "string":
            value = f"String({value})"
        return f"{url_variable}.searchParams.set({quote_string(self.key)}, {value});"


@dataclass
class ExpandedEndpoint:
    """Result of expanding one endpoint."""
    parameters: List[SignatureParameter] = field(default_factory=list)
    path_expression: str = ""
    query_bindings: List[QueryBinding] = field(default_factory=list)

    @property
    def has_query(self) -> bool:
        return len(self.query_bindings) > 0

    def signature(self) -> str:
        return ", ".join(param.declaration() for param in self.parameters)

    def path_statements(self) -> List[str]:
        """Statements that leave the request path in ``fullPath``."""
        if not self.has_query:
            return [f"const fullPath = `{self.path_expression}`;"]

        lines = [f"const u = new URL(`{self.path_expression}`, window.location.href);"]
        lines.extend(binding.statement("u") for binding in self.query_bindings)
        lines.append("const fullPath = u.toString();")
        return lines


def expand_endpoint(
    endpoint: Endpoint,
    registry: TypeRegistry,
    group: Optional[EndpointGroup] = None
) -> ExpandedEndpoint:
    """
    Expand an endpoint into signature parameters, path expression and query bindings.

    Signature order is the request body first, then path parameters in
    template order, then query parameters in declaration order.

    Args:
        endpoint: Endpoint to expand
        registry: Registry that already holds every type of the endpoint
        group: Owning group; its prefix is removed from the start of the path

    Raises:
        TemplateMismatchError: If placeholders and path parameters do not match
            one-to-one, or two parameters share a name
    """
    placeholders = _check_placeholders(endpoint)
    _check_parameter_names(endpoint, placeholders)

    expanded = ExpandedEndpoint()

    if endpoint.request is not None:
        expanded.parameters.append(SignatureParameter(
            name=REQUEST_PARAMETER,
            type_name=registry.name_of(endpoint.request_type()),
            location=ParameterLocation.BODY,
        ))

    path_params = {param.name: param for param in endpoint.path_params}
    for placeholder in placeholders:
        param = path_params[placeholder]
        expanded.parameters.append(SignatureParameter(
            name=param.name,
            type_name=registry.parameter_type_name(param, endpoint, "path"),
            location=ParameterLocation.PATH,
            description=param.description,
        ))

    for param in endpoint.query_params:
        signature_param = SignatureParameter(
            name=param.name,
            type_name=registry.parameter_type_name(param, endpoint, "query"),
            location=ParameterLocation.QUERY,
            description=param.description,
        )
        expanded.parameters.append(signature_param)
        expanded.query_bindings.append(QueryBinding(key=param.key, parameter=signature_param))

    expanded.path_expression = build_path_expression(endpoint.path, placeholders, group)
    return expanded


def build_path_expression(path: str, placeholders: List[str], group: Optional[EndpointGroup] = None) -> str:
    """Template-literal body for the request path, rooted at the class ROOT_PATH."""
    relative = _strip_group_prefix(path, group.prefix if group else "")

    if relative and not relative.startswith("/"):
        relative = "/" + relative
    relative = normalize_slashes(relative)

    # Splitting on a capturing pattern alternates static text and placeholder names
    segments = []
    for index, part in enumerate(PLACEHOLDER_PATTERN.split(relative)):
        if index % 2 and part in placeholders:
            segments.append(f"${{{part}}}")
        elif index % 2:
            segments.append(_escape_template_text(f"{{{part}}}"))
        else:
            segments.append(_escape_template_text(part))

    return f"${{this.{HttpClientRuntime.ROOT_PATH_FIELD}}}" + "".join(segments)


def _escape_template_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("$", "\\$")


def _strip_group_prefix(path: str, prefix: str) -> str:
    if not prefix:
        return path

    stripped = path.lstrip("/")
    if stripped == prefix:
        return ""
    if stripped.startswith(prefix + "/"):
        return stripped[len(prefix):]
    return path


def _check_placeholders(endpoint: Endpoint) -> List[str]:
    placeholders = endpoint.placeholders
    declared = [param.name for param in endpoint.path_params]

    for name in placeholders:
        if placeholders.count(name) > 1:
            raise TemplateMismatchError(
                f"Placeholder '{{{name}}}' appears more than once in path '{endpoint.path}' of endpoint '{endpoint.name}'",
                endpoint=endpoint.name, path=endpoint.path,
            )
        if name not in declared:
            raise TemplateMismatchError(
                f"Placeholder '{{{name}}}' in path '{endpoint.path}' of endpoint '{endpoint.name}' has no matching path parameter",
                endpoint=endpoint.name, path=endpoint.path,
            )

    for name in declared:
        if declared.count(name) > 1:
            raise TemplateMismatchError(
                f"Path parameter '{name}' is declared more than once on endpoint '{endpoint.name}'",
                endpoint=endpoint.name, path=endpoint.path,
            )
        if name not in placeholders:
            raise TemplateMismatchError(
                f"Path parameter '{name}' of endpoint '{endpoint.name}' has no placeholder in path '{endpoint.path}'",
                endpoint=endpoint.name, path=endpoint.path,
            )

    return placeholders


def _check_parameter_names(endpoint: Endpoint, placeholders: List[str]):
    names = list(placeholders) + [param.name for param in endpoint.query_params]
    if endpoint.request is not None:
        names.insert(0, REQUEST_PARAMETER)

    seen = set()
    for name in names:
        if not is_identifier(name):
            raise TemplateMismatchError(
                f"Parameter '{name}' of endpoint '{endpoint.name}' is not a valid TypeScript identifier",
                endpoint=endpoint.name, path=endpoint.path,
            )
        if name in seen:
            raise TemplateMismatchError(
                f"Parameter name '{name}' is used more than once in the signature of endpoint '{endpoint.name}'",
                endpoint=endpoint.name, path=endpoint.path,
            )
        seen.add(name)
