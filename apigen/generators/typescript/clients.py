"""
TypeScript client method generation.

Emits one async class method per Endpoint. Every method builds the request
path, dispatches through the shared HttpClient, returns the decoded body on
a successful status and otherwise throws an Error carrying the server's
error message.
"""

from typing import Optional

from apigen.core.constants import HttpClientRuntime
from apigen.core.schema import Endpoint, EndpointGroup
from apigen.generators.typescript.registry import TypeRegistry
from apigen.generators.typescript.paths import ExpandedEndpoint, expand_endpoint
from apigen.generators.typescript.utils import CodeBuilder, docstring_parts, wrap_jsdoc


def generate_endpoint_method(
    endpoint: Endpoint,
    registry: TypeRegistry,
    group: Optional[EndpointGroup] = None,
    indent: int = 4,
    indent_level: int = 0
) -> str:
    """
    Generate the client method for a single endpoint.

    Args:
        endpoint: Endpoint to emit
        registry: Registry populated by the registration pass
        group: Owning group (used to relativize the path)
        indent: Spaces per indentation level
        indent_level: Starting indentation level (1 inside a class body)

    Returns:
        Method source text
    """
    expanded = expand_endpoint(endpoint, registry, group)
    response_type = _response_type_name(endpoint, registry)

    builder = CodeBuilder(indent_size=indent, indent_level=indent_level)

    jsdoc = generate_method_jsdoc(endpoint, expanded)
    if jsdoc:
        builder.add_lines(jsdoc.split("\n"))

    signature = f"public async {endpoint.method_name}({expanded.signature()}): Promise<{response_type or 'void'}> {{"
    with builder.add_block(signature):
        builder.add_lines(expanded.path_statements())
        builder.add_line(_dispatch_statement(endpoint))

        with builder.add_block("if (response.ok) {"):
            builder.add_line(_success_statement(response_type))

        builder.add_line("const err = await response.json();")
        builder.add_line("throw new Error(err.error);")

    return builder.get_code()


def generate_method_jsdoc(endpoint: Endpoint, expanded: ExpandedEndpoint) -> str:
    """JSDoc for a method; empty when nothing is documented."""
    parts = []

    if endpoint.description:
        parts.extend(docstring_parts(endpoint.description))

    documented = [param for param in expanded.parameters if param.description]
    if documented:
        if parts:
            parts.append("")
        for param in documented:
            parts.append(f"@param {param.name} - {param.description}")

    return wrap_jsdoc(parts)


def _response_type_name(endpoint: Endpoint, registry: TypeRegistry) -> Optional[str]:
    response = endpoint.response_type()
    if response is None:
        return None
    return registry.name_of(response)


def _dispatch_statement(endpoint: Endpoint) -> str:
    verb = endpoint.method.lower()
    http = f"this.{HttpClientRuntime.FIELD_NAME}"
    if endpoint.request is not None:
        return f"const response = await {http}.{verb}(fullPath, JSON.stringify(request));"
    return f"const response = await {http}.{verb}(fullPath);"


def _success_statement(response_type: Optional[str]) -> str:
    if response_type is None:
        return "return;"
    return f"return response.json().then((body) => body as {response_type});"
