"""
apigen Generation Pipeline

Assembles a complete TypeScript client module from an API description:
header and imports, every registered type declaration, then one client
class per endpoint group.

Generation is strictly two-pass. All types are registered before any text
is rendered, so type declarations and method signatures always see final
emitted names. The output is byte-identical for an unchanged API.
"""

import os
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from apigen.core.config import ApigenConfig
from apigen.core.errors import SchemaConflictError, WriteError
from apigen.core.constants import GENERATED_HEADER, HttpClientRuntime
from apigen.core.schema import API, EndpointGroup
from apigen.core.utils import is_identifier, to_pascal_case
from apigen.generators.typescript.registry import TypeRegistry
from apigen.generators.typescript.clients import generate_endpoint_method
from apigen.generators.typescript.utils import CodeBuilder, docstring_parts, quote_string, wrap_jsdoc


logger = logging.getLogger(__name__)

# Class members every generated client already declares
RESERVED_MEMBER_NAMES = frozenset({HttpClientRuntime.FIELD_NAME, HttpClientRuntime.ROOT_PATH_FIELD, "constructor"})


def generate_typescript(api: API, config: Optional[ApigenConfig] = None) -> str:
    """
    Generate the TypeScript client module for an API.

    Args:
        api: API description
        config: Generator configuration (defaults are used when omitted)

    Returns:
        Complete module source, ending with a newline

    Raises:
        SchemaConflictError: Conflicting type names or client class identifiers
        TemplateMismatchError: Path templates that disagree with their parameters
    """
    config = config or ApigenConfig()
    registry = TypeRegistry()

    register_types(api, registry)
    logger.debug(f"Registered {len(registry)} types for {len(api.endpoint_groups)} endpoint groups")

    _check_identifiers(api, registry, config)

    sections = [_generate_header(config)]

    definitions = registry.generate_definitions(indent=config.indent)
    if definitions:
        sections.append("\n\n".join(definitions))

    for group in api.endpoint_groups:
        sections.append(generate_client_class(api, group, registry, config))

    return "\n\n".join(sections) + "\n"


def register_types(api: API, registry: TypeRegistry):
    """Registration pass: every request, response and parameter type of every group."""
    for group in api.endpoint_groups:
        for endpoint in group.endpoints:
            if endpoint.request is not None:
                registry.register(endpoint.request_type())
            if endpoint.response is not None:
                registry.register(endpoint.response_type())
            for param in endpoint.path_params:
                registry.register_parameter(param, endpoint, "path")
            for param in endpoint.query_params:
                registry.register_parameter(param, endpoint, "query")


def client_class_name(api: API, group: EndpointGroup) -> str:
    """``<Group>HttpApi<VERSION>``, e.g. ``UsersHttpApiV0``."""
    return f"{to_pascal_case(group.name)}HttpApi{api.version.upper()}"


def generate_client_class(api: API, group: EndpointGroup, registry: TypeRegistry, config: ApigenConfig) -> str:
    """Render the client class for one endpoint group."""
    builder = CodeBuilder(indent_size=config.indent)
    client_class = config.httpClient.className

    if group.description:
        builder.add_lines(wrap_jsdoc(docstring_parts(group.description)).split("\n"))

    with builder.add_block(f"export class {client_class_name(api, group)} {{"):
        builder.add_line(
            f"private readonly {HttpClientRuntime.FIELD_NAME}: {client_class} = new {client_class}();"
        )
        builder.add_line(
            f"private readonly {HttpClientRuntime.ROOT_PATH_FIELD}: string = {quote_string(api.root_path_for(group))};"
        )

        for endpoint in group.endpoints:
            builder.add_line()
            method = generate_endpoint_method(
                endpoint,
                registry,
                group=group,
                indent=config.indent,
                indent_level=builder.indent_level
            )
            builder.lines.extend(method.split("\n"))

    return builder.get_code()


def write_typescript(api: API, path: str, config: Optional[ApigenConfig] = None) -> str:
    """
    Generate the module and write it to path.

    The content is written to a temporary file next to the destination and
    moved into place, so a failed run never leaves a partial module behind.

    Returns:
        The generated content

    Raises:
        WriteError: If the destination cannot be written
    """
    content = generate_typescript(api, config)
    write_generated_file(path, content)
    return content


def write_generated_file(path: str, content: str):
    """Atomically replace path with content."""
    destination = Path(path)
    temp_path = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=str(destination.parent), prefix=f".{destination.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)
        os.replace(temp_path, destination)
        temp_path = None
    except OSError as e:
        raise WriteError(str(destination), str(e)) from e
    finally:
        if temp_path is not None and os.path.exists(temp_path):
            os.unlink(temp_path)

    logger.debug(f"Generated: {destination}")


def _generate_header(config: ApigenConfig) -> str:
    lines: List[str] = list(GENERATED_HEADER)
    lines.append("")
    lines.append(HttpClientRuntime.import_statement(config.httpClient.className, config.httpClient.importPath))
    return "\n".join(lines)


def _check_identifiers(api: API, registry: TypeRegistry, config: ApigenConfig):
    """Module-level identifiers (types, client classes, the HTTP client import) must be unique."""
    client_class = config.httpClient.className
    if client_class in registry:
        raise SchemaConflictError(
            f"Type name '{client_class}' clashes with the imported HTTP client class",
            name=client_class,
        )

    seen_classes = {}
    seen_prefixes = {}
    for group in api.endpoint_groups:
        class_name = client_class_name(api, group)
        if class_name in seen_classes:
            raise SchemaConflictError(
                f"Endpoint groups '{seen_classes[class_name]}' and '{group.name}' "
                f"both generate the client class '{class_name}'",
                name=class_name,
            )
        if class_name in registry or class_name == client_class:
            raise SchemaConflictError(
                f"Client class '{class_name}' of endpoint group '{group.name}' clashes with a declared type",
                name=class_name,
            )
        if group.prefix in seen_prefixes:
            raise SchemaConflictError(
                f"Endpoint groups '{seen_prefixes[group.prefix]}' and '{group.name}' share the prefix '{group.prefix}'",
                name=group.prefix,
            )
        seen_classes[class_name] = group.name
        seen_prefixes[group.prefix] = group.name
        _check_method_names(group)


def _check_method_names(group: EndpointGroup):
    seen_methods = {}
    for endpoint in group.endpoints:
        method_name = endpoint.method_name
        if not is_identifier(method_name):
            raise SchemaConflictError(
                f"Endpoint '{endpoint.name}' in group '{group.name}' has method name '{method_name}', "
                f"which is not a valid TypeScript identifier",
                name=method_name,
            )
        if method_name in RESERVED_MEMBER_NAMES:
            raise SchemaConflictError(
                f"Endpoint '{endpoint.name}' in group '{group.name}' generates the method '{method_name}', "
                f"which clashes with a built-in client class member",
                name=method_name,
            )
        if method_name in seen_methods:
            raise SchemaConflictError(
                f"Endpoints '{seen_methods[method_name]}' and '{endpoint.name}' in group '{group.name}' "
                f"both generate the method '{method_name}'",
                name=method_name,
            )
        seen_methods[method_name] = endpoint.name
