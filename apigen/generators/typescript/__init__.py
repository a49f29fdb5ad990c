"""
TypeScript client generation.

Main entry points for turning an API description into a TypeScript client
module. Lower-level pieces (registry, path expansion, method emission) are
exported for tools that assemble modules themselves.
"""

from .registry import TypeRegistry, elementary_type
from .paths import expand_endpoint, ExpandedEndpoint
from .clients import generate_endpoint_method
from .pipeline import generate_typescript, write_typescript, client_class_name


__all__ = [
    # Main entry points
    'generate_typescript',
    'write_typescript',

    # Building blocks
    'TypeRegistry',
    'elementary_type',
    'expand_endpoint',
    'ExpandedEndpoint',
    'generate_endpoint_method',
    'client_class_name',
]
