"""
Naming and path helpers shared by the schema and the generators.
"""

import re


def to_pascal_case(name: str) -> str:
    """Convert kebab-case, snake_case, or camelCase to PascalCase."""
    name = re.sub(r'[^0-9A-Za-z]+', ' ', name)
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1 \2', name)
    parts = name.split()
    return ''.join(p[0].upper() + p[1:] if p else '' for p in parts)


def to_camel_case(name: str) -> str:
    """Convert to camelCase."""
    pascal = to_pascal_case(name)
    return pascal[0].lower() + pascal[1:] if pascal else ''


def normalize_slashes(path: str) -> str:
    """Collapse runs of slashes into one."""
    return re.sub(r'/{2,}', '/', path)


def is_identifier(name: str) -> bool:
    """Check if name can be used unquoted as a TypeScript property or variable."""
    return re.fullmatch(r'[A-Za-z_$][0-9A-Za-z_$]*', name) is not None
