"""
apigen - Typed TypeScript HTTP client generation from API descriptions
"""

def _check_dependencies():
    """Check for required dependencies"""
    missing = []
    
    try:
        import fastapi
    except ImportError:
        missing.append("fastapi")
    
    try:
        import pydantic
    except ImportError:
        missing.append("pydantic")
    
    if missing:
        deps = " and ".join(missing)
        raise ImportError(
            f"apigen requires {deps} to be installed.\n"
            f"Install with: pip install {' '.join(missing)}"
        )

# Check dependencies on import
_check_dependencies()

# Import main API only after dependency check
from .core.config import get_version
from .core.errors import GenerationError, SchemaConflictError, TemplateMismatchError, WriteError
from .core.schema import (
    API, EndpointGroup, Endpoint, PathParam, QueryParam, BaseType,
    PrimitiveType, CompositeType, CompositeField, ArrayType, OptionalType, AliasType,
)
from .core.integrator import integrate
from .generators.typescript.registry import TypeRegistry
from .generators.typescript.pipeline import generate_typescript, write_typescript
from .introspection.routes import introspect_app

__version__ = get_version()

__all__ = [
    # Main functions
    'integrate',
    'generate_typescript',
    'write_typescript',
    'introspect_app',
    'TypeRegistry',
    
    # Schema
    'API',
    'EndpointGroup',
    'Endpoint',
    'PathParam',
    'QueryParam',
    'BaseType',
    'PrimitiveType',
    'CompositeType',
    'CompositeField',
    'ArrayType',
    'OptionalType',
    'AliasType',
    
    # Errors
    'GenerationError',
    'SchemaConflictError',
    'TemplateMismatchError',
    'WriteError',
    
    # Version
    '__version__'
]
