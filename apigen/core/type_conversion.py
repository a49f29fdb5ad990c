"""
apigen Type Conversion for Runtime Introspection

Converts Python runtime type objects (typing constructs, primitives, Enums,
dataclasses and Pydantic models) into apigen TypeRefs with full recursive
support for nested types.
"""

import sys
import types
import typing
import inspect
import dataclasses
import collections.abc
from enum import Enum
from typing import Any, Tuple, Union, get_origin, get_args

from pydantic import BaseModel

from apigen.core.constants import COMMON_TYPE_MAP
from apigen.core.errors import SchemaConflictError
from apigen.core.schema import (
    TypeRef, BaseType, PrimitiveType, CompositeType, CompositeField,
    ArrayType, OptionalType, AliasType,
)


ARRAY_ORIGINS = (
    list, set, frozenset, tuple,
    collections.abc.Sequence, collections.abc.MutableSequence, collections.abc.Set,
    collections.abc.MutableSet, collections.abc.Iterable,
)
if sys.version_info >= (3, 10):
    UNION_ORIGINS = (Union, types.UnionType)
else:
    UNION_ORIGINS = (Union,)

EXTERNAL_MODULES = ("uuid", "datetime", "decimal", "pathlib", "pydantic", "pydantic_core")


def python_type_to_type_ref(py_type: Any) -> TypeRef:
    """
    Convert Python runtime type object to a TypeRef.

    Supports complex nested types like Optional[List[User]].

    Args:
        py_type: Python type object from typing.get_type_hints() or a model field

    Returns:
        TypeRef representing the type structure

    Raises:
        SchemaConflictError: If a model refers back to itself
    """
    return _convert(py_type, ())


def _convert(py_type: Any, stack: Tuple[type, ...]) -> TypeRef:
    if py_type is None or py_type is type(None):
        return PrimitiveType(BaseType.NULL)

    if py_type is Any:
        return PrimitiveType(BaseType.ANY)

    # Handle typing module constructs (Optional, List, Union, etc.)
    origin = get_origin(py_type)
    if origin is not None:
        return _convert_typing_construct(py_type, origin, stack)

    if _is_primitive_type(py_type):
        return _convert_primitive_type(py_type)

    if inspect.isclass(py_type):
        return _convert_custom_type(py_type, stack)

    return PrimitiveType(BaseType.ANY)


def _convert_typing_construct(py_type: Any, origin: Any, stack: Tuple[type, ...]) -> TypeRef:
    """Convert typing module constructs (Optional, List, Union, etc.)."""
    args = get_args(py_type)

    if origin is typing.Annotated:
        return _convert(args[0], stack)

    elif origin in UNION_ORIGINS:
        return _convert_union_type(args, stack)

    elif origin in ARRAY_ORIGINS:
        return _convert_list_type(args, stack)

    elif origin is typing.Literal:
        return _convert_literal_type(args)

    # Dicts, callables and generics we don't specifically handle
    else:
        return PrimitiveType(BaseType.ANY)


def _convert_union_type(args: tuple, stack: Tuple[type, ...]) -> TypeRef:
    """
    Convert Union types, including Optional (Union[T, None]).

    Only Optional[T] has a TypeRef shape; other unions become ``any``.
    """
    non_none = [arg for arg in args if arg is not type(None)]
    inner = _convert(non_none[0], stack) if len(non_none) == 1 else PrimitiveType(BaseType.ANY)

    if len(non_none) < len(args):
        return OptionalType(element=inner)
    return inner


def _convert_list_type(args: tuple, stack: Tuple[type, ...]) -> TypeRef:
    """Convert List[T] (and Set/Sequence/homogeneous Tuple) to an array."""
    element_args = [arg for arg in args if arg is not Ellipsis]
    if len(element_args) == 1:
        return ArrayType(element=_convert(element_args[0], stack))
    # Heterogeneous tuples and bare containers
    return ArrayType(element=PrimitiveType(BaseType.ANY))


def _convert_literal_type(args: tuple) -> TypeRef:
    """Convert Literal["a", "b"] to the primitive its values share."""
    value_types = {_convert_primitive_type(type(arg)) for arg in args}
    if len(value_types) == 1:
        return value_types.pop()
    return PrimitiveType(BaseType.ANY)


def _convert_primitive_type(py_type: type) -> PrimitiveType:
    """Convert primitive Python types to BaseType."""
    if py_type is bool:
        return PrimitiveType(BaseType.BOOLEAN)
    elif py_type is int or py_type is float:
        return PrimitiveType(BaseType.NUMBER)
    elif py_type is str or py_type is bytes:
        return PrimitiveType(BaseType.STRING)
    else:
        return PrimitiveType(BaseType.ANY)


def _is_primitive_type(py_type: Any) -> bool:
    """Check if type is a Python primitive type."""
    primitive_types = {int, float, str, bool, bytes, dict, list, tuple, set}
    return py_type in primitive_types


def _convert_custom_type(py_type: type, stack: Tuple[type, ...]) -> TypeRef:
    """Convert Enums, dataclasses, Pydantic models and common external types."""
    common_external = _check_common_external_type(py_type)
    if common_external:
        return common_external

    if issubclass(py_type, Enum):
        return _convert_enum_type(py_type)

    if py_type in stack:
        chain = " -> ".join(cls.__name__ for cls in stack + (py_type,))
        raise SchemaConflictError(f"Recursive type reference is not supported: {chain}", name=py_type.__name__)

    if issubclass(py_type, BaseModel):
        return _convert_pydantic_model(py_type, stack + (py_type,))

    if dataclasses.is_dataclass(py_type):
        return _convert_dataclass(py_type, stack + (py_type,))

    return PrimitiveType(BaseType.ANY)


def _convert_enum_type(cls: type) -> AliasType:
    """Enums become an alias of the primitive their values share."""
    value_types = {_convert_primitive_type(type(member.value)) for member in cls}
    target = value_types.pop() if len(value_types) == 1 else PrimitiveType(BaseType.ANY)
    return AliasType(name=cls.__name__, target=target)


def _convert_pydantic_model(cls: type, stack: Tuple[type, ...]) -> CompositeType:
    """
    Convert a Pydantic model using Pydantic's field introspection.

    Field names follow the model's serialization alias, since that is
    the key the client sees on the wire.
    """
    fields = []
    for field_name, field_info in cls.model_fields.items():
        wire_name = field_info.serialization_alias or field_info.alias or field_name
        fields.append(CompositeField(
            name=wire_name,
            type=_convert(field_info.annotation, stack),
            description=field_info.description,
        ))

    return CompositeType(
        name=cls.__name__,
        fields=tuple(fields),
        description=_own_docstring(cls),
    )


def _convert_dataclass(cls: type, stack: Tuple[type, ...]) -> CompositeType:
    hints = typing.get_type_hints(cls)
    fields = tuple(
        CompositeField(name=f.name, type=_convert(hints.get(f.name, Any), stack))
        for f in dataclasses.fields(cls)
    )
    return CompositeType(name=cls.__name__, fields=fields, description=_own_docstring(cls))


def _own_docstring(cls: type):
    """Class docstring, ignoring docstrings inherited from bases."""
    doc = cls.__dict__.get('__doc__')
    if not doc:
        return None
    # Auto-generated dataclass signatures are not documentation
    if dataclasses.is_dataclass(cls) and doc.startswith(f"{cls.__name__}("):
        return None
    return inspect.cleandoc(doc)


def _check_common_external_type(py_type: type):
    """Map well-known library types (UUID, datetime, EmailStr, ...) to primitives."""
    module_root = getattr(py_type, '__module__', '').split('.')[0]
    if module_root not in EXTERNAL_MODULES:
        return None

    for cls in py_type.__mro__:
        mapped = COMMON_TYPE_MAP.get(cls.__name__)
        if mapped:
            return PrimitiveType(BaseType(mapped))

    return None
