"""
TypeScript Type Registry

Resolves structural TypeRefs to stable TypeScript names, registers every
declared (named) type exactly once, and renders their declarations in
first-registration order.

A registry belongs to a single generation run. Named composites become
``export interface`` declarations; aliases and named arrays/optionals become
``export type`` declarations. Primitives and unnamed wrappers resolve to
inline type expressions (``string``, ``User[]``, ``User | null``) and
produce no declaration.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple, Union

from apigen.core.constants import RESERVED_TYPE_NAMES
from apigen.core.errors import SchemaConflictError
from apigen.core.utils import is_identifier, to_pascal_case
from apigen.core.schema import (
    TypeRef, TypeKind, PrimitiveType, CompositeType, CompositeField, ArrayType,
    OptionalType, AliasType, Endpoint, PathParam, QueryParam,
)
from apigen.generators.typescript.utils import CodeBuilder, docstring_parts, quote_string, wrap_jsdoc


@dataclass(frozen=True)
class RegisteredField:
    """Composite member with its resolved TypeScript type."""
    name: str
    type_name: str
    optional: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class RegisteredType:
    """
    Registry entry for one declared type.

    ``target`` is the resolved element/target expression for aliases and
    named wrappers; ``fields`` is only populated for composites.
    """
    name: str
    kind: TypeKind
    type_ref: TypeRef
    fields: Tuple[RegisteredField, ...] = ()
    target: Optional[str] = None
    description: Optional[str] = None


class TypeRegistry:
    """Maps TypeRefs to emitted TypeScript names for one generation run."""

    def __init__(self):
        self._entries: Dict[str, RegisteredType] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    @property
    def entries(self) -> List[RegisteredType]:
        """Registered types in first-registration order."""
        return list(self._entries.values())

    def get(self, name: str) -> Optional[RegisteredType]:
        return self._entries.get(name)

    # === REGISTRATION === #

    def register(self, type_ref: TypeRef, hint: Optional[str] = None) -> str:
        """
        Register a type (and everything it references) and return its emitted name.

        Re-registering a structurally identical type returns the previously
        assigned name without creating another declaration.

        Args:
            type_ref: Type to register
            hint: Name to give an anonymous composite found in this position

        Raises:
            SchemaConflictError: If a different type already owns the emitted name
        """
        return self._resolve(type_ref, hint, create=True)

    def name_of(self, type_ref: TypeRef, hint: Optional[str] = None) -> str:
        """
        Emitted name of an already registered type.

        Raises:
            SchemaConflictError: If the type (or a type it references) was never registered
        """
        return self._resolve(type_ref, hint, create=False)

    def register_parameter(self, param: Union[PathParam, QueryParam], endpoint: Endpoint, where: str) -> str:
        """Register a path/query parameter type after unwrapping it to its elementary type."""
        context = f"{where} parameter '{param.name}' of endpoint '{endpoint.name}'"
        return self.register(elementary_type(param.type, context))

    def parameter_type_name(self, param: Union[PathParam, QueryParam], endpoint: Endpoint, where: str) -> str:
        context = f"{where} parameter '{param.name}' of endpoint '{endpoint.name}'"
        return self.name_of(elementary_type(param.type, context))

    def _resolve(self, type_ref: TypeRef, hint: Optional[str], create: bool) -> str:
        if isinstance(type_ref, PrimitiveType):
            return type_ref.base.value
        elif isinstance(type_ref, CompositeType):
            return self._resolve_composite(type_ref, hint, create)
        elif isinstance(type_ref, ArrayType):
            return self._resolve_array(type_ref, hint, create)
        elif isinstance(type_ref, OptionalType):
            return self._resolve_optional(type_ref, hint, create)
        elif isinstance(type_ref, AliasType):
            return self._resolve_alias(type_ref, create)
        else:
            raise SchemaConflictError(f"Unsupported type reference: {type_ref!r}")

    def _resolve_composite(self, type_ref: CompositeType, hint: Optional[str], create: bool) -> str:
        source_name = type_ref.name or hint
        if not source_name:
            raise SchemaConflictError(
                f"Anonymous composite {describe_type(type_ref)} has no naming context"
            )

        name = self._emitted_name(source_name)
        key = type_ref.with_name(name)

        existing = self._lookup(name, key, create)
        if existing:
            return existing.name

        fields = []
        for field in type_ref.fields:
            field_hint = f"{name}{to_pascal_case(field.name)}"
            fields.append(self._resolve_field(field, field_hint, create))

        return self._add(RegisteredType(
            name=name,
            kind=TypeKind.COMPOSITE,
            type_ref=key,
            fields=tuple(fields),
            description=type_ref.description,
        )).name

    def _resolve_field(self, field: CompositeField, hint: str, create: bool) -> RegisteredField:
        field_type = field.type
        optional = isinstance(field_type, OptionalType) and field_type.name is None
        if optional:
            type_name = self._resolve(field_type.element, hint, create)
        else:
            type_name = self._resolve(field_type, hint, create)

        return RegisteredField(
            name=field.name,
            type_name=type_name,
            optional=optional,
            description=field.description,
        )

    def _resolve_array(self, type_ref: ArrayType, hint: Optional[str], create: bool) -> str:
        name = self._emitted_name(type_ref.name) if type_ref.name else None
        element_hint = f"{name or hint}Item" if (name or hint) else None

        if name:
            existing = self._lookup(name, replace(type_ref, name=name), create)
            if existing:
                return existing.name

        element = self._resolve(type_ref.element, element_hint, create)
        expression = f"({element})[]" if " " in element else f"{element}[]"

        if name is None:
            return expression

        return self._add(RegisteredType(
            name=name,
            kind=TypeKind.ARRAY,
            type_ref=replace(type_ref, name=name),
            target=expression,
        )).name

    def _resolve_optional(self, type_ref: OptionalType, hint: Optional[str], create: bool) -> str:
        name = self._emitted_name(type_ref.name) if type_ref.name else None

        if name:
            existing = self._lookup(name, replace(type_ref, name=name), create)
            if existing:
                return existing.name

        element = self._resolve(type_ref.element, f"{name}Value" if name else hint, create)
        expression = f"{element} | null"

        if name is None:
            return expression

        return self._add(RegisteredType(
            name=name,
            kind=TypeKind.OPTIONAL,
            type_ref=replace(type_ref, name=name),
            target=expression,
        )).name

    def _resolve_alias(self, type_ref: AliasType, create: bool) -> str:
        name = self._emitted_name(type_ref.name)

        existing = self._lookup(name, replace(type_ref, name=name), create)
        if existing:
            return existing.name

        target = self._resolve(type_ref.target, f"{name}Value", create)

        return self._add(RegisteredType(
            name=name,
            kind=TypeKind.ALIAS,
            type_ref=replace(type_ref, name=name),
            target=target,
        )).name

    def _emitted_name(self, source_name: str) -> str:
        name = to_pascal_case(source_name)
        if not name or not is_identifier(name):
            raise SchemaConflictError(f"Type name '{source_name}' cannot be used as a TypeScript identifier", name=source_name)
        if name in RESERVED_TYPE_NAMES:
            raise SchemaConflictError(f"Type name '{source_name}' clashes with the TypeScript builtin '{name}'", name=name)
        return name

    def _lookup(self, name: str, key: TypeRef, create: bool) -> Optional[RegisteredType]:
        """Return the entry already owning name, or None when it is free and create is set."""
        existing = self._entries.get(name)
        if existing is None:
            if create:
                return None
            raise SchemaConflictError(f"Type '{name}' was used before it was registered", name=name)

        if existing.type_ref != key:
            raise SchemaConflictError(
                f"Type name '{name}' is declared by two different types: "
                f"{describe_type(existing.type_ref)} and {describe_type(key)}",
                name=name,
            )
        return existing

    def _add(self, entry: RegisteredType) -> RegisteredType:
        # Member registration may have claimed the name in the meantime
        existing = self._lookup(entry.name, entry.type_ref, create=True)
        if existing:
            return existing
        self._entries[entry.name] = entry
        return entry

    # === DEFINITIONS === #

    def generate_definitions(self, indent: int = 4) -> List[str]:
        """TypeScript declarations for every registered type, in registration order."""
        return [_render_definition(entry, indent) for entry in self._entries.values()]


def elementary_type(type_ref: TypeRef, context: str = "parameter") -> PrimitiveType:
    """
    Unwrap a parameter type to the primitive it is serialized as in a URL.

    Aliases unwrap to their target and single-field composites unwrap to
    their only field; anything else cannot be written into a path segment
    or a query value.

    Raises:
        SchemaConflictError: If the type does not reduce to a primitive
    """
    current = type_ref
    while True:
        if isinstance(current, PrimitiveType):
            return current
        elif isinstance(current, AliasType):
            current = current.target
        elif isinstance(current, CompositeType) and len(current.fields) == 1:
            current = current.fields[0].type
        else:
            raise SchemaConflictError(
                f"The {context} has type {describe_type(type_ref)}, "
                f"which is not a primitive or a single-field primitive wrapper",
                name=getattr(type_ref, 'name', None),
            )


def describe_type(type_ref: TypeRef) -> str:
    """Short human readable description used in error messages."""
    if isinstance(type_ref, PrimitiveType):
        return type_ref.base.value
    elif isinstance(type_ref, CompositeType):
        members = ", ".join(f"{f.name}: {describe_type(f.type)}" for f in type_ref.fields)
        label = f"'{type_ref.name}'" if type_ref.name else "(anonymous)"
        return f"composite {label} {{{members}}}"
    elif isinstance(type_ref, ArrayType):
        return f"array of {describe_type(type_ref.element)}"
    elif isinstance(type_ref, OptionalType):
        return f"optional {describe_type(type_ref.element)}"
    elif isinstance(type_ref, AliasType):
        return f"alias '{type_ref.name}' of {describe_type(type_ref.target)}"
    return repr(type_ref)


def _render_definition(entry: RegisteredType, indent: int) -> str:
    if entry.kind == TypeKind.COMPOSITE:
        return _render_interface(entry, indent)
    elif entry.kind in (TypeKind.ALIAS, TypeKind.ARRAY, TypeKind.OPTIONAL):
        return f"export type {entry.name} = {entry.target};"
    else:
        raise SchemaConflictError(f"Cannot render declaration of kind {entry.kind.value}")


def _render_interface(entry: RegisteredType, indent: int) -> str:
    builder = CodeBuilder(indent_size=indent)

    if entry.description:
        builder.add_lines(wrap_jsdoc(docstring_parts(entry.description)).split("\n"))

    if not entry.fields:
        builder.add_line(f"export interface {entry.name} {{}}")
        return builder.get_code()

    with builder.add_block(f"export interface {entry.name} {{"):
        for field in entry.fields:
            if field.description:
                builder.add_lines(wrap_jsdoc(docstring_parts(field.description)).split("\n"))
            property_name = field.name if is_identifier(field.name) else quote_string(field.name)
            if field.optional:
                property_name += "?"
            builder.add_line(f"{property_name}: {field.type_name};")

    return builder.get_code()
