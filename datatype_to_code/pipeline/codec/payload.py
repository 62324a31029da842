"""
Payload codec.

Encodes and decodes JSON payloads against a resolved model with the same
rules the generated formats follow, so sample documents can be checked
without compiling the generated sources:

- a record is a JSON object holding every field under its name;
- an absent field with a declared default decodes to ``DefaultValue``;
- an interface value carries a ``type`` key naming its concrete record;
- an enum value is the symbol name as a JSON string;
- ``T?`` maps to null or absence, ``T*`` to a JSON array.

Values of types outside the schema are passed through untouched.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..analyzer.ir_nodes import ResolvedField, ResolvedModel, ResolvedType, TypeRef
from ..errors import PayloadError

# Key holding the concrete record name of an interface value
DISCRIMINATOR = "type"


@dataclass(frozen=True)
class DefaultValue:
    """A field left to its declared default; the expression is not evaluated."""

    expression: str


@dataclass(frozen=True, eq=False)
class RecordValue:
    """A decoded record: qualified type name and its fields.

    Decoding yields fields in effective order; equality ignores the order.
    """

    type_name: str
    fields: tuple[tuple[str, Any], ...] = ()

    def __getitem__(self, name: str) -> Any:
        for key, value in self.fields:
            if key == name:
                return value
        raise KeyError(name)

    def as_dict(self) -> dict[str, Any]:
        return dict(self.fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordValue):
            return NotImplemented
        return self.type_name == other.type_name and self.as_dict() == other.as_dict()

    def __hash__(self) -> int:
        return hash((self.type_name, frozenset(name for name, _ in self.fields)))

    @staticmethod
    def of(type_name: str, **fields: Any) -> RecordValue:
        return RecordValue(type_name, tuple(fields.items()))


class PayloadCodec:
    """Converts between JSON-compatible data and ``RecordValue`` trees."""

    def __init__(self, model: ResolvedModel):
        self.model = model

    def decode(self, data: Any, type_name: str) -> Any:
        """
        Decode JSON-compatible data as a value of a schema type.

        Args:
            data: Parsed JSON
            type_name: Qualified name of a record, interface or enum

        Returns:
            RecordValue for records and interfaces, the symbol name for enums

        Raises:
            PayloadError: If the data does not match the type
        """
        return self._decode_type(data, self._type(type_name))

    def encode(self, value: Any, type_name: str | None = None) -> Any:
        """
        Encode a value as JSON-compatible data.

        Args:
            value: A RecordValue or an enum symbol name
            type_name: Declared type; defaults to the record's own type

        Returns:
            Data suitable for ``json.dumps``
        """
        if type_name is None:
            if not isinstance(value, RecordValue):
                raise PayloadError("A type name is required to encode a non-record value")
            type_name = value.type_name
        return self._encode_type(value, self._type(type_name))

    def decode_json(self, text: str, type_name: str) -> Any:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PayloadError(f"Invalid JSON: {e}", definition=type_name) from e
        return self.decode(data, type_name)

    def encode_json(self, value: Any, type_name: str | None = None) -> str:
        return json.dumps(self.encode(value, type_name), separators=(",", ":"), ensure_ascii=False)

    def _type(self, type_name: str) -> ResolvedType:
        if type_name not in self.model:
            raise PayloadError(f"Unknown type '{type_name}'")
        return self.model[type_name]

    # Decoding

    def _decode_type(self, data: Any, rtype: ResolvedType) -> Any:
        if rtype.is_enum:
            return self._check_symbol(data, rtype)
        if rtype.is_interface:
            return self._decode_union(data, rtype)
        return self._decode_record(data, rtype)

    def _decode_record(self, data: Any, rtype: ResolvedType) -> RecordValue:
        if not isinstance(data, dict):
            raise PayloadError(f"Expected a JSON object, got {type(data).__name__}", definition=rtype.qualified_name)

        values = []
        for f in rtype.fields:
            # null on a defaulted optional is None, on other defaulted fields the default
            if f.name in data and not (data[f.name] is None and f.has_default and not f.type_ref.is_optional):
                value = self._decode_field(data[f.name], f, rtype)
            elif f.has_default:
                value = DefaultValue(f.default)
            elif f.type_ref.is_optional:
                value = None
            elif f.type_ref.is_list:
                value = ()
            else:
                raise PayloadError("Missing required field", definition=rtype.qualified_name, field=f.name)
            values.append((f.name, value))
        return RecordValue(rtype.qualified_name, tuple(values))

    def _decode_union(self, data: Any, rtype: ResolvedType) -> RecordValue:
        if not isinstance(data, dict):
            raise PayloadError(f"Expected a JSON object, got {type(data).__name__}", definition=rtype.qualified_name)
        tag = data.get(DISCRIMINATOR)
        for variant in self.model.concrete_descendants(rtype.qualified_name):
            if variant.name == tag:
                return self._decode_record({k: v for k, v in data.items() if k != DISCRIMINATOR}, variant)
        raise PayloadError(f"Unknown {DISCRIMINATOR} '{tag}'", definition=rtype.qualified_name, field=DISCRIMINATOR)

    def _check_symbol(self, data: Any, rtype: ResolvedType) -> str:
        if not isinstance(data, str) or data not in {s.name for s in rtype.symbols}:
            raise PayloadError(f"Unknown symbol {data!r}", definition=rtype.qualified_name)
        return data

    def _decode_field(self, data: Any, f: ResolvedField, owner: ResolvedType) -> Any:
        type_ref = f.type_ref
        if type_ref.is_optional:
            return None if data is None else self._decode_element(data, f, owner)
        if type_ref.is_list:
            if not isinstance(data, list):
                raise PayloadError(
                    f"Expected a JSON array, got {type(data).__name__}",
                    definition=owner.qualified_name,
                    field=f.name,
                )
            return tuple(self._decode_element(item, f, owner) for item in data)
        return self._decode_element(data, f, owner)

    def _decode_element(self, data: Any, f: ResolvedField, owner: ResolvedType) -> Any:
        element_type = self._schema_type(f.type_ref, f)
        if element_type is None:
            return data
        try:
            return self._decode_type(data, element_type)
        except PayloadError as e:
            if e.field is not None:
                raise
            raise PayloadError(e.message, definition=owner.qualified_name, field=f.name) from e

    # Encoding

    def _encode_type(self, value: Any, rtype: ResolvedType) -> Any:
        if rtype.is_enum:
            return self._check_symbol(value, rtype)
        if not isinstance(value, RecordValue):
            raise PayloadError(f"Expected a record value, got {type(value).__name__}", definition=rtype.qualified_name)
        record = self._type(value.type_name)
        if rtype.is_interface:
            if record.qualified_name not in rtype.descendants or not record.is_record:
                raise PayloadError(f"{value.type_name} is not a concrete {rtype.qualified_name}", definition=rtype.qualified_name)
            return {DISCRIMINATOR: record.name, **self._encode_record(value, record)}
        if record.qualified_name != rtype.qualified_name:
            raise PayloadError(f"Expected {rtype.qualified_name}, got {value.type_name}", definition=rtype.qualified_name)
        return self._encode_record(value, record)

    def _encode_record(self, value: RecordValue, rtype: ResolvedType) -> dict[str, Any]:
        given = value.as_dict()
        result: dict[str, Any] = {}
        for f in rtype.fields:
            if f.name not in given:
                if f.has_default or f.type_ref.is_optional:
                    continue
                raise PayloadError("Missing required field", definition=rtype.qualified_name, field=f.name)
            field_value = given[f.name]
            if isinstance(field_value, DefaultValue):
                continue
            if field_value is None and f.type_ref.is_optional:
                # An absent defaulted optional would decode to its default
                if f.has_default:
                    result[f.name] = None
                continue
            result[f.name] = self._encode_field(field_value, f)
        return result

    def _encode_field(self, value: Any, f: ResolvedField) -> Any:
        element_type = self._schema_type(f.type_ref, f)
        if f.type_ref.is_list:
            return [self._encode_element(item, element_type) for item in value]
        return self._encode_element(value, element_type)

    def _encode_element(self, value: Any, element_type: ResolvedType | None) -> Any:
        if element_type is None:
            return value
        return self._encode_type(value, element_type)

    def _schema_type(self, type_ref: TypeRef, f: ResolvedField) -> ResolvedType | None:
        return self.model.lookup(type_ref.name, self.model[f.declared_in].namespace)
