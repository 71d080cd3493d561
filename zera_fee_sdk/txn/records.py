"""
Boundary adapter from caller records to typed transactions.

Callers hand the engine either a protobuf message or a plain dict. This
module decides the transaction kind once, at the boundary, and produces a
``Transaction``: the kind plus a working copy of the record as a schema
message. The caller's object is never modified.

Kind resolution order for dict records:

1. a ``type_name`` (or ``typeName`` / ``$typeName``) or ``kind`` discriminator;
2. the first wrapper key found, in network kind order (``coin_txn``,
   ``mint_txn``, ``foundation_txn``, ...);
3. an unwrapped value-transfer body (``auth``, ``input_transfers`` or
   ``output_transfers`` present).
"""
import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import base58
from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import Message

from ..amounts import format_decimal
from ..exceptions import ClassificationError
from .kinds import KIND_SPECS, SPEC_BY_KIND, SPEC_BY_MESSAGE, KindSpec, TxnKind
from .schema import PACKAGE, message_class

TYPE_NAME_KEYS = ("type_name", "typeName", "$typeName")
KIND_KEYS = ("kind",)
VALUE_TRANSFER_KEYS = ("auth", "input_transfers", "inputTransfers", "output_transfers", "outputTransfers")


@dataclass(frozen=True)
class Transaction:
    """A classified transaction: its kind and a private working copy."""
    kind: TxnKind
    message: Message

    @property
    def spec(self) -> KindSpec:
        return SPEC_BY_KIND[self.kind]

    def copy(self) -> "Transaction":
        return Transaction(self.kind, _copy_message(self.message))


def public_key_bytes(identifier: str) -> bytes:
    """
    Encode a textual public key identifier as the bytes carried on the wire.

    ``"A_c_<base58 key>"`` becomes ``b"A_c_"`` followed by the decoded key.

    Raises:
        ClassificationError: If the identifier has no prefix or the key is not base58
    """
    prefix, separator, encoded = identifier.rpartition("_")
    if not separator or not prefix or not encoded:
        raise ClassificationError(
            f"Public key identifier must look like 'A_c_<base58 key>': {identifier!r}"
        )
    try:
        raw = base58.b58decode(encoded)
    except ValueError as exc:
        raise ClassificationError(f"Public key is not valid base58: {identifier!r}") from exc
    return f"{prefix}_".encode("ascii") + raw


def address_bytes(address: str) -> bytes:
    """
    Decode a base58 wallet address.

    Raises:
        ValueError: If the address is empty or not base58
    """
    if not address:
        raise ValueError("Address must not be empty")
    return base58.b58decode(address)


def to_transaction(record: Any) -> Transaction:
    """
    Resolve a record's kind and build its working copy.

    Args:
        record: Protobuf message, ``Transaction`` or dict

    Returns:
        Transaction with a copy of the record

    Raises:
        ClassificationError: If no transaction kind matches or a field is malformed
    """
    if isinstance(record, Transaction):
        return record.copy()
    if isinstance(record, Message):
        spec = _spec_for_message_name(record.DESCRIPTOR.full_name)
        return Transaction(spec.kind, _convert_message(record, spec))
    if not isinstance(record, Mapping):
        raise ClassificationError(f"Unsupported transaction record type: {type(record).__name__}")

    spec, body = _discriminate(record) or _probe(record)
    if isinstance(body, Message):
        return Transaction(spec.kind, _convert_message(body, spec))
    if not isinstance(body, Mapping):
        raise ClassificationError(f"{spec.message_name} body must be a mapping or message")
    message = message_class(spec.message_name)()
    fill_message(message, body)
    return Transaction(spec.kind, message)


def _spec_for_message_name(name: str) -> KindSpec:
    short = name.split(".")[-1]
    if short not in SPEC_BY_MESSAGE or (name != short and name != f"{PACKAGE}.{short}"):
        raise ClassificationError(f"Unknown transaction message type: {name}")
    return SPEC_BY_MESSAGE[short]


def _spec_for_kind_value(value: Any) -> KindSpec:
    try:
        if isinstance(value, str) and not value.isdigit():
            kind = TxnKind[value.upper()]
        else:
            kind = TxnKind(int(value))
    except (KeyError, TypeError, ValueError) as exc:
        raise ClassificationError(f"Unknown transaction kind: {value!r}") from exc
    spec = SPEC_BY_KIND[kind]
    if spec.message_name is None:
        raise ClassificationError(f"Transaction kind {kind.name} has no wire format")
    return spec


def _lookup(record: Mapping[str, Any], snake: str) -> Tuple[Optional[str], Any]:
    for key in (snake, _camel(snake)):
        if key in record:
            return key, record[key]
    return None, None


def _discriminate(record: Mapping[str, Any]) -> Optional[Tuple[KindSpec, Any]]:
    spec = None
    used = set()
    for key in TYPE_NAME_KEYS:
        if key in record:
            spec = _spec_for_message_name(str(record[key]))
            used.add(key)
            break
    if spec is None:
        for key in KIND_KEYS:
            if key in record:
                spec = _spec_for_kind_value(record[key])
                used.add(key)
                break
    if spec is None:
        return None

    wrapper, body = _lookup(record, spec.wrapper_key)
    if wrapper is not None:
        return spec, body
    return spec, {key: value for key, value in record.items() if key not in used}


def _probe(record: Mapping[str, Any]) -> Tuple[KindSpec, Any]:
    for spec in KIND_SPECS:
        if spec.wrapper_key is None:
            continue
        wrapper, body = _lookup(record, spec.wrapper_key)
        if wrapper is not None and body is not None:
            return spec, body

    if any(key in record for key in VALUE_TRANSFER_KEYS):
        return SPEC_BY_KIND[TxnKind.COIN], record

    raise ClassificationError(
        "Cannot determine transaction kind: expected a type_name or kind discriminator, "
        f"a wrapper key, or a value-transfer body (got keys: {', '.join(sorted(map(str, record)))})"
    )


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _copy_message(message: Message) -> Message:
    duplicate = type(message)()
    duplicate.CopyFrom(message)
    return duplicate


def _convert_message(message: Message, spec: KindSpec) -> Message:
    if message.DESCRIPTOR.name != spec.message_name:
        raise ClassificationError(
            f"Expected a {spec.message_name} message, got {message.DESCRIPTOR.full_name}"
        )
    converted = message_class(spec.message_name)()
    converted.MergeFromString(message.SerializeToString())
    return converted


def _fields_by_json_name(message: Message) -> Dict[str, FieldDescriptor]:
    return {field.json_name: field for field in message.DESCRIPTOR.fields}


def fill_message(message: Message, data: Mapping[str, Any], path: str = "") -> None:
    """
    Populate ``message`` from a dict with snake_case or lowerCamelCase keys.

    Bytes fields only accept ``bytes``; string amount fields also accept
    integers and Decimals.

    Raises:
        ClassificationError: On unknown fields or values of the wrong type
    """
    descriptor = message.DESCRIPTOR
    json_fields = _fields_by_json_name(message)
    for key, value in data.items():
        where = f"{path}{key}"
        field = descriptor.fields_by_name.get(key) or json_fields.get(key)
        if field is None:
            raise ClassificationError(f"Unknown field '{where}' for {descriptor.name}")
        if value is None:
            continue

        if field.is_repeated:
            if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Sequence):
                raise ClassificationError(f"Field '{where}' expects a list")
            container = getattr(message, field.name)
            del container[:]
            for index, item in enumerate(value):
                item_path = f"{where}[{index}]"
                if field.message_type is not None:
                    _fill_submessage(container.add(), item, item_path)
                else:
                    _append_scalar(container, field, item, item_path)
        elif field.message_type is not None:
            _fill_submessage(getattr(message, field.name), value, where)
        else:
            _set_scalar(message, field, value, where)


def _fill_submessage(target: Message, value: Any, where: str) -> None:
    target.SetInParent()
    if isinstance(value, Message):
        if value.DESCRIPTOR.full_name != target.DESCRIPTOR.full_name:
            raise ClassificationError(
                f"Field '{where}' expects {target.DESCRIPTOR.full_name}, got {value.DESCRIPTOR.full_name}"
            )
        target.MergeFromString(value.SerializeToString())
    elif isinstance(value, datetime.datetime) and target.DESCRIPTOR.full_name == "google.protobuf.Timestamp":
        micros = round(value.timestamp() * 1_000_000)
        target.seconds, remainder = divmod(micros, 1_000_000)
        target.nanos = remainder * 1000
    elif isinstance(value, Mapping):
        fill_message(target, value, f"{where}.")
    else:
        raise ClassificationError(f"Field '{where}' expects a {target.DESCRIPTOR.name} mapping")


def _coerce_scalar(field: FieldDescriptor, value: Any, where: str) -> Any:
    if field.type == FieldDescriptor.TYPE_BYTES:
        if not isinstance(value, (bytes, bytearray)):
            raise ClassificationError(
                f"Field '{where}' expects bytes, got {type(value).__name__}; "
                "use public_key_bytes() or address_bytes() for identifiers"
            )
        return bytes(value)
    if field.type == FieldDescriptor.TYPE_STRING:
        if isinstance(value, Decimal):
            return format_decimal(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
    if field.type == FieldDescriptor.TYPE_BOOL:
        if not isinstance(value, bool):
            raise ClassificationError(f"Field '{where}' expects a bool, got {value!r}")
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    if isinstance(value, bool):
        raise ClassificationError(f"Field '{where}' expects an integer, got {value!r}")
    return value


def _set_scalar(message: Message, field: FieldDescriptor, value: Any, where: str) -> None:
    try:
        setattr(message, field.name, _coerce_scalar(field, value, where))
    except (TypeError, ValueError) as exc:
        raise ClassificationError(f"Invalid value for field '{where}': {value!r}") from exc


def _append_scalar(container: Any, field: FieldDescriptor, value: Any, where: str) -> None:
    try:
        container.append(_coerce_scalar(field, value, where))
    except (TypeError, ValueError) as exc:
        raise ClassificationError(f"Invalid value for field '{where}': {value!r}") from exc
