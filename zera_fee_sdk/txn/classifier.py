"""
Transaction classification.

``classify`` turns a caller record into a ``Classification``: the
transaction kind, one ``KeyDescriptor`` per signing key and the hash
schemes tagged in those keys. Kind resolution lives in
:mod:`zera_fee_sdk.txn.records`; this module only reads the typed message.

Public key blobs look like ``[r_]<key>_[<hash>_...]<raw key bytes>``, for
example ``b"A_c_" + 32 bytes``. The raw key length is fixed per key kind, so
the identifier prefix is everything before it.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

from google.protobuf.message import Message

from ..exceptions import ClassificationError
from .kinds import (
    KEY_BYTES,
    RESTRICTED_PREFIX,
    TOKEN_SEPARATOR,
    HashDescriptor,
    HashKind,
    KeyDescriptor,
    KeyKind,
    TxnKind,
)
from .records import Transaction, to_transaction

# Configure logger
logger = logging.getLogger(__name__)

_HASH_TOKENS = {kind.value.encode("ascii"): kind for kind in HashKind}
_KEY_TOKENS = {kind.value.encode("ascii"): kind for kind in KeyKind}


@dataclass(frozen=True)
class Classification:
    kind: TxnKind
    keys: Tuple[KeyDescriptor, ...]
    hashes: Tuple[HashDescriptor, ...]
    transaction: Transaction

    @property
    def restricted(self) -> bool:
        return any(key.restricted for key in self.keys)

    @property
    def message(self) -> Message:
        return self.transaction.message


def classify(record: Any) -> Classification:
    """
    Classify a transaction record.

    Args:
        record: Protobuf message, dict or ``Transaction``

    Returns:
        Classification holding a working copy of the record

    Raises:
        ClassificationError: If the kind, a key or a hash tag cannot be recognized,
            the authentication substructure is empty, or a multi-signature key is used
    """
    transaction = to_transaction(record)
    keys: List[KeyDescriptor] = []
    hashes: List[HashDescriptor] = []
    for blob in _public_key_blobs(transaction):
        key, key_hashes = parse_key_identifier(blob)
        keys.append(key)
        hashes.extend(key_hashes)

    if not hashes:
        hashes.append(HashDescriptor.default())

    logger.debug(
        f"Classified {transaction.kind.name}: keys={[k.kind.name for k in keys]} "
        f"hashes={[h.kind.name for h in hashes]}"
    )
    return Classification(transaction.kind, tuple(keys), tuple(hashes), transaction)


def _public_key_blobs(transaction: Transaction) -> List[bytes]:
    message = transaction.message
    if transaction.spec.value_transfer:
        if not message.HasField("auth"):
            raise ClassificationError(f"{transaction.spec.message_name} has no auth substructure")
        public_keys = list(message.auth.public_key)
        if not public_keys:
            raise ClassificationError(f"{transaction.spec.message_name} auth has no public keys")
    else:
        if not message.base.HasField("public_key"):
            raise ClassificationError(f"{transaction.spec.message_name} base has no public key")
        public_keys = [message.base.public_key]

    return [_single_key(public_key) for public_key in public_keys]


def _single_key(public_key: Message) -> bytes:
    which = public_key.WhichOneof("key_type")
    if which == "single":
        return public_key.single
    if which == "multi":
        raise ClassificationError("Multi-signature wallets are not supported")
    if which in ("smart_contract_auth", "governance_auth"):
        raise ClassificationError(
            f"Public key uses {which} and carries no signing key",
            byte_length=len(getattr(public_key, which)),
        )
    raise ClassificationError("Public key is empty")


def parse_key_identifier(blob: bytes) -> Tuple[KeyDescriptor, List[HashDescriptor]]:
    """
    Decode the identifier prefix of a public key blob.

    Args:
        blob: Public key bytes including the ASCII identifier prefix

    Returns:
        The key descriptor and the hash descriptors tagged in the prefix

    Raises:
        ClassificationError: If the prefix holds an unknown or malformed token
    """
    position = 0
    restricted = blob.startswith(RESTRICTED_PREFIX)
    if restricted:
        position = len(RESTRICTED_PREFIX)

    end = blob.find(TOKEN_SEPARATOR, position)
    kind = _KEY_TOKENS.get(blob[position:end]) if end != -1 else None
    if kind is None:
        raise ClassificationError("Unrecognized key type token", byte_length=len(blob))

    prefix_end = len(blob) - KEY_BYTES[kind]
    if prefix_end <= end:
        raise ClassificationError(
            f"Public key too short for a {kind.name.lower()} key", byte_length=len(blob)
        )

    hashes: List[HashDescriptor] = []
    for token in _split_tokens(blob[end + 1:prefix_end], len(blob)):
        hash_kind = _HASH_TOKENS.get(token)
        if hash_kind is None:
            raise ClassificationError(
                f"Unrecognized hash type token {token!r}", byte_length=len(blob)
            )
        hashes.append(HashDescriptor.for_kind(hash_kind))

    return KeyDescriptor(kind, KEY_BYTES[kind], restricted), hashes


def _split_tokens(segment: bytes, byte_length: int) -> Sequence[bytes]:
    if not segment:
        return []
    if not segment.endswith(TOKEN_SEPARATOR):
        raise ClassificationError("Malformed public key identifier", byte_length=byte_length)
    tokens = segment[:-1].split(TOKEN_SEPARATOR)
    if any(not token for token in tokens):
        raise ClassificationError("Malformed public key identifier", byte_length=byte_length)
    return tokens
