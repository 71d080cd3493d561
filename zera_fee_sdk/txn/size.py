"""
Byte-size estimation for unsigned transactions.
"""
from dataclasses import dataclass
from typing import Optional

from google.protobuf.message import Message

from .classifier import Classification


@dataclass(frozen=True)
class SizeBreakdown:
    body_bytes: int
    signature_bytes: int
    hash_bytes: int

    @property
    def total(self) -> int:
        return self.body_bytes + self.signature_bytes + self.hash_bytes


def serialized_size(message: Message) -> int:
    """Length of the deterministic wire encoding of ``message``."""
    return len(message.SerializeToString(deterministic=True))


def size_breakdown(classification: Classification, message: Optional[Message] = None) -> SizeBreakdown:
    """
    Split the final size of a transaction into body, signature and hash bytes.

    Args:
        classification: Result of ``classify``
        message: Message to measure; defaults to the classification's working copy

    Returns:
        SizeBreakdown with one signature per key and one hash per hash descriptor
    """
    body = classification.message if message is None else message
    return SizeBreakdown(
        body_bytes=serialized_size(body),
        signature_bytes=sum(key.signature_bytes for key in classification.keys),
        hash_bytes=sum(h.byte_length for h in classification.hashes),
    )


def estimate_size(record: Message, classification: Classification) -> int:
    """
    Estimate the size in bytes of ``record`` once signed and hashed.

    Serialized body bytes plus signature bytes per detected key plus hash
    bytes per detected hash (or one default hash).
    """
    return size_breakdown(classification, record).total
