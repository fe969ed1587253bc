"""Text serialization of ``nonce:tag:ciphertext`` envelopes."""

from __future__ import annotations

import base64
import binascii
from typing import NamedTuple

from .errors import FormatError

DELIMITER = ":"
PART_COUNT = 3


class Envelope(NamedTuple):
    ciphertext: bytes
    nonce: bytes
    tag: bytes


def encode_segment(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def decode_segment(segment: str, name: str) -> bytes:
    try:
        return base64.b64decode(segment.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise FormatError(f"Envelope {name} segment is not valid base64.") from exc


def split(envelope: str) -> tuple[str, str, str]:
    """Split an envelope into its raw ``(nonce, tag, ciphertext)`` segments."""
    if not isinstance(envelope, str):
        raise FormatError("Envelope must be a string.")
    parts = envelope.split(DELIMITER)
    if len(parts) != PART_COUNT:
        raise FormatError(f"Invalid envelope format: expected {PART_COUNT} parts (nonce:tag:ciphertext), got {len(parts)}.")
    nonce, tag, ciphertext = parts
    return nonce, tag, ciphertext


def pack(ciphertext: bytes, nonce: bytes, tag: bytes) -> str:
    return DELIMITER.join((encode_segment(nonce), encode_segment(tag), encode_segment(ciphertext)))


def unpack(envelope: str) -> Envelope:
    """Decode every segment of an envelope.

    Tag length is not checked here so the result can be inspected for
    diagnostics; :meth:`EnvelopeCipher.decrypt` enforces it.
    """
    nonce, tag, ciphertext = split(envelope)
    return Envelope(
        ciphertext=decode_segment(ciphertext, "ciphertext"),
        nonce=decode_segment(nonce, "nonce"),
        tag=decode_segment(tag, "tag"),
    )
