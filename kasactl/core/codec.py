"""Autokey XOR obfuscation and length-prefixed framing.

Every byte on the wire is the XOR of the plaintext byte with the previous
ciphertext byte, starting from a fixed seed. This is obfuscation only.
"""

from __future__ import annotations

import struct
from collections.abc import Callable

from kasactl.core.errors import FramingError

INITIAL_KEY = 0xAB
HEADER = struct.Struct(">I")


def encode(data: bytes) -> bytes:
    key = INITIAL_KEY
    out = bytearray(len(data))
    for index, byte in enumerate(data):
        key ^= byte
        out[index] = key
    return bytes(out)


def decode(data: bytes) -> bytes:
    key = INITIAL_KEY
    out = bytearray(len(data))
    for index, byte in enumerate(data):
        out[index] = byte ^ key
        key = byte
    return bytes(out)


def frame(payload: bytes) -> bytes:
    """Obfuscate ``payload`` and prepend its 4-byte big-endian length."""
    return HEADER.pack(len(payload)) + encode(payload)


def read_exact(read: Callable[[int], bytes], size: int) -> bytes:
    """Call ``read`` until ``size`` bytes are collected.

    Short reads keep waiting; an empty read means the peer closed the stream.
    Timeouts raised by ``read`` propagate unchanged.
    """
    buf = bytearray()
    while len(buf) < size:
        chunk = read(size - len(buf))
        if not chunk:
            raise FramingError(f"Stream closed after {len(buf)} of {size} bytes")
        buf.extend(chunk)
    return bytes(buf)


def unframe(read: Callable[[int], bytes]) -> bytes:
    """Read one frame from a stream reader and return the de-obfuscated payload."""
    (length,) = HEADER.unpack(read_exact(read, HEADER.size))
    return decode(read_exact(read, length))


def unframe_bytes(data: bytes) -> bytes:
    """Unframe a complete buffer, rejecting any length mismatch."""
    if len(data) < HEADER.size:
        raise FramingError(f"Frame shorter than {HEADER.size}-byte header")
    (length,) = HEADER.unpack_from(data)
    body = data[HEADER.size :]
    if len(body) != length:
        raise FramingError(f"Frame declares {length} bytes but carries {len(body)}")
    return decode(body)
