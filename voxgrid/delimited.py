"""Length-delimited message streams using base-128 varints."""

from __future__ import annotations

from typing import BinaryIO

_MAX_VARINT_BYTES = 10
_UINT32_MAX = 0xFFFFFFFF


def encode_varint32(value: int) -> bytes:
    """Encode an unsigned 32-bit integer as a varint."""
    if not 0 <= value <= _UINT32_MAX:
        raise ValueError(f"value {value} does not fit in 32 unsigned bits")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint32(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint at ``offset``; return the value and the offset after it."""
    result = 0
    window = data[offset : offset + _MAX_VARINT_BYTES]
    for consumed, byte in enumerate(window, start=1):
        result |= (byte & 0x7F) << (7 * (consumed - 1))
        if not byte & 0x80:
            return result & _UINT32_MAX, offset + consumed
    raise ValueError("truncated or malformed varint")


def _read_varint_at(stream: BinaryIO, byte_offset: int) -> tuple[int, int]:
    stream.seek(byte_offset)
    head = stream.read(_MAX_VARINT_BYTES)
    value, end = decode_varint32(head)
    return value, byte_offset + end


def read_message_count(stream: BinaryIO, byte_offset: int) -> tuple[int, int]:
    """Read the message count at ``byte_offset``; return it and the next offset."""
    try:
        return _read_varint_at(stream, byte_offset)
    except ValueError as exc:
        raise ValueError("could not read message count") from exc


def write_message_count(message_count: int, stream: BinaryIO) -> None:
    """Write a message count at the current stream position."""
    stream.write(encode_varint32(message_count))


def read_message(stream: BinaryIO, byte_offset: int) -> tuple[bytes, int]:
    """Read one size-prefixed message; return its payload and the next offset."""
    try:
        size, payload_offset = _read_varint_at(stream, byte_offset)
    except ValueError as exc:
        raise ValueError("could not read message size") from exc
    if size == 0:
        raise ValueError("empty message")
    stream.seek(payload_offset)
    payload = stream.read(size)
    if len(payload) < size:
        raise ValueError("could not consume the whole message")
    return payload, payload_offset + size


def write_message(message, stream: BinaryIO) -> None:
    """Write a message, as bytes or an object with ``SerializeToString``, size-prefixed."""
    if isinstance(message, (bytes, bytearray, memoryview)):
        payload = bytes(message)
    else:
        payload = message.SerializeToString()
    stream.write(encode_varint32(len(payload)) + payload)