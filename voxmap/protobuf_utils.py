"""Length-delimited message streams using base-128 varint framing."""

from __future__ import annotations

from typing import BinaryIO, Protocol

_MAX_VARINT_BYTES = 10


class Message(Protocol):
    """Anything that serialises to and parses from bytes."""

    def SerializeToString(self) -> bytes: ...

    def ParseFromString(self, data: bytes) -> object: ...


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a base-128 varint."""
    if value < 0:
        raise ValueError("varint value must be non-negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint from data at offset; return (value, next offset)."""
    result = 0
    for shift_index, position in enumerate(range(offset, len(data))):
        if shift_index >= _MAX_VARINT_BYTES:
            break
        byte = data[position]
        result |= (byte & 0x7F) << (7 * shift_index)
        if not byte & 0x80:
            return result, position + 1
    raise ValueError("truncated or malformed varint")


def _read_varint(stream: BinaryIO) -> tuple[int, int]:
    raw = bytearray()
    while len(raw) < _MAX_VARINT_BYTES:
        chunk = stream.read(1)
        if not chunk:
            break
        raw += chunk
        if not chunk[0] & 0x80:
            return decode_varint(bytes(raw))
    raise ValueError("could not read varint from stream")


def read_message_count(stream: BinaryIO, byte_offset: int) -> tuple[int, int]:
    """Read a message count at byte_offset; return (count, new offset)."""
    stream.seek(byte_offset)
    count, consumed = _read_varint(stream)
    return count & 0xFFFFFFFF, byte_offset + consumed


def write_message_count(stream: BinaryIO, message_count: int) -> None:
    """Write a message count at the stream's current position."""
    stream.write(encode_varint(message_count))


def read_message(stream: BinaryIO, message: Message, byte_offset: int) -> int:
    """Parse one size-prefixed message at byte_offset into message; return the new offset."""
    stream.seek(byte_offset)
    size, consumed = _read_varint(stream)
    if size == 0:
        raise ValueError("empty message")
    payload = stream.read(size)
    if len(payload) != size:
        raise ValueError("could not consume the whole message")
    message.ParseFromString(payload)
    return byte_offset + consumed + size


def write_message(stream: BinaryIO, message: Message) -> None:
    """Write message prefixed with its size at the stream's current position."""
    payload = message.SerializeToString()
    stream.write(encode_varint(len(payload)) + payload)