import io

import pytest

from voxmap.protobuf_utils import (
    decode_varint,
    encode_varint,
    read_message,
    read_message_count,
    write_message,
    write_message_count,
)


class _BytesMessage:
    def __init__(self, payload=b""):
        self.payload = payload

    def SerializeToString(self):
        return self.payload

    def ParseFromString(self, data):
        self.payload = bytes(data)
        return len(data)


def test_encode_varint_wire_bytes():
    assert encode_varint(1) == b"\x01"
    assert encode_varint(300) == b"\xac\x02"


@pytest.mark.parametrize("value", [0, 1, 127, 128, 16383, 16384, 2**32 - 1, 2**40])
def test_varint_round_trip(value):
    encoded = encode_varint(value)
    assert decode_varint(encoded) == (value, len(encoded))


def test_decode_varint_with_offset():
    data = b"xyz" + encode_varint(999) + b"tail"
    value, end = decode_varint(data, 3)
    assert value == 999
    assert data[end:] == b"tail"


def test_decode_truncated_raises():
    with pytest.raises(ValueError):
        decode_varint(b"\x80\x80")


def test_encode_negative_raises():
    with pytest.raises(ValueError):
        encode_varint(-1)


def test_message_count_round_trip():
    stream = io.BytesIO()
    write_message_count(stream, 70000)
    count, offset = read_message_count(stream, 0)
    assert count == 70000
    assert offset == len(stream.getvalue())


def test_message_count_empty_stream_raises():
    with pytest.raises(ValueError):
        read_message_count(io.BytesIO(), 0)


def test_messages_round_trip_in_sequence():
    stream = io.BytesIO()
    write_message_count(stream, 2)
    write_message(stream, _BytesMessage(b"first block"))
    write_message(stream, _BytesMessage(b"second" * 50))

    count, offset = read_message_count(stream, 0)
    assert count == 2
    received = []
    for _ in range(count):
        msg = _BytesMessage()
        offset = read_message(stream, msg, offset)
        received.append(msg.payload)
    assert received == [b"first block", b"second" * 50]
    assert offset == len(stream.getvalue())


def test_read_empty_message_raises():
    stream = io.BytesIO()
    write_message(stream, _BytesMessage(b""))
    with pytest.raises(ValueError):
        read_message(stream, _BytesMessage(), 0)


def test_read_truncated_message_raises():
    stream = io.BytesIO(encode_varint(10) + b"short")
    with pytest.raises(ValueError):
        read_message(stream, _BytesMessage(), 0)