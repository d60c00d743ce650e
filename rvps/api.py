"""Wire messages of the reference value provider gRPC service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

SERVICE_NAME = "reference.ReferenceValueProviderService"
QUERY_METHOD = f"/{SERVICE_NAME}/QueryReferenceValue"
REGISTER_METHOD = f"/{SERVICE_NAME}/RegisterReferenceValue"

_VARINT = 0
_FIXED64 = 1
_LENGTH_DELIMITED = 2
_FIXED32 = 5


def _encode_varint(number: int) -> bytes:
    out = bytearray()
    while True:
        bits = number & 0x7F
        number >>= 7
        if number:
            out.append(bits | 0x80)
        else:
            out.append(bits)
            return bytes(out)


def _read_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7
        if shift >= 64:
            raise ValueError("varint too long")


def _take(data: bytes, pos: int, size: int) -> tuple[bytes, int]:
    end = pos + size
    if end > len(data):
        raise ValueError("truncated field")
    return data[pos:end], end


def _fields(data: bytes) -> Iterator[tuple[int, int, int | bytes]]:
    """Yield ``(field number, wire type, value)`` for every field of a message."""
    pos = 0
    while pos < len(data):
        key, pos = _read_varint(data, pos)
        number, wire = key >> 3, key & 0x7
        if number == 0:
            raise ValueError("invalid field number 0")
        value: int | bytes
        if wire == _VARINT:
            value, pos = _read_varint(data, pos)
        elif wire == _FIXED64:
            value, pos = _take(data, pos, 8)
        elif wire == _LENGTH_DELIMITED:
            length, pos = _read_varint(data, pos)
            value, pos = _take(data, pos, length)
        elif wire == _FIXED32:
            value, pos = _take(data, pos, 4)
        else:
            raise ValueError(f"unsupported wire type {wire}")
        yield number, wire, value


def _encode_string(number: int, text: str) -> bytes:
    if not text:
        return b""
    raw = text.encode("utf-8")
    return _encode_varint(number << 3 | _LENGTH_DELIMITED) + _encode_varint(len(raw)) + raw


def _decode_string(data: bytes, number: int) -> str:
    text = ""
    for field_number, wire, value in _fields(bytes(data)):
        if field_number != number:
            continue
        if wire != _LENGTH_DELIMITED or not isinstance(value, bytes):
            raise ValueError(f"field {number} must be a string")
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as err:
            raise ValueError(f"field {number} is not valid UTF-8: {err}") from err
    return text


def _check_message(data: bytes) -> None:
    for _ in _fields(bytes(data)):
        pass


@dataclass(frozen=True)
class QueryRequest:
    """Request for every stored reference value."""

    def encode(self) -> bytes:
        return b""

    @classmethod
    def decode(cls, data: bytes) -> QueryRequest:
        _check_message(data)
        return cls()


@dataclass(frozen=True)
class QueryResponse:
    """The stored reference values as a JSON object."""

    reference_value_results: str = ""

    def encode(self) -> bytes:
        return _encode_string(1, self.reference_value_results)

    @classmethod
    def decode(cls, data: bytes) -> QueryResponse:
        return cls(reference_value_results=_decode_string(data, 1))


@dataclass(frozen=True)
class RegisterRequest:
    """A provenance message to verify and store."""

    message: str = ""

    def encode(self) -> bytes:
        return _encode_string(1, self.message)

    @classmethod
    def decode(cls, data: bytes) -> RegisterRequest:
        return cls(message=_decode_string(data, 1))


@dataclass(frozen=True)
class RegisterResponse:
    """Acknowledgement of a successful registration."""

    def encode(self) -> bytes:
        return b""

    @classmethod
    def decode(cls, data: bytes) -> RegisterResponse:
        _check_message(data)
        return cls()