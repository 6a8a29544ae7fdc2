"""Fixed-width field codecs shared by the header builder and parser."""

from typing import Union

Buffer = Union[bytes, bytearray, memoryview]

OCTAL_DIGITS = b"01234567"
PADDING_BYTES = b" \0"


def encode_octal(value: int, width: int) -> bytes:
    """
    Encodes a number as an octal field following the TAR convention:
    1. Converts the number to octal.
    2. Pads with leading zeros up to width - 1 digits.
    3. Ends the field with a NULL terminator.

    Values that need more digits than the field holds keep only their
    low-order digits. Nothing is raised.
    """
    max_digits = width - 1
    octal_string = format(int(value), "o")

    if len(octal_string) > max_digits:
        octal_string = octal_string[-max_digits:] if max_digits > 0 else ""

    final_string = octal_string.zfill(max_digits) + "\0"
    return final_string.encode("ascii")


def encode_long_octal(value: int, width: int) -> bytes:
    """Encodes the 12-byte size and mtime fields."""
    return encode_octal(value, width)


def decode_octal(data: Buffer) -> int:
    """
    Parses an octal field.

    Leading spaces and NULs are padding. Parsing stops at the first byte
    that is not an octal digit, so both NUL and space terminators work.
    A blank field is zero.
    """
    raw = bytes(data)
    index = 0
    while index < len(raw) and raw[index] in PADDING_BYTES:
        index += 1

    result = 0
    while index < len(raw) and raw[index] in OCTAL_DIGITS:
        result = (result << 3) + (raw[index] - ord("0"))
        index += 1

    return result


def encode_name(text: str, width: int) -> bytes:
    """Encodes text as UTF-8, truncated to the field and padded with NULs.

    A value that fills the field exactly carries no terminator.
    """
    data = text.encode("utf-8", errors="surrogateescape")[:width]
    return data + b"\0" * (width - len(data))


def decode_name(data: Buffer, width: int) -> str:
    raw = bytes(data[:width])
    end = raw.find(b"\0")
    if end != -1:
        raw = raw[:end]
    return raw.decode("utf-8", errors="surrogateescape")


def compute_checksum(block: Buffer) -> int:
    """
    Sum of the unsigned values of every byte in the header.

    The checksum field must already hold ASCII spaces and every other
    field (trailing zero padding included) must already be written.
    """
    return sum(bytes(block))


def encode_checksum(value: int, width: int = 8) -> bytes:
    """Checksum format: width - 2 octal digits + NULL + space."""
    return encode_octal(value, width - 1) + b" "
