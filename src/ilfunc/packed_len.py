# Compressed unsigned integers as used in custom attribute blobs:
#
#   0xxxxxxx                              -> 7-bit value, 1 byte
#   10xxxxxx xxxxxxxx                     -> 14-bit value, 2 bytes
#   110xxxxx xxxxxxxx xxxxxxxx xxxxxxxx   -> 29-bit value, 4 bytes
#   111xxxxx                              -> reserved (0xFF marks a null string)

from .errors import InvalidLengthEncodingError, TruncatedPayloadError

MAX_PACKED_LEN = 0x1FFFFFFF


def _need(data, index, count):
    if index + count > len(data):
        raise TruncatedPayloadError(
            f"packed length needs {count} bytes at {index}, blob has {len(data)}",
            offset=index)


def read_packed_len(data: bytes, index: int) -> tuple[int, int]:
    """Decode one packed length at data[index]; returns (value, next index)."""
    _need(data, index, 1)
    first = data[index]

    if (first & 0x80) == 0:
        return first, index + 1

    if (first & 0x40) == 0:
        _need(data, index, 2)
        return ((first & 0x3F) << 8) | data[index + 1], index + 2

    if (first & 0x20) != 0:
        raise InvalidLengthEncodingError(
            f"reserved length prefix 0x{first:02X}", offset=index)

    _need(data, index, 4)
    return (((first & 0x1F) << 24) |
            (data[index + 1] << 16) |
            (data[index + 2] << 8) |
            data[index + 3]), index + 4


def pack_len(value: int) -> bytes:
    if value < 0 or value > MAX_PACKED_LEN:
        raise ValueError(f"length {value} cannot be packed")
    if value < 0x80:
        return bytes([value])
    if value < 0x4000:
        return bytes([0x80 | (value >> 8), value & 0xFF])
    return bytes([0xC0 | (value >> 24),
                  (value >> 16) & 0xFF,
                  (value >> 8) & 0xFF,
                  value & 0xFF])
