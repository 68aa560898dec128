import logging

from .errors import MalformedBlobError, TruncatedPayloadError
from .packed_len import pack_len, read_packed_len

logger = logging.getLogger(__name__)

# Every custom attribute blob starts with the little-endian uint16 0x0001.
PROLOG = b"\x01\x00"


def decode_payload(blob: bytes, check_prolog: bool = True) -> str:
    """Return the string argument stored in an ILFuncAttribute blob."""
    if len(blob) < len(PROLOG):
        raise TruncatedPayloadError(
            f"blob of {len(blob)} bytes is shorter than its prolog", offset=len(blob))
    if check_prolog and blob[:len(PROLOG)] != PROLOG:
        raise MalformedBlobError(
            f"unexpected blob prolog {blob[:len(PROLOG)].hex(' ')}", offset=0)

    length, index = read_packed_len(blob, len(PROLOG))
    if index + length > len(blob):
        raise TruncatedPayloadError(
            f"payload declares {length} bytes but only {len(blob) - index} follow",
            offset=index)

    logger.debug(f"payload: {length} bytes at blob offset {index}")
    try:
        return blob[index:index + length].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedBlobError(f"payload is not valid UTF-8: {e.reason}",
                                 offset=index + e.start) from e


def encode_payload(text: str) -> bytes:
    """Build the blob ildasm would show for ILFuncAttribute(text)."""
    data = text.encode("utf-8")
    # trailing uint16 is the (zero) count of named arguments
    return PROLOG + pack_len(len(data)) + data + b"\x00\x00"
