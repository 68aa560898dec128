# Recover the raw bytes of a custom attribute blob from ildasm text, e.g.
#
#   .custom instance void ILFuncAttribute::.ctor(string) = ( 01 00 0C 6C 64 61 72 67 2E 30 0D 0A   // ...ldarg.0..
#                                                            72 65 74 00 00 )                      // ret..
#
# ildasm prints the bytes as hex pairs and annotates every line with a
# "//" comment holding the printable characters, which must not be read as hex.

import logging

from .errors import MalformedBlobError

logger = logging.getLogger(__name__)

HEX_DIGITS = "0123456789abcdefABCDEF"


def find_end_of_line(text: str, index: int) -> int:
    """Offset of the line break ("\\r\\n" or "\\n") at or after index, or len(text)."""
    nl = text.find("\n", index)
    if nl == -1:
        return len(text)
    if nl > index and text[nl - 1] == "\r":
        return nl - 1
    return nl


def parse_hex(text: str, index: int):
    """
    Read one byte written as hex at text[index].

    Two digits are read high nibble first; a single digit followed by anything
    else is taken as the whole byte. Returns (byte, next index), or
    (None, index) when text[index] is not a hex digit.
    """
    if text[index] not in HEX_DIGITS:
        return None, index
    value = int(text[index], 16)
    index += 1
    if index < len(text) and text[index] in HEX_DIGITS:
        value = (value << 4) | int(text[index], 16)
        index += 1
    return value, index


def parse_attribute_blob(text: str, start: int) -> tuple[bytes, int]:
    """
    Collect the blob bytes between the "(" and ")" following start.

    Returns the bytes and the offset of the closing ")".
    """
    blob = bytearray()
    found_opening_paren = False
    i = start
    while i < len(text):
        if text.startswith("//", i):
            i = find_end_of_line(text, i + 2)
            continue

        if not found_opening_paren:
            if text[i] == "(":
                found_opening_paren = True
            i += 1
            continue

        if text[i] == ")":
            logger.debug(f"blob at {start}: {len(blob)} bytes, closed at {i}")
            return bytes(blob), i

        value, i_next = parse_hex(text, i)
        if value is not None:
            blob.append(value)
            i = i_next
            continue

        i += 1

    if not found_opening_paren:
        raise MalformedBlobError("attribute blob has no opening '('", offset=start)
    raise MalformedBlobError("attribute blob is never closed with ')'", offset=start)
