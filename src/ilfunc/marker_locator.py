# Find the ILFuncAttribute markers in ildasm output. A marked method looks like
#
#   .method public hidebysig static int32 Add(int32 a, int32 b) cil managed
#   {
#     .custom instance void [Lib]Lib.ILFuncAttribute::.ctor(string) = ( 01 00 ... )   // ...
#     // Code size       ...
#     .maxstack  8
#     IL_0000:  ...stub body...
#   } // end of method Program::Add
#
# The stub body runs from .maxstack to the end-of-method marker.

import logging
import re
from dataclasses import dataclass

from .blob_parser import find_end_of_line, parse_attribute_blob
from .errors import RewriteError, StructuralMismatchError

logger = logging.getLogger(__name__)

MARKER_REGEX = re.compile(
    r"\.custom\s+instance\s+void\s+.*?ILFuncAttribute\s*::\s*\.ctor\s*\(\s*string\s*\)\s*=\s*")
MAXSTACK = ".maxstack"
END_OF_METHOD = "} // end of method"


@dataclass(frozen=True)
class MarkerOccurrence:
    index: int
    match_start: int
    blob_end: int       # offset of the ")" closing the blob
    blob: bytes
    body_start: int     # offset of .maxstack
    body_end: int       # offset of the end-of-method marker

    @property
    def match_end(self):
        return self.blob_end + 1


def locate_marker(text: str, index: int, match) -> MarkerOccurrence:
    try:
        blob, blob_end = parse_attribute_blob(text, match.end())
    except RewriteError as e:
        e.occurrence = index
        raise

    search_from = find_end_of_line(text, blob_end)
    body_end = text.find(END_OF_METHOD, search_from)
    if body_end == -1:
        raise StructuralMismatchError(
            f"no '{END_OF_METHOD}' after marker; ildasm output format not recognized",
            occurrence=index, offset=search_from)

    # only the marked method's own body counts (abstract/extern methods have none)
    body_start = text.find(MAXSTACK, search_from, body_end)
    if body_start == -1:
        raise StructuralMismatchError(
            f"no {MAXSTACK} in the marked method; it has no IL body to replace",
            occurrence=index, offset=search_from)

    return MarkerOccurrence(index, match.start(), blob_end, blob, body_start, body_end)


def find_markers(text: str) -> list[MarkerOccurrence]:
    markers = []
    for i, match in enumerate(MARKER_REGEX.finditer(text)):
        marker = locate_marker(text, i, match)
        logger.debug(f"marker #{i} at {marker.match_start}: {len(marker.blob)} blob bytes, "
                     f"body {marker.body_start}..{marker.body_end}")
        markers.append(marker)
    return markers
