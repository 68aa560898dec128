import logging

from .errors import RewriteError
from .marker_locator import MarkerOccurrence, find_markers
from .payload import decode_payload
from .string_actions import InsertBlock, RemoveBlock, apply_actions

logger = logging.getLogger(__name__)


def detect_newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def get_replacement_il(marker: MarkerOccurrence) -> str:
    try:
        return decode_payload(marker.blob)
    except RewriteError as e:
        # blob offsets mean nothing to someone reading the .il file
        if e.offset is not None:
            e.message = f"{e.message} (blob byte {e.offset})"
        e.occurrence = marker.index
        e.offset = marker.match_start
        raise


def plan_actions(marker: MarkerOccurrence, replacement_il: str, newline: str = "\r\n"):
    return [
        # the attribute itself
        RemoveBlock(marker.match_start, marker.match_end - marker.match_start),
        # new body goes in front of .maxstack
        InsertBlock(marker.body_start, replacement_il + newline),
        # old body, up to the closing brace
        RemoveBlock(marker.body_start, marker.body_end - marker.body_start),
    ]


def rewrite_il(il: str) -> str:
    """
    Replace the body of every ILFuncAttribute-marked method with the IL given
    in the attribute, and drop the attribute.

    Raises a RewriteError subclass if any marker cannot be handled; in that
    case nothing is rewritten.
    """
    markers = find_markers(il)
    if not markers:
        logger.debug("no ILFunc markers found")
        return il

    newline = detect_newline(il)
    actions = []
    for marker in markers:
        actions.extend(plan_actions(marker, get_replacement_il(marker), newline))

    logger.info(f"rewriting {len(markers)} ILFunc method(s)")
    return apply_actions(il, actions)
