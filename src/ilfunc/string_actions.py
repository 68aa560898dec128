"""
Text edits expressed against the original buffer.

Every action's start is an offset into the *original* text. apply_actions
sorts them and performs them left to right on a copy, keeping a running
fixup (total length added minus removed so far) to translate each original
offset into the current buffer.
"""

import logging
from abc import ABC, abstractmethod

from .errors import EditConflictError

logger = logging.getLogger(__name__)


class StringAction(ABC):
    def __init__(self, start: int):
        if start < 0:
            raise ValueError(f"negative action start {start}")
        self.start = start

    @property
    def end(self) -> int:
        """End of the original span this action consumes."""
        return self.start

    @abstractmethod
    def perform(self, buf: list, fixup: int) -> int:
        """Apply the action to buf and return the updated fixup."""

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


class RemoveBlock(StringAction):
    def __init__(self, start: int, count: int):
        super().__init__(start)
        if count < 0:
            raise ValueError(f"negative remove count {count}")
        self.count = count

    @property
    def end(self) -> int:
        return self.start + self.count

    def perform(self, buf: list, fixup: int) -> int:
        at = self.start + fixup
        del buf[at:at + self.count]
        return fixup - self.count


class InsertBlock(StringAction):
    def __init__(self, start: int, block: str):
        super().__init__(start)
        self.block = block

    def perform(self, buf: list, fixup: int) -> int:
        at = self.start + fixup
        buf[at:at] = self.block
        return fixup + len(self.block)


def apply_actions(text: str, actions) -> str:
    """Return text with all actions applied; text itself is left untouched."""
    # sorted() is stable, so an insert queued before a remove at the same
    # offset lands in front of the removed span
    ordered = sorted(actions, key=lambda a: a.start)

    consumed = 0
    for action in ordered:
        if action.start < consumed:
            raise EditConflictError(
                f"{action!r} overlaps a removal ending at {consumed}", offset=action.start)
        if action.end > len(text):
            raise EditConflictError(
                f"{action!r} reaches past the end of the text ({len(text)})",
                offset=action.start)
        consumed = action.end

    buf = list(text)
    fixup = 0
    for action in ordered:
        fixup = action.perform(buf, fixup)

    logger.debug(f"applied {len(ordered)} actions, length {len(text)} -> {len(buf)}")
    return "".join(buf)
