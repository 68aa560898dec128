"""
Errors raised while rewriting ildasm output.

Everything under MalformedInputError means the disassembly (or a blob inside
it) is not in the shape ildasm produces; EditConflictError means the planned
edits themselves are inconsistent.
"""


class RewriteError(Exception):
    def __init__(self, message, occurrence=None, offset=None):
        super().__init__(message)
        self.message = message
        self.occurrence = occurrence
        self.offset = offset

    def __str__(self):
        return self.message

    @property
    def kind(self):
        return type(self).__name__

    def describe(self, text=None):
        parts = [f"{self.kind}: {self.message}"]
        if self.occurrence is not None:
            parts.append(f"marker #{self.occurrence}")
        if self.offset is not None:
            parts.append(f"offset {self.offset}")
            if text is not None:
                parts.append(f"line {line_number(text, self.offset)}")
        return ", ".join(parts)


class MalformedInputError(RewriteError):
    pass


class MalformedBlobError(MalformedInputError):
    pass


class InvalidLengthEncodingError(MalformedInputError):
    pass


class TruncatedPayloadError(MalformedInputError):
    pass


class StructuralMismatchError(MalformedInputError):
    pass


class EditConflictError(RewriteError):
    pass


def line_number(text, offset):
    return text.count("\n", 0, offset) + 1
