from .errors import (EditConflictError, InvalidLengthEncodingError, MalformedBlobError,
                     MalformedInputError, RewriteError, StructuralMismatchError,
                     TruncatedPayloadError)
from .il_rewrite import rewrite_il

__version__ = "0.1.0"
