class ResParserError(Exception):
    """Exception for the parsers"""

    pass


class MalformedHeader(ResParserError):
    """A chunk header breaks one of the size invariants."""


class UnexpectedChunkType(ResParserError):
    """A chunk has a known type, but not the one allowed at this position."""


class UnknownChunkType(ResParserError):
    """A chunk type outside of the known set of chunk types."""


class InvariantViolation(ResParserError):
    """A reserved field which must be zero is not."""


class InvalidEncoding(ResParserError):
    """A string pool entry is not valid UTF-8 / UTF-16."""


class StringIndexOutOfRange(ResParserError):
    """A string reference has no entry in the string pool."""


class UnresolvedNamespace(ResParserError):
    """A namespace URI is used before a prefix was bound to it."""


class UnsupportedChunk(ResParserError):
    """A known chunk kind this decoder does not read."""


class TruncatedData(ResParserError):
    """The data ends in the middle of a chunk."""


class EntryNotFound(Exception):
    """The requested entry does not exist in the archive."""
