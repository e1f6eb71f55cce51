from loguru import logger

from .decoder import AXMLDecoder
from .errors import (
    EntryNotFound,
    InvalidEncoding,
    InvariantViolation,
    MalformedHeader,
    ResParserError,
    StringIndexOutOfRange,
    TruncatedData,
    UnexpectedChunkType,
    UnknownChunkType,
    UnresolvedNamespace,
    UnsupportedChunk,
)
from .internal_types import BlockType, ValueKind
from .manifest import ManifestInfo
from .printer import AXMLPrinter

logger.disable("axmldecode")
