from struct import calcsize, unpack
from typing import BinaryIO, Optional, Union

from loguru import logger

from .errors import MalformedHeader, TruncatedData, UnexpectedChunkType, UnknownChunkType
from .internal_types import CHUNK_HEADER_SIZE, BlockType


def read_struct(buff: BinaryIO, fmt: str) -> tuple:
    """
    Read and unpack `fmt` at the current position of the buffer.

    :raises TruncatedData: if the buffer holds less bytes than `fmt` needs
    """
    size = calcsize(fmt)
    offset = buff.tell()
    data = buff.read(size)
    if len(data) != size:
        raise TruncatedData(
            "Can not read {} bytes at offset 0x{:08x}, only {} left".format(
                size, offset, len(data)
            )
        )
    return unpack(fmt, data)


def decode_block_type(buff: BinaryIO) -> BlockType:
    """
    Read the 16 bit type of the next chunk.

    :raises UnknownChunkType: if the tag is not a known chunk type
    """
    offset = buff.tell()
    (tag,) = read_struct(buff, '<H')
    try:
        return BlockType(tag)
    except ValueError:
        raise UnknownChunkType(
            "Unknown chunk type 0x{:04x} at offset 0x{:08x}".format(tag, offset)
        ) from None


def peek_block_type(buff: BinaryIO) -> Optional[BlockType]:
    """
    Decode the type of the next chunk without moving the position in the buffer.

    :returns: the chunk type, or None if the buffer is exhausted
    """
    offset = buff.tell()
    try:
        if len(buff.read(2)) < 2:
            return None
        buff.seek(offset)
        return decode_block_type(buff)
    finally:
        buff.seek(offset)


class ChunkHeader:
    """
    Object which contains a Resource Chunk.
    This is an implementation of the `ResChunk_header`.

    The tag is checked against `expected_type` and the three size fields are
    checked against each other; a header which fails any check raises.
    Whether the chunk fits into its parent chunk is left to the caller.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#196
    """

    # This is the minimal size such a header must have. There might be other header data too!
    SIZE = CHUNK_HEADER_SIZE

    def __init__(
        self,
        buff: BinaryIO,
        expected_type: Union[BlockType, None] = None
    ) -> None:
        """
        :raises ResParserError: if header malformed
        :param buff: the buffer set to the position where the header starts.
        :param expected_type: the type of the header which is expected.
        """
        self.start = buff.tell()
        self._type = decode_block_type(buff)
        self._header_size, self._size = read_struct(buff, '<HL')
        logger.debug(f"ChunkHeader: {self._type.name} {self._header_size} {self._size}")

        if expected_type is not None and self._type != expected_type:
            raise UnexpectedChunkType(
                "Header type is not equal the expected type: Got 0x{:04x}, wanted 0x{:04x}! Offset=0x{:08x}".format(
                    self._type, expected_type, self.start
                )
            )

        # Assert that the read data will fit into the chunk.
        # The total size must be equal or larger than the header size
        if self._header_size < self.SIZE:
            raise MalformedHeader(
                "declared header size is smaller than required size of {}! Offset=0x{:08x}".format(
                    self.SIZE, self.start
                )
            )
        if self._size < self.SIZE:
            raise MalformedHeader(
                "declared chunk size is smaller than required size of {}! Offset=0x{:08x}".format(
                    self.SIZE, self.start
                )
            )
        if self._size < self._header_size:
            raise MalformedHeader(
                "declared chunk size ({}) is smaller than header size ({})! Offset=0x{:08x}".format(
                    self._size, self._header_size, self.start
                )
            )

    @classmethod
    def read(cls, buff: BinaryIO, expected_type: BlockType) -> "ChunkHeader":
        return cls(buff, expected_type)

    def get_type(self) -> BlockType:
        """
        Type identifier for this chunk
        """
        return self._type

    def get_header_size(self) -> int:
        """
        Size of the chunk header (in bytes).  Adding this value to
        the address of the chunk allows you to find its associated data
        (if any).
        """
        return self._header_size

    def get_size(self) -> int:
        """
        Total size of this chunk (in bytes).  This is the chunkSize plus
        the size of any data associated with the chunk.  Adding this value
        to the chunk allows you to completely skip its contents (including
        any child chunks).  If this value is the same as chunkSize, there is
        no data associated with the chunk.
        """
        return self._size

    def get_data_start(self) -> int:
        """
        Absolute offset where the chunk specific header fields end.
        """
        return self.start + self._header_size

    def skip_header(self, buff: BinaryIO) -> None:
        """
        Move forward to the data of the chunk, past header fields which were not read.
        Never moves backwards: fields read beyond a short `header_size` stay consumed.
        """
        if buff.tell() < self.get_data_start():
            buff.seek(self.get_data_start())

    def get_end(self) -> int:
        """
        Get the absolute offset inside the file, where the chunk ends.
        This is equal to `ChunkHeader.start + ChunkHeader.get_size()`.
        """
        return self.start + self._size

    def __repr__(self):
        return "<ChunkHeader idx='0x{:08x}' type='{}' header_size='{}' size='{}'>".format(
            self.start, self.get_type().name, self.get_header_size(), self.get_size()
        )
