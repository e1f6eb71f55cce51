from typing import BinaryIO

from loguru import logger

from .chunk import ChunkHeader, peek_block_type, read_struct
from .errors import InvalidEncoding, TruncatedData, UnexpectedChunkType, UnsupportedChunk
from .internal_types import PACKAGE_HEADER_SIZE, PACKAGE_NAME_UNITS, BlockType
from .string_pool import StringPool

# Chunks of a package we know about, but do not decode
UNSUPPORTED_PACKAGE_CHUNKS = (
    BlockType.TABLE_TYPE,
    BlockType.TABLE_TYPE_SPEC,
    BlockType.TABLE_LIBRARY,
)


class ResourceTable:
    """
    Header for a resource table: `ResTable_header`

    Its data contains a series of additional chunks:
      * A string pool containing all table values.  This string pool
        contains all of the string values in the entire resource table (not
        the names of entries or type identifiers however).
      * One or more `ResTable_package` chunks.
    """

    def __init__(self, buff: BinaryIO, header: ChunkHeader) -> None:
        self.header = header
        (self.package_count,) = read_struct(buff, '<L')
        logger.debug(f"package_count: {self.package_count}")
        header.skip_header(buff)

        self.strings = []
        self.string_pools = []
        self.packages = []
        for _ in range(self.package_count):
            block_type = peek_block_type(buff)
            if block_type is None:
                raise TruncatedData(
                    "Resource table at offset 0x{:08x} ends before all chunks were read".format(header.start)
                )
            if block_type == BlockType.STRING_POOL:
                self.string_pools.append(StringPool.read(buff, self.strings))
            elif block_type == BlockType.TABLE_PACKAGE:
                self.packages.append(ResTablePackage.read(buff))
            else:
                raise UnexpectedChunkType(
                    "Unexpected chunk type {} inside resource table! Offset=0x{:08x}".format(
                        block_type.name, buff.tell()
                    )
                )

    @classmethod
    def read(cls, buff: BinaryIO) -> "ResourceTable":
        header = ChunkHeader(buff, BlockType.TABLE)
        return cls(buff, header)

    def __repr__(self):
        return "<ResourceTable #packages={} #strings={}>".format(self.package_count, len(self.strings))


class ResTablePackage:
    """
    A collection of resource data types within a package: `ResTable_package`.
    Followed by the type and key string pools and one or more `ResTable_type`
    and `ResTable_typeSpec` structures containing the entry values for each
    resource type. Those are not decoded.
    """

    def __init__(self, buff: BinaryIO, header: ChunkHeader) -> None:
        self.header = header
        # If this is a base package, its ID.  Package IDs start
        # at 1 (corresponding to the value of the package bits in a
        # resource identifier).  0 means this is not a base package.
        (self.id,) = read_struct(buff, '<L')

        # Actual name of this package, \0-terminated, in a fixed size buffer.
        # All units are read, whatever comes after the terminator.
        units = read_struct(buff, '<{}H'.format(PACKAGE_NAME_UNITS))
        self.name_units = list(units)
        if 0 in units:
            units = units[:units.index(0)]
        try:
            self.name = b"".join(u.to_bytes(2, 'little') for u in units).decode('utf-16-le')
        except UnicodeDecodeError as e:
            raise InvalidEncoding(
                "Invalid UTF-16 package name at offset 0x{:08x}: {}".format(header.start, e)
            ) from e

        (self.type_strings,
         self.last_public_type,
         self.key_strings,
         self.last_public_key) = read_struct(buff, '<4L')

        self.type_id_offset = 0
        if header.get_header_size() >= PACKAGE_HEADER_SIZE:
            (self.type_id_offset,) = read_struct(buff, '<L')
        logger.debug(
            f"package id=0x{self.id:02x} name='{self.name}' type_strings={self.type_strings} "
            f"key_strings={self.key_strings} type_id_offset={self.type_id_offset}"
        )

        self.type_names = []
        self.key_names = []
        data_end = max(header.get_data_start(), buff.tell())
        # Offsets to the string pools defining the resource type and key symbol
        # tables. Zero means the package inherits them from a base package.
        for offset, names in ((self.type_strings, self.type_names), (self.key_strings, self.key_names)):
            if offset == 0:
                continue
            buff.seek(header.start + offset)
            pool = StringPool.read(buff, names)
            data_end = max(data_end, pool.header.get_end())

        buff.seek(data_end)
        # Anything left in the package are the typed entries
        if buff.tell() < header.get_end():
            block_type = peek_block_type(buff)
            if block_type is None:
                raise TruncatedData(
                    "Package '{}' ends before its declared size".format(self.name)
                )
            if block_type in UNSUPPORTED_PACKAGE_CHUNKS:
                raise UnsupportedChunk(
                    "Decoding of {} chunks is not supported! Offset=0x{:08x}".format(
                        block_type.name, buff.tell()
                    )
                )
            raise UnexpectedChunkType(
                "Unexpected chunk type {} inside package '{}'! Offset=0x{:08x}".format(
                    block_type.name, self.name, buff.tell()
                )
            )
        buff.seek(header.get_end())

    @classmethod
    def read(cls, buff: BinaryIO) -> "ResTablePackage":
        header = ChunkHeader(buff, BlockType.TABLE_PACKAGE)
        return cls(buff, header)

    def __repr__(self):
        return "<ResTablePackage id=0x{:02x} name='{}'>".format(self.id, self.name)
