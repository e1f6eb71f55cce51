import io
from typing import Iterator, Optional, Union

from loguru import logger

from .chunk import ChunkHeader, decode_block_type, peek_block_type
from .errors import UnsupportedChunk
from .internal_types import BlockType
from .res_table import ResourceTable, ResTablePackage
from .resource_map import ResourceMap
from .string_pool import StringPool
from .xml_events import (
    DecodeContext,
    EndElement,
    StartElement,
    Text,
    parse_cdata,
    parse_end_element,
    parse_end_namespace,
    parse_start_element,
    parse_start_namespace,
)

Event = Union[StartElement, EndElement, Text]


class AXMLDecoder:
    """
    `AXMLDecoder` reads through all chunks of an AXML or ARSC file.

    An AXML file is a file which contains multiple chunks of data, defined
    by the `ResChunk_header`. There is no real file magic, a file usually
    starts with a `RES_XML_TYPE` chunk (`0x03000800`) and a `resources.arsc`
    with a `RES_TABLE_TYPE` chunk.

    The type of the next chunk is peeked without consuming it, and the chunk is
    then handed to the reader for that type, which reads the whole chunk,
    header included. Iterating the decoder yields the element and text events
    of the document; string pools, resource maps and resource tables are kept
    on the decoder for inspection.

    Decoding stops when the data is exhausted at a chunk boundary. Any
    malformed chunk raises a `ResParserError` and ends the decoding.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#563
    """

    def __init__(self, raw_buff: bytes) -> None:
        self.buff = io.BytesIO(raw_buff)
        self.buff_size = len(raw_buff)
        logger.debug(f"buff_size: {self.buff_size}")

        self.context = DecodeContext()
        self.string_pools = []
        self.resource_maps = []
        self.resource_tables = []
        self.packages = []

        self._handlers = {
            BlockType.NULL: self._skip_null,
            BlockType.STRING_POOL: self._parse_string_pool,
            BlockType.TABLE: self._parse_table,
            BlockType.XML: self._parse_xml_header,
            BlockType.XML_START_NAMESPACE: lambda: parse_start_namespace(self.buff, self.context),
            BlockType.XML_END_NAMESPACE: lambda: parse_end_namespace(self.buff, self.context),
            BlockType.XML_START_ELEMENT: lambda: parse_start_element(self.buff, self.context),
            BlockType.XML_END_ELEMENT: lambda: parse_end_element(self.buff, self.context),
            BlockType.XML_CDATA: lambda: parse_cdata(self.buff, self.context),
            BlockType.XML_RESOURCE_MAP: self._parse_resource_map,
            BlockType.TABLE_PACKAGE: self._parse_package,
            BlockType.XML_LAST_CHUNK: self._unsupported,
            BlockType.TABLE_TYPE: self._unsupported,
            BlockType.TABLE_TYPE_SPEC: self._unsupported,
            BlockType.TABLE_LIBRARY: self._unsupported,
        }

    def __iter__(self) -> Iterator[Event]:
        return self.events()

    def events(self) -> Iterator[Event]:
        """
        Decode the chunks one after another, yielding the XML events.
        """
        while True:
            block_type = peek_block_type(self.buff)
            if block_type is None:
                logger.debug(f"End of data at offset 0x{self.buff.tell():08x}")
                break
            logger.debug(f"BLOCK TYPE: {block_type.name} at offset 0x{self.buff.tell():08x}")
            event = self._handlers[block_type]()
            if event is not None:
                yield event

    def parse(self) -> list:
        """
        Decode the whole buffer.

        :returns: the list of all XML events
        """
        return list(self.events())

    @property
    def strings(self) -> list:
        return self.context.strings

    @property
    def string_pool(self) -> Optional[StringPool]:
        return self.string_pools[0] if self.string_pools else None

    @property
    def resource_map(self) -> Optional[ResourceMap]:
        return self.resource_maps[-1] if self.resource_maps else None

    def _skip_null(self) -> None:
        # padding between chunks, only the tag itself is consumed
        decode_block_type(self.buff)

    def _parse_string_pool(self) -> None:
        self.string_pools.append(StringPool.read(self.buff, self.context.strings))

    def _parse_resource_map(self) -> None:
        resource_map = ResourceMap.read(self.buff)
        self.resource_maps.append(resource_map)
        self.context.resource_ids = resource_map.resource_ids

    def _parse_table(self) -> None:
        self.resource_tables.append(ResourceTable.read(self.buff))

    def _parse_package(self) -> None:
        self.packages.append(ResTablePackage.read(self.buff))

    def _parse_xml_header(self) -> None:
        header = ChunkHeader(self.buff, BlockType.XML)
        if header.get_size() > self.buff_size - header.start:
            logger.warning(
                "Declared filesize ({}) is larger than the data ({})".format(
                    header.get_size(), self.buff_size - header.start
                )
            )
        # the chunks of the document follow the header
        header.skip_header(self.buff)

    def _unsupported(self) -> None:
        block_type = peek_block_type(self.buff)
        raise UnsupportedChunk(
            "Decoding of {} chunks is not supported! Offset=0x{:08x}".format(
                block_type.name, self.buff.tell()
            )
        )
