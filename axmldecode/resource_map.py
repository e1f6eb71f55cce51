from typing import BinaryIO

from loguru import logger

from .chunk import ChunkHeader, read_struct
from .internal_types import BlockType


class ResourceMap:
    """
    The optional `RES_XML_RESOURCE_MAP_TYPE` chunk: a uint32_t array mapping
    strings in the string pool back to resource identifiers. Entry i belongs to
    string i, usually the attribute names of the android namespace.
    """

    def __init__(self, buff: BinaryIO, header: ChunkHeader) -> None:
        self.header = header
        # total_size counts the 8 byte chunk header as well
        count = header.get_size() // 4 - 2
        self.resource_ids = list(read_struct(buff, '<{}I'.format(count)))
        for i, res_id in enumerate(self.resource_ids):
            logger.debug(f"resource_ids[{i}]: 0x{res_id:08x}")
        buff.seek(header.get_end())

    @classmethod
    def read(cls, buff: BinaryIO) -> "ResourceMap":
        header = ChunkHeader(buff, BlockType.XML_RESOURCE_MAP)
        return cls(buff, header)

    def __len__(self):
        return len(self.resource_ids)

    def __repr__(self):
        return "<ResourceMap #ids={}>".format(len(self.resource_ids))
