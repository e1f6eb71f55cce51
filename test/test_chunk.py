import io
from struct import pack

import pytest

from axmldecode.chunk import ChunkHeader, decode_block_type, peek_block_type, read_struct
from axmldecode.errors import MalformedHeader, TruncatedData, UnexpectedChunkType, UnknownChunkType
from axmldecode.internal_types import BlockType

from chunks import header


class TestChunkHeader(object):

    def test_read_header(self):
        buff = io.BytesIO(header(0x0003, 8, 0x100) + b'\x00' * 0xF8)
        h = ChunkHeader.read(buff, BlockType.XML)
        assert h.get_type() == BlockType.XML
        assert h.get_header_size() == 8
        assert h.get_size() == 0x100
        assert h.get_data_start() == 8
        assert h.get_end() == 0x100
        assert buff.tell() == 8

    def test_header_at_offset(self):
        buff = io.BytesIO(b'\x00' * 4 + header(0x0180, 8, 16))
        buff.seek(4)
        h = ChunkHeader(buff)
        assert h.start == 4
        assert h.get_end() == 20

    @pytest.mark.parametrize("header_size,total_size", [
        (4, 16),     # header smaller than 8
        (8, 4),      # total smaller than 8
        (0x1C, 16),  # total smaller than header
    ])
    def test_size_invariants(self, header_size, total_size):
        buff = io.BytesIO(header(0x0001, header_size, total_size))
        with pytest.raises(MalformedHeader):
            ChunkHeader.read(buff, BlockType.STRING_POOL)

    def test_unexpected_type(self):
        buff = io.BytesIO(header(0x0001, 0x1C, 0x1C))
        with pytest.raises(UnexpectedChunkType):
            ChunkHeader.read(buff, BlockType.XML_RESOURCE_MAP)

    def test_truncated_header(self):
        buff = io.BytesIO(pack('<HH', 0x0003, 8))
        with pytest.raises(TruncatedData):
            ChunkHeader.read(buff, BlockType.XML)


class TestBlockType(object):

    def test_unknown_tag(self):
        buff = io.BytesIO(pack('<H', 0x0099))
        with pytest.raises(UnknownChunkType):
            decode_block_type(buff)

    def test_known_tags(self):
        assert decode_block_type(io.BytesIO(pack('<H', 0x0102))) == BlockType.XML_START_ELEMENT
        assert decode_block_type(io.BytesIO(pack('<H', 0x0100))) == BlockType.XML_FIRST_CHUNK

    def test_peek_does_not_move(self):
        buff = io.BytesIO(header(0x0180, 8, 8))
        assert peek_block_type(buff) == BlockType.XML_RESOURCE_MAP
        assert buff.tell() == 0

    def test_peek_unknown_does_not_move(self):
        buff = io.BytesIO(pack('<H', 0x0099))
        with pytest.raises(UnknownChunkType):
            peek_block_type(buff)
        assert buff.tell() == 0

    def test_peek_end_of_data(self):
        assert peek_block_type(io.BytesIO(b'')) is None
        buff = io.BytesIO(b'\x01')
        assert peek_block_type(buff) is None
        assert buff.tell() == 0

    def test_read_struct_short(self):
        with pytest.raises(TruncatedData):
            read_struct(io.BytesIO(b'\x01\x02'), '<L')
