import io

import pytest

from axmldecode.errors import MalformedHeader, UnexpectedChunkType
from axmldecode.resource_map import ResourceMap

from chunks import header, resource_map, string_pool


class TestResourceMap(object):

    def test_two_ids(self):
        data = resource_map([0x01010003, 0x0101021b])
        assert len(data) == 16
        buff = io.BytesIO(data)
        rm = ResourceMap.read(buff)
        assert len(rm) == 2
        assert rm.resource_ids == [0x01010003, 0x0101021b]
        assert buff.tell() == 16

    def test_empty(self):
        rm = ResourceMap.read(io.BytesIO(resource_map([])))
        assert rm.resource_ids == []

    def test_wrong_type(self):
        with pytest.raises(UnexpectedChunkType):
            ResourceMap.read(io.BytesIO(string_pool(["a"])))

    def test_bad_size(self):
        with pytest.raises(MalformedHeader):
            ResourceMap.read(io.BytesIO(header(0x0180, 8, 4)))
