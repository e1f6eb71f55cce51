from struct import unpack_from
from typing import BinaryIO, Optional

from loguru import logger

from .chunk import ChunkHeader, read_struct
from .errors import InvalidEncoding, MalformedHeader, StringIndexOutOfRange, TruncatedData
from .internal_types import SORTED_FLAG, UTF8_FLAG, BlockType


def decode_length(data: bytes, offset: int, sizeof_char: int) -> tuple[int, int]:
    """
    Generic Length Decoding at offset of string

    The method works for both 8 and 16 bit Strings.
    A length is one char, or two chars if the high bit of the first one is set.
    In that case the high bit is dropped and the first char becomes the high part:
    * 8 bit strings: ((first & 0x7F) << 8) | second
    * 16 bit strings: ((first & 0x7FFF) << 16) | second

    :param data: the string data of the pool
    :param offset: offset into the string data section of the beginning of
    the string
    :param sizeof_char: number of bytes per char (1 = 8bit, 2 = 16bit)
    :returns: tuple of (length, read bytes)
    """
    fmt = '<B' if sizeof_char == 1 else '<H'
    highbit = 0x80 << (8 * (sizeof_char - 1))

    def char_at(pos):
        if pos + sizeof_char > len(data):
            raise TruncatedData(
                "String length at offset {} runs past the string data".format(offset)
            )
        return unpack_from(fmt, data, pos)[0]

    length = char_at(offset)
    if (length & highbit) != 0:
        length = ((length & ~highbit) << (8 * sizeof_char)) | char_at(offset + sizeof_char)
        return length, sizeof_char << 1
    return length, sizeof_char


class StringPool:
    """
    StringPool is a CHUNK inside an AXML or ARSC File: `ResStringPool_header`
    It contains all strings, which are used by referencing to ID's

    The strings are appended to a shared list given by the caller, so several
    pools can fill one index space. Every offset table slot gets an entry, empty
    strings included, so the position in the list always matches the string ID.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#436
    """

    def __init__(self, buff: BinaryIO, header: ChunkHeader, shared_strings: Optional[list] = None) -> None:
        """
        :param buff: buffer positioned right after the chunk header
        :param header: the already read header of this chunk
        :param shared_strings: list which receives the decoded strings
        """
        self.header = header
        if shared_strings is None:
            shared_strings = []

        (self.string_count,
         self.style_count,
         self.flags,
         self.strings_start,
         self.styles_start) = read_struct(buff, '<5I')
        self.is_utf8 = (self.flags & UTF8_FLAG) != 0
        self.is_sorted = (self.flags & SORTED_FLAG) != 0

        logger.debug(f"string_count: {self.string_count}")
        logger.debug(f"style_count: {self.style_count}")
        logger.debug(f"flags: {self.flags}, is_utf8: {self.is_utf8}")
        logger.debug(f"strings_start: {self.strings_start}, styles_start: {self.styles_start}")

        # Next, there is a list of string following.
        # This is only a list of offsets (4 byte each)
        header.skip_header(buff)
        self.string_offsets = list(read_struct(buff, '<{}I'.format(self.string_count)))
        # And a list of styles, again a list of offsets
        self.style_offsets = list(read_struct(buff, '<{}I'.format(self.style_count)))

        self._charbuff = b""
        if self.string_count > 0:
            self._charbuff = self._read_string_data(buff)

        for i, offset in enumerate(self.string_offsets):
            if self.is_utf8:
                string = self._decode8(offset)
            else:
                string = self._decode16(offset)
            logger.debug(f"string[{len(shared_strings)}] (entry {i}): {string!r}")
            shared_strings.append(string)

        self.strings = list(shared_strings)
        buff.seek(header.get_end())

    @classmethod
    def read(cls, buff: BinaryIO, shared_strings: Optional[list] = None) -> "StringPool":
        """
        Read a complete string pool chunk, header included.
        """
        header = ChunkHeader(buff, BlockType.STRING_POOL)
        return cls(buff, header, shared_strings)

    def _read_string_data(self, buff: BinaryIO) -> bytes:
        start = self.header.start + self.strings_start
        end = self.header.get_end()
        # if there are styles as well, we do not want to read them too.
        if self.styles_start != 0 and self.style_count != 0:
            end = self.header.start + self.styles_start

        if self.strings_start < self.header.get_header_size() or start > end:
            raise MalformedHeader(
                "String data start 0x{:x} lies outside of the string pool chunk! Offset=0x{:08x}".format(
                    self.strings_start, self.header.start
                )
            )
        if (end - start) % 4 != 0:
            logger.warning("Size of strings is not aligned by four bytes.")

        buff.seek(start)
        (data,) = read_struct(buff, '<{}s'.format(end - start))
        return data

    def _decode8(self, offset: int) -> str:
        """
        Decode an UTF-8 String at the given offset

        :param offset: offset of the string inside the data
        :return: the decoded string
        """
        # UTF-8 Strings contain two lengths, as they might differ:
        # 1) the UTF-16 length
        str_len, skip = decode_length(self._charbuff, offset, 1)
        offset += skip

        # 2) the utf-8 string length
        encoded_bytes, skip = decode_length(self._charbuff, offset, 1)
        offset += skip

        data = self._slice(offset, encoded_bytes)
        if self._charbuff[offset + encoded_bytes:offset + encoded_bytes + 1] != b"\x00":
            logger.warning(
                "UTF-8 String is not null terminated! At offset={}".format(offset)
            )

        try:
            string = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidEncoding(
                "Invalid UTF-8 string at offset {}: {}".format(offset, e)
            ) from e
        if len(string.encode('utf-16-le')) // 2 != str_len:
            logger.warning("invalid decoded string length")
        return string

    def _decode16(self, offset: int) -> str:
        """
        Decode an UTF-16 String at the given offset

        :param offset: offset of the string inside the data
        :return: the decoded string
        """
        str_len, skip = decode_length(self._charbuff, offset, 2)
        offset += skip

        # The len is the string len in utf-16 units
        encoded_bytes = str_len * 2

        data = self._slice(offset, encoded_bytes)
        if self._charbuff[offset + encoded_bytes:offset + encoded_bytes + 2] != b"\x00\x00":
            logger.warning(
                "UTF-16 String is not null terminated! At offset={}".format(offset)
            )

        try:
            return data.decode('utf-16-le')
        except UnicodeDecodeError as e:
            raise InvalidEncoding(
                "Invalid UTF-16 string at offset {}: {}".format(offset, e)
            ) from e

    def _slice(self, offset: int, size: int) -> bytes:
        if len(self._charbuff) < (offset + size):
            raise TruncatedData(
                f"String size: {offset + size} is exceeding string pool size {len(self._charbuff)}"
            )
        return self._charbuff[offset:offset + size]

    def __repr__(self):
        return "<StringPool #strings={}, #styles={}, UTF8={}>".format(
            self.string_count, self.style_count, self.is_utf8
        )

    def __getitem__(self, idx: int) -> str:
        """
        Returns the string at the index in the string table

        :raises StringIndexOutOfRange: if there is no such string
        """
        if idx < 0 or idx >= len(self.strings):
            raise StringIndexOutOfRange("String index {} is not in the string pool".format(idx))
        return self.strings[idx]

    def __len__(self):
        return len(self.strings)

    def __iter__(self):
        return iter(self.strings)

    def show(self) -> None:
        """
        Print some information on stdout about the string table
        """
        print(
            "StringPool(stringsCount=0x%x, "
            "stringsStart=0x%x, "
            "stylesCount=0x%x, "
            "stylesStart=0x%x, "
            "flags=0x%x"
            ")"
            % (
                self.string_count,
                self.strings_start,
                self.style_count,
                self.styles_start,
                self.flags,
            )
        )

        if self.strings:
            print()
            print("String Table: ")
            for i, s in enumerate(self):
                print("{:08d} {}".format(i, repr(s)))
