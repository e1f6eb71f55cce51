"""
Decoding of the XML node chunks of an AXML document.

Each `parse_*` function reads one complete chunk (the cursor must be at the
start of its header), updates the `DecodeContext` and leaves the cursor at the
end of the chunk.
"""
from typing import BinaryIO, NamedTuple

from loguru import logger

from .chunk import ChunkHeader, read_struct
from .errors import StringIndexOutOfRange, UnresolvedNamespace
from .internal_types import NO_ENTRY, BlockType
from .value import TypedValue, format_value

# line number + comment index
XML_NODE_HEADER_SIZE = 0x10


class StartElement(NamedTuple):
    name: str
    # list of (key, value), in the order found in the file
    attributes: list
    # prefix -> uri of the namespaces in scope
    nsmap: dict
    namespace: str = ''
    line_number: int = 0


class EndElement(NamedTuple):
    name: str
    namespace: str = ''
    line_number: int = 0


class Text(NamedTuple):
    text: str
    line_number: int = 0


class DecodeContext:
    """
    State shared by the chunks of one document: the strings of the string pool(s),
    the namespace URI -> prefix table and the resource ids of the resource map.
    """

    def __init__(self) -> None:
        self.strings = []
        self.namespaces = {}
        self.resource_ids = []

    def get_string(self, idx: int) -> str:
        """
        :raises StringIndexOutOfRange: if there is no string for the index
        """
        if idx == NO_ENTRY or idx >= len(self.strings):
            raise StringIndexOutOfRange(
                "String index 0x{:x} is not in the string pool ({} strings)".format(
                    idx, len(self.strings)
                )
            )
        return self.strings[idx]

    def get_prefix(self, uri: str) -> str:
        """
        :raises UnresolvedNamespace: if no prefix is bound to the URI
        """
        try:
            return self.namespaces[uri]
        except KeyError:
            raise UnresolvedNamespace(
                "Namespace '{}' is used before it was declared".format(uri)
            ) from None

    def get_nsmap(self) -> dict[str, str]:
        """
        Returns the current namespace mapping as a dictionary prefix -> uri.
        Mappings with an empty prefix or uri are left out.
        """
        return {
            prefix: uri.strip()
            for uri, prefix in self.namespaces.items()
            if uri != "" and prefix != ""
        }


def _read_node_header(buff: BinaryIO, expected_type: BlockType) -> tuple[ChunkHeader, int, int]:
    header = ChunkHeader(buff, expected_type)
    # Line Number of the source file, only used as meta information
    # and the comment index (usually 0xFFFFFFFF)
    line_number, comment_index = read_struct(buff, '<LL')
    if header.get_header_size() != XML_NODE_HEADER_SIZE:
        logger.debug(
            "XML node header size is 0x{:04x} instead of 0x10. Offset=0x{:08x}".format(
                header.get_header_size(), header.start
            )
        )
    header.skip_header(buff)
    return header, line_number, comment_index


def parse_start_namespace(buff: BinaryIO, context: DecodeContext) -> None:
    header, line_number, _ = _read_node_header(buff, BlockType.XML_START_NAMESPACE)
    prefix, uri = read_struct(buff, '<LL')
    logger.debug(f"prefix: {prefix}, uri: {uri}")

    s_prefix = context.get_string(prefix)
    s_uri = context.get_string(uri)
    logger.debug(
        "Start of Namespace mapping: prefix {}: '{}' --> uri {}: '{}'".format(
            prefix, s_prefix, uri, s_uri
        )
    )
    if s_uri == '':
        logger.warning(
            "Namespace prefix '{}' resolves to empty URI. "
            "This might be a packer.".format(s_prefix)
        )
    if context.namespaces.get(s_uri) == s_prefix:
        logger.debug(
            "Namespace mapping ({}, {}) already seen! "
            "This is usually not a problem but could indicate packers or broken AXML compilers.".format(
                s_prefix, s_uri
            )
        )
    context.namespaces[s_uri] = s_prefix
    buff.seek(header.get_end())


def parse_end_namespace(buff: BinaryIO, context: DecodeContext) -> None:
    header, line_number, _ = _read_node_header(buff, BlockType.XML_END_NAMESPACE)
    # END_PREFIX contains again prefix and uri field
    prefix, uri = read_struct(buff, '<LL')
    s_prefix = context.get_string(prefix)
    s_uri = context.get_string(uri)

    if context.namespaces.get(s_uri) == s_prefix:
        del context.namespaces[s_uri]
    else:
        logger.warning(
            "Reached a NAMESPACE_END without having the namespace stored before? "
            "Prefix: '{}', URI: '{}', line {}".format(s_prefix, s_uri, line_number)
        )
    buff.seek(header.get_end())


def _attribute_key(context: DecodeContext, ns_index: int, name_index: int) -> str:
    name = context.get_string(name_index)
    if not name and name_index < len(context.resource_ids):
        # stripped attribute name, only the resource id is left
        name = 'UNKNOWN_SYSTEM_ATTRIBUTE_{:08x}'.format(context.resource_ids[name_index])
        logger.warning(f"Attribute {name_index} has no name, using '{name}'")

    if ns_index == NO_ENTRY:
        return name
    prefix = context.get_prefix(context.get_string(ns_index))
    return "{}:{}".format(prefix, name)


def _attribute_value(context: DecodeContext, raw_index: int, value: TypedValue) -> str:
    # The raw string wins over the typed value
    if raw_index != NO_ENTRY:
        return context.get_string(raw_index)
    return format_value(value, context.get_string)


def parse_start_element(buff: BinaryIO, context: DecodeContext) -> StartElement:
    # The TAG consists of some fields:
    # * (chunk_size, line_number, comment_index - we read before)
    # * namespace_uri
    # * name
    # * size of the attribute block, not needed for decoding
    # * attribute count
    # * id, class and style attribute indices
    # After that, there is the list of attributes, 20 bytes each
    header, line_number, _ = _read_node_header(buff, BlockType.XML_START_ELEMENT)
    (ns_index,
     name_index,
     attribute_block_size,
     attribute_count,
     id_index,
     class_index,
     style_index) = read_struct(buff, '<LLLHHHH')
    logger.debug(f"ns: {ns_index}, name: {name_index}, attribute_block_size: {attribute_block_size}")
    logger.debug(f"attribute_count: {attribute_count}")

    name = context.get_string(name_index)
    namespace = context.get_string(ns_index) if ns_index != NO_ENTRY else ''

    attributes = []
    for i in range(attribute_count):
        # Each Attribute contains:
        # * Namespace URI (String ID)
        # * Name (String ID)
        # * Raw value (String ID)
        # * Typed value
        attr_ns, attr_name, attr_raw = read_struct(buff, '<LLL')
        typed_value = TypedValue(buff)

        key = _attribute_key(context, attr_ns, attr_name)
        value = _attribute_value(context, attr_raw, typed_value)
        logger.debug(f"attribute[{i}]: {key}='{value}'")
        attributes.append((key, value))

    buff.seek(header.get_end())
    return StartElement(name, attributes, context.get_nsmap(), namespace, line_number)


def parse_end_element(buff: BinaryIO, context: DecodeContext) -> EndElement:
    header, line_number, _ = _read_node_header(buff, BlockType.XML_END_ELEMENT)
    ns_index, name_index = read_struct(buff, '<LL')
    name = context.get_string(name_index)
    namespace = context.get_string(ns_index) if ns_index != NO_ENTRY else ''
    buff.seek(header.get_end())
    return EndElement(name, namespace, line_number)


def parse_cdata(buff: BinaryIO, context: DecodeContext) -> Text:
    # The CDATA field is like an attribute.
    # It contains an index into the String pool
    # as well as a typed value, usually set to UNDEFINED
    header, line_number, _ = _read_node_header(buff, BlockType.XML_CDATA)
    (data_index,) = read_struct(buff, '<L')
    typed_value = TypedValue(buff)
    logger.debug(f"found a CDATA Chunk: index={data_index}, {typed_value}")
    text = context.get_string(data_index)
    buff.seek(header.get_end())
    return Text(text, line_number)
