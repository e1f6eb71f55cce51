# Constants for AXML and ARSC files
# see http://aospxref.com/android-13.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#233

from enum import IntEnum


class BlockType(IntEnum):
    """
    Type identifier of a `ResChunk_header`.

    This is a closed set: anything else found where a chunk header should start
    means the stream is corrupt or the cursor is out of sync.
    """

    NULL = 0x0000
    STRING_POOL = 0x0001
    TABLE = 0x0002
    XML = 0x0003

    # Chunk types in XML
    XML_START_NAMESPACE = 0x0100
    XML_END_NAMESPACE = 0x0101
    XML_START_ELEMENT = 0x0102
    XML_END_ELEMENT = 0x0103
    XML_CDATA = 0x0104
    XML_LAST_CHUNK = 0x017F

    # This contains a uint32_t array mapping strings in the string
    # pool back to resource identifiers.  It is optional.
    XML_RESOURCE_MAP = 0x0180

    # Chunk types in TABLE
    TABLE_PACKAGE = 0x0200
    TABLE_TYPE = 0x0201
    TABLE_TYPE_SPEC = 0x0202
    TABLE_LIBRARY = 0x0203

    # Alias of XML_START_NAMESPACE
    XML_FIRST_CHUNK = 0x0100


class ValueKind(IntEnum):
    """
    `Res_value::dataType`, tells how the 32 bit data of a typed value is to be read.
    """

    # The 'data' is either 0 or 1, specifying this resource is either undefined or empty
    NULL = 0x00
    # The 'data' holds a ResTable_ref, a reference to another resource table entry
    REFERENCE = 0x01
    # The 'data' holds an attribute resource identifier
    ATTRIBUTE = 0x02
    # The 'data' holds an index into the containing resource table's global value string pool
    STRING = 0x03
    # The 'data' holds a single-precision floating point number
    FLOAT = 0x04
    # The 'data' holds a complex number encoding a dimension value, such as "100in"
    DIMENSION = 0x05
    # The 'data' holds a complex number encoding a fraction of a container
    FRACTION = 0x06
    # The 'data' holds a dynamic ResTable_ref, which needs to be resolved before it can be used
    DYNAMIC_REFERENCE = 0x07
    # The 'data' holds an attribute resource identifier, which needs to be resolved first
    DYNAMIC_ATTRIBUTE = 0x08

    # The 'data' is a raw integer value of the form n..n
    INT_DEC = 0x10
    # The 'data' is a raw integer value of the form 0xn..n
    INT_HEX = 0x11
    # The 'data' is either 0 or 1, for input "false" or "true" respectively
    INT_BOOLEAN = 0x12

    # The 'data' is a raw integer value of the form #aarrggbb
    INT_COLOR_ARGB8 = 0x1C
    # The 'data' is a raw integer value of the form #rrggbb
    INT_COLOR_RGB8 = 0x1D
    # The 'data' is a raw integer value of the form #argb
    INT_COLOR_ARGB4 = 0x1E
    # The 'data' is a raw integer value of the form #rgb
    INT_COLOR_RGB4 = 0x1F

    @classmethod
    def from_raw(cls, raw: int) -> "ValueKind":
        """
        Map a raw type byte to a kind. Unknown bytes map to `NULL`, a typed value
        is always 8 bytes long so an unknown kind can not desync the stream.
        """
        try:
            return cls(raw)
        except ValueError:
            return cls.NULL


COLOR_KINDS = (
    ValueKind.INT_COLOR_ARGB8,
    ValueKind.INT_COLOR_RGB8,
    ValueKind.INT_COLOR_ARGB4,
    ValueKind.INT_COLOR_RGB4,
)

# Flags in the STRING Section
SORTED_FLAG = 1 << 0
UTF8_FLAG = 1 << 8

# Index value meaning "no string" (namespace, raw value, comment)
NO_ENTRY = 0xFFFFFFFF

CHUNK_HEADER_SIZE = 2 + 2 + 4

# ResTable_package: the package name is a fixed buffer of 128 UTF-16 units
PACKAGE_NAME_UNITS = 128
# Header size of a package chunk carrying the typeIdOffset field
PACKAGE_HEADER_SIZE = 0x120

RADIX_MULTS = [0.00390625, 3.051758e-005, 1.192093e-007, 4.656613e-010]
DIMENSION_UNITS = ["px", "dip", "sp", "pt", "in", "mm"]
FRACTION_UNITS = ["%", "%p"]

COMPLEX_UNIT_MASK = 0x0F

ANDROID_NAMESPACE = "http://schemas.android.com/apk/res/android"
