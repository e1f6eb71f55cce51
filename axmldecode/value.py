from struct import pack, unpack
from typing import BinaryIO, Callable

from loguru import logger

from .chunk import read_struct
from .errors import InvariantViolation
from .internal_types import (
    COLOR_KINDS,
    COMPLEX_UNIT_MASK,
    DIMENSION_UNITS,
    FRACTION_UNITS,
    RADIX_MULTS,
    ValueKind,
)


class TypedValue:
    """
    Representation of a value in a resource, supplying type information: `Res_value`.

    Format (8 bytes):
     * uint16_t size
     * uint8_t res0 -> always zero
     * uint8_t dataType
     * uint32_t data
    """

    def __init__(self, buff: BinaryIO) -> None:
        offset = buff.tell()
        self.size, self.res0, self.raw_type, self.data = read_struct(buff, '<HBBL')
        if self.res0 != 0:
            raise InvariantViolation(
                "res0 of typed value is not zero but 0x{:02x}! Offset=0x{:08x}".format(
                    self.res0, offset
                )
            )
        self.value_type = ValueKind.from_raw(self.raw_type)

    @classmethod
    def read(cls, buff: BinaryIO) -> "TypedValue":
        return cls(buff)

    def __repr__(self):
        return "<TypedValue type={} data=0x{:08x}>".format(self.value_type.name, self.data)


def complex_to_float(xcomplex: int) -> float:
    """
    Convert the packed mantissa/radix of a dimension or fraction to a float.
    """
    return float(xcomplex & 0xFFFFFF00) * RADIX_MULTS[(xcomplex >> 4) & 3]


def unhandled_value(raw_type: int, data: int) -> str:
    return "<unhandled 0x{:X}, type 0x{:02X}>".format(data, raw_type)


def format_value(
    value: TypedValue, lookup_string: Callable[[int], str] = lambda ix: "<string>"
) -> str:
    """
    Format a typed value based on type and data.
    By default, no strings are looked up and `"<string>"` is returned.
    You need to define `lookup_string` in order to actually lookup strings from
    the string table.

    :param value: the typed value of an attribute
    :param lookup_string: A function how to resolve strings from integer IDs
    :returns: the formatted string
    """
    _type = value.value_type
    _data = value.data

    # Function to prepend android prefix for attributes from the android library
    fmt_package = lambda x: "android:" if x >> 24 == 1 else ""

    logger.debug(f"format_value: {_type.name}: 0x{_data:08x}")

    if _type == ValueKind.INT_DEC:
        return str(_data)

    elif _type == ValueKind.INT_HEX:
        return "0x{:x}".format(_data)

    elif _type == ValueKind.INT_BOOLEAN:
        if _data == 0:
            return "false"
        return "true"

    elif _type == ValueKind.REFERENCE:
        return "type1/{}".format(_data)

    elif _type == ValueKind.STRING:
        return lookup_string(_data)

    elif _type == ValueKind.ATTRIBUTE:
        return "?{}{:08X}".format(fmt_package(_data), _data)

    elif _type == ValueKind.FLOAT:
        return "%f" % unpack("=f", pack("=L", _data))[0]

    elif _type == ValueKind.DIMENSION:
        unit = _data & COMPLEX_UNIT_MASK
        if unit < len(DIMENSION_UNITS):
            return "{:f}{}".format(complex_to_float(_data), DIMENSION_UNITS[unit])

    elif _type == ValueKind.FRACTION:
        unit = _data & COMPLEX_UNIT_MASK
        if unit < len(FRACTION_UNITS):
            return "{:f}{}".format(complex_to_float(_data) * 100, FRACTION_UNITS[unit])

    elif _type in COLOR_KINDS:
        return "#%08X" % _data

    logger.warning(
        "No rendering for value type 0x{:02x}, data 0x{:08x}".format(value.raw_type, _data)
    )
    return unhandled_value(value.raw_type, _data)
