import io
from struct import pack

import pytest

from axmldecode.errors import InvariantViolation
from axmldecode.internal_types import ValueKind
from axmldecode.value import TypedValue, complex_to_float, format_value


def typed_value(value_type, data, res0=0):
    return TypedValue.read(io.BytesIO(pack('<HBBL', 8, res0, value_type, data)))


class TestTypedValue(object):

    def test_read(self):
        v = typed_value(0x12, 1)
        assert v.size == 8
        assert v.value_type == ValueKind.INT_BOOLEAN
        assert v.data == 1

    def test_res0_must_be_zero(self):
        with pytest.raises(InvariantViolation):
            typed_value(0x10, 1, res0=1)

    def test_unknown_kind_is_null(self):
        v = typed_value(0x42, 7)
        assert v.value_type == ValueKind.NULL
        assert v.raw_type == 0x42

    def test_from_raw(self):
        assert ValueKind.from_raw(0x11) == ValueKind.INT_HEX
        assert ValueKind.from_raw(0xFF) == ValueKind.NULL


class TestFormatValue(object):

    @pytest.mark.parametrize("value_type,data,expected", [
        (0x10, 42, "42"),
        (0x10, 0xFFFFFFFF, "4294967295"),
        (0x11, 255, "0xff"),
        (0x12, 0, "false"),
        (0x12, 1, "true"),
        (0x12, 0xFFFFFFFF, "true"),
        (0x01, 0x7f010001, "type1/2130771969"),
        (0x02, 0x0101000e, "?android:0101000E"),
        (0x02, 0x7f01000e, "?7F01000E"),
        (0x1C, 0xFF00FF00, "#FF00FF00"),
        (0x1D, 0x00112233, "#00112233"),
        (0x04, 0x3FC00000, "1.500000"),
        (0x05, (100 << 8) | 1, "100.000000dip"),
        (0x05, (16 << 8) | 2, "16.000000sp"),
        (0x06, (1 << 8) | 0, "100.000000%"),
    ])
    def test_rendering(self, value_type, data, expected):
        assert format_value(typed_value(value_type, data)) == expected

    def test_string_lookup(self):
        strings = ["zero", "one"]
        assert format_value(typed_value(0x03, 1), strings.__getitem__) == "one"
        assert format_value(typed_value(0x03, 1)) == "<string>"

    def test_unhandled(self):
        assert format_value(typed_value(0x00, 0x1F)) == "<unhandled 0x1F, type 0x00>"
        assert format_value(typed_value(0x42, 0xAB)) == "<unhandled 0xAB, type 0x42>"

    def test_dimension_unknown_unit(self):
        assert format_value(typed_value(0x05, 0x0F)) == "<unhandled 0xF, type 0x05>"

    def test_complex_to_float(self):
        assert complex_to_float(1 << 8) == 1.0
        # radix 1 shifts the mantissa by 7 more bits
        assert complex_to_float((1 << 8) | (1 << 4)) == pytest.approx(1.0 / 128, rel=1e-5)
