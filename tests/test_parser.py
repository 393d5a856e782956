import pytest

from spongenet.buffer import Buffer
from spongenet.parser import NetParser, NetUnparser, ParseResult, as_string


@pytest.mark.parametrize("value", [0, 1, 0x7F, 0xFF, 0x1234, 0xFFFF, 0xDEADBEEF, 0xFFFFFFFF])
def test_u32_round_trip(value):
    parser = NetParser(NetUnparser.u32(value))
    assert parser.u32() == value
    assert not parser.error


@pytest.mark.parametrize("value", [0, 1, 0xFF, 0xABCD, 0xFFFF])
def test_u16_round_trip(value):
    parser = NetParser(NetUnparser.u16(value))
    assert parser.u16() == value
    assert len(parser.buffer) == 0


@pytest.mark.parametrize("value", [0, 1, 0x80, 0xFF])
def test_u8_round_trip(value):
    assert NetParser(NetUnparser.u8(value)).u8() == value


def test_network_byte_order():
    assert NetUnparser.u16(0x1234) == b"\x12\x34"
    assert NetUnparser.u32(0x01020304) == bytes([1, 2, 3, 4])


def test_unparse_truncates():
    assert NetUnparser.u8(0x1FF) == NetUnparser.u8(0xFF)
    assert NetUnparser.u16(0x1ABCD) == NetUnparser.u16(0xABCD)
    assert len(NetUnparser.u32(1 << 40)) == 4


def test_sequential_fields():
    data = NetUnparser.u32(7) + NetUnparser.u16(8) + NetUnparser.u8(9) + b"rest"
    parser = NetParser(Buffer(data))
    assert (parser.u32(), parser.u16(), parser.u8()) == (7, 8, 9)
    assert parser.buffer == b"rest"
    assert parser.result == ParseResult.NO_ERROR


def test_too_short_records_error():
    parser = NetParser(b"\x01\x02")
    assert parser.u32() == 0
    assert parser.error
    assert parser.result == ParseResult.PACKET_TOO_SHORT
    assert parser.buffer == b"\x01\x02"


def test_error_is_sticky():
    parser = NetParser(b"\x01\x02")
    parser.u32()
    assert parser.u8() == 0
    assert parser.buffer == b"\x01\x02"


def test_remove_prefix():
    parser = NetParser(b"abcdef")
    parser.remove_prefix(4)
    assert parser.buffer == b"ef"
    parser.remove_prefix(3)
    assert parser.result == ParseResult.PACKET_TOO_SHORT
    assert parser.buffer == b"ef"


def test_buffer_property_is_a_copy():
    parser = NetParser(b"abcd")
    copy = parser.buffer
    copy.remove_prefix(2)
    assert parser.buffer == b"abcd"


def test_parser_does_not_consume_callers_buffer():
    source = Buffer(NetUnparser.u16(5))
    parser = NetParser(source)
    parser.u16()
    assert len(source) == 2


def test_result_can_be_set():
    parser = NetParser(b"\x00")
    parser.result = ParseResult.BAD_CHECKSUM
    assert parser.error
    assert parser.u8() == 0


@pytest.mark.parametrize(
    "result, name",
    [
        (ParseResult.NO_ERROR, "NoError"),
        (ParseResult.BAD_CHECKSUM, "BadChecksum"),
        (ParseResult.PACKET_TOO_SHORT, "PacketTooShort"),
        (ParseResult.WRONG_IP_VERSION, "WrongIPVersion"),
        (ParseResult.HEADER_TOO_SHORT, "HeaderTooShort"),
        (ParseResult.TRUNCATED_PACKET, "TruncatedPacket"),
    ],
)
def test_as_string(result, name):
    assert as_string(result) == name