"""
Tests du client JSON IPC mpv (sans socket: FakeTransport)
"""
import json

import pytest

from player.errors import ProtocolError, TransportError
from player.protocol import I64_MAX, U64_MAX, MpvClient, PropertyKind, coerce_json

from conftest import FakeTransport


@pytest.mark.unit
class TestPayloads:
    """Forme exacte des requêtes envoyées à mpv"""

    def test_get_property_payload(self, player, transport):
        player.get_property("time-pos")
        assert json.loads(transport.sent[0]) == {"command": ["get_property", "time-pos"]}

    @pytest.mark.parametrize("name,value", [
        ("pause", True),
        ("pause", False),
        ("time-pos", 95.0),
        ("sid", 0),
        ("volume", 30),
    ])
    def test_set_property_payload(self, player, transport, name, value):
        player.set_property(name, value)
        assert json.loads(transport.sent[0]) == {"command": ["set_property", name, value]}

    def test_bool_is_encoded_as_json_literal(self, player, transport):
        player.set_property("pause", True)
        assert '"pause", true]' in transport.sent[0]

    def test_send_command_wraps_list(self, player, transport):
        player.send_command(["cycle", "pause"])
        assert json.loads(transport.sent[0]) == {"command": ["cycle", "pause"]}

    def test_send_command_passes_dict_through(self, player, transport):
        player.send_command({"command": ["get_property", "volume"], "request_id": 7})
        assert json.loads(transport.sent[0])["request_id"] == 7

    def test_send_command_passes_string_through(self, transport):
        transport.raw_reply = '{"error":"success"}\n'
        player = MpvClient(transport)

        player.send_command('{ "command": ["stop"] }')

        assert transport.sent == ['{ "command": ["stop"] }']

    def test_unserializable_command(self, player, transport):
        with pytest.raises(ProtocolError):
            player.send_command(["set_property", "volume", object()])
        assert transport.sent == []

    def test_set_property_returns_raw_reply(self, player):
        assert json.loads(player.set_property("pause", True)) == {"error": "success"}


@pytest.mark.unit
class TestReplies:
    """Décodage des réponses"""

    def test_get_property_returns_full_reply(self, player):
        assert player.get_property("volume") == {"data": 50.0, "error": "success"}

    def test_event_lines_are_skipped(self, transport):
        transport.raw_reply = '{"event":"pause"}\n{"event":"seek"}\n{"data":12.5,"error":"success"}\n'
        assert MpvClient(transport).get_float("time-pos") == 12.5

    @pytest.mark.parametrize("reply", ["", "\n", '{"event":"idle"}\n'])
    def test_no_reply_is_protocol_error(self, transport, reply):
        transport.raw_reply = reply
        with pytest.raises(ProtocolError):
            MpvClient(transport).get_property("time-pos")

    @pytest.mark.parametrize("reply", ["not json\n", "{\"data\": 1\n", "[1, 2]\n", "42\n"])
    def test_malformed_reply(self, transport, reply):
        transport.raw_reply = reply
        client = MpvClient(transport)

        with pytest.raises(ProtocolError):
            client.get_property("time-pos")
        assert client.get_float("time-pos") is None
        assert client.get_int("sid") is None
        assert client.get_bool("pause") is None

    def test_missing_data_is_none(self, player):
        assert player.get_float("chapter") is None

    def test_transport_error_propagates_from_raw_calls(self, player, transport):
        transport.fail = True
        with pytest.raises(TransportError):
            player.set_property("pause", True)
        with pytest.raises(TransportError):
            player.get_property("pause")

    def test_transport_error_is_none_for_typed_reads(self, player, transport):
        transport.fail = True
        assert player.get_float("time-pos") is None
        assert player.get_uint("volume") is None


@pytest.mark.unit
class TestTypedReads:
    """get_property_as: conversions acceptées et refusées"""

    @pytest.fixture
    def client(self):
        return MpvClient(FakeTransport({
            "time-pos": 12,
            "duration": 3661.25,
            "pause": True,
            "sid": 2,
            "delay": -3,
            "title": "movie.mkv",
            "huge": U64_MAX,
        }))

    def test_int_accepted_as_float(self, client):
        value = client.get_float("time-pos")
        assert value == 12.0
        assert isinstance(value, float)

    def test_float(self, client):
        assert client.get_float("duration") == 3661.25

    def test_float_never_accepted_as_int(self, client):
        assert client.get_int("duration") is None
        assert client.get_uint("duration") is None

    def test_bool(self, client):
        assert client.get_bool("pause") is True
        assert client.get_bool("sid") is None

    def test_bool_is_not_a_number(self, client):
        assert client.get_int("pause") is None
        assert client.get_float("pause") is None

    def test_signed_and_unsigned(self, client):
        assert client.get_int("delay") == -3
        assert client.get_uint("delay") is None
        assert client.get_uint("sid") == 2

    def test_u64_range(self, client):
        assert client.get_uint("huge") == U64_MAX
        assert client.get_int("huge") is None

    def test_string_is_none_for_every_kind(self, client):
        for kind in PropertyKind:
            assert client.get_property_as("title", kind) is None


@pytest.mark.unit
@pytest.mark.parametrize("value,kind,expected", [
    (I64_MAX, PropertyKind.INT, I64_MAX),
    (I64_MAX + 1, PropertyKind.INT, None),
    (0, PropertyKind.UINT, 0),
    (-1, PropertyKind.UINT, None),
    (1.5, PropertyKind.FLOAT, 1.5),
    (None, PropertyKind.FLOAT, None),
    (False, PropertyKind.BOOL, False),
    (0, PropertyKind.BOOL, None),
    ("1", PropertyKind.INT, None),
])
def test_coerce_json(value, kind, expected):
    assert coerce_json(value, kind) == expected


@pytest.mark.unit
@pytest.mark.parametrize("name", ["time-pos", "duration", "pause", "sid", "aid", "volume"])
def test_malformed_reply_never_raises(transport, name):
    transport.raw_reply = "{oops\n"
    client = MpvClient(transport)
    for kind in PropertyKind:
        assert client.get_property_as(name, kind) is None
