"""Tests for Netstat parser."""

import pytest

from parsers.base import ConnectionState, Protocol
from parsers.errors import (
    MalformedLineError,
    NetstatParseError,
    UnknownPortNameError,
    UnknownStateError,
    UnrecognizedProtocolError,
)
from parsers.netstat import NetstatParser


class TestNetstatParserFormatDetection:
    """Test netstat capture layout detection."""

    def test_detect_single_format(self, parser, windows_sample):
        assert parser.detect_format(windows_sample) == "single"

    def test_detect_snapshots_format(self, parser, snapshots_sample):
        assert parser.detect_format(snapshots_sample) == "snapshots"

    def test_detect_unknown_format(self, parser):
        assert parser.detect_format("this is not netstat output") is None


class TestNetstatParserConnectionLine:
    """Test parsing of individual connection lines."""

    def test_parse_established(self, parser):
        records = parser.parse("TCP  10.0.0.1:80   10.0.0.2:61000   ESTABLISHED")
        assert len(records) == 1

        record = records[0]
        assert record.protocol == Protocol.TCP
        assert record.local_host == "10.0.0.1"
        assert record.local_port == 80
        assert record.remote_host == "10.0.0.2"
        assert record.remote_port == 61000
        assert record.state == ConnectionState.ESTABLISHED
        assert record.owning_process is None
        assert record.line_number == 1

    def test_parse_udp(self, parser):
        record = parser.parse("UDP 0.0.0.0:500 10.0.0.9:500 LISTENING")[0]
        assert record.protocol == Protocol.UDP
        assert record.state == ConnectionState.LISTENING

    def test_parse_closing_state(self, parser):
        record = parser.parse("TCP 10.0.0.1:80 10.0.0.2:61000 CLOSING")[0]
        assert record.state == ConnectionState.CLOSING

    def test_standard_port_name(self, parser):
        record = parser.parse("TCP 1.2.3.4:pptp 1.2.3.5:1 CLOSE_WAIT")[0]
        assert record.local_port == 1723
        assert record.remote_port == 1

    def test_standard_remote_port_name(self, parser):
        record = parser.parse("TCP 1.2.3.4:52011 1.2.3.5:ms-sql-s ESTABLISHED")[0]
        assert record.remote_port == 1433

    def test_hostname_placeholders(self, parser):
        record = parser.parse("TCP 0.0.0.0:135 GBDC1-APP-1:0 LISTENING")[0]
        assert record.remote_host == "GBDC1-APP-1"
        assert record.remote_port == 0

    def test_ipv6_host_split_on_last_colon(self, parser):
        record = parser.parse("TCP [::1]:8080 [fe80::1%4]:49670 ESTABLISHED")[0]
        assert record.local_host == "[::1]"
        assert record.local_port == 8080
        assert record.remote_host == "[fe80::1%4]"
        assert record.remote_port == 49670

    def test_tabs_between_columns(self, parser):
        record = parser.parse("TCP\t10.0.0.1:80\t10.0.0.2:61000\tTIME_WAIT")[0]
        assert record.local_port == 80
        assert record.state == ConnectionState.TIME_WAIT

    @pytest.mark.parametrize(
        "local,remote",
        [
            ("10.0.0.1:80", "10.0.0.2:61000"),
            ("0.0.0.0:0", "GBDC1-PLMPRD-1:65535"),
            ("[::]:443", "[::]:0"),
            ("localhost:8080", "127.0.0.1:49671"),
        ],
    )
    def test_address_round_trip(self, parser, local, remote):
        record = parser.parse(f"TCP {local}   {remote}   ESTABLISHED")[0]
        assert record.local_address == local
        assert record.remote_address == remote


class TestNetstatParserContinuation:
    """Test process continuation lines."""

    def test_process_attached(self, parser):
        data = "TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING\n[java.exe]"
        records = parser.parse(data)
        assert len(records) == 1
        assert records[0].owning_process == "java.exe"

    def test_indented_process(self, parser):
        data = "  TCP    1.2.3.4:80    1.2.3.5:61122    LISTENING\n    [java.exe]   \n"
        assert parser.parse(data)[0].owning_process == "java.exe"

    def test_consecutive_connection_lines(self, parser):
        data = (
            "TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING\n"
            "TCP 1.2.3.4:81 1.2.3.5:61123 ESTABLISHED\n"
        )
        records = parser.parse(data)
        assert len(records) == 2
        assert all(r.owning_process is None for r in records)
        assert [r.local_port for r in records] == [80, 81]

    def test_extraneous_text_ignored(self, parser):
        data = (
            "TCP 0.0.0.0:135 10.0.0.1:0 LISTENING\n"
            "RpcSs\n"
            "[svchost.exe]\n"
            "TCP 0.0.0.0:445 10.0.0.1:0 LISTENING\n"
            "Can not obtain ownership information\n"
        )
        records = parser.parse(data)
        assert records[0].owning_process == "svchost.exe"
        assert records[1].owning_process is None

    def test_blank_lines_between(self, parser):
        data = "TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING\n\n\n[java.exe]\n"
        assert parser.parse(data)[0].owning_process == "java.exe"

    def test_first_process_wins(self, parser):
        data = "TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING\n[java.exe]\n[other.exe]\n"
        assert parser.parse(data)[0].owning_process == "java.exe"

    def test_process_before_any_connection_ignored(self, parser):
        data = "[java.exe]\nTCP 1.2.3.4:80 1.2.3.5:61122 LISTENING\n"
        assert parser.parse(data)[0].owning_process is None

    def test_unterminated_bracket(self, parser):
        data = "TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING\n[java.exe\n"
        with pytest.raises(MalformedLineError) as exc_info:
            parser.parse(data)
        assert exc_info.value.line_number == 2


class TestNetstatParserParse:
    """Test parsing complete captures."""

    def test_parse_windows_sample(self, parser, windows_sample):
        records = parser.parse(windows_sample)
        assert len(records) == 8

        svchost = records[0]
        assert svchost.local_port == 135
        assert svchost.owning_process == "svchost.exe"

        assert sum(1 for r in records if r.owning_process == "java.exe") == 4

        pptp = records[6]
        assert pptp.local_port == 1723
        assert pptp.state == ConnectionState.CLOSE_WAIT
        assert pptp.owning_process is None

    def test_parse_empty_input(self, parser):
        assert parser.parse("") == []

    def test_parse_headers_only(self, parser):
        data = "Active Connections\n\n  Proto  Local Address          Foreign Address        State\n"
        assert parser.parse(data) == []

    def test_parse_resets_state(self, parser):
        parser.parse("TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING")
        assert len(parser.parse("TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING")) == 1

    def test_feed_and_finish(self, parser):
        parser.feed(1, "TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING")
        assert parser.pending is not None
        parser.feed(2, "[java.exe]")
        records = parser.finish()
        assert parser.pending is None
        assert records[0].owning_process == "java.exe"


class TestNetstatParserErrors:
    """Test that malformed lines abort with the right error and line number."""

    def test_unknown_state(self, parser):
        data = "TCP 1.2.3.4:80 1.2.3.5:61122 LISTENING\nTCP 1.2.3.4:80 1.2.3.5:61122 BOGUS_STATE\n"
        with pytest.raises(UnknownStateError) as exc_info:
            parser.parse(data)
        assert exc_info.value.line_number == 2
        assert exc_info.value.state == "BOGUS_STATE"
        assert "line 2" in str(exc_info.value)

    def test_state_is_case_sensitive(self, parser):
        with pytest.raises(UnknownStateError):
            parser.parse("TCP 1.2.3.4:80 1.2.3.5:61122 established")

    def test_unknown_state_is_malformed_line(self, parser):
        with pytest.raises(MalformedLineError):
            parser.parse("TCP 1.2.3.4:80 1.2.3.5:61122 BOGUS_STATE")

    def test_missing_state_separator(self, parser):
        with pytest.raises(MalformedLineError) as exc_info:
            parser.parse("TCP 1.2.3.4:80")
        assert exc_info.value.line_number == 1

    def test_missing_address_separator(self, parser):
        with pytest.raises(MalformedLineError) as exc_info:
            parser.parse("\n\nTCP 1.2.3.4:80 ESTABLISHED")
        assert exc_info.value.line_number == 3
        assert "local address and remote address" in exc_info.value.message

    def test_missing_colon(self, parser):
        with pytest.raises(MalformedLineError) as exc_info:
            parser.parse("TCP 1.2.3.4:80 1.2.3.5 ESTABLISHED")
        assert "remote address" in exc_info.value.message

    def test_unknown_port_name(self, parser):
        with pytest.raises(UnknownPortNameError) as exc_info:
            parser.parse("TCP 1.2.3.4:http 1.2.3.5:1 ESTABLISHED")
        assert exc_info.value.token == "http"
        assert exc_info.value.side == "local"
        assert exc_info.value.line_number == 1

    def test_port_name_is_case_sensitive(self, parser):
        with pytest.raises(UnknownPortNameError):
            parser.parse("TCP 1.2.3.4:PPTP 1.2.3.5:1 ESTABLISHED")

    def test_port_out_of_range(self, parser):
        with pytest.raises(MalformedLineError):
            parser.parse("TCP 1.2.3.4:65536 1.2.3.5:1 ESTABLISHED")

    def test_oversized_port_number(self, parser):
        with pytest.raises(MalformedLineError) as exc_info:
            parser.parse("TCP 1.2.3.4:80 1.2.3.5:" + "9" * 5000 + " ESTABLISHED")
        assert exc_info.value.line_number == 1
        assert exc_info.value.message == "remote port out of range"

    def test_leading_zero_port(self, parser):
        record = parser.parse("TCP 1.2.3.4:000080 1.2.3.5:1 ESTABLISHED")[0]
        assert record.local_port == 80

    def test_unrecognized_protocol(self, parser):
        with pytest.raises(UnrecognizedProtocolError) as exc_info:
            parser.parse_connection_line(7, "SCTP 1.2.3.4:80 1.2.3.5:1 ESTABLISHED")
        assert exc_info.value.line_number == 7

    def test_errors_share_base_class(self, parser):
        with pytest.raises(NetstatParseError):
            parser.parse("TCP 1.2.3.4:nope 1.2.3.5:1 ESTABLISHED")

    def test_custom_port_table(self):
        parser = NetstatParser(standard_ports={"http": 80})
        record = parser.parse("TCP 1.2.3.4:http 1.2.3.5:1 ESTABLISHED")[0]
        assert record.local_port == 80


class TestStandardPorts:
    """Test the standard port table."""

    def test_lookup(self):
        from network.constants import STANDARD_PORTS

        assert STANDARD_PORTS["pptp"] == 1723
        assert STANDARD_PORTS["man"] == 9535
        assert STANDARD_PORTS.get("http") is None

    def test_read_only(self):
        from network.constants import STANDARD_PORTS

        with pytest.raises(TypeError):
            STANDARD_PORTS["http"] = 80

    def test_resolve_port(self, parser):
        assert parser.resolve_port("8080") == 8080
        assert parser.resolve_port("msmq") == 1801
        assert parser.resolve_port("MSMQ") is None
