from nats_sub.core.render import (
    header_lines, message_output, quote, raw_output, summary_line,
)
from nats_sub.core.types import DeliveryMetadata


INFO = DeliveryMetadata(stream="ORDERS", consumer="worker", delivered=3, consumer_seq=7, stream_seq=42)


def test_summary_plain_message():
    assert summary_line(1, "orders.new", None, None, False) == '[#1] Received on "orders.new"'


def test_summary_plain_message_with_reply():
    line = summary_line(2, "orders.new", "_INBOX.abc", None, False)
    assert line == '[#2] Received on "orders.new" with reply "_INBOX.abc"'


def test_summary_jetstream_message_fixed_field_order():
    line = summary_line(5, "orders.new", "$JS.ACK.whatever", INFO, True)
    assert line == (
        "[#5] Received JetStream message: consumer: ORDERS > worker / subject: orders.new"
        " / delivered: 3 / consumer seq: 7 / stream seq: 42 / ack: true"
    )
    assert summary_line(5, "orders.new", "x", INFO, False).endswith("/ ack: false")


def test_quote_escapes_like_a_go_string():
    assert quote('a"b') == '"a\\"b"'


def test_header_lines_keep_declared_order():
    headers = {"A": ["1", "2"], "B": ["x"]}
    assert header_lines(headers) == ["A: 1", "A: 2", "B: x"]


def test_header_lines_accept_single_string_values():
    assert header_lines({"Nats-Msg-Id": "abc"}) == ["Nats-Msg-Id: abc"]
    assert header_lines(None) == []
    assert header_lines({}) == []


def test_message_output_headers_then_blank_then_payload():
    out = message_output(1, "s", None, {"A": ["1", "2"], "B": ["x"]}, b"body", None, False)
    assert out == '[#1] Received on "s"\nA: 1\nA: 2\nB: x\n\nbody\n\n'


def test_message_output_payload_with_trailing_newline():
    out = message_output(1, "s", None, None, b"body\n", None, False)
    assert out == '[#1] Received on "s"\nbody\n\n'


def test_raw_output_adds_newline_only_when_missing():
    assert raw_output(b"payload") == "payload\n"
    assert raw_output(b"payload\n") == "payload\n"
    assert raw_output(b"") == "\n"


def test_non_utf8_payload_does_not_raise():
    assert raw_output(b"\xff\xfe").endswith("\n")
