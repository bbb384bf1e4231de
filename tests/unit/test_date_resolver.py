from datetime import date, datetime, timezone

import pytest

from app.models.schemas import DateSource, FileItem
from domains.date_filing.resolvers.date_text import parse_date_text
from domains.date_filing.resolvers.dates import DateResolver, find_eml_date

CREATED = date(2022, 1, 15)


def make_item(path, created=CREATED):
    return FileItem(path=path, extension=path.suffix.lstrip('.').lower(), created=created)


class FakeMsgReader:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.streams = []

    def try_read_sent_date(self, stream):
        self.streams.append(stream)
        if self.error:
            raise self.error
        return self.result


def test_parse_date_text_formats():
    assert parse_date_text("Mon, 3 Jun 2024 10:15:00 +0000").date() == date(2024, 6, 3)
    assert parse_date_text("Monday, June 3, 2024 10:15 AM").date() == date(2024, 6, 3)
    assert parse_date_text("2024-06-03T10:15:00") == datetime(2024, 6, 3, 10, 15)
    assert parse_date_text("not a date at all") is None
    assert parse_date_text("   ") is None


@pytest.mark.parametrize("text", ["10:15", "Mon", "3", "June 2024", "10:15:00 +0000"])
def test_parse_date_text_rejects_incomplete_dates(text):
    assert parse_date_text(text) is None


def test_eml_skips_header_without_a_full_date():
    text = "Date: 10:15\nReceived: a; Thu, 7 Mar 2024 12:00:00 +0000\n"
    assert find_eml_date(text) == ("Received", date(2024, 3, 7))


def test_pdf_uses_creation_date(tmp_path):
    pdf = tmp_path / "scan.pdf"
    pdf.write_bytes(b"%PDF-1.4")

    resolved = DateResolver().resolve(make_item(pdf, date(2023, 11, 2)))

    assert resolved.value == date(2023, 11, 2)
    assert resolved.source == DateSource.CREATION_TIME


def test_eml_date_header(tmp_path):
    eml = tmp_path / "invoice.eml"
    eml.write_text(
        "From: billing@example.com\n"
        "Subject: Invoice\n"
        "Date: Mon, 3 Jun 2024 10:15:00 +0000\n"
        "\n"
        "Body\n",
        encoding="utf-8",
    )

    resolved = DateResolver().resolve(make_item(eml))

    assert resolved.value == date(2024, 6, 3)
    assert resolved.source == DateSource.TEXT_HEADER
    assert resolved.header == "Date"


def test_eml_header_is_case_insensitive_and_anchored():
    text = "X-Original-Date: Tue, 1 Jan 2019 00:00:00 +0000\ndate: Wed, 5 Feb 2020 08:00:00 +0100\n"
    assert find_eml_date(text) == ("Date", date(2020, 2, 5))


def test_eml_date_keeps_header_time_zone():
    text = "Date: Mon, 3 Jun 2024 23:30:00 -0500\n"
    assert find_eml_date(text) == ("Date", date(2024, 6, 3))


def test_eml_falls_back_through_header_order():
    text = (
        "Date: sometime last week\n"
        "Received: from mx.example.com by mail.example.com; Fri, 1 Mar 2024 09:00:00 +0000\n"
        "Delivery-Date: Sat, 2 Mar 2024 09:00:00 +0000\n"
    )
    assert find_eml_date(text) == ("Delivery-Date", date(2024, 3, 2))


def test_eml_sent_header_from_forwarded_outlook_text():
    text = "From: Someone\nSent: Monday, June 3, 2024 10:15 AM\nTo: Me\n"
    assert find_eml_date(text) == ("Sent", date(2024, 6, 3))


def test_eml_received_uses_text_after_last_semicolon():
    text = "Received: from a (a [10.0.0.1]); by b; id 42; Thu, 7 Mar 2024 12:00:00 +0000\n"
    assert find_eml_date(text) == ("Received", date(2024, 3, 7))


def test_eml_received_folded_onto_next_line():
    text = (
        "Received: from mx.example.com by mail.example.com;\r\n"
        "\tThu, 7 Mar 2024 12:00:00 +0000\r\n"
        "Subject: hi\r\n"
    )
    assert find_eml_date(text) == ("Received", date(2024, 3, 7))


def test_malformed_eml_falls_back_to_creation_date(tmp_path):
    eml = tmp_path / "garbage.eml"
    eml.write_bytes(b"\xff\xfe\x00garbage\nDate: ???\nReceived: no semicolon here\n")

    resolved = DateResolver().resolve(make_item(eml))

    assert resolved.value == CREATED
    assert resolved.source == DateSource.CREATION_TIME


def test_unreadable_eml_falls_back_to_creation_date(tmp_path):
    missing = tmp_path / "gone.eml"

    resolved = DateResolver().resolve(make_item(missing))

    assert resolved.value == CREATED


def test_msg_without_reader_logs_notice(tmp_path, log_messages):
    msg = tmp_path / "mail.msg"
    msg.write_bytes(b"\xd0\xcf\x11\xe0")

    resolved = DateResolver(msg_reader=None).resolve(make_item(msg))

    assert resolved.value == CREATED
    assert any("not available" in m for m in log_messages)


def test_msg_reader_sent_date(tmp_path):
    msg = tmp_path / "mail.msg"
    msg.write_bytes(b"\xd0\xcf\x11\xe0")
    reader = FakeMsgReader(result=datetime(2024, 4, 9, 14, 0, tzinfo=timezone.utc))

    resolved = DateResolver(msg_reader=reader).resolve(make_item(msg))

    assert resolved.value == date(2024, 4, 9)
    assert resolved.source == DateSource.CONTAINER_METADATA
    assert reader.streams[0].closed


@pytest.mark.parametrize("reader", [
    FakeMsgReader(result=None),
    FakeMsgReader(error=RuntimeError("corrupt container")),
])
def test_msg_reader_failure_falls_back_and_releases_stream(tmp_path, reader):
    msg = tmp_path / "mail.msg"
    msg.write_bytes(b"\xd0\xcf\x11\xe0")

    resolved = DateResolver(msg_reader=reader).resolve(make_item(msg))

    assert resolved.value == CREATED
    assert resolved.source == DateSource.CREATION_TIME
    assert reader.streams[0].closed
