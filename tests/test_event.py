from datetime import date, datetime

import pytz

from ezcal.event import CalendarEvent
from ezcal.rrule import RRule
from ezcal.timezone_utils import INVALID_INSTANT


UTC = pytz.UTC

EVENT_TEXT = """BEGIN:VEVENT
UID:event-1
DTSTAMP:2024-01-01T08:00:00.000Z
CREATED:2024-01-01T08:00:00.000Z
LAST-MODIFIED:2024-01-02T09:30:00.000Z
DTSTART:2024-05-01T00:00:00.000Z
DTEND:2024-05-03T00:00:00.000Z
RRULE:FREQ:yearly;
SUMMARY:Conference
DESCRIPTION:Annual meeting
CATEGORIES:Work, Personal ,Urgent
CLASS:PUBLIC
TRANSP:OPAQUE
ORGANIZER:mailto:boss@example.com
GEO:52.37;4.89
STATUS:CONFIRMED
LOCATION:Amsterdam
SEQUENCE:2
URL:https://example.com/conf
X-EZOFFICE-ICON:https://example.com/icon.png
END:VEVENT
"""


def full_event() -> CalendarEvent:
    return CalendarEvent(
        uid="event-1",
        timestamp=datetime(2024, 1, 1, 8, tzinfo=UTC),
        created=datetime(2024, 1, 1, 8, tzinfo=UTC),
        last_modified=datetime(2024, 1, 2, 9, 30, tzinfo=UTC),
        start_time=datetime(2024, 5, 1, tzinfo=UTC),
        end_time=datetime(2024, 5, 3, tzinfo=UTC),
        rrule=RRule(freq="yearly"),
        summary="Conference",
        description="Annual meeting",
        categories=["Work", "Personal", "Urgent"],
        cls="PUBLIC",
        transp="OPAQUE",
        organizer="mailto:boss@example.com",
        geo="52.37;4.89",
        status="CONFIRMED",
        location="Amsterdam",
        sequence="2",
        url="https://example.com/conf",
        ezoffice_icon="https://example.com/icon.png",
    )


# ==================== Construction ====================

def test_defaults_resolved_once():
    event = CalendarEvent()
    assert event.timestamp == event.created == event.last_modified
    assert event.start_time == event.end_time == event.timestamp
    assert event.timestamp.tzinfo is not None
    assert event.categories == []
    assert event.rrule is None
    assert event.summary is None
    assert event.uid


def test_generated_uids_are_unique():
    assert CalendarEvent().uid != CalendarEvent().uid


def test_uid_factory_is_used(fixed_uid):
    assert CalendarEvent(uid_factory=fixed_uid).uid == "generated-uid"
    assert CalendarEvent(uid="given", uid_factory=fixed_uid).uid == "given"


def test_naive_datetime_and_date_are_local():
    event = CalendarEvent(start_time=datetime(2024, 5, 1, 12), end_time=date(2024, 5, 2))
    assert event.start_time == datetime(2024, 5, 1, 12, tzinfo=UTC)
    assert event.end_time == datetime(2024, 5, 2, tzinfo=UTC)


def test_rrule_given_as_text():
    event = CalendarEvent(rrule="FREQ:monthly;BYMONTHDAY:-1;")
    assert event.rrule == RRule(freq="monthly", bymonthday="-1")
    assert event.is_recurring


def test_inverted_span_is_accepted():
    event = CalendarEvent(
        start_time=datetime(2024, 5, 3, tzinfo=UTC),
        end_time=datetime(2024, 5, 1, tzinfo=UTC),
    )
    assert event.start_time > event.end_time


# ==================== Decode ====================

def test_decode_all_fields():
    assert CalendarEvent.from_ical(EVENT_TEXT) == full_event()


def test_decode_uses_full_prefix_length():
    event = CalendarEvent.from_ical(
        "LAST-MODIFIED:2024-01-02T09:30:00Z\nORGANIZER:mailto:a@example.com\n"
    )
    assert event.last_modified == datetime(2024, 1, 2, 9, 30, tzinfo=UTC)
    assert event.organizer == "mailto:a@example.com"


def test_decode_distinguishes_dtstart_and_dtstamp():
    event = CalendarEvent.from_ical("DTSTART:20240501T100000Z\nDTSTAMP:20240101T000000Z\n")
    assert event.start_time == datetime(2024, 5, 1, 10, tzinfo=UTC)
    assert event.timestamp == datetime(2024, 1, 1, tzinfo=UTC)


def test_decode_last_occurrence_wins():
    event = CalendarEvent.from_ical("SUMMARY:first\nLOCATION:here\nSUMMARY:second\n")
    assert event.summary == "second"
    assert event.location == "here"


def test_decode_order_independent():
    lines = EVENT_TEXT.strip().split("\n")
    shuffled = "\n".join([lines[0]] + list(reversed(lines[1:-1])) + [lines[-1]])
    assert CalendarEvent.from_ical(shuffled) == CalendarEvent.from_ical(EVENT_TEXT)


def test_decode_categories_trimmed():
    event = CalendarEvent.from_ical("CATEGORIES:Work, Personal ,Urgent\n")
    assert event.categories == ["Work", "Personal", "Urgent"]


def test_decode_categories_keep_empty_segments():
    event = CalendarEvent.from_ical("CATEGORIES:a,,b\n")
    assert event.categories == ["a", "", "b"]


def test_decode_ignores_unknown_lines():
    noisy = EVENT_TEXT.replace(
        "SUMMARY:Conference\n",
        "X-FOO:bar\n;garbage\n\n continuation line\n\tmore\n# comment\n:odd\nSUMMARY:Conference\n",
    )
    event = CalendarEvent.from_ical(noisy)
    assert event == full_event()
    assert event.warnings == []


def test_decode_crlf():
    assert CalendarEvent.from_ical(EVENT_TEXT.replace("\n", "\r\n")) == full_event()


def test_decode_without_uid_uses_factory(fixed_uid):
    event = CalendarEvent.from_ical("SUMMARY:x\n", uid_factory=fixed_uid)
    assert event.uid == "generated-uid"


def test_decode_empty_text():
    event = CalendarEvent.from_ical("")
    assert event.summary is None
    assert event.categories == []


def test_decode_invalid_date_is_sentinel():
    event = CalendarEvent.from_ical("UID:x\nDTSTART:garbage\n")
    assert event.start_time is INVALID_INSTANT
    assert len(event.warnings) == 1
    assert event.warnings[0].line_number == 2
    assert "DTSTART" in event.warnings[0].message


def test_decode_rrule_line():
    event = CalendarEvent.from_ical("RRULE:FREQ:monthly;BYMONTHDAY:-2;\n")
    assert event.rrule == RRule(freq="monthly", bymonthday="-2")


def test_decode_doubled_rrule_marker():
    event = CalendarEvent.from_ical("RRULE:RRULE:FREQ:yearly;\n")
    assert event.rrule == RRule(freq="yearly")


# ==================== Encode ====================

def test_encode_field_order():
    assert full_event().to_ical() == EVENT_TEXT.replace(
        "CATEGORIES:Work, Personal ,Urgent", "CATEGORIES:Work,Personal,Urgent"
    )


def test_encode_omits_unset_fields():
    event = CalendarEvent(
        uid="u",
        timestamp=datetime(2024, 1, 1, tzinfo=UTC),
        created=datetime(2024, 1, 1, tzinfo=UTC),
        last_modified=datetime(2024, 1, 1, tzinfo=UTC),
        start_time=datetime(2024, 1, 1, tzinfo=UTC),
        end_time=datetime(2024, 1, 1, tzinfo=UTC),
        categories=[""],
    )
    assert event.to_ical() == (
        "BEGIN:VEVENT\n"
        "UID:u\n"
        "DTSTAMP:2024-01-01T00:00:00.000Z\n"
        "CREATED:2024-01-01T00:00:00.000Z\n"
        "LAST-MODIFIED:2024-01-01T00:00:00.000Z\n"
        "DTSTART:2024-01-01T00:00:00.000Z\n"
        "DTEND:2024-01-01T00:00:00.000Z\n"
        "END:VEVENT\n"
    )


def test_encode_converts_to_utc():
    amsterdam = pytz.timezone("Europe/Amsterdam")
    event = CalendarEvent(start_time=amsterdam.localize(datetime(2024, 5, 1, 10, 0, 0, 250000)))
    assert "DTSTART:2024-05-01T08:00:00.250Z\n" in event.to_ical()


def test_encode_invalid_date():
    event = CalendarEvent.from_ical("UID:x\nDTEND:garbage\n")
    text = event.to_ical()
    assert "DTEND:Invalid Date\n" in text
    assert CalendarEvent.from_ical(text).end_time is INVALID_INSTANT


# ==================== Round trips ====================

def test_encode_then_decode_reproduces_fields():
    event = full_event()
    assert CalendarEvent.from_ical(event.to_ical()) == event


def test_encode_then_decode_sparse_event():
    event = CalendarEvent(
        uid="sparse",
        timestamp=datetime(2023, 6, 1, tzinfo=UTC),
        created=datetime(2023, 6, 1, tzinfo=UTC),
        last_modified=datetime(2023, 6, 1, tzinfo=UTC),
        start_time=datetime(2023, 6, 2, 14, tzinfo=UTC),
        end_time=datetime(2023, 6, 2, 15, tzinfo=UTC),
        summary="Dentist",
        categories=["Health"],
    )
    assert CalendarEvent.from_ical(event.to_ical()) == event


def test_decode_is_idempotent():
    once = CalendarEvent.from_ical(EVENT_TEXT)
    twice = CalendarEvent.from_ical(once.to_ical())
    assert twice == once
    assert twice.to_ical() == once.to_ical()


def test_sub_millisecond_instants_survive_round_trip():
    decoded = CalendarEvent.from_ical("UID:x\nDTSTART:2024-05-01T00:00:00.123456Z\n")
    assert decoded.start_time == datetime(2024, 5, 1, 0, 0, 0, 123000, tzinfo=UTC)
    assert CalendarEvent.from_ical(decoded.to_ical()) == decoded

    constructed = CalendarEvent(start_time=datetime(2024, 5, 1, 0, 0, 0, 500, tzinfo=UTC))
    assert CalendarEvent.from_ical(constructed.to_ical()) == constructed


def test_default_instants_survive_round_trip():
    event = CalendarEvent()
    assert CalendarEvent.from_ical(event.to_ical()) == event


def test_early_year_survives_round_trip():
    event = CalendarEvent(start_time=datetime(5, 3, 1, tzinfo=UTC))
    assert "DTSTART:0005-03-01T00:00:00.000Z\n" in event.to_ical()
    assert CalendarEvent.from_ical(event.to_ical()).start_time == datetime(5, 3, 1, tzinfo=UTC)


def test_decode_date_past_supported_range_is_sentinel():
    event = CalendarEvent.from_ical("UID:x\nDTSTART:9999-12-31T23:59:59-05:00\nRRULE:FREQ:yearly;\n")
    assert event.start_time is INVALID_INSTANT
    assert "DTSTART" in event.warnings[0].message
    assert "DTSTART:Invalid Date\n" in event.to_ical()
    assert not event.occurs_on(date(2024, 1, 1))


def test_construct_with_date_past_supported_range():
    event = CalendarEvent(end_time=datetime(9999, 12, 31, 23, 59, 59, tzinfo=pytz.FixedOffset(-300)))
    assert event.end_time is INVALID_INSTANT
    assert "DTEND:Invalid Date\n" in event.to_ical()
