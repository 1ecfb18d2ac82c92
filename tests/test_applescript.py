from __future__ import annotations

import pytest

from macos_calendar_mcp.core import ValidationError
from macos_calendar_mcp.core.applescript import (
    FIELD_SEPARATOR,
    RECORD_SEPARATOR,
    date_assignment,
    escape,
    parse_clock,
    parse_count,
    parse_date,
    parse_datetime,
    parse_events,
    parse_names,
    quote,
)
from macos_calendar_mcp.domain import DateParts


class TestEscape:
    def test_plain_text_is_unchanged(self):
        assert escape("Team sync") == "Team sync"

    def test_quotes_and_backslashes(self):
        assert escape('say "hi" \\ bye') == 'say \\"hi\\" \\\\ bye'

    def test_line_breaks_and_tabs(self):
        assert escape("a\r\nb\nc\rd\te") == "a\\nb\\nc\\nd\\te"

    def test_other_control_characters_become_spaces(self):
        assert escape("a\x00b\x07c\x1fd\x7f") == "a b c d "

    def test_injection_attempt_stays_inside_the_literal(self):
        hostile = 'x" & (do shell script "rm -rf ~") & "'
        quoted = quote(hostile)
        assert quoted.startswith('"') and quoted.endswith('"')
        inner = quoted[1:-1]
        # Every quote inside the literal is escaped.
        assert inner.count('"') == inner.count('\\"')


class TestParseDatetime:
    def test_valid_value(self):
        assert parse_datetime("2025-01-15 14:30") == DateParts(2025, 1, 15, 14, 30)

    def test_midnight_is_allowed(self):
        assert parse_datetime("2025-03-01 00:00") == DateParts(2025, 3, 1, 0, 0)

    def test_single_digit_components(self):
        assert parse_datetime("2025-1-5 9:05") == DateParts(2025, 1, 5, 9, 5)

    @pytest.mark.parametrize(
        "value",
        [
            "2025-01-15",
            "2025-01-15T14:30",
            "2025-01-15  14:30",
            "2025/01/15 14:30",
            "2025-01 14:30",
            "2025-01-15-01 14:30",
            "2025-01-15 14",
            "2025-01-15 14:30:00",
            "2025-0a-15 14:30",
            "2025-01-15 -1:30",
            "2025-00-15 14:30",
            "0000-01-15 14:30",
            "2025-01-00 14:30",
            "",
        ],
    )
    def test_invalid_values_raise_with_original_text(self, value):
        with pytest.raises(ValidationError) as excinfo:
            parse_datetime(value)
        assert f"'{value}'" in excinfo.value.message

    def test_non_string_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_datetime(20250115)  # type: ignore[arg-type]


class TestParseDateAndClock:
    def test_parse_date(self):
        assert parse_date("2025-02-03") == DateParts(2025, 2, 3)

    @pytest.mark.parametrize("value", ["2025-02-03 10:00", "2025-02", "03-02-2025x", "2025-02-00"])
    def test_parse_date_rejects(self, value):
        with pytest.raises(ValidationError) as excinfo:
            parse_date(value)
        assert value in excinfo.value.message

    def test_parse_clock(self):
        assert parse_clock("07:45") == (7, 45)

    @pytest.mark.parametrize("value", ["7", "07:45:00", "ab:cd", "", "07-45"])
    def test_parse_clock_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_clock(value)


def test_date_assignment_resets_day_before_month():
    script = date_assignment(DateParts(2025, 2, 28, 9, 0), "startTime")
    lines = script.strip().splitlines()
    assert lines[0] == "set startTime to current date"
    assert lines[1] == "set day of startTime to 1"
    assert lines.index("set month of startTime to 2") < lines.index("set day of startTime to 28")
    assert lines[-1] == "set time of startTime to (9 * hours + 0 * minutes)"


class TestOutputParsing:
    def test_parse_names(self):
        stdout = RECORD_SEPARATOR.join(["Personal", "Work", "Family"]) + "\n"
        assert parse_names(stdout) == ["Personal", "Work", "Family"]

    def test_parse_names_empty(self):
        assert parse_names("\n") == []

    def test_parse_events(self):
        record = FIELD_SEPARATOR.join(["Standup", "2025-01-15 09:00", "2025-01-15 09:15", "", "Room 1"])
        other = FIELD_SEPARATOR.join(["Review", "2025-01-15 14:00", "2025-01-15 15:00", "Q1", ""])
        events = parse_events(record + RECORD_SEPARATOR + other + "\n", calendar="Work")
        assert [event.title for event in events] == ["Standup", "Review"]
        assert events[0].location == "Room 1"
        assert events[1].description == "Q1"
        assert all(event.calendar == "Work" for event in events)

    def test_parse_events_pads_short_records(self):
        events = parse_events(FIELD_SEPARATOR.join(["Lunch", "2025-01-15 12:00", "2025-01-15 13:00"]))
        assert events[0].description == "" and events[0].location == ""

    def test_parse_events_empty_outputs(self):
        assert parse_events("") == []
        assert parse_events('""\n') == []

    def test_parse_count(self):
        assert parse_count("3\n") == 3
        assert parse_count("") == 0
        assert parse_count("many") == 0
