import pytest
from pydantic import ValidationError

from app.core.exceptions import MalformedSettingsError
from app.schemas.settings import (
    BreakTime,
    TimetableSettings,
    WorkingHours,
    format_clock_time,
    parse_clock_time,
)
from app.schemas.timetable import BreakBlock, PeriodBlock
from app.services.slot_layout import build_layout, build_schedule


def make_settings(start, end, duration, periods, breaks=()):
    return TimetableSettings(
        workingHours={"startTime": start, "endTime": end},
        periodDuration=duration,
        numberOfPeriods=periods,
        breakTimes=list(breaks),
    )


def describe(blocks):
    rows = []
    for block in blocks:
        if isinstance(block, PeriodBlock):
            rows.append(("period", block.periodNumber, block.startTime, block.endTime, block.duration))
        else:
            rows.append(("break", block.name, block.startTime, block.endTime, block.duration))
    return rows


@pytest.mark.parametrize(
    ("value", "minutes"),
    [
        ("12:00 AM", 0),
        ("9:00 AM", 540),
        ("09:15 AM", 555),
        ("12:30 PM", 750),
        ("1:05 pm", 785),
        ("11:59 PM", 1439),
    ],
)
def test_parse_clock_time(value, minutes):
    assert parse_clock_time(value) == minutes


@pytest.mark.parametrize("value", ["13:00 PM", "9:00", "9:60 AM", "", "noon", "0:30 AM"])
def test_parse_clock_time_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        parse_clock_time(value)


def test_format_clock_time():
    assert format_clock_time(0) == "12:00 AM"
    assert format_clock_time(540) == "9:00 AM"
    assert format_clock_time(720) == "12:00 PM"
    assert format_clock_time(780) == "1:00 PM"
    with pytest.raises(ValueError):
        format_clock_time(24 * 60)


def test_lunch_break_example_layout():
    settings = make_settings(
        "9:00 AM",
        "1:00 PM",
        60,
        4,
        [{"name": "Lunch", "startTime": "11:00 AM", "endTime": "11:30 AM", "enabled": True}],
    )

    assert describe(build_schedule(settings)) == [
        ("period", 1, "9:00 AM", "10:00 AM", 60),
        ("period", 2, "10:00 AM", "11:00 AM", 60),
        ("break", "Lunch", "11:00 AM", "11:30 AM", 30),
        ("period", 3, "11:30 AM", "12:30 PM", 60),
        ("period", 4, "12:30 PM", "1:00 PM", 30),
    ]


def test_no_breaks_fills_window_with_contiguous_periods():
    settings = make_settings("8:00 AM", "12:00 PM", 40, 10)
    blocks = build_schedule(settings)

    assert all(isinstance(block, PeriodBlock) for block in blocks)
    assert [block.periodNumber for block in blocks] == [1, 2, 3, 4, 5, 6]
    for previous, following in zip(blocks, blocks[1:]):
        assert previous.endTime == following.startTime
    assert blocks[0].startTime == "8:00 AM"
    assert blocks[-1].endTime == "12:00 PM"


def test_requested_period_count_caps_layout():
    settings = make_settings("8:00 AM", "4:00 PM", 60, 3)
    blocks = build_schedule(settings)

    assert [block.periodNumber for block in blocks] == [1, 2, 3]
    assert blocks[-1].endTime == "11:00 AM"


def test_final_period_is_clipped_to_working_hours_end():
    settings = make_settings("8:00 AM", "10:30 AM", 60, 5)
    blocks = build_schedule(settings)

    assert describe(blocks)[-1] == ("period", 3, "10:00 AM", "10:30 AM", 30)


def test_short_lead_in_before_break_is_dropped():
    settings = make_settings(
        "9:00 AM",
        "1:00 PM",
        60,
        4,
        [{"name": "Tea", "startTime": "10:10 AM", "endTime": "10:30 AM"}],
    )

    assert describe(build_schedule(settings))[:3] == [
        ("period", 1, "9:00 AM", "10:00 AM", 60),
        ("break", "Tea", "10:10 AM", "10:30 AM", 20),
        ("period", 2, "10:30 AM", "11:30 AM", 60),
    ]


def test_lead_in_of_twenty_minutes_or_more_becomes_a_period():
    settings = make_settings(
        "9:00 AM",
        "1:00 PM",
        60,
        5,
        [{"name": "Tea", "startTime": "10:20 AM", "endTime": "10:35 AM"}],
    )

    assert describe(build_schedule(settings))[:4] == [
        ("period", 1, "9:00 AM", "10:00 AM", 60),
        ("period", 2, "10:00 AM", "10:20 AM", 20),
        ("break", "Tea", "10:20 AM", "10:35 AM", 15),
        ("period", 3, "10:35 AM", "11:35 AM", 60),
    ]


def test_single_break_adds_one_block_and_at_most_one_lead_in():
    base = make_settings("9:00 AM", "3:00 PM", 50, 6)
    with_break = make_settings(
        "9:00 AM",
        "3:00 PM",
        50,
        6,
        [{"name": "Lunch", "startTime": "11:00 AM", "endTime": "11:40 AM"}],
    )

    plain = build_schedule(base)
    split = build_schedule(with_break)

    assert sum(isinstance(block, BreakBlock) for block in split) == 1
    assert len(split) - len(plain) in {1, 2}
    assert sum(isinstance(block, PeriodBlock) for block in split) <= 6


def test_disabled_breaks_never_appear():
    settings = make_settings(
        "9:00 AM",
        "1:00 PM",
        60,
        4,
        [
            {"name": "Assembly", "startTime": "9:00 AM", "endTime": "9:30 AM", "enabled": False},
            {"name": "Lunch", "startTime": "11:00 AM", "endTime": "11:30 AM", "enabled": False},
        ],
    )
    blocks = build_schedule(settings)

    assert not any(isinstance(block, BreakBlock) for block in blocks)
    assert [block.startTime for block in blocks] == ["9:00 AM", "10:00 AM", "11:00 AM", "12:00 PM"]


def test_breaks_are_processed_in_start_order_and_fire_once():
    settings = make_settings(
        "9:00 AM",
        "3:00 PM",
        60,
        6,
        [
            {"name": "Lunch", "startTime": "12:00 PM", "endTime": "12:30 PM"},
            {"name": "Tea", "startTime": "10:00 AM", "endTime": "10:15 AM"},
        ],
    )
    names = [block.name for block in build_schedule(settings) if isinstance(block, BreakBlock)]

    assert names == ["Tea", "Lunch"]


def test_breaks_sharing_a_start_keep_configured_order():
    settings = TimetableSettings.model_construct(
        workingHours=WorkingHours(startTime="9:00 AM", endTime="1:00 PM"),
        periodDuration=60,
        numberOfPeriods=4,
        breakTimes=[
            BreakTime(name="First", startTime="10:00 AM", endTime="10:10 AM"),
            BreakTime(name="Second", startTime="10:00 AM", endTime="10:20 AM"),
        ],
    )
    names = [block.name for block in build_schedule(settings) if isinstance(block, BreakBlock)]

    assert names == ["First"]


def test_breaks_are_not_clipped_to_working_hours():
    settings = make_settings(
        "9:00 AM",
        "11:30 AM",
        60,
        5,
        [{"name": "Late", "startTime": "11:40 AM", "endTime": "11:50 AM"}],
    )

    assert describe(build_schedule(settings))[-2:] == [
        ("period", 3, "11:00 AM", "11:40 AM", 40),
        ("break", "Late", "11:40 AM", "11:50 AM", 10),
    ]


def test_layout_reports_shortfall():
    settings = make_settings("9:00 AM", "11:00 AM", 60, 4)
    layout = build_layout(settings)

    assert layout.requestedPeriods == 4
    assert layout.emittedPeriods == 2
    assert layout.shortfall == 2
    assert layout.period_numbers == [1, 2]
    assert "2 of 4 periods" in layout.shortfall_message()


def test_layout_without_shortfall_has_no_message():
    layout = build_layout(make_settings("9:00 AM", "1:00 PM", 60, 4))

    assert layout.shortfall == 0
    assert layout.shortfall_message() is None


def test_build_schedule_is_deterministic():
    settings = make_settings(
        "8:30 AM",
        "3:30 PM",
        45,
        8,
        [
            {"name": "Tea", "startTime": "10:00 AM", "endTime": "10:15 AM"},
            {"name": "Lunch", "startTime": "12:30 PM", "endTime": "1:15 PM"},
        ],
    )

    assert build_schedule(settings) == build_schedule(settings)


def test_unparseable_time_fails_the_call():
    settings = TimetableSettings.model_construct(
        workingHours=WorkingHours.model_construct(startTime="25:00", endTime="1:00 PM"),
        periodDuration=60,
        numberOfPeriods=4,
        breakTimes=[],
    )

    with pytest.raises(MalformedSettingsError) as excinfo:
        build_schedule(settings)
    assert excinfo.value.status_code == 422


def test_inverted_working_hours_fail_the_call():
    settings = TimetableSettings.model_construct(
        workingHours=WorkingHours.model_construct(startTime="1:00 PM", endTime="9:00 AM"),
        periodDuration=60,
        numberOfPeriods=4,
        breakTimes=[],
    )

    with pytest.raises(MalformedSettingsError):
        build_schedule(settings)


def test_settings_schema_rejects_invalid_payloads():
    with pytest.raises(ValidationError):
        make_settings("9:00", "1:00 PM", 60, 4)
    with pytest.raises(ValidationError):
        make_settings("1:00 PM", "9:00 AM", 60, 4)
    with pytest.raises(ValidationError):
        make_settings("9:00 AM", "1:00 PM", 0, 4)
    with pytest.raises(ValidationError):
        make_settings(
            "9:00 AM",
            "1:00 PM",
            60,
            4,
            [
                {"name": "Lunch", "startTime": "11:00 AM", "endTime": "11:30 AM"},
                {"name": "lunch", "startTime": "12:00 PM", "endTime": "12:15 PM"},
            ],
        )
