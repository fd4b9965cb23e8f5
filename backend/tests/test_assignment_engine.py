import pytest

from app.core.exceptions import MalformedAvailabilityError
from app.schemas.faculty import AvailabilityEntry, FacultyRosterEntry
from app.schemas.settings import WEEK_DAYS
from app.schemas.timetable import BreakBlock, PeriodBlock
from app.services.assignment import GenerationSession, generate_timetable


def faculty(faculty_id, name, subject, department, availability):
    return FacultyRosterEntry(
        id=faculty_id,
        name=name,
        subjectCode=subject.upper(),
        subjectName=subject,
        departmentId=department,
        availability=[{"day": day, "periods": periods} for day, periods in availability.items()],
    )


@pytest.fixture
def schedule():
    return [
        PeriodBlock(periodNumber=1, startTime="9:00 AM", endTime="10:00 AM", duration=60),
        PeriodBlock(periodNumber=2, startTime="10:00 AM", endTime="11:00 AM", duration=60),
        BreakBlock(name="Lunch", startTime="11:00 AM", endTime="11:30 AM", duration=30),
        PeriodBlock(periodNumber=3, startTime="11:30 AM", endTime="12:30 PM", duration=60),
    ]


def test_first_available_faculty_in_roster_order_wins(schedule):
    roster = [
        faculty("a", "Prof A", "Physics", "sci", {"Monday": [1, 2]}),
        faculty("b", "Prof B", "Chemistry", "sci", {"Monday": [1]}),
    ]

    result = generate_timetable("sci", roster, schedule)

    assert result.grid["Monday"][1].facultyId == "a"
    assert result.grid["Monday"][2].facultyId == "a"
    assert result.grid["Monday"][3] is None


def test_roster_order_decides_ties(schedule):
    roster = [
        faculty("b", "Prof B", "Chemistry", "sci", {"Monday": [1]}),
        faculty("a", "Prof A", "Physics", "sci", {"Monday": [1, 2]}),
    ]

    result = generate_timetable("sci", roster, schedule)

    assert result.grid["Monday"][1].model_dump() == {
        "subjectName": "Chemistry",
        "facultyName": "Prof B",
        "facultyId": "b",
    }
    assert result.grid["Monday"][2].facultyId == "a"


def test_grid_covers_every_weekday_and_emitted_period(schedule):
    roster = [faculty("a", "Prof A", "Physics", "sci", {"Tuesday": [3]})]

    result = generate_timetable("sci", roster, schedule)

    assert list(result.grid) == list(WEEK_DAYS)
    for cells in result.grid.values():
        assert list(cells) == [1, 2, 3]
    assert result.period_numbers == [1, 2, 3]
    assert result.filled_cells == 1
    assert result.empty_cells == len(WEEK_DAYS) * 3 - 1


def test_breaks_are_never_scheduled(schedule):
    roster = [faculty("a", "Prof A", "Physics", "sci", {day: [1, 2, 3] for day in WEEK_DAYS})]

    result = generate_timetable("sci", roster, schedule)

    assert result.empty_cells == 0
    assert result.filled_cells == len(WEEK_DAYS) * 3


def test_department_without_faculty_is_not_found(schedule):
    roster = [faculty("a", "Prof A", "Physics", "sci", {"Monday": [1]})]

    assert generate_timetable("arts", roster, schedule) is None
    assert generate_timetable("arts", [], schedule) is None


def test_other_departments_are_ignored(schedule):
    roster = [
        faculty("h", "Prof H", "History", "arts", {"Monday": [1]}),
        faculty("a", "Prof A", "Physics", "sci", {"Monday": [2]}),
    ]

    result = generate_timetable("sci", roster, schedule)

    assert result.grid["Monday"][1] is None
    assert result.grid["Monday"][2].facultyId == "a"


def test_shared_session_prevents_double_booking_across_departments(schedule):
    shared = faculty("x", "Prof X", "Maths", "sci", {"Monday": [1, 2]})
    roster = [
        shared,
        faculty("y", "Prof Y", "Statistics", "sci", {"Monday": [1]}),
    ]
    session = GenerationSession()
    session.occupy("x", "Monday", 1)

    result = generate_timetable("sci", roster, schedule, session=session)

    assert result.grid["Monday"][1].facultyId == "y"
    assert result.grid["Monday"][2].facultyId == "x"
    assert session.is_occupied("x", "Monday", 2)
    assert session.is_occupied("y", "Monday", 1)


def test_no_faculty_shares_a_cell_across_departments_in_one_run(schedule):
    everywhere = {day: [1, 2, 3] for day in WEEK_DAYS}
    roster = [
        faculty("a", "Prof A", "Physics", "sci", everywhere),
        faculty("b", "Prof B", "History", "arts", everywhere),
        faculty("c", "Prof C", "Chemistry", "sci", {"Monday": [1]}),
    ]
    session = GenerationSession()

    results = [generate_timetable(department, roster, schedule, session=session) for department in ("sci", "arts")]

    seen = set()
    for result in results:
        for day, cells in result.grid.items():
            for period, slot in cells.items():
                if slot is None:
                    continue
                key = (slot.facultyId, day, period)
                assert key not in seen
                seen.add(key)


def test_reserved_payload_blocks_cells(schedule):
    session = GenerationSession()
    reserved = session.reserve_payload(
        {
            "Monday": {
                "1": {"subjectName": "Physics", "facultyName": "Prof A", "facultyId": "a"},
                "2": None,
            }
        }
    )
    roster = [faculty("a", "Prof A", "Physics", "sci", {"Monday": [1, 2]})]

    result = generate_timetable("sci", roster, schedule, session=session)

    assert reserved == 1
    assert result.grid["Monday"][1] is None
    assert result.grid["Monday"][2].facultyId == "a"


def test_generation_is_deterministic(schedule):
    roster = [
        faculty("a", "Prof A", "Physics", "sci", {"Monday": [1, 2], "Friday": [3]}),
        faculty("b", "Prof B", "Chemistry", "sci", {"Monday": [1, 3], "Wednesday": [2]}),
    ]

    first = generate_timetable("sci", roster, schedule)
    second = generate_timetable("sci", roster, schedule)

    assert first.to_payload() == second.to_payload()


def test_payload_uses_string_period_keys(schedule):
    roster = [faculty("a", "Prof A", "Physics", "sci", {"Monday": [1]})]

    payload = generate_timetable("sci", roster, schedule).to_payload()

    assert payload["Monday"]["1"] == {"subjectName": "Physics", "facultyName": "Prof A", "facultyId": "a"}
    assert payload["Monday"]["2"] is None
    assert set(payload) == set(WEEK_DAYS)


def test_out_of_range_period_fails_the_call(schedule):
    roster = [faculty("a", "Prof A", "Physics", "sci", {"Monday": [1, 9]})]

    with pytest.raises(MalformedAvailabilityError) as excinfo:
        generate_timetable("sci", roster, schedule, period_limit=4)
    assert excinfo.value.details["period"] == 9


def test_availability_beyond_emitted_periods_within_limit_is_ignored(schedule):
    roster = [faculty("a", "Prof A", "Physics", "sci", {"Monday": [4]})]

    result = generate_timetable("sci", roster, schedule, period_limit=4)

    assert result.filled_cells == 0


def test_weekend_availability_is_malformed(schedule):
    member = FacultyRosterEntry.model_construct(
        id="a",
        name="Prof A",
        subjectCode="PHY",
        subjectName="Physics",
        departmentId="sci",
        availability=[AvailabilityEntry.model_construct(day="Saturday", periods=[1])],
    )

    with pytest.raises(MalformedAvailabilityError):
        generate_timetable("sci", [member], schedule)
