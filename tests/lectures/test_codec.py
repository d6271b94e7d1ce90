from datetime import date, time

import pytest

from attendmate.core.exceptions import ValidationError
from attendmate.lectures.codec import lecture_id, schedule_key


def test_lecture_id_format():
    assert lecture_id(date(2024, 3, 1), time(9, 0), time(10, 0)) == "2024-03-01_0900_1000"


def test_lecture_id_is_stable_across_input_types():
    a = lecture_id("2024-03-01", "09:00", "10:00")
    b = lecture_id(date(2024, 3, 1), time(9, 0, 45), time(10, 0))
    assert a == b == lecture_id("2024-03-01", "09:00", "10:00")


def test_lecture_id_rejects_bad_date():
    with pytest.raises(ValidationError):
        lecture_id("01/03/2024", "09:00", "10:00")


def test_schedule_key_slot_and_duration():
    # 2024-03-01 is a Friday
    assert schedule_key(date(2024, 3, 1), time(9, 0), time(10, 0)) == "FRIDAY_0_1"
    assert schedule_key(date(2024, 3, 4), time(11, 0), time(13, 0)) == "MONDAY_2_2"


def test_schedule_key_none_before_first_slot_or_without_whole_hour():
    assert schedule_key(date(2024, 3, 1), time(8, 0), time(9, 0)) is None
    assert schedule_key(date(2024, 3, 1), time(9, 0), time(9, 45)) is None
