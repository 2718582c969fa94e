from datetime import time

from src.timekeeping.timekeeping.attendance.calculator.standard_calculator import StandardWorkHoursCalculator
from src.timekeeping.timekeeping.attendance.policy import AttendancePolicy


def test_standard_calculator_full_day():
    calc = StandardWorkHoursCalculator()
    result = calc.compute(time(9, 0), time(17, 30))

    assert result.work_hours == 8.5
    assert result.overtime_hours is None


def test_standard_calculator_subtracts_break():
    calc = StandardWorkHoursCalculator(AttendancePolicy(break_minutes=60))
    assert calc.worked_minutes(time(8, 0), time(17, 0)) == 8 * 60


def test_standard_calculator_never_negative_after_break():
    calc = StandardWorkHoursCalculator(AttendancePolicy(break_minutes=60))
    assert calc.compute(time(9, 0), time(9, 30)).work_hours == 0.0


def test_standard_calculator_rounds_to_two_decimals():
    calc = StandardWorkHoursCalculator()
    assert calc.compute(time(9, 0), time(9, 20)).work_hours == 0.33


def test_standard_calculator_open_day_has_no_hours():
    result = StandardWorkHoursCalculator().compute(time(9, 0), None)
    assert result.work_hours is None
    assert result.overtime_hours is None


def test_standard_calculator_overtime_when_enabled():
    calc = StandardWorkHoursCalculator(AttendancePolicy(overtime_enabled=True, standard_work_hours=8))

    assert calc.compute(time(9, 0), time(19, 0)).overtime_hours == 2.0
    assert calc.compute(time(9, 0), time(12, 0)).overtime_hours == 0.0
