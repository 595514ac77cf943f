from datetime import date, datetime

from src.worktime.worktime.attendance.factory import AttendanceStrategyFactory
from src.worktime.worktime.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.worktime.worktime.attendance.strategies.late_strategy import LateStrategy
from src.worktime.worktime.attendance.strategies.normal_strategy import NormalStrategy
from src.worktime.worktime.core.enums import AttendanceStatus
from src.worktime.worktime.settings.model import AttendanceSettings


def test_factory_punch_in_on_time_within_threshold():
    settings = AttendanceSettings(work_start_time="08:00", late_threshold=5)
    today = date(2025, 1, 6)
    now = datetime(2025, 1, 6, 8, 4, 59)

    factory = AttendanceStrategyFactory()
    strategy = factory.for_punch_in(now=now, today=today, settings=settings)

    assert isinstance(strategy, NormalStrategy)


def test_factory_punch_in_late_after_threshold():
    settings = AttendanceSettings(work_start_time="08:00", late_threshold=5)
    today = date(2025, 1, 6)
    now = datetime(2025, 1, 6, 8, 6, 0)

    factory = AttendanceStrategyFactory()
    strategy = factory.for_punch_in(now=now, today=today, settings=settings)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_punch_in(now=now, today=today, settings=settings)
    assert decision.status == AttendanceStatus.LATE
    assert decision.late_minutes == 6


def test_factory_punch_out_below_half_of_standard_hours():
    # 09:00-17:00 minus 60 min break = 7h standard, half day below 3.5h
    settings = AttendanceSettings()
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_punch_out(worked_hours=3.4, settings=settings), HalfDayStrategy)
    assert isinstance(factory.for_punch_out(worked_hours=3.5, settings=settings), NormalStrategy)


def test_punch_out_keeps_late_status_on_a_full_day():
    settings = AttendanceSettings()
    strategy = AttendanceStrategyFactory().for_punch_out(worked_hours=7.5, settings=settings)

    decision = strategy.decide_punch_out(worked_hours=7.5, settings=settings, current=AttendanceStatus.LATE)

    assert decision.status == AttendanceStatus.LATE


def test_half_day_fraction_is_configurable():
    settings = AttendanceSettings(half_day_fraction=0.75)
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_punch_out(worked_hours=5.0, settings=settings), HalfDayStrategy)
