from datetime import datetime

from src.teacher_attendance.teacher_attendance.attendance.factory import AttendanceStrategyFactory
from src.teacher_attendance.teacher_attendance.attendance.strategies.early_strategy import EarlyLeaveStrategy
from src.teacher_attendance.teacher_attendance.attendance.strategies.late_strategy import LateStrategy
from src.teacher_attendance.teacher_attendance.attendance.strategies.normal_strategy import NormalStrategy
from src.teacher_attendance.teacher_attendance.core.enums import AttendanceStatus

EXPECTED_IN = datetime(2025, 1, 6, 7, 0)
EXPECTED_OUT = datetime(2025, 1, 6, 15, 0)


def test_factory_checkin_on_time_within_grace():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=datetime(2025, 1, 6, 7, 10), expected=EXPECTED_IN, grace_minutes=15)

    assert isinstance(strategy, NormalStrategy)
    assert not isinstance(strategy, LateStrategy)


def test_factory_checkin_exactly_at_grace_is_on_time():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=datetime(2025, 1, 6, 7, 15, 59), expected=EXPECTED_IN, grace_minutes=15)

    decision = strategy.decide_checkin(now=datetime(2025, 1, 6, 7, 15, 59), expected=EXPECTED_IN)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.late_minutes == 0


def test_factory_checkin_late_after_grace():
    now = datetime(2025, 1, 6, 7, 20)
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=now, expected=EXPECTED_IN, grace_minutes=15)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(now=now, expected=EXPECTED_IN)
    assert decision.status == AttendanceStatus.LATE
    assert decision.is_late is True
    assert decision.late_minutes == 20


def test_factory_checkin_early_arrival_is_present():
    now = datetime(2025, 1, 6, 6, 30)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, expected=EXPECTED_IN, grace_minutes=15)

    decision = strategy.decide_checkin(now=now, expected=EXPECTED_IN)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.late_minutes == 0


def test_factory_checkout_beyond_threshold_is_early():
    now = datetime(2025, 1, 6, 14, 40)
    strategy = AttendanceStrategyFactory().for_checkout(now=now, expected=EXPECTED_OUT, threshold_minutes=10)

    assert isinstance(strategy, EarlyLeaveStrategy)
    decision = strategy.decide_checkout(now=now, expected=EXPECTED_OUT)
    assert decision.is_early_departure is True
    assert decision.early_minutes == 20


def test_factory_checkout_within_threshold_is_not_early():
    now = datetime(2025, 1, 6, 14, 55)
    strategy = AttendanceStrategyFactory().for_checkout(now=now, expected=EXPECTED_OUT, threshold_minutes=10)

    decision = strategy.decide_checkout(now=now, expected=EXPECTED_OUT)
    assert decision.is_early_departure is False
    assert decision.early_minutes == 0


def test_factory_checkout_after_expected_is_not_early():
    now = datetime(2025, 1, 6, 16, 30)
    strategy = AttendanceStrategyFactory().for_checkout(now=now, expected=EXPECTED_OUT, threshold_minutes=10)

    assert strategy.decide_checkout(now=now, expected=EXPECTED_OUT).early_minutes == 0
