from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds
from ..core.constants import MAX_REPORT_YEAR, MIN_REPORT_YEAR
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .model import AttendanceStats, DailyDetail, MonthlyReport, MonthlySummary


def percent(numerator: int, denominator: int) -> int:
    """round(numerator / denominator * 100), halves rounded up; 0 for an empty denominator."""
    if denominator <= 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)


def summarize(records: Iterable[AttendanceRecord]) -> AttendanceStats:
    counts: Counter[AttendanceStatus] = Counter(r.status for r in records)
    total = sum(counts.values())
    present = counts[AttendanceStatus.PRESENT]
    late = counts[AttendanceStatus.LATE]

    return AttendanceStats(
        total=total,
        present=present,
        late=late,
        absent=counts[AttendanceStatus.ABSENT],
        sick=counts[AttendanceStatus.SICK],
        leave=counts[AttendanceStatus.LEAVE],
        excused=counts[AttendanceStatus.EXCUSED],
        attendance_rate=percent(present + late, total),
        punctuality_rate=percent(present, present + late),
    )


def _daily_detail(r: AttendanceRecord) -> DailyDetail:
    return DailyDetail(
        date=r.work_date,
        status=r.status,
        check_in_time=r.check_in_time,
        check_out_time=r.check_out_time,
        is_late=r.is_late,
        late_minutes=r.late_minutes,
        is_early_departure=r.is_early_departure,
        early_minutes=r.early_minutes,
        notes=r.notes,
    )


class AttendanceReportService:
    """Folds attendance records into dashboard stats and monthly reports.

    Stats and monthly summaries share `summarize`, so the same set of records always
    yields the same counts and rates through either entry point.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def get_stats(
        self,
        *,
        teacher_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AttendanceStats:
        if date_from and date_to and date_to < date_from:
            raise ValidationError("date_to must be >= date_from")

        records = self._attendance.list_range(teacher_id=teacher_id, start_date=date_from, end_date=date_to)
        return summarize(records)

    def monthly_report(self, *, teacher_id: int, month: int, year: int) -> MonthlyReport:
        month = int(month)
        year = int(year)
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        if not MIN_REPORT_YEAR <= year <= MAX_REPORT_YEAR:
            raise ValidationError(f"year must be between {MIN_REPORT_YEAR} and {MAX_REPORT_YEAR}")

        start, end = month_bounds(year, month)
        records = sorted(
            self._attendance.list_range(teacher_id=int(teacher_id), start_date=start, end_date=end),
            key=lambda r: r.work_date,
        )

        stats = summarize(records)
        summary = MonthlySummary(
            **stats.to_dict(),
            total_late_minutes=sum(r.late_minutes for r in records),
            # Overridden days are authorized exceptions, not real early departures.
            total_early_departures=sum(1 for r in records if r.is_early_departure and not r.is_manual_override),
        )

        return MonthlyReport(
            teacher_id=int(teacher_id),
            month=month,
            year=year,
            summary=summary,
            daily_details=tuple(_daily_detail(r) for r in records),
        )
