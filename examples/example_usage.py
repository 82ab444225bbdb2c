"""Example: drive the service layer directly, without Flask.

Controllers stay thin; check-in rules and reports live in the services.
"""

import importlib

from config import get_settings_module

from src.teacher_attendance.teacher_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    today = container.attendance_service.get_today_attendance(teacher_id=1)
    print(today.to_dict() if today else "No attendance yet today")

    stats = container.report_service.get_stats(teacher_id=1)
    print(stats.to_dict())


if __name__ == "__main__":
    main()
