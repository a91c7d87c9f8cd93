"""Example: drive the service layer directly, without Flask.

Previews March 2025 pay for employee 1 and prints the attendance it was built from.
"""

import importlib

from config import get_settings_module

from src.workforce_engine.workforce_engine.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    summary = container.monthly_aggregator.aggregate(employee_id=1, month=3, year=2025)
    print(summary.to_dict(include_records=False))

    preview = container.payroll_service.preview_salary(employee_id=1, month=3, year=2025)
    print(preview.to_dict())


if __name__ == "__main__":
    main()
