"""
Shared fixtures.
"""

from pathlib import Path

import pytest

SHOP_YAML = """
shop_name: Test Barber
timezone: America/Sao_Paulo
unit_id: centro
defaults:
  service_duration_minutes: 30
  search_days: 7
business_hours:
  - {day_of_week: monday, is_open: true, open_time: "09:00", close_time: "18:00"}
  - {day_of_week: 2, is_open: true, open_time: 09:00, close_time: 18:00, break_start: 12:00, break_end: 13:00}
  - {day_of_week: sunday, is_open: false}
special_hours:
  - {special_date: 2024-12-24, is_open: true, open_time: "08:00", close_time: "13:00"}
  - {special_date: 2024-12-30, is_open: false}
blocked_dates:
  - 2024-12-23
staff:
  - id: joao
    name: Joao
    schedule:
      monday: {enabled: false}
      tuesday: {is_open: true, open_time: "08:00", close_time: "18:00"}
  - id: ana
    name: Ana
  - id: rui
    name: Rui
    active: false
appointments:
  - {appointment_date: 2024-11-25, time: "14:00", duration: 60}
  - {appointment_date: 2024-11-25, time: "10:00", duration: 30, status: cancelled}
  - {appointment_date: 2024-11-26, time: "09:00", duration: 30, staff_id: joao}
  - {appointment_date: 2024-11-26, time: "10:00", duration: 30, staff_id: ana}
"""


@pytest.fixture
def shop_file(tmp_path: Path) -> Path:
    """Write the test shop file and return its path."""
    path = tmp_path / "shop.yaml"
    path.write_text(SHOP_YAML, encoding="utf-8")
    return path
