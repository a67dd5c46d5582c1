from datetime import date

import pytest

from app.models.kpi import KPIStatus
from app.services.progress import (
    kpi_status,
    round_half_up,
    scaled_current,
    task_contribution,
    value_progress,
    weighted_progress,
)


@pytest.mark.parametrize("value, expected", [
    (62.5, 63),
    (62.4, 62),
    (0.5, 1),
    (0, 0),
    (99.5, 100),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_value_progress_basic():
    assert value_progress(25, 100) == 25
    assert value_progress(1, 3) == 33
    assert value_progress(2, 3) == 67


def test_value_progress_capped_at_100():
    assert value_progress(250, 100) == 100


def test_value_progress_without_target():
    assert value_progress(10, 0) == 0
    assert value_progress(10, None) == 0


def test_weighted_progress():
    assert weighted_progress([(100, 1), (0, 1)]) == 50
    assert weighted_progress([(100, 3), (0, 1)]) == 75
    # Missing weight counts as 1
    assert weighted_progress([(80, None), (40, 1)]) == 60


def test_weighted_progress_empty():
    assert weighted_progress([]) == 0


def test_kpi_status():
    today = date(2025, 6, 1)
    assert kpi_status(100, None, today) == KPIStatus.COMPLETED
    assert kpi_status(100, date(2025, 1, 1), today) == KPIStatus.COMPLETED
    assert kpi_status(40, date(2025, 5, 31), today) == KPIStatus.OVERDUE
    assert kpi_status(40, date(2025, 6, 1), today) == KPIStatus.ACTIVE
    assert kpi_status(40, None, today) == KPIStatus.ACTIVE


def test_task_contribution():
    assert task_contribution("DONE") == 100
    assert task_contribution("IN_PROGRESS") == 50
    assert task_contribution("TODO") == 0
    assert task_contribution("UNKNOWN") == 0


def test_scaled_current():
    assert scaled_current(50, 200) == 100
    assert scaled_current(33, 10) == 3
    assert scaled_current(50, None) == 50
