# tests/test_forecast.py
import pytest

from insights.forecast import forecast_next


def test_forecast_linear_series():
    fc = forecast_next([(0, 10), (1, 20), (2, 30)])
    assert fc.next_x == 3
    assert fc.value == pytest.approx(40.0)
    assert fc.slope == pytest.approx(10.0)
    assert fc.points == 3


def test_forecast_needs_three_points():
    assert forecast_next([(0, 1), (1, 2)]) is None
    assert forecast_next([(0, 1), (1, None), ("x", 3)]) is None


def test_forecast_needs_x_spread():
    assert forecast_next([(1, 1), (1, 2), (1, 3)]) is None


def test_forecast_on_years():
    fc = forecast_next([(2019, 60), (2020, 70), (2021, 80)])
    assert fc.next_x == 2022
    assert fc.value == pytest.approx(90.0)
    assert set(fc.to_dict()) == {"next_x", "value", "slope", "intercept", "points"}
