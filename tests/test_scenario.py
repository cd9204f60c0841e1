from __future__ import annotations

import pytest

from analytics.scenario import WHAT_IF_PRESETS, project_presets, project_what_if


def test_what_if_drop():
    result = project_what_if(10000, -10)
    assert result.what_if_value == pytest.approx(9000)
    assert result.impact == pytest.approx(-1000)


def test_what_if_zero_is_identity():
    result = project_what_if(12345.67, 0)
    assert result.what_if_value == pytest.approx(12345.67)
    assert result.impact == 0


def test_what_if_empty_portfolio():
    result = project_what_if(0, 20)
    assert result.what_if_value == 0
    assert result.impact == 0


def test_presets():
    assert WHAT_IF_PRESETS == (-20.0, -10.0, 0.0, 10.0, 20.0)
    values = [round(p.what_if_value) for p in project_presets(1000)]
    assert values == [800, 900, 1000, 1100, 1200]


def test_what_if_is_repeatable():
    assert project_what_if(10000, -12.5) == project_what_if(10000, -12.5)
    assert project_presets(1000) == project_presets(1000)
