import math
import re

import pytest

from fishery_dashboard.colors import build_color_scale, log1p10
from fishery_dashboard.config import NO_DATA_COLOR


def _rgb(color):
    return tuple(float(c) for c in re.findall(r"[\d.]+", color)[:3])


def _intensity(color):
    # GnBu runs from pale to dark, so a lower channel sum is darker
    return -sum(_rgb(color))


def test_domain_is_log_of_year_maximum():
    scale = build_color_scale([1.0, 99.0, 999.0])
    assert scale.domain[0] == 0.0
    assert scale.domain[1] == pytest.approx(3.0)


def test_domain_defaults_when_year_has_no_records():
    assert build_color_scale([]).domain == pytest.approx((0.0, math.log10(2)))
    assert build_color_scale(None).domain == pytest.approx((0.0, math.log10(2)))


def test_domain_defaults_when_year_is_all_zero():
    assert build_color_scale([0, 0]).domain == pytest.approx((0.0, math.log10(2)))


def test_accepts_year_records_frame(index):
    scale = build_color_scale(index.year_values(2001))
    assert scale.domain[1] == pytest.approx(log1p10(20.0))


@pytest.mark.parametrize("value", [0, -5, -1e9, None, float("nan"), "abc"])
def test_non_positive_and_missing_values_get_no_data_color(value):
    scale = build_color_scale([10.0, 1000.0])
    assert scale(value) == NO_DATA_COLOR


def test_positive_values_never_get_no_data_color():
    scale = build_color_scale([10.0, 1000.0])
    assert scale(0.001) != NO_DATA_COLOR


def test_larger_values_are_darker():
    scale = build_color_scale([1.0, 50.0, 5000.0, 1e6])
    values = [1.0, 50.0, 5000.0, 1e6]
    intensities = [_intensity(scale(v)) for v in values]
    assert intensities == sorted(intensities)
    assert len(set(intensities)) == len(intensities)


def test_year_maximum_maps_to_darkest_palette_color():
    scale = build_color_scale([5.0, 1000.0])
    assert _rgb(scale(1000.0)) == pytest.approx((8, 64, 129), abs=1)


def test_values_above_domain_are_clamped():
    scale = build_color_scale([10.0])
    assert scale(1e9) == scale(10.0)


def test_colorbar_ticks_are_powers_of_ten_within_domain():
    tickvals, ticktext = build_color_scale([999.0]).colorbar_ticks()
    assert ticktext == ["1", "10", "100"]
    assert tickvals == pytest.approx([log1p10(1), log1p10(10), log1p10(100)])


def test_no_data_stop_sits_below_the_data_domain():
    scale = build_color_scale([999.0])
    stops = scale.with_no_data_stop()
    assert stops[0] == [0.0, NO_DATA_COLOR]
    assert stops[-1][0] == pytest.approx(1.0)
    assert [s[0] for s in stops] == sorted(s[0] for s in stops)

    # domain lower bound lands exactly on the first palette stop
    lo, hi = scale.domain
    assert (lo - scale.no_data_z) / (hi - scale.no_data_z) == pytest.approx(stops[1][0])
    assert stops[1][1] == scale.colorscale[0][1]
