import pytest

from fishery_dashboard.dataset import Record, build_index
from fishery_dashboard.selection import SelectionState
from fishery_dashboard.stacked_area import (
    EMPTY_Y_DOMAIN,
    PALETTE,
    StackedAreaRenderer,
    layer_color,
    reconcile,
    stack_layers,
)


@pytest.fixture
def renderer():
    return StackedAreaRenderer()


def _points(view, code):
    return {year: (base, top) for year, base, top in next(layer for layer in view.layers if layer.code == code).points}


def test_layers_stack_in_sorted_code_order(renderer, index):
    view = renderer.update({"BBB", "AAA"}, index)
    assert view.codes == ("AAA", "BBB")
    assert _points(view, "AAA")[2001] == (0.0, 20.0)
    assert _points(view, "BBB")[2001] == (20.0, 25.0)
    assert _points(view, "AAA")[2000] == (0.0, 10.0)
    assert _points(view, "BBB")[2000] == (10.0, 15.0)


def test_click_order_does_not_change_the_view(renderer, index):
    a = SelectionState().toggle("BBB").toggle("AAA")
    b = SelectionState().toggle("AAA").toggle("BBB")
    assert renderer.update(a, index) == renderer.update(b, index)


def test_update_is_idempotent(renderer, index):
    first = renderer.update(["AAA", "BBB"], index)
    second = renderer.update(["AAA", "BBB"], index)
    assert first == second
    assert renderer.figure(first).to_dict() == renderer.figure(second).to_dict()
    assert [b.id for b in renderer.legend(first)] == [b.id for b in renderer.legend(second)]


def test_y_domain_is_niced_maximum(renderer, index):
    view = renderer.update(["AAA", "BBB"], index)
    assert view.y_domain == (0.0, 26.0)


def test_x_domain_is_full_year_range_regardless_of_selection(renderer, index):
    assert renderer.update([], index).x_domain == (2000, 2001)
    assert renderer.update(["BBB"], index).x_domain == (2000, 2001)


def test_empty_selection_is_a_blank_chart(renderer, index):
    view = renderer.update([], index)
    assert view.empty
    assert view.layers == ()
    assert view.legend == ()
    assert view.y_domain == EMPTY_Y_DOMAIN
    fig = renderer.figure(view)
    assert len(fig.data) == 0
    assert tuple(fig.layout.yaxis.range) == (0.0, 1.0)
    assert renderer.legend(view) == []


def test_all_zero_selection_uses_unit_domain(renderer):
    idx = build_index([
        Record("Peru", "PER", 2000, 0.0),
        Record("Peru", "PER", 2001, 0.0),
    ])
    assert renderer.update(["PER"], idx).y_domain == EMPTY_Y_DOMAIN


def test_missing_years_count_as_zero():
    idx = build_index([
        Record("Peru", "PER", 2000, 4.0),
        Record("Chile", "CHL", 2000, 1.0),
        Record("Chile", "CHL", 2001, 2.0),
    ])
    layers = stack_layers(["CHL", "PER"], idx)
    per = dict((year, (base, top)) for year, base, top in layers[1].points)
    assert per[2001] == (2.0, 2.0)
    assert [p[0] for p in layers[0].points] == [2000, 2001]


def test_figure_has_one_trace_per_layer_keyed_by_code(renderer, index):
    fig = renderer.figure(renderer.update(["BBB", "AAA"], index))
    assert [t.uid for t in fig.data] == ["AAA", "BBB"]
    assert [t.name for t in fig.data] == ["Alpha", "Beta"]
    # polygon: tops forward, baselines back
    assert list(fig.data[1].y) == [15.0, 25.0, 20.0, 10.0]
    assert list(fig.data[1].x) == [2000, 2001, 2001, 2000]
    assert tuple(fig.layout.xaxis.range) == (2000, 2001)


def test_legend_lists_sorted_selection(renderer, index):
    buttons = renderer.legend(renderer.update(["BBB", "AAA"], index))
    assert [b.id for b in buttons] == [
        {"type": "legend-item", "code": "AAA"},
        {"type": "legend-item", "code": "BBB"},
    ]


def test_toggle_twice_restores_rendered_state(renderer, index):
    s = SelectionState().toggle("AAA")
    before = renderer.update(s, index)
    after = renderer.update(s.toggle("BBB").toggle("BBB"), index)
    assert before == after


def test_layer_color_is_stable_across_selections(renderer, index):
    alone = renderer.update(["BBB"], index).layers[0].color
    together = renderer.update(["AAA", "BBB"], index).layers[1].color
    assert alone == together == layer_color("BBB", index) == PALETTE[1]


def test_reconcile_reports_entering_and_exiting_layers():
    changes = reconcile(["AAA", "BBB"], ["BBB", "CCC"])
    assert changes.entered == ("CCC",)
    assert changes.updated == ("BBB",)
    assert changes.exited == ("AAA",)


def test_x_scale_spans_plot_width(renderer):
    scale = renderer.x_scale((2000, 2010))
    assert scale(2000) == 0
    assert scale(2010) == renderer.inner_width == 520


def test_plot_area_is_pinned_to_the_margins(renderer, index):
    # year lookup under the pointer assumes the plot starts at margin["l"]
    fig = renderer.figure(renderer.update(["AAA", "BBB"], index))
    assert fig.layout.margin.l == renderer.margin["l"]
    assert fig.layout.xaxis.automargin is False
    assert fig.layout.yaxis.automargin is False
