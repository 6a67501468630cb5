import altair as alt
import pytest

from anesrec.models.app_types import TimeRecord
from anesrec.projection.chart import build_chart_model
from anesrec.ui.charts import PICK, build_vitals_chart, picked_point


def records(n):
    return [TimeRecord(time=f"10:{i:02d}", pulse=80 + i, iso=1.0, fluids={"LRS": 10}) for i in range(n)]


@pytest.mark.parametrize("event", [
    None,
    {},
    {"selection": {}},
    {"selection": {PICK: []}},
    {"selection": {PICK: [{"slot": 3}]}},
])
def test_picked_point_without_a_point(event):
    assert picked_point(event) is None


def test_picked_point_reads_first_point():
    event = {"selection": {PICK: [{"slot": 4.0, "series": "fluid:LRS"}, {"slot": 1, "series": "pulse"}]}}
    assert picked_point(event) == (4, "fluid:LRS")


def test_chart_has_a_layer_pair_per_axis():
    chart = build_vitals_chart(build_chart_model(records(3)))
    assert isinstance(chart, alt.LayerChart)
    assert len(chart.layer) == 6
    assert chart.width == "container"


def test_chart_scrolls_past_twenty_slots():
    chart = build_vitals_chart(build_chart_model(records(25), px_per_slot=40))
    assert chart.width == 1000


def test_chart_builds_for_empty_record():
    chart = build_vitals_chart(build_chart_model([]))
    assert len(chart.layer) == 6
