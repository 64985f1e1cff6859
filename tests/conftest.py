import json

import pytest

from fishery_dashboard.config import VALUE_COLUMN
from fishery_dashboard.dataset import Record, build_index
from fishery_dashboard.map_view import MapRenderer


def _square(x, y):
    return {
        "type": "Polygon",
        "coordinates": [[[x, y], [x + 1, y], [x + 1, y + 1], [x, y + 1], [x, y]]],
    }


@pytest.fixture
def records():
    return [
        Record("Alpha", "AAA", 2000, 10.0),
        Record("Alpha", "AAA", 2001, 20.0),
        Record("Beta", "BBB", 2000, 5.0),
        Record("Beta", "BBB", 2001, 5.0),
    ]


@pytest.fixture
def index(records):
    return build_index(records)


@pytest.fixture
def world():
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": "AAA", "properties": {"name": "Alpha Land"}, "geometry": _square(0, 0)},
            {"type": "Feature", "properties": {"iso_a3": "bbb"}, "geometry": _square(2, 0)},
            {"type": "Feature", "properties": {"ADM0_A3": "ZZZ", "name": "Nowhere"}, "geometry": _square(4, 0)},
            {"type": "Feature", "properties": {"name": "Mystery Island"}, "geometry": _square(6, 0)},
        ],
    }


@pytest.fixture
def map_renderer(index, world):
    return MapRenderer(index, world)


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "proj.csv"
    path.write_text(
        f"Entity,Code,Year,{VALUE_COLUMN}\n"
        "Alpha,AAA,2000,10\n"
        "Alpha,AAA,2001,20\n"
        "Beta,BBB ,2000,5\n"
        "Beta,BBB,2001,\n"
        "World,OWID_WRL,2000,1000\n"
        "Africa,,2000,300\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def geojson_file(tmp_path, world):
    path = tmp_path / "world.geojson"
    path.write_text(json.dumps(world), encoding="utf-8")
    return path
