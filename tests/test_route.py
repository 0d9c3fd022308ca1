from __future__ import annotations

import json

import pytest

from wmroute.route import (
    INVALID_LOCATION_MESSAGE,
    NO_PERMISSIONS_MESSAGE,
    Coordinate,
    LocationDataError,
    fetch_route,
    parse_location,
)
from wmroute.time_period import TimeWindow

WINDOW = TimeWindow(1_000, 2_000)


def _loc(lat, lng) -> str:
    return json.dumps({"lat": lat, "lng": lng})


@pytest.mark.parametrize(
    "value, expected",
    [
        (_loc(51.5, -0.09), Coordinate(51.5, -0.09)),
        (_loc("51.500000", "-0.090000"), Coordinate(51.5, -0.09)),
        (json.dumps({"lat": 1, "lng": 2, "speed": 30}), Coordinate(1.0, 2.0)),
    ],
)
def test_parse_location_accepts_numeric_values(value, expected):
    assert parse_location(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "not json",
        json.dumps([51.5, -0.09]),
        json.dumps({"lat": 51.5}),
        _loc(True, 1.0),
        _loc("north", 1.0),
        _loc(None, 1.0),
        _loc("nan", 1.0),
    ],
)
def test_parse_location_rejects_invalid_records(value):
    with pytest.raises(LocationDataError):
        parse_location(value)


def test_fetch_route_returns_points_in_sample_order(fake_api_factory):
    api = fake_api_factory(
        history={
            "100": [
                (1_200, _loc(51.51, -0.10)),
                (1_100, _loc(51.50, -0.09)),
                (1_300, _loc(51.52, -0.11)),
            ]
        }
    )

    result = fetch_route(api, "100", WINDOW)

    assert result.ok
    assert [p.as_dict() for p in result.points] == [
        {"lat": 51.50, "lng": -0.09},
        {"lat": 51.51, "lng": -0.10},
        {"lat": 51.52, "lng": -0.11},
    ]


def test_fetch_route_queries_string_history_for_the_window(fake_api_factory):
    api = fake_api_factory()

    fetch_route(api, "100", WINDOW)

    method, params = api.calls[0]
    assert method == "history.get"
    assert params["itemids"] == ["100"]
    assert params["value_type"] == 1
    assert params["time_from"] == 1_000
    assert params["time_till"] == 2_000
    assert params["output"] == ["value"]
    assert (params["sortfield"], params["sortorder"]) == ("clock", "ASC")


def test_fetch_route_with_no_samples_is_an_empty_success(fake_api_factory):
    api = fake_api_factory(history={"100": [(5_000, _loc(1, 2))]})

    result = fetch_route(api, "100", WINDOW)

    assert result.ok
    assert result.points == []


def test_fetch_route_is_all_or_nothing(fake_api_factory):
    samples = [(1_000 + i, _loc(51.5 + i / 100, -0.1)) for i in range(10)]
    samples[6] = (1_006, "not json")
    api = fake_api_factory(history={"100": samples})

    result = fetch_route(api, "100", WINDOW)

    assert result.error == INVALID_LOCATION_MESSAGE
    assert result.points == []


def test_fetch_route_reports_query_errors_separately(fake_api_factory):
    api = fake_api_factory(fail=["history.get"])

    result = fetch_route(api, "100", WINDOW)

    assert result.error == NO_PERMISSIONS_MESSAGE
