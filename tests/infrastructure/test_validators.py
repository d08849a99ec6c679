"""
Polygon predicate (shapely).
"""

import pytest

from infrastructure.validators import is_valid_polygon
from tests.factories.model_factories import make_feature_collection


def collection(geometry, count=1):
    return {
        "type": "FeatureCollection",
        "features": [{"type": "Feature", "properties": {}, "geometry": geometry}] * count,
    }


class TestIsValidPolygon:
    def test_valid_square(self):
        assert is_valid_polygon(make_feature_collection())

    def test_self_intersecting_bowtie(self):
        bowtie = {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [1, 0], [0, 1], [0, 0]]]}
        assert not is_valid_polygon(collection(bowtie))

    def test_point_geometry(self):
        assert not is_valid_polygon(collection({"type": "Point", "coordinates": [0, 0]}))

    def test_multipolygon_rejected(self):
        square = [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]]
        assert not is_valid_polygon(collection({"type": "MultiPolygon", "coordinates": [square]}))

    def test_two_features(self):
        fc = make_feature_collection()
        fc["features"] = fc["features"] * 2
        assert not is_valid_polygon(fc)

    def test_no_features(self):
        assert not is_valid_polygon({"type": "FeatureCollection", "features": []})

    def test_bare_feature(self):
        assert not is_valid_polygon(make_feature_collection()["features"][0])

    @pytest.mark.parametrize("coordinates", [
        [],
        [[[0, 0], [1, 0]]],
        [[["a", "b"], ["c", "d"], ["e", "f"], ["a", "b"]]],
    ])
    def test_broken_coordinates(self, coordinates):
        assert not is_valid_polygon(collection({"type": "Polygon", "coordinates": coordinates}))

    @pytest.mark.parametrize("value", [None, "FeatureCollection", [], 1])
    def test_not_a_dict(self, value):
        assert not is_valid_polygon(value)
