"""
Tests for Flask API endpoints.

Integration tests that validate the REST API returns correct
status codes, JSON structure, and physically reasonable values.
"""

import json
import math
import pytest


def post(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


CENTRAL = {"id": "c", "position": [0, 0, 0], "mass": 100}


class TestSharedEndpoints:

    def test_services(self, client):
        resp = client.get("/api/services")
        assert resp.status_code == 200
        ids = [s["id"] for s in resp.get_json()]
        assert ids == ["curvature", "orbit"]

    def test_constants(self, client):
        data = client.get("/api/constants").get_json()
        assert data["G"] == 1.0
        assert data["c"] == 1.0
        assert data["minDistance"] == 0.001
        assert data["grid"]["maxResolution"] == 256
        assert data["orbit"]["maxEccentricity"] == 0.95

    def test_settings(self, client):
        data = client.get("/api/settings").get_json()
        assert data["apiMaxResolution"] == 16
        assert data["useWorker"] is False


class TestCurvatureGridEndpoint:
    """Test POST /api/curvature/grid."""

    def test_small_grid(self, client):
        resp = post(client, "/api/curvature/grid", {
            "resolution": 4,
            "bounds": [-1, -1, -1, 1, 1, 1],
            "timeStep": 0.016,
            "masses": [CENTRAL],
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert len(data["samples"]) == 64
        assert data["resolution"] == 4
        assert data["maxDeviation"] > 0
        assert data["computeTimeMs"] >= 0
        first = data["samples"][0]
        assert first["position"] == [-0.75, -0.75, -0.75]
        assert len(first["tidalTensor"]) == 3

    def test_settings_defaults_capped(self, client):
        """Without a resolution the default (32) exceeds the test cap (16)."""
        resp = post(client, "/api/curvature/grid", {"masses": [CENTRAL]})
        assert resp.status_code == 400
        assert "API limit" in resp.get_json()["error"]

    def test_default_bounds_and_step(self, client):
        resp = post(client, "/api/curvature/grid", {"resolution": 2, "masses": []})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["bounds"] == [-5.0, -5.0, -5.0, 5.0, 5.0, 5.0]
        assert data["maxDeviation"] == 0.0

    def test_resolution_above_cap(self, client):
        resp = post(client, "/api/curvature/grid", {"resolution": 17, "masses": []})
        assert resp.status_code == 400

    @pytest.mark.parametrize("payload,fragment", [
        ({"resolution": 1, "masses": []}, "resolution"),
        ({"resolution": 4, "bounds": [0, 0, 0, 1, 1], "masses": []}, "Bounds"),
        ({"resolution": 4, "timeStep": 5, "masses": []}, "Time step"),
        ({"resolution": 4, "masses": [{"id": "x", "position": [0, 0, 0], "mass": -1}]},
         "non-negative"),
        ({"resolution": 4, "masses": "lots"}, "array"),
        ([1], "JSON object"),
        ({"resolution": 4, "masses": [{"id": "x", "position": [0, 0, 0], "mass": 1,
                                       "orbit": 5}]}, "orbit must be an object"),
    ])
    def test_invalid_payloads(self, client, payload, fragment):
        resp = post(client, "/api/curvature/grid", payload)
        assert resp.status_code == 400
        assert fragment in resp.get_json()["error"]

    def test_missing_body(self, client):
        resp = client.post("/api/curvature/grid")
        assert resp.status_code == 400


class TestPotentialEndpoint:
    """Test POST /api/curvature/potential."""

    def test_probe(self, client):
        resp = post(client, "/api/curvature/potential", {
            "point": [1, 0, 0], "masses": [CENTRAL]})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["potential"] == pytest.approx(-100.0)
        assert data["metricDeviation"] == pytest.approx(-200.0)
        assert data["tidalTensor"] == pytest.approx([200.0, -100.0, -100.0])

    def test_bad_point(self, client):
        resp = post(client, "/api/curvature/potential", {"point": [1, 0], "masses": []})
        assert resp.status_code == 400

    def test_bad_mass(self, client):
        resp = post(client, "/api/curvature/potential", {
            "point": [0, 0, 0], "masses": [{"id": "", "position": [0, 0, 0], "mass": 1}]})
        assert resp.status_code == 400


class TestOrbitEndpoints:
    """Test POST /api/orbit/*."""

    def test_position_at_start(self, client):
        resp = post(client, "/api/orbit/position", {
            "orbit": {"semiMajorAxis": 2.0}, "centralMass": 100, "time": 0})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["position"] == pytest.approx([2.0, 0.0, 0.0])
        assert data["period"] == pytest.approx(2 * math.pi * math.sqrt(8.0 / 100.0))

    def test_position_offset(self, client):
        resp = post(client, "/api/orbit/position", {
            "orbit": {"semiMajorAxis": 1.0}, "centralMass": 10,
            "centerPosition": [1, 1, 1]})
        assert resp.get_json()["position"] == pytest.approx([2.0, 1.0, 1.0])

    def test_position_no_central_mass(self, client):
        resp = post(client, "/api/orbit/position", {
            "orbit": {"semiMajorAxis": 2.0}, "centralMass": 0})
        assert resp.status_code == 200
        assert resp.get_json()["period"] is None

    @pytest.mark.parametrize("payload,fragment", [
        ({"centralMass": 100}, "orbit"),
        ({"orbit": {"semiMajorAxis": 2.0, "eccentricity": 1.0}, "centralMass": 100},
         "Eccentricity"),
        ({"orbit": {"semiMajorAxis": -2.0}, "centralMass": 100}, "Semi-major axis"),
        ({"orbit": {"semiMajorAxis": 2.0}}, "centralMass"),
        ({"orbit": {"semiMajorAxis": 2.0}, "centralMass": 1, "centerPosition": [0]},
         "centerPosition"),
        ([1], "JSON object"),
    ])
    def test_position_invalid(self, client, payload, fragment):
        resp = post(client, "/api/orbit/position", payload)
        assert resp.status_code == 400
        assert fragment in resp.get_json()["error"]

    def test_period(self, client):
        data = post(client, "/api/orbit/period", {
            "semiMajorAxis": 1, "centralMass": 1}).get_json()
        assert data["period"] == pytest.approx(2 * math.pi)
        assert data["orbiting"] is True

    def test_period_not_orbiting(self, client):
        data = post(client, "/api/orbit/period", {
            "semiMajorAxis": 1, "centralMass": 0}).get_json()
        assert data["period"] is None
        assert data["orbiting"] is False

    def test_period_invalid(self, client):
        resp = post(client, "/api/orbit/period", {"semiMajorAxis": "far", "centralMass": 1})
        assert resp.status_code == 400

    def test_update_system(self, client):
        resp = post(client, "/api/orbit/update", {
            "time": 0.0,
            "masses": [
                {"id": "sun", "position": [0, 0, 0], "mass": 100},
                {"id": "p", "position": [9, 9, 9], "mass": 1,
                 "orbit": {"semiMajorAxis": 2.0}, "orbitsCentralMassId": "sun"},
            ],
        })
        assert resp.status_code == 200
        data = resp.get_json()
        sun, planet = data["masses"]
        assert sun["position"] == [0, 0, 0]
        assert planet["position"] == pytest.approx([2.0, 0.0, 0.0])
        assert planet["orbitsCentralMassId"] == "sun"

    def test_update_rejects_non_object_orbit(self, client):
        resp = post(client, "/api/orbit/update", {
            "time": 1.0,
            "masses": [{"id": "p", "position": [0, 0, 0], "mass": 1, "orbit": 5}],
        })
        assert resp.status_code == 400
        assert "orbit must be an object" in resp.get_json()["error"]

    def test_update_rejects_bad_orbit(self, client):
        resp = post(client, "/api/orbit/update", {
            "time": 1.0,
            "masses": [{"id": "p", "position": [0, 0, 0], "mass": 1,
                        "orbit": {"semiMajorAxis": 2.0, "eccentricity": 3}}],
        })
        assert resp.status_code == 400
        assert "Eccentricity" in resp.get_json()["error"]


@pytest.mark.parametrize("url", [
    "/api/curvature/grid",
    "/api/curvature/potential",
    "/api/orbit/position",
    "/api/orbit/period",
    "/api/orbit/update",
])
@pytest.mark.parametrize("body", [[1], "text", 3])
def test_non_object_body_rejected(client, url, body):
    resp = post(client, url, body)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Request body must be a JSON object"
