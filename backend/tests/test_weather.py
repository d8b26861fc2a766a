"""
Tests for the Open-Meteo weather client and the geocoding helper.
"""

import httpx
import pytest

from ausflug.core.errors import InternalError
from ausflug.services import geocoding_service
from ausflug.services.weather_service import WeatherService, describe_weather_code

DAILY = {
    "daily": {
        "time": ["2026-07-01", "2026-07-02"],
        "temperature_2m_max": [24.6, 19.2],
        "temperature_2m_min": [13.4, 11.0],
        "precipitation_probability_max": [10, None],
        "weather_code": [1, 63],
    }
}

HOURLY = {
    "hourly": {
        "time": ["2026-07-01T10:00", "2026-07-01T11:00"],
        "temperature_2m": [18.4, 20.6],
        "precipitation_probability": [0, 35],
        "weather_code": [0, 95],
    }
}


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.AsyncClient created by the services through a handler."""
    real_client = httpx.AsyncClient
    state = {"handler": None, "requests": []}

    def dispatch(request):
        state["requests"].append(request)
        return state["handler"](request)

    def factory(*args, **kwargs):
        return real_client(*args, transport=httpx.MockTransport(dispatch), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)
    return state


class TestWeatherService:
    async def test_daily_forecast(self, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, json=DAILY)
        result = await WeatherService().get_forecast(47.3769, 8.5417, days=2)

        assert result["location"] == "47.38, 8.54"
        first, second = result["forecasts"]
        assert first == {
            "date": "2026-07-01",
            "temperature_max": 25,
            "temperature_min": 13,
            "precipitation_probability": 10,
            "weather_code": 1,
            "weather_description": "Überwiegend klar",
        }
        assert second["precipitation_probability"] == 0
        assert second["weather_description"] == "Mäßiger Regen"

        params = mock_http["requests"][0].url.params
        assert params["forecast_days"] == "2"
        assert params["timezone"] == "Europe/Zurich"

    async def test_hourly_forecast(self, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, json=HOURLY)
        result = await WeatherService().get_hourly(46.0, 7.0, days=1)
        assert [h["temperature"] for h in result["hourly"]] == [18, 21]
        assert result["hourly"][1]["weather_description"] == "Gewitter"

    async def test_upstream_error_raises_internal_error(self, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(503)
        with pytest.raises(InternalError):
            await WeatherService().get_forecast(47.0, 8.0)

    async def test_missing_daily_block(self, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, json={"error": True})
        with pytest.raises(InternalError):
            await WeatherService().get_forecast(47.0, 8.0)

    async def test_missing_series_raises_internal_error(self, mock_http):
        daily = {k: v for k, v in DAILY["daily"].items() if k != "weather_code"}
        mock_http["handler"] = lambda request: httpx.Response(200, json={"daily": daily})
        with pytest.raises(InternalError):
            await WeatherService().get_forecast(47.0, 8.0)

        hourly = {k: v for k, v in HOURLY["hourly"].items() if k != "temperature_2m"}
        mock_http["handler"] = lambda request: httpx.Response(200, json={"hourly": hourly})
        with pytest.raises(InternalError):
            await WeatherService().get_hourly(47.0, 8.0)

    @pytest.mark.parametrize("code, text", [(0, "Klar"), ("45", "Nebel"), (42, "Unbekannt"), (None, "Unbekannt")])
    def test_describe_weather_code(self, code, text):
        assert describe_weather_code(code) == text


class TestWeatherEndpoints:
    async def test_days_out_of_range(self, client):
        resp = await client.get("/api/v1/weather/forecast", params={"latitude": 47, "longitude": 8, "days": 17})
        assert resp.status_code == 400

    async def test_upstream_failure_is_500(self, client, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(500)
        resp = await client.get("/api/v1/weather/forecast", params={"latitude": 47, "longitude": 8})
        assert resp.status_code == 500
        assert resp.json()["message"] == "Wettervorhersage konnte nicht abgerufen werden"


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------

class TestGeocoding:
    @pytest.fixture
    def api_key(self, monkeypatch):
        monkeypatch.setattr(geocoding_service.settings, "GOOGLE_MAPS_API_KEY", "test-key")

    async def test_without_key_returns_none(self, mock_http):
        mock_http["handler"] = lambda request: pytest.fail("no request expected")
        assert await geocoding_service.geocode_address("Bern") is None

    async def test_first_result_is_used(self, api_key, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, json={
            "status": "OK",
            "results": [
                {"geometry": {"location": {"lat": 46.948, "lng": 7.447}}},
                {"geometry": {"location": {"lat": 0, "lng": 0}}},
            ],
        })
        assert await geocoding_service.geocode_address(" Bern ") == (46.948, 7.447)
        assert mock_http["requests"][0].url.params["address"] == "Bern"

    async def test_zero_results(self, api_key, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        assert await geocoding_service.geocode_address("Nirgendwo") is None

    async def test_non_json_body(self, api_key, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, text="<html>Fehler</html>")
        assert await geocoding_service.geocode_address("Bern") is None

    async def test_result_without_geometry(self, api_key, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, json={"status": "OK", "results": [{"formatted": "Bern"}]})
        assert await geocoding_service.geocode_address("Bern") is None

    async def test_endpoint_not_found(self, client, api_key, mock_http):
        mock_http["handler"] = lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        resp = await client.get("/api/v1/geocoding", params={"address": "Nirgendwo"})
        assert resp.status_code == 404
