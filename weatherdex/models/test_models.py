import pytest
from pydantic import ValidationError

from weatherdex.models.city import City
from weatherdex.models.forecast import DailyForecast, Forecast
from weatherdex.models.state import Notification, SearchState


def test_city_identity_ignores_country_and_population():
    a = City(name="Berlin", country="DE", latitude=52.52, longitude=13.4, population=3645000)
    b = City(name="Berlin", country="Germany", latitude=52.52, longitude=13.4)
    assert a.identity == ("Berlin", 52.52, 13.4)
    assert a.same_city(b)
    assert a.identity_key == b.identity_key


def test_city_population_unknown_and_zero_stay_distinct():
    unknown = City.from_geocoding_result(
        {"name": "Atlantis", "country_code": "XX", "latitude": 1.0, "longitude": 2.0}
    )
    zero = City.from_geocoding_result(
        {
            "name": "Ghost Town",
            "country": "United States",
            "latitude": 3.0,
            "longitude": 4.0,
            "population": 0,
        }
    )
    assert unknown.population is None
    assert zero.population == 0
    assert unknown.population_label() is None
    assert zero.population_label() is None


def test_city_population_label():
    city = City(name="Berlin", country="DE", latitude=52.52, longitude=13.4, population=3645000)
    assert city.population_label() == "Population: 3,645,000"


def test_city_from_geocoding_result_prefers_country_name():
    city = City.from_geocoding_result(
        {
            "name": "London",
            "country": "United Kingdom",
            "country_code": "GB",
            "latitude": 51.50853,
            "longitude": -0.12574,
            "population": 8961989,
        }
    )
    assert city.country == "United Kingdom"
    assert city.population == 8961989


def test_city_from_geocoding_result_missing_coordinates():
    with pytest.raises(KeyError):
        City.from_geocoding_result({"name": "London", "country": "GB"})


def test_city_is_immutable():
    city = City(name="Berlin", country="DE", latitude=52.52, longitude=13.4)
    with pytest.raises(ValidationError):
        city.name = "Munich"


def test_daily_forecast_all_fields_optional():
    day = DailyForecast.model_validate({})
    assert day.clouds is None
    assert day.temp is None
    assert day.weather is None
    assert day.primary_condition is None


def test_daily_forecast_parses_nested_fields():
    day = DailyForecast.model_validate(
        {
            "dt": 1700000000,
            "clouds": 75,
            "dew_point": 3.2,
            "feels_like": {"day": 8.1, "night": 2.0},
            "temp": {"min": 1.5, "max": 9.0},
            "pop": 0.4,
            "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
            "wind_speed": 4.6,
            "summary": "ignored",
        }
    )
    assert day.feels_like.day == 8.1
    assert day.feels_like.morn is None
    assert day.temp.max == 9.0
    assert day.temp.day is None
    assert day.rain is None
    assert day.primary_condition.main == "Rain"


def test_daily_forecast_accepts_camel_case_keys():
    day = DailyForecast.model_validate({"dewPoint": 1.0, "windGust": 9.5, "moonPhase": 0.5})
    assert day.dew_point == 1.0
    assert day.wind_gust == 9.5
    assert day.moon_phase == 0.5


def test_daily_forecast_rejects_wrong_types():
    with pytest.raises(ValidationError):
        DailyForecast.model_validate({"weather": "sunny"})


def test_forecast_without_daily():
    forecast = Forecast.from_api_response({"lat": 52.52, "lon": 13.4, "daily": None})
    assert forecast.daily == []
    assert forecast.timezone is None


def test_search_state_defaults():
    state = SearchState()
    assert state.query == ""
    assert state.is_searching is False
    assert state.results == ()
    assert state.favorites == ()


def test_notification_requires_message():
    with pytest.raises(ValidationError):
        Notification(message="")
    assert Notification(message="Oops").action_label == "Close"


def test_city_from_geocoding_result_without_country():
    city = City.from_geocoding_result(
        {"name": "Berlin Seamount", "latitude": -30.1, "longitude": 170.2}
    )
    assert city.country == ""
    assert city.identity == ("Berlin Seamount", -30.1, 170.2)
