from .base import WeatherAdapter, WeatherAdapterError
from .openweather import OpenWeatherMapAdapter

__all__ = ["WeatherAdapter", "WeatherAdapterError", "OpenWeatherMapAdapter"]
