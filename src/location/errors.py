"""Typed failures raised by the upstream API clients."""


class UpstreamError(Exception):
    """An upstream service was unreachable, returned non-2xx, or sent an unusable body."""
    provider = "upstream"


class SoilGridsError(UpstreamError):
    provider = "soilgrids"


class OpenMeteoError(UpstreamError):
    provider = "open-meteo"


class NominatimError(UpstreamError):
    provider = "nominatim"


class OpenWeatherError(UpstreamError):
    provider = "openweather"
