"""
Upstream API clients for the farm data proxy.

Modules:
    soilgrids   - Fetch ISRIC SoilGrids topsoil properties (with synthetic fallback)
    weather     - Fetch Open-Meteo daily precipitation and roll up by month
    resolver    - Geocode free-text place queries via Nominatim
    openweather - Fetch OpenWeather current conditions
    errors      - Typed upstream failures
"""
