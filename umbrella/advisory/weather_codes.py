"""WMO weather code lookups used by Open-Meteo."""

WEATHER_DESCRIPTIONS: dict[int, str] = {
    0: "clear sky",
    1: "mainly clear",
    2: "partly cloudy",
    3: "overcast",
    45: "fog",
    48: "depositing rime fog",
    51: "light drizzle",
    53: "moderate drizzle",
    55: "dense drizzle",
    61: "slight rain",
    63: "moderate rain",
    65: "heavy rain",
    71: "slight snow",
    73: "moderate snow",
    75: "heavy snow",
    95: "thunderstorm",
}

UNKNOWN = "unknown"

ICON_SUN = "☀️"
ICON_CLOUD = "⛅"
ICON_FOG = "🌫️"
ICON_RAIN = "🌧️"
ICON_SNOW = "❄️"
ICON_STORM = "⛈️"
ICON_PARTLY_CLOUDY = "🌤️"


def describe_weather(code: int | None) -> str:
    if code is None:
        return UNKNOWN
    return WEATHER_DESCRIPTIONS.get(code, UNKNOWN)


def weather_icon(code: int | None) -> str:
    """Pick a glyph by ordered range checks; the first match wins."""
    if code is None:
        return ICON_PARTLY_CLOUDY
    if code == 0:
        return ICON_SUN
    if code <= 3:
        return ICON_CLOUD
    if code <= 48:
        return ICON_FOG
    if code <= 65:
        return ICON_RAIN
    if code <= 75:
        return ICON_SNOW
    if code >= 95:
        return ICON_STORM
    return ICON_PARTLY_CLOUDY
