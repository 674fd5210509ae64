"""Simple two-language (ko/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "태양계 시계",
        "en": "Orrery Clock",
    },
    "btn_weather": {
        "ko": "날씨",
        "en": "Weather",
    },
    "btn_settings": {
        "ko": "⚙ 설정",
        "en": "⚙ Settings",
    },
    "btn_close": {
        "ko": "닫기",
        "en": "Close",
    },
    "label_time_format": {
        "ko": "시간 형식",
        "en": "Time Format",
    },
    "label_format_24": {
        "ko": "24시간",
        "en": "24-hour",
    },
    "label_format_12": {
        "ko": "12시간",
        "en": "12-hour",
    },
    "label_speed": {
        "ko": "자전 속도",
        "en": "Spin Speed",
    },
    "label_bloom": {
        "ko": "빛 번짐",
        "en": "Bloom Strength",
    },
    "label_view": {
        "ko": "보기",
        "en": "View",
    },
    "view_live": {
        "ko": "실시간",
        "en": "Live",
    },
    "view_explore": {
        "ko": "3D 탐색",
        "en": "Explore 3D",
    },
    "weather_locating": {
        "ko": "위치 확인 중...",
        "en": "Locating...",
    },
    "weather_geo_unsupported": {
        "ko": "위치 기능 미지원",
        "en": "Geo Not Supported",
    },
    "weather_geo_denied": {
        "ko": "위치 접근 거부됨",
        "en": "Loc Access Denied",
    },
    "weather_fetch_error": {
        "ko": "날씨를 불러오지 못했어요",
        "en": "Error Fetching",
    },
    "weather_location": {
        "ko": "위도: {lat:.1f} 경도: {lon:.1f}",
        "en": "Lat: {lat:.1f} Lon: {lon:.1f}",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
