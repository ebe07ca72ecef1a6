"""Tests for user-agent sniffing."""

import pytest

from fotolokashen.utils import user_agent as ua

IPHONE_SAFARI = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
)
IPHONE_CHROME = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) CriOS/124.0.6367.88 Mobile/15E148 Safari/604.1"
)
ANDROID_CHROME = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Mobile Safari/537.36"
)
DESKTOP_FIREFOX = "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0"
DESKTOP_CHROME = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
OTHER_MOBILE = "Opera/9.80 (J2ME/MIDP; Opera Mini/9.80; U; en) Presto/2.5.25 Mobile"


@pytest.mark.unit
class TestDeviceType:

    @pytest.mark.parametrize(
        "agent,expected",
        [
            (IPHONE_SAFARI, "mobile-browser-ios"),
            ("Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X)", "mobile-browser-ios"),
            ("Mozilla/5.0 (iPod touch; CPU OS 15_8 like Mac OS X)", "mobile-browser-ios"),
            (ANDROID_CHROME, "mobile-browser-android"),
            (OTHER_MOBILE, "mobile-browser"),
            (DESKTOP_CHROME, "web"),
            ("", "web"),
            (None, "web"),
        ],
    )
    def test_detect_device_type(self, agent, expected):
        assert ua.detect_device_type(agent) == expected

    def test_device_name(self):
        assert ua.device_name(DESKTOP_CHROME) == "Macintosh; Intel Mac OS X 10_15_7"
        assert ua.device_name("curl/8.5.0") is None
        assert ua.device_name(None) is None


@pytest.mark.unit
class TestBrowser:

    @pytest.mark.parametrize(
        "agent,expected",
        [
            (IPHONE_CHROME, "Chrome Mobile"),
            (ANDROID_CHROME, "Chrome Mobile"),
            (IPHONE_SAFARI, "Safari"),
            (DESKTOP_CHROME, "Chrome"),
            (DESKTOP_FIREFOX, "Firefox"),
            ("curl/8.5.0", "Unknown"),
        ],
    )
    def test_browser_name(self, agent, expected):
        assert ua.browser_name(agent) == expected

    def test_mobile_detection(self):
        assert ua.is_mobile(IPHONE_SAFARI)
        assert ua.is_mobile(ANDROID_CHROME)
        assert not ua.is_mobile(DESKTOP_FIREFOX)

    def test_desktop_safari_is_not_ios_safari(self):
        desktop_safari = (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.4 Safari/605.1.15"
        )
        assert not ua.is_safari(desktop_safari)

    def test_geolocation_fallback(self):
        assert ua.supports_geolocation_fallback(IPHONE_SAFARI)
        assert ua.supports_geolocation_fallback(DESKTOP_FIREFOX)
        assert not ua.supports_geolocation_fallback(ANDROID_CHROME)
        assert not ua.supports_geolocation_fallback(DESKTOP_CHROME)

    def test_ios_matching_ignores_case(self):
        lowered = IPHONE_SAFARI.replace("iPhone", "iphone")
        assert ua.is_safari(lowered)
        assert ua.is_mobile(lowered)
        assert ua.detect_device_type(lowered) == "mobile-browser-ios"

    def test_ipod_safari(self):
        ipod = IPHONE_SAFARI.replace("iPhone; CPU iPhone OS", "iPod touch; CPU OS")
        assert ua.browser_name(ipod) == "Safari"
