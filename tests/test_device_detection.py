"""Unit tests for User-Agent parsing and client IP extraction."""

import pytest
from starlette.datastructures import Headers

from schoolflow.services.auth.device_detector import DeviceDetector, parse_user_agent
from schoolflow.services.auth.ip_utils import extract_ip_address


EDGE_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.2210.91"
)
CHROME_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.6099.109 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)
SAFARI_IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 16_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)
CHROME_ANDROID = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.6099.144 Mobile Safari/537.36"
)
FIREFOX_UBUNTU = "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
OPERA_WINDOWS_7 = "Opera/9.80 (Windows NT 6.1; U; en) Presto/2.12.388 Version/12.16"
CHROME_OS = (
    "Mozilla/5.0 (X11; CrOS x86_64 14541.0.0) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
WINDOWS_TABLET_PC = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; Tablet PC 2.0) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
ANDROID_TABLET = "Mozilla/5.0 (Android 13; Tablet; rv:121.0) Gecko/121.0 Firefox/121.0"
IPAD_DESKTOP_MODE = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Safari/605.1.15"
)
IPHONE_APP = "SchoolFlowApp/2.1 (iPhone; iOS 17_1)"


# ─────────────────────────────────────────────────────────────────
# parse_user_agent
# ─────────────────────────────────────────────────────────────────


class TestParseUserAgent:
    @pytest.mark.parametrize("ua, browser, os_name, device_type", [
        (EDGE_WINDOWS, "Edge 120.0.2210.91", "Windows 10", "desktop"),
        (CHROME_MAC, "Chrome 120", "macOS 10.15.7", "desktop"),
        (SAFARI_IPHONE, "Safari 17.1", "macOS", "mobile"),
        (SAFARI_IPAD, "Safari 16.6", "macOS", "tablet"),
        (CHROME_ANDROID, "Chrome 120", "Android 14", "mobile"),
        (FIREFOX_UBUNTU, "Firefox 121.0", "Linux", "desktop"),
        (OPERA_WINDOWS_7, "Opera", "Windows 7", "desktop"),
        (WINDOWS_TABLET_PC, "Chrome 120", "Windows 10", "desktop"),
        (ANDROID_TABLET, "Firefox 121.0", "Android 13", "tablet"),
        (IPAD_DESKTOP_MODE, "Safari 17.0", "macOS 10.15.7", "desktop"),
        (IPHONE_APP, "Unknown Browser", "iOS 17.1", "mobile"),
    ])
    def test_known_agents(self, ua, browser, os_name, device_type):
        info = parse_user_agent(ua)

        assert info["browser"] == browser
        assert info["os"] == os_name
        assert info["deviceType"] == device_type
        assert info["device"] == f"{browser} on {os_name}"

    def test_edge_is_not_classified_as_chrome(self):
        assert "Chrome/" in EDGE_WINDOWS
        assert parse_user_agent(EDGE_WINDOWS)["browser"].startswith("Edge")

    def test_macos_is_checked_before_ios(self):
        assert "like Mac OS X" in SAFARI_IPHONE
        assert parse_user_agent(SAFARI_IPHONE)["os"] == "macOS"

    def test_tablet_marker_needs_a_mobile_agent(self):
        assert parse_user_agent(WINDOWS_TABLET_PC)["deviceType"] == "desktop"

    def test_chrome_os(self):
        assert parse_user_agent(CHROME_OS)["os"] == "Chrome OS"

    def test_empty_agent(self):
        info = parse_user_agent("")

        assert info == {
            "browser": "Unknown Browser",
            "os": "Unknown OS",
            "device": "Unknown Device",
            "deviceType": "unknown",
        }

    def test_unrecognised_agent(self):
        info = parse_user_agent("curl/8.4.0")

        assert info["browser"] == "Unknown Browser"
        assert info["os"] == "Unknown OS"
        assert info["deviceType"] == "unknown"

    def test_deterministic(self):
        detector = DeviceDetector()
        results = [detector.detect(CHROME_ANDROID) for _ in range(5)]
        assert all(r == results[0] for r in results)


# ─────────────────────────────────────────────────────────────────
# extract_ip_address
# ─────────────────────────────────────────────────────────────────


class TestExtractIpAddress:
    def test_forwarded_for_first_entry_wins(self):
        headers = {
            "x-forwarded-for": " 203.0.113.7 , 10.0.0.1, 10.0.0.2",
            "x-real-ip": "198.51.100.1",
            "cf-connecting-ip": "192.0.2.1",
            "x-client-ip": "192.0.2.2",
        }
        assert extract_ip_address(headers) == "203.0.113.7"

    def test_real_ip_before_cloudflare(self):
        headers = {
            "x-real-ip": "198.51.100.1",
            "cf-connecting-ip": "192.0.2.1",
            "x-client-ip": "192.0.2.2",
        }
        assert extract_ip_address(headers) == "198.51.100.1"

    def test_cloudflare_before_client_ip(self):
        headers = {"cf-connecting-ip": "192.0.2.1", "x-client-ip": "192.0.2.2"}
        assert extract_ip_address(headers) == "192.0.2.1"

    def test_client_ip_last(self):
        assert extract_ip_address({"x-client-ip": "192.0.2.2"}) == "192.0.2.2"

    def test_fallback(self):
        assert extract_ip_address({}) == "127.0.0.1"

    def test_empty_header_is_skipped(self):
        headers = {"x-forwarded-for": "", "x-real-ip": "198.51.100.1"}
        assert extract_ip_address(headers) == "198.51.100.1"

    def test_plain_dict_lookup_is_case_insensitive(self):
        assert extract_ip_address({"X-Real-IP": "198.51.100.9"}) == "198.51.100.9"

    def test_starlette_headers(self):
        headers = Headers(raw=[(b"x-forwarded-for", b"203.0.113.8, 10.0.0.1")])
        assert extract_ip_address(headers) == "203.0.113.8"
