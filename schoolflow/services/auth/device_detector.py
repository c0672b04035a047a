"""
Device detection from User-Agent strings.

Extracts browser, OS and device type for session and login-history records.
The result is informational only and never used for authorization.
"""

import re
from typing import TypedDict


class DeviceInfo(TypedDict):
    """Device information extracted from User-Agent."""
    browser: str
    os: str
    device: str
    deviceType: str  # "desktop" | "mobile" | "tablet" | "unknown"


UNKNOWN_BROWSER = "Unknown Browser"
UNKNOWN_OS = "Unknown OS"
UNKNOWN_DEVICE = "Unknown Device"


class DeviceDetector:
    """
    Extracts browser, OS and device type from a User-Agent header.

    Checks run in a fixed order. Edge must be tested before Chrome because
    Edge user agents also carry "Chrome/". macOS is tested before iOS, so
    iPhone and iPad agents ("like Mac OS X") report as macOS.
    """

    _WINDOWS_VERSIONS = [
        ("Windows NT 10.0", "Windows 10"),
        ("Windows NT 6.3", "Windows 8.1"),
        ("Windows NT 6.2", "Windows 8"),
        ("Windows NT 6.1", "Windows 7"),
    ]

    def detect(self, user_agent: str) -> DeviceInfo:
        """
        Parse User-Agent and return device information.

        Args:
            user_agent: HTTP User-Agent header value

        Returns:
            dict with fields:
                - browser: e.g. "Chrome 120", "Edge 120.0.2210.91"
                - os: e.g. "Windows 10", "macOS 10.15.7", "iOS 17.1"
                - device: "<browser> on <os>"
                - deviceType: "desktop" | "mobile" | "tablet" | "unknown"
        """
        if not user_agent:
            return DeviceInfo(
                browser=UNKNOWN_BROWSER,
                os=UNKNOWN_OS,
                device=UNKNOWN_DEVICE,
                deviceType="unknown",
            )

        browser = self._detect_browser(user_agent)
        os_name = self._detect_os(user_agent)
        device_type = self._detect_device_type(user_agent)

        return DeviceInfo(
            browser=browser,
            os=os_name,
            device=f"{browser} on {os_name}",
            deviceType=device_type,
        )

    def _detect_browser(self, ua: str) -> str:
        """Detect browser name and version."""
        if "Edg/" in ua:
            match = re.search(r"Edg/([\d.]+)", ua)
            return f"Edge {match.group(1)}" if match else "Edge"

        if "Chrome/" in ua:
            match = re.search(r"Chrome/([\d.]+)", ua)
            return f"Chrome {match.group(1).split('.')[0]}" if match else "Chrome"

        if "Firefox/" in ua:
            match = re.search(r"Firefox/([\d.]+)", ua)
            return f"Firefox {match.group(1)}" if match else "Firefox"

        if "Safari/" in ua and "Chrome" not in ua:
            match = re.search(r"Version/([\d.]+)", ua)
            return f"Safari {match.group(1)}" if match else "Safari"

        if "Opera/" in ua or "OPR/" in ua:
            return "Opera"

        return UNKNOWN_BROWSER

    def _detect_os(self, ua: str) -> str:
        """Detect operating system and version."""
        for marker, name in self._WINDOWS_VERSIONS:
            if marker in ua:
                return name
        if "Windows" in ua:
            return "Windows"

        if "Mac OS X" in ua:
            match = re.search(r"Mac OS X ([\d_]+)", ua)
            return f"macOS {match.group(1).replace('_', '.')}" if match else "macOS"

        if "Android" in ua:
            match = re.search(r"Android ([\d.]+)", ua)
            return f"Android {match.group(1)}" if match else "Android"

        if "iPhone" in ua or "iPad" in ua:
            match = re.search(r"OS ([\d_]+)", ua)
            return f"iOS {match.group(1).replace('_', '.')}" if match else "iOS"

        if "Linux" in ua:
            return "Linux"
        if "Ubuntu" in ua:
            return "Ubuntu"
        if "CrOS" in ua:
            return "Chrome OS"

        return UNKNOWN_OS

    def _detect_device_type(self, ua: str) -> str:
        """Detect device type (mobile, tablet, desktop, unknown)."""
        if "Mobile" in ua or "iPhone" in ua or "Android" in ua:
            if "iPad" in ua or "Tablet" in ua:
                return "tablet"
            return "mobile"
        if "Windows" in ua or "Mac OS X" in ua or "Linux" in ua:
            return "desktop"
        return "unknown"


_detector = DeviceDetector()


def parse_user_agent(user_agent: str) -> DeviceInfo:
    """Module-level shortcut for ``DeviceDetector().detect``."""
    return _detector.detect(user_agent)
