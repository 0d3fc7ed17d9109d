"""
Device detection from User-Agent strings.

Extracts device type, OS, and browser information for session tracking,
and derives the device label that keys a user's session.
"""

import re
from typing import Optional, TypedDict

from inkwell.auth.models import UNKNOWN_DEVICE


class DeviceInfo(TypedDict):
    """Device information extracted from User-Agent."""
    deviceType: str
    os: str
    browser: str
    displayName: str


class DeviceDetector:
    """
    Extracts device type and details from User-Agent header.

    Detection is advisory: anything unrecognised becomes "Unknown" and the
    label falls back to "unknown", never an error.
    """

    # OS detection patterns
    _OS_PATTERNS = [
        (r"iPhone|iPad|iPod", "iOS"),
        (r"Android", "Android"),
        (r"Windows NT|Windows Phone", "Windows"),
        (r"Mac OS X|Macintosh", "macOS"),
        (r"CrOS", "Chrome OS"),
        (r"Linux", "Linux"),
    ]

    # Browser detection patterns
    _BROWSER_PATTERNS = [
        (r"Edg/|EdgA/|EdgiOS/", "Edge"),
        (r"OPR/|Opera", "Opera"),
        (r"SamsungBrowser/", "Samsung Internet"),
        (r"Chrome/|CriOS/", "Chrome"),
        (r"Firefox/|FxiOS/", "Firefox"),
        (r"Safari/", "Safari"),
    ]

    # Device type patterns
    _TABLET_PATTERNS = [
        r"iPad",
        r"Tablet",
    ]

    _MOBILE_PATTERNS = [
        r"Mobile",
        r"iPhone",
        r"iPod",
        r"Windows Phone",
    ]

    def detect(self, user_agent: Optional[str]) -> DeviceInfo:
        """
        Parse User-Agent and return device information.

        Args:
            user_agent: HTTP User-Agent header value

        Returns:
            dict with fields:
                - deviceType: "mobile" | "tablet" | "desktop"
                - os: "iOS" | "Android" | "Windows" | "macOS" | "Linux" | "Chrome OS" | "Unknown"
                - browser: "Chrome" | "Safari" | "Firefox" | "Edge" | etc.
                - displayName: Human-readable string, e.g., "Chrome on macOS"
        """
        if not user_agent or not user_agent.strip():
            return DeviceInfo(
                deviceType="desktop",
                os="Unknown",
                browser="Unknown",
                displayName="Unknown device"
            )

        os_name = self._detect_os(user_agent)
        browser = self._detect_browser(user_agent)
        device_type = self._detect_device_type(user_agent)

        display_name = f"{browser} on {os_name}"

        return DeviceInfo(
            deviceType=device_type,
            os=os_name,
            browser=browser,
            displayName=display_name
        )

    def resolve(self, user_agent: Optional[str]) -> str:
        """
        Map a User-Agent to the normalized device label used as session key.

        Returns "<os>-<browser>" in lowercase (e.g. "macos-safari",
        "windows-unknown"), or "unknown" when neither is recognised.
        Identical inputs always give identical labels.
        """
        return self.label_for(self.detect(user_agent))

    @staticmethod
    def label_for(device: DeviceInfo) -> str:
        """Device label for an already detected DeviceInfo."""
        os_name = device["os"]
        browser = device["browser"]

        if os_name == "Unknown" and browser == "Unknown":
            return UNKNOWN_DEVICE

        return f"{_slug(os_name)}-{_slug(browser)}"

    def _detect_os(self, user_agent: str) -> str:
        """Detect operating system from User-Agent."""
        for pattern, os_name in self._OS_PATTERNS:
            if re.search(pattern, user_agent, re.IGNORECASE):
                return os_name
        return "Unknown"

    def _detect_browser(self, user_agent: str) -> str:
        """Detect browser from User-Agent."""
        for pattern, browser_name in self._BROWSER_PATTERNS:
            if re.search(pattern, user_agent, re.IGNORECASE):
                return browser_name
        return "Unknown"

    def _detect_device_type(self, user_agent: str) -> str:
        """Detect device type (mobile, tablet, desktop) from User-Agent."""
        # iPads also advertise "Mobile/", so tablets are checked first
        for pattern in self._TABLET_PATTERNS:
            if re.search(pattern, user_agent, re.IGNORECASE):
                return "tablet"

        for pattern in self._MOBILE_PATTERNS:
            if re.search(pattern, user_agent, re.IGNORECASE):
                return "mobile"

        if re.search(r"Android", user_agent, re.IGNORECASE):
            return "tablet"

        return "desktop"


def _slug(value: str) -> str:
    return value.strip().lower().replace(" ", "_")
