# ==============================================================================
# User-Agent Enrichment
# ==============================================================================
"""
Derive device type, browser and operating system from a user-agent string.

Classification is deliberately simple: ordered substring matching over a
fixed priority list where the first match wins. Anything unrecognised falls
back to "desktop" / "Unknown" and is never an error.

Priority order matters because real user agents carry several tokens:
Edge and Opera both include "Chrome", Chrome includes "Safari", iOS devices
include "Mac OS X" and Android includes "Linux".
"""

import re

from sitepulse.core.models import DeviceType

UNKNOWN = "Unknown"

# Tablets are checked before phones: iPads and Android tablets would
# otherwise match the generic mobile signatures.
TABLET_PATTERN = re.compile(r"iPad|Tablet|PlayBook|Silk|Kindle|Android(?!.*Mobile)", re.IGNORECASE)
MOBILE_PATTERN = re.compile(
    r"Android|webOS|iPhone|iPod|BlackBerry|IEMobile|Opera Mini|Mobile", re.IGNORECASE
)

BROWSER_SIGNATURES: list[tuple[str, str]] = [
    ("Edg", "Edge"),
    ("OPR", "Opera"),
    ("Opera", "Opera"),
    ("Firefox", "Firefox"),
    ("FxiOS", "Firefox"),
    ("Chrome", "Chrome"),
    ("CriOS", "Chrome"),
    ("Safari", "Safari"),
]

OS_SIGNATURES: list[tuple[str, str]] = [
    ("Windows", "Windows"),
    ("Android", "Android"),
    ("iPhone", "iOS"),
    ("iPad", "iOS"),
    ("iPod", "iOS"),
    ("Mac", "macOS"),
    ("CrOS", "ChromeOS"),
    ("Linux", "Linux"),
]


def _first_match(user_agent: str, signatures: list[tuple[str, str]]) -> str:
    for token, name in signatures:
        if token in user_agent:
            return name
    return UNKNOWN


def detect_device_type(user_agent: str | None) -> DeviceType:
    """Classify a user agent as tablet, mobile or desktop (the default)."""
    if not user_agent:
        return DeviceType.DESKTOP
    if TABLET_PATTERN.search(user_agent):
        return DeviceType.TABLET
    if MOBILE_PATTERN.search(user_agent):
        return DeviceType.MOBILE
    return DeviceType.DESKTOP


def detect_browser(user_agent: str | None) -> str:
    """Browser name, or "Unknown"."""
    return _first_match(user_agent or "", BROWSER_SIGNATURES)


def detect_os(user_agent: str | None) -> str:
    """Operating system name, or "Unknown"."""
    return _first_match(user_agent or "", OS_SIGNATURES)


def enrich(user_agent: str | None) -> dict:
    """
    Derive all enrichment fields at once.

    Args:
        user_agent: Raw user agent string (may be None or empty)

    Returns:
        Dict with device_type, browser and os keys
    """
    return {
        "device_type": detect_device_type(user_agent),
        "browser": detect_browser(user_agent),
        "os": detect_os(user_agent),
    }
