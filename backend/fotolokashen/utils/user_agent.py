"""User-agent sniffing and client address helpers."""

import re

from starlette.requests import Request

_IOS = re.compile(r"iPhone|iPad|iPod", re.IGNORECASE)
_ANDROID = re.compile(r"Android", re.IGNORECASE)
_CHROME = re.compile(r"CriOS|Chrome")
_FIREFOX = re.compile(r"Firefox|FxiOS")


def detect_device_type(user_agent: str | None) -> str:
    if _IOS.search(user_agent or ""):
        return "mobile-browser-ios"
    ua = (user_agent or "").lower()
    if "android" in ua:
        return "mobile-browser-android"
    if "mobile" in ua:
        return "mobile-browser"
    return "web"


def device_name(user_agent: str | None) -> str | None:
    """The platform part inside the first parentheses, e.g. 'Macintosh; Intel Mac OS X 10_15_7'."""
    if not user_agent or "(" not in user_agent:
        return None
    inner = user_agent.split("(", 1)[1].split(")", 1)[0]
    return inner or None


def is_mobile(user_agent: str | None) -> bool:
    ua = user_agent or ""
    return bool(_IOS.search(ua) or _ANDROID.search(ua))


def is_chrome(user_agent: str | None) -> bool:
    return bool(_CHROME.search(user_agent or ""))


def is_chrome_mobile(user_agent: str | None) -> bool:
    return is_chrome(user_agent) and is_mobile(user_agent)


def is_safari(user_agent: str | None) -> bool:
    """Safari on iOS: WebKit + Safari tokens, no Chrome token."""
    ua = user_agent or ""
    return (
        bool(_IOS.search(ua))
        and "WebKit" in ua
        and "Safari" in ua
        and not is_chrome(ua)
    )


def is_firefox(user_agent: str | None) -> bool:
    return bool(_FIREFOX.search(user_agent or ""))


def browser_name(user_agent: str | None) -> str:
    if is_chrome_mobile(user_agent):
        return "Chrome Mobile"
    if is_safari(user_agent):
        return "Safari"
    if is_chrome(user_agent):
        return "Chrome"
    if is_firefox(user_agent):
        return "Firefox"
    return "Unknown"


def supports_geolocation_fallback(user_agent: str | None) -> bool:
    # Chrome on mobile does not report position reliably
    return (is_safari(user_agent) or is_firefox(user_agent)) and not is_chrome_mobile(user_agent)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def request_user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"
