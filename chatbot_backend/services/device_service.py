"""Visitor fingerprinting: browser/OS detection, device IDs and client IPs"""
from fastapi import Request
from typing import NamedTuple, Optional
import secrets
import string
import time

UNKNOWN = "Unknown"
DEVICE_ID_PREFIX = "device_"
DEFAULT_IP = "127.0.0.1"

_BASE36 = string.digits + string.ascii_lowercase


class DeviceInfo(NamedTuple):
    browser: str
    os: str


def detect_browser(user_agent: str) -> str:
    # Order matters: Chrome UAs also carry "Safari", Edge UAs carry "Chrome"
    if "Chrome" in user_agent and "Edg" not in user_agent:
        return "Chrome"
    if "Firefox" in user_agent:
        return "Firefox"
    if "Safari" in user_agent and "Chrome" not in user_agent:
        return "Safari"
    if "Edg" in user_agent:
        return "Edge"
    if "Opera" in user_agent or "OPR" in user_agent:
        return "Opera"
    return UNKNOWN


def detect_os(user_agent: str) -> str:
    if "Windows" in user_agent:
        return "Windows"
    if "Mac OS X" in user_agent or "Macintosh" in user_agent:
        return "Mac"
    if "Linux" in user_agent:
        return "Linux"
    if "Android" in user_agent:
        return "Android"
    if "iOS" in user_agent or "iPhone" in user_agent or "iPad" in user_agent:
        return "iOS"
    return UNKNOWN


def classify(user_agent: Optional[str]) -> DeviceInfo:
    """
    Best-effort browser and OS from a User-Agent string.

    First matching token wins; anything unrecognised is "Unknown".
    """
    user_agent = user_agent or ""
    return DeviceInfo(browser=detect_browser(user_agent), os=detect_os(user_agent))


def generate_device_id() -> str:
    """device_<epoch ms>_<9 random base36 chars>; unique enough, not secret"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{DEVICE_ID_PREFIX}{int(time.time() * 1000)}_{suffix}"


def resolve_device_id(cookie_value: Optional[str], client_value: Optional[str]) -> str:
    """Client-supplied ID first, then the cookie, then a fresh one"""
    return client_value or cookie_value or generate_device_id()


def client_ip(request: Request) -> str:
    """Visitor IP, honouring proxy headers"""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host

    return DEFAULT_IP
