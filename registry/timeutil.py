"""Timestamp formatting and client address helpers."""

from datetime import datetime, timedelta, timezone

from fastapi import Request

# Azerbaijan time, no DST
LOCAL_TZ = timezone(timedelta(hours=4))

UNKNOWN_IP = "Bilinmiyor"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_time(now: datetime) -> str:
    """Format an aware datetime as UTC+4 wall-clock time."""
    return now.astimezone(LOCAL_TZ).strftime("%Y-%m-%d %H:%M:%S")


def utc_timestamp(now: datetime) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2026-02-07T10:30:00.123Z"""
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def client_ip(request: Request) -> str:
    """Best guess at the caller's address, honouring reverse-proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_IP
