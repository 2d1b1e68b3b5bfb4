"""Tests for timestamp formatting, client IP resolution and header parsing."""

from datetime import datetime, timedelta, timezone

import pytest
from starlette.requests import Request

from registry.deps import bearer_token
from registry.timeutil import UNKNOWN_IP, client_ip, epoch_ms, local_time, utc_timestamp


def make_request(headers: dict | None = None, client: tuple | None = ("10.0.0.5", 1234)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/submit",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestTimestamps:
    """Local UTC+4 and UTC ISO-8601 formatting."""

    def test_local_time_is_utc_plus_4(self):
        now = datetime(2026, 2, 7, 22, 15, 30, tzinfo=timezone.utc)
        assert local_time(now) == "2026-02-08 02:15:30"

    def test_local_time_from_other_zone(self):
        now = datetime(2026, 2, 7, 12, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert local_time(now) == "2026-02-07 21:00:00"

    def test_utc_timestamp_has_millis_and_z(self):
        now = datetime(2026, 2, 7, 10, 30, 0, 123456, tzinfo=timezone.utc)
        assert utc_timestamp(now) == "2026-02-07T10:30:00.123Z"

    def test_epoch_ms(self):
        assert epoch_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000


class TestClientIP:
    """Caller address from proxy headers or the socket peer."""

    def test_forwarded_for_first_hop(self):
        req = make_request({"X-Forwarded-For": "203.0.113.1, 70.41.3.18, 150.172.238.178"})
        assert client_ip(req) == "203.0.113.1"

    def test_real_ip(self):
        assert client_ip(make_request({"X-Real-IP": "198.51.100.2"})) == "198.51.100.2"

    def test_socket_peer(self):
        assert client_ip(make_request()) == "10.0.0.5"

    def test_unknown(self):
        assert client_ip(make_request(client=None)) == UNKNOWN_IP


class TestBearerToken:
    """Parsing the Authorization header."""

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc==", "abc=="),
        ("bearer abc", "abc"),
        ("  Bearer   abc  ", "abc"),
        ("Bearer", None),
        ("Basic abc", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, header, expected):
        assert bearer_token(header) == expected
