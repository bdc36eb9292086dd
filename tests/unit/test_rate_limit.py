"""Unit tests for rate-limit keying."""

import pytest
from libs.common.rate_limit import client_ip, limiter
from starlette.requests import Request


def _request(headers=None, client=("10.0.0.9", 5000)) -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/users",
            "headers": [
                (name.lower().encode(), value.encode())
                for name, value in (headers or {}).items()
            ],
            "client": client,
        }
    )


@pytest.mark.unit
def test_client_ip_prefers_first_forwarded_hop():
    request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert client_ip(request) == "203.0.113.7"


@pytest.mark.unit
def test_client_ip_falls_back_to_socket_address():
    assert client_ip(_request()) == "10.0.0.9"


@pytest.mark.unit
def test_only_decorated_endpoints_are_limited():
    # No SlowAPIMiddleware is installed, so global defaults would never apply
    assert limiter._default_limits == []
