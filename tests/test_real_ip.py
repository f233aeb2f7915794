"""Test real client IP and user agent extraction."""

from starlette.requests import Request

from zivy.infra.real_ip import get_real_ip, get_user_agent


def _request(headers: dict[str, str] | None = None, client=("10.0.0.1", 1234)) -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/chat",
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
            ],
            "client": client,
        }
    )


class TestGetRealIP:
    def test_cloudflare_header_wins(self):
        request = _request(
            {
                "CF-Connecting-IP": "1.1.1.1",
                "X-Real-IP": "2.2.2.2",
                "X-Forwarded-For": "3.3.3.3",
            }
        )

        assert get_real_ip(request) == "1.1.1.1"

    def test_x_real_ip(self):
        request = _request({"X-Real-IP": "2.2.2.2", "X-Forwarded-For": "3.3.3.3"})

        assert get_real_ip(request) == "2.2.2.2"

    def test_forwarded_for_leftmost(self):
        request = _request({"X-Forwarded-For": "3.3.3.3, 10.0.0.2, 10.0.0.3"})

        assert get_real_ip(request) == "3.3.3.3"

    def test_falls_back_to_client_host(self):
        assert get_real_ip(_request()) == "10.0.0.1"

    def test_unknown_without_client(self):
        assert get_real_ip(_request(client=None)) == "unknown"


class TestGetUserAgent:
    def test_reads_header(self):
        assert get_user_agent(_request({"User-Agent": "Widget/1.0"})) == "Widget/1.0"

    def test_missing_header(self):
        assert get_user_agent(_request()) == "unknown"
