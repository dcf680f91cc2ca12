"""Unit tests for credential slots."""

from datetime import timedelta

from starlette.responses import Response

from playnext.adapter.cookie import CookieCredentialSlot, InMemoryCredentialSlot


def set_cookie_headers(response: Response) -> list[str]:
    return [
        value.decode("latin-1")
        for key, value in response.raw_headers
        if key == b"set-cookie"
    ]


class TestCookieCredentialSlot:
    """Tests for CookieCredentialSlot."""

    def test_reads_request_cookies(self):
        slot = CookieCredentialSlot({"steam_link_state": "sealed"}, secure=False)

        assert slot.get("steam_link_state") == "sealed"
        assert slot.get("other") is None

    def test_put_is_written_as_http_only_cookie(self):
        """Should emit an HttpOnly, SameSite=Lax cookie with the TTL as Max-Age."""
        # Arrange
        slot = CookieCredentialSlot({}, secure=True)
        response = Response()

        # Act
        slot.put("steam_link_state", "sealed", timedelta(minutes=10))
        slot.apply(response)

        # Assert
        [header] = set_cookie_headers(response)
        assert header.startswith("steam_link_state=sealed")
        assert "HttpOnly" in header
        assert "Max-Age=600" in header
        assert "Path=/" in header
        assert "Secure" in header
        assert "samesite=lax" in header.lower()

    def test_delete_expires_cookie(self):
        slot = CookieCredentialSlot({"steam_link_state": "sealed"}, secure=False)
        response = Response()

        slot.delete("steam_link_state")
        slot.apply(response)

        assert slot.get("steam_link_state") is None
        [header] = set_cookie_headers(response)
        assert header.startswith("steam_link_state=")
        assert "Max-Age=0" in header

    def test_delete_after_put_drops_pending_value(self):
        slot = CookieCredentialSlot({}, secure=False)
        response = Response()

        slot.put("steam_link_state", "sealed", timedelta(minutes=10))
        slot.delete("steam_link_state")
        slot.apply(response)

        [header] = set_cookie_headers(response)
        assert "sealed" not in header


class TestInMemoryCredentialSlot:
    """Tests for InMemoryCredentialSlot."""

    def test_honours_ttl(self, clock):
        slot = InMemoryCredentialSlot(clock=clock)
        slot.put("key", "value", timedelta(minutes=10))

        assert slot.get("key") == "value"

        clock.now = clock.now + timedelta(minutes=10)

        assert slot.get("key") is None

    def test_delete(self, clock):
        slot = InMemoryCredentialSlot(clock=clock)
        slot.put("key", "value", timedelta(minutes=10))

        slot.delete("key")

        assert slot.get("key") is None
