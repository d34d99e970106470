"""Unit tests for the infrastructure layer: HTTP client, mail and file storage."""

import os
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config import EmailSettings
from infrastructure.email.log_provider import LogEmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.storage.local import LocalFileStore
from infrastructure.storage.protocol import ImageUpload


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_post_propagates_transport_error(self, mocker):
        client = HttpClient()
        mocker.patch.object(
            client._client, "post", side_effect=httpx.ConnectError("refused")
        )
        with pytest.raises(httpx.ConnectError):
            await client.post("http://example.com")
        await client.aclose()

    async def test_user_agent_header(self):
        client = HttpClient(user_agent="AuthShop/1.0")
        assert client._client.headers["User-Agent"] == "AuthShop/1.0"
        await client.aclose()

    async def test_context_manager_closes(self, mocker):
        client = HttpClient()
        aclose = mocker.patch.object(client._client, "aclose", new=AsyncMock())
        async with client:
            pass
        aclose.assert_awaited_once()


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


class TestZeptoMailProvider:
    def _make(self, token="test-token"):
        settings = EmailSettings(
            zepto_api_token=token,
            zepto_from_email="noreply@authshop.local",
            zepto_from_name="AuthShop",
        )
        http = MagicMock()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        return ZeptoMailProvider(settings=settings, http_client=http), http

    async def test_send_verification_makes_post(self):
        provider, http = self._make()
        result = await provider.send_verification_email(
            "user@example.com", "Alice", "123456", 50
        )
        assert result is True
        http.post.assert_awaited_once()
        payload = http.post.call_args.kwargs["json"]
        assert payload["to"][0]["email_address"]["address"] == "user@example.com"
        assert "123456" in payload["htmlbody"]
        assert "50 minutes" in payload["textbody"]

    async def test_auth_header_prefixed(self):
        provider, http = self._make(token="abc")
        await provider.send_verification_email("u@e.com", None, "000000", 10)
        headers = http.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Zoho-enczapikey abc"

    async def test_send_reset_contains_link(self):
        provider, http = self._make()
        link = "http://localhost:5173/users/reset/id/tok"
        assert await provider.send_password_reset_email("u@e.com", "Bob", link) is True
        payload = http.post.call_args.kwargs["json"]
        assert link in payload["htmlbody"]
        assert link in payload["textbody"]

    async def test_html_escapes_user_name(self):
        provider, http = self._make()
        await provider.send_verification_email("u@e.com", "<script>", "000000", 10)
        payload = http.post.call_args.kwargs["json"]
        assert "<script>" not in payload["htmlbody"]

    async def test_returns_false_when_token_empty(self):
        provider, http = self._make(token="")
        assert (
            await provider.send_verification_email("u@e.com", None, "000000", 10)
            is False
        )
        http.post.assert_not_called()

    async def test_returns_false_on_non_2xx(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=422, text="bad"))
        assert (
            await provider.send_verification_email("u@e.com", None, "000000", 10)
            is False
        )

    async def test_returns_false_on_exception(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=httpx.ReadTimeout("timeout"))
        assert (
            await provider.send_password_reset_email("u@e.com", None, "http://x")
            is False
        )


# ── LogEmailProvider ──────────────────────────────────────────────────────────


class TestLogEmailProvider:
    async def test_always_succeeds(self):
        provider = LogEmailProvider()
        assert await provider.send_verification_email("u@e.com", "A", "123456", 50)
        assert await provider.send_password_reset_email("u@e.com", "A", "http://x")

    @pytest.mark.parametrize("reveal", [True, False], ids=["reveal", "hidden"])
    async def test_code_only_logged_when_revealed(self, mocker, reveal):
        log = mocker.patch("infrastructure.email.log_provider.log")
        await LogEmailProvider(reveal_codes=reveal).send_verification_email(
            "u@e.com", "A", "123456", 50
        )
        kwargs = log.info.call_args.kwargs
        assert ("verification_code" in kwargs) is reveal

    @pytest.mark.parametrize("reveal", [True, False], ids=["reveal", "hidden"])
    async def test_reset_link_only_logged_when_revealed(self, mocker, reveal):
        log = mocker.patch("infrastructure.email.log_provider.log")
        link = "http://x/users/reset/507f1f77bcf86cd799439011/eyJhbGciOiJIUzI1NiJ9.e30.sig"
        await LogEmailProvider(reveal_codes=reveal).send_password_reset_email(
            "u@e.com", "A", link
        )
        kwargs = log.info.call_args.kwargs
        assert ("reset_link" in kwargs) is reveal
        assert (link in kwargs.values()) is reveal


# ── LocalFileStore ────────────────────────────────────────────────────────────


class TestLocalFileStore:
    async def test_save_writes_file(self, tmp_path):
        store = LocalFileStore(str(tmp_path / "uploads"))
        upload = ImageUpload(filename="me.PNG", content_type="image/png", content=b"png")
        path = await store.save(upload)
        assert path.startswith("uploads/")
        assert path.endswith(".png")
        with open(os.path.join(store.root, os.path.basename(path)), "rb") as fh:
            assert fh.read() == b"png"

    async def test_public_prefix(self, tmp_path):
        store = LocalFileStore(str(tmp_path / "data"), public_prefix="/media/")
        upload = ImageUpload(filename="a.jpg", content_type="image/jpeg", content=b"j")
        assert (await store.save(upload)).startswith("media/")

    @pytest.mark.parametrize(
        "filename, content_type, ext",
        [
            ("a.gif", "image/gif", ".gif"),
            ("a.webp", None, ".webp"),
            ("a.exe", None, ".bin"),
            (None, None, ".bin"),
        ],
        ids=["from_type", "from_name", "unknown_name", "nothing"],
    )
    async def test_extension(self, tmp_path, filename, content_type, ext):
        store = LocalFileStore(str(tmp_path))
        upload = ImageUpload(filename=filename, content_type=content_type, content=b"x")
        assert (await store.save(upload)).endswith(ext)

    async def test_names_are_unique(self, tmp_path):
        store = LocalFileStore(str(tmp_path))
        upload = ImageUpload(filename="a.png", content_type="image/png", content=b"x")
        assert await store.save(upload) != await store.save(upload)

    async def test_delete(self, tmp_path):
        store = LocalFileStore(str(tmp_path / "uploads"))
        upload = ImageUpload(filename="a.png", content_type="image/png", content=b"x")
        path = await store.save(upload)
        await store.delete(path)
        assert os.listdir(store.root) == []

    async def test_delete_missing_is_quiet(self, tmp_path):
        store = LocalFileStore(str(tmp_path))
        await store.delete("uploads/nothing.png")
