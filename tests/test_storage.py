"""Unit tests for media storage providers and upload staging."""

import hashlib
import io

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import UploadFile

from common.storage import CloudinaryStorage, LocalMediaStorage, MediaUploadError
from common.utils.exceptions import PayloadTooLargeException
from accounts.user.uploads import stage_upload


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "avatar.PNG"
    path.write_bytes(b"\x89PNG data")
    return path


# ─────────────────────────────────────────────────────────────────
# LocalMediaStorage
# ─────────────────────────────────────────────────────────────────


class TestLocalMediaStorage:
    @pytest.mark.asyncio
    async def test_upload_copies_into_root(self, tmp_path, source_file):
        storage = LocalMediaStorage(tmp_path / "uploads", base_url="/static/uploads/")

        result = await storage.upload(source_file)

        assert result.public_id.endswith(".png")
        assert result.url == f"/static/uploads/{result.public_id}"
        assert (tmp_path / "uploads" / result.public_id).read_bytes() == b"\x89PNG data"

    @pytest.mark.asyncio
    async def test_upload_missing_file(self, tmp_path):
        storage = LocalMediaStorage(tmp_path / "uploads")

        with pytest.raises(MediaUploadError):
            await storage.upload(tmp_path / "missing.png")

    @pytest.mark.asyncio
    async def test_delete_removes_file(self, tmp_path, source_file):
        storage = LocalMediaStorage(tmp_path / "uploads")
        result = await storage.upload(source_file)

        await storage.delete(result.public_id)
        await storage.delete(result.public_id)

        assert not (tmp_path / "uploads" / result.public_id).exists()

    @pytest.mark.asyncio
    async def test_delete_refuses_paths(self, tmp_path):
        storage = LocalMediaStorage(tmp_path / "uploads")

        with pytest.raises(MediaUploadError):
            await storage.delete("../secret.txt")


# ─────────────────────────────────────────────────────────────────
# CloudinaryStorage
# ─────────────────────────────────────────────────────────────────


def _mock_client(response):
    client = MagicMock()
    client.post = AsyncMock(return_value=response)
    return client


def _response(status_code, **kwargs):
    return httpx.Response(status_code, request=httpx.Request("POST", "https://api.test"), **kwargs)


class TestCloudinaryStorage:
    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            CloudinaryStorage(cloud_name="demo", api_key="", api_secret="secret")

    def test_signature_sorts_params_and_appends_secret(self):
        storage = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="abcd")

        signature = storage._sign({"timestamp": "1315060510", "public_id": "sample"})

        expected = hashlib.sha1(b"public_id=sample&timestamp=1315060510abcd").hexdigest()
        assert signature == expected

    @pytest.mark.asyncio
    async def test_upload_returns_secure_url(self, source_file):
        storage = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret", folder="avatars")
        client = _mock_client(_response(200, json={
            "secure_url": "https://res.cloudinary.com/demo/image/upload/avatars/abc.png",
            "public_id": "avatars/abc",
        }))

        with patch("common.storage.cloudinary.httpx.AsyncClient") as client_cls:
            client_cls.return_value.__aenter__.return_value = client
            result = await storage.upload(source_file)

        assert result.url.startswith("https://res.cloudinary.com/")
        assert result.public_id == "avatars/abc"
        url = client.post.call_args[0][0]
        data = client.post.call_args.kwargs["data"]
        assert url.endswith("/demo/auto/upload")
        assert data["folder"] == "avatars"
        assert data["api_key"] == "key"
        assert "signature" in data

    @pytest.mark.asyncio
    async def test_upload_rejected(self, source_file):
        storage = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret")
        client = _mock_client(_response(400, json={"error": {"message": "Invalid image file"}}))

        with patch("common.storage.cloudinary.httpx.AsyncClient") as client_cls:
            client_cls.return_value.__aenter__.return_value = client
            with pytest.raises(MediaUploadError, match="Invalid image file"):
                await storage.upload(source_file)

    @pytest.mark.asyncio
    async def test_upload_network_error(self, source_file):
        storage = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret")
        client = MagicMock()
        client.post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with patch("common.storage.cloudinary.httpx.AsyncClient") as client_cls:
            client_cls.return_value.__aenter__.return_value = client
            with pytest.raises(MediaUploadError):
                await storage.upload(source_file)


# ─────────────────────────────────────────────────────────────────
# stage_upload
# ─────────────────────────────────────────────────────────────────


class TestStageUpload:
    @pytest.mark.asyncio
    async def test_no_file_yields_none(self, tmp_path):
        async with stage_upload(None, tmp_path, 1024) as path:
            assert path is None

    @pytest.mark.asyncio
    async def test_staged_file_removed_after_block(self, tmp_path):
        upload = UploadFile(file=io.BytesIO(b"image bytes"), filename="photo.JPG")

        async with stage_upload(upload, tmp_path / "temp", 1024) as path:
            assert path.suffix == ".jpg"
            assert path.read_bytes() == b"image bytes"

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_staged_file_removed_on_error(self, tmp_path):
        upload = UploadFile(file=io.BytesIO(b"image bytes"), filename="photo.png")
        staged = None

        with pytest.raises(RuntimeError):
            async with stage_upload(upload, tmp_path, 1024) as path:
                staged = path
                raise RuntimeError("storage failed")

        assert staged is not None and not staged.exists()

    @pytest.mark.asyncio
    async def test_oversized_file_rejected(self, tmp_path):
        upload = UploadFile(file=io.BytesIO(b"x" * 2048), filename="big.png")

        with pytest.raises(PayloadTooLargeException):
            async with stage_upload(upload, tmp_path, 1024):
                pass

        assert list(tmp_path.iterdir()) == []
