"""
Tests for the Cloudinary media delegate and upload validation.
Cloudinary itself is patched out; no network calls are made.
"""

import io
import pytest
from pathlib import Path
from unittest.mock import patch
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.config import Settings
from app.services.media import MediaService, public_id_from_url
from app.utils.exceptions import MediaDeleteError, UploadFailedError, ValidationError
from app.utils.file_utils import FileValidator, remove_temp_file, write_temp_file
from tests.conftest import make_image_bytes


def make_upload(content: bytes, filename: str = "room.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


@pytest.fixture
def media_settings(tmp_path) -> Settings:
    return Settings(
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
        upload_temp_dir=str(tmp_path),
    )


@pytest.fixture
def configured_media(media_settings: Settings) -> MediaService:
    return MediaService(media_settings)


class TestPublicIdFromUrl:

    @pytest.mark.parametrize("url,expected", [
        ("https://res.cloudinary.com/demo/image/upload/v1712345/image/abc123.jpg", "image/abc123"),
        ("https://res.cloudinary.com/demo/image/upload/image/abc123.png", "image/abc123"),
        ("https://res.cloudinary.com/demo/image/upload/v99/abc123.webp", "abc123"),
        ("https://res.cloudinary.com/demo/image/upload/v1/image/nested/pic.jpeg", "image/nested/pic"),
        ("https://cdn.example.com/files/photo.jpg", "photo"),
    ])
    def test_derivation(self, url, expected):
        assert public_id_from_url(url) == expected

    def test_version_like_folder_is_kept_when_not_numeric(self):
        url = "https://res.cloudinary.com/demo/image/upload/vacation/beach.jpg"
        assert public_id_from_url(url) == "vacation/beach"

    def test_underivable(self):
        with pytest.raises(ValueError):
            public_id_from_url("https://res.cloudinary.com/")


class TestUpload:

    async def test_upload_returns_secure_url_and_cleans_up(self, configured_media: MediaService, tmp_path):
        result = {"secure_url": "https://res.cloudinary.com/demo/image/upload/v1/image/x.png", "public_id": "image/x"}

        with patch("cloudinary.uploader.upload", return_value=result) as mock_upload:
            url = await configured_media.upload(make_upload(make_image_bytes("PNG")))

        assert url == result["secure_url"]
        temp_path = Path(mock_upload.call_args.args[0])
        assert temp_path.parent == tmp_path
        assert temp_path.suffix == ".png"
        assert not temp_path.exists()

        kwargs = mock_upload.call_args.kwargs
        assert kwargs["folder"] == "image"
        assert kwargs["transformation"] == [{"width": 600, "height": 600, "crop": "limit"}]

    async def test_host_error_becomes_upload_failed(self, configured_media: MediaService, tmp_path):
        with patch("cloudinary.uploader.upload", side_effect=RuntimeError("boom")):
            with pytest.raises(UploadFailedError) as exc_info:
                await configured_media.upload(make_upload(make_image_bytes("PNG")))

        assert exc_info.value.status_code == 500
        assert exc_info.value.error == "boom"
        assert list(tmp_path.iterdir()) == []

    async def test_missing_url_in_response(self, configured_media: MediaService):
        with patch("cloudinary.uploader.upload", return_value={}):
            with pytest.raises(UploadFailedError):
                await configured_media.upload(make_upload(make_image_bytes("PNG")))

    async def test_unconfigured_host(self, tmp_path):
        media = MediaService(Settings(upload_temp_dir=str(tmp_path)))

        with patch("cloudinary.uploader.upload") as mock_upload:
            with pytest.raises(UploadFailedError):
                await media.upload(make_upload(make_image_bytes("PNG")))

        mock_upload.assert_not_called()

    async def test_invalid_image_never_reaches_host(self, configured_media: MediaService):
        with patch("cloudinary.uploader.upload") as mock_upload:
            with pytest.raises(ValidationError):
                await configured_media.upload(make_upload(b"plain text", "notes.png"))

        mock_upload.assert_not_called()


class TestDelete:

    @pytest.mark.parametrize("outcome,expected", [("ok", True), ("not found", False)])
    async def test_delete_outcomes(self, configured_media: MediaService, outcome, expected):
        with patch("cloudinary.uploader.destroy", return_value={"result": outcome}) as mock_destroy:
            assert await configured_media.delete("image/abc") is expected

        assert mock_destroy.call_args.args[0] == "image/abc"

    async def test_unexpected_outcome(self, configured_media: MediaService):
        with patch("cloudinary.uploader.destroy", return_value={"result": "error"}):
            with pytest.raises(MediaDeleteError):
                await configured_media.delete("image/abc")

    async def test_transport_error(self, configured_media: MediaService):
        with patch("cloudinary.uploader.destroy", side_effect=ConnectionError("offline")):
            with pytest.raises(MediaDeleteError):
                await configured_media.delete("image/abc")

    async def test_release_urls_collects_failures(self, configured_media: MediaService):
        urls = [
            "https://res.cloudinary.com/demo/image/upload/v1/image/good.jpg",
            "https://res.cloudinary.com/demo/image/upload/v1/image/bad.jpg",
            "",
        ]

        def destroy(public_id, **kwargs):
            if public_id == "image/bad":
                raise ConnectionError("offline")
            return {"result": "ok"}

        with patch("cloudinary.uploader.destroy", side_effect=destroy) as mock_destroy:
            failed = await configured_media.release_urls(urls)

        assert failed == [urls[1]]
        assert mock_destroy.call_count == 2


class TestFileValidator:

    async def test_accepts_matching_image(self):
        content, extension = await FileValidator.read_and_validate(
            make_upload(make_image_bytes("JPEG"), "pic.JPG", "image/jpeg")
        )
        assert extension == ".jpg"
        assert content

    @pytest.mark.parametrize("filename,content_type,fmt", [
        ("pic.bmp", "image/png", "PNG"),
        ("pic.png", "application/pdf", "PNG"),
        ("pic.jpg", "image/png", "PNG"),
        ("pic.png", "image/png", "JPEG"),
    ])
    async def test_rejects_mismatches(self, filename, content_type, fmt):
        with pytest.raises(ValidationError):
            await FileValidator.read_and_validate(make_upload(make_image_bytes(fmt), filename, content_type))

    async def test_rejects_empty_file(self):
        with pytest.raises(ValidationError, match="File is empty"):
            await FileValidator.read_and_validate(make_upload(b""))

    async def test_temp_file_helpers(self, tmp_path):
        path = await write_temp_file(b"data", ".png", str(tmp_path))

        assert path.read_bytes() == b"data"
        assert remove_temp_file(path) is True
        assert remove_temp_file(path) is False
