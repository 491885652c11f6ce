"""
Media delegate backed by Cloudinary.

Images are uploaded to the configured folder, resized to fit 600x600, and
addressed afterwards by the public id derived from their delivery URL.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from app.config import Settings, get_settings
from app.utils.exceptions import APIException, UploadFailedError, MediaDeleteError
from app.utils.file_utils import FileValidator, write_temp_file, remove_temp_file

logger = logging.getLogger(__name__)


def public_id_from_url(url: str) -> str:
    """
    Derive the Cloudinary public id from a delivery URL.

    The public id is the path after ``/upload/``, minus an optional
    ``v<digits>`` version segment and minus the file extension::

        https://res.cloudinary.com/demo/image/upload/v1712/image/abc123.jpg
        -> image/abc123

    Transformation segments are never stored in URLs we persist, so they are
    not handled. URLs without an ``/upload/`` segment fall back to the last
    path segment without its extension.
    """
    path = urlparse(url).path
    marker = "/upload/"

    if marker in path:
        remainder = path.split(marker, 1)[1]
        segments = [s for s in remainder.split("/") if s]
        if segments and segments[0].startswith("v") and segments[0][1:].isdigit():
            segments = segments[1:]
    else:
        segments = [s for s in path.split("/") if s][-1:]

    if not segments:
        raise ValueError(f"Cannot derive public id from URL: {url}")

    segments[-1] = segments[-1].rsplit(".", 1)[0]
    return "/".join(segments)


class MediaService:
    """
    Upload and delete images on the media host.

    Uploads block the request until the host answers; temp files are always removed.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        if self.settings.media_configured:
            cloudinary.config(
                cloud_name=self.settings.cloudinary_cloud_name,
                api_key=self.settings.cloudinary_api_key,
                api_secret=self.settings.cloudinary_api_secret,
                secure=True
            )

    async def upload(self, file: UploadFile) -> str:
        """
        Upload one image and return its permanent https URL.

        Raises:
            ValidationError: If the file is not an acceptable image
            UploadFailedError: On missing credentials or any host/transport error
        """
        content, extension = await FileValidator.read_and_validate(file)

        if not self.settings.media_configured:
            raise UploadFailedError("Media host credentials are not configured")

        temp_path = None
        try:
            temp_path = await write_temp_file(content, extension, self.settings.upload_temp_dir)
            size = self.settings.image_max_dimension
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                str(temp_path),
                folder=self.settings.cloudinary_folder,
                resource_type="image",
                transformation=[{"width": size, "height": size, "crop": "limit"}],
            )
            url = result.get("secure_url") or result.get("url")
            if not url:
                raise UploadFailedError("Media host returned no URL")

            logger.info(f"Uploaded image {file.filename} as {result.get('public_id')}")
            return url
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Image upload failed for {file.filename}: {e}")
            raise UploadFailedError(str(e))
        finally:
            if temp_path is not None:
                remove_temp_file(temp_path)

    async def delete(self, public_id: str) -> bool:
        """
        Delete an image by public id.

        Returns True when the host deleted it and False when it was already gone.

        Raises:
            MediaDeleteError: For any other outcome
        """
        if not self.settings.media_configured:
            raise MediaDeleteError(public_id, "Media host credentials are not configured")

        try:
            result = await run_in_threadpool(
                cloudinary.uploader.destroy, public_id, resource_type="image"
            )
        except Exception as e:
            raise MediaDeleteError(public_id, str(e))

        outcome = (result or {}).get("result")
        if outcome == "ok":
            logger.info(f"Deleted image {public_id}")
            return True
        if outcome == "not found":
            logger.info(f"Image {public_id} already absent on media host")
            return False
        raise MediaDeleteError(public_id, f"Unexpected result: {outcome}")

    async def delete_url(self, url: str) -> bool:
        try:
            public_id = public_id_from_url(url)
        except ValueError as e:
            raise MediaDeleteError(url, str(e))
        return await self.delete(public_id)

    async def release_urls(self, urls) -> list:
        """
        Best-effort delete of several images.

        Returns:
            URLs that could not be deleted; each failure is logged
        """
        failed = []
        for url in urls or []:
            if not url:
                continue
            try:
                await self.delete_url(url)
            except MediaDeleteError as e:
                logger.warning(f"Failed to delete image {url}: {e.detail} ({e.error})")
                failed.append(url)
        return failed


def get_media_service() -> MediaService:
    """Dependency to get the media service."""
    return MediaService()
