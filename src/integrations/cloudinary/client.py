import hashlib
import logging
import time
import httpx
from typing import Optional, Dict, Any
from urllib.parse import urlparse
from src.core.config import settings
from src.integrations.cloudinary.schemas import CloudinaryUploadResult, CloudinaryDestroyResult
from src.services.media_store import MediaReference
from src.utils.errors import UploadError

logger = logging.getLogger(__name__)

RESOURCE_TYPES = ("image", "video", "raw")


class CloudinaryClient:
    """
    Client for the Cloudinary upload/destroy REST API.

    Implements the media store capability: upload bytes, delete by
    reference, and map delivery URLs back to references.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _sign(self, params: Dict[str, Any]) -> str:
        """SHA-1 over the sorted, '&'-joined params followed by the API secret."""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(
            f"{to_sign}{self.settings.CLOUDINARY_API_SECRET}".encode("utf-8")
        ).hexdigest()

    def _signed_payload(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        return {
            **params,
            "api_key": self.settings.CLOUDINARY_API_KEY,
            "signature": self._sign(params),
        }

    def _endpoint(self, resource_type: str, action: str) -> str:
        return (
            f"{self.settings.CLOUDINARY_API_BASE}/"
            f"{self.settings.CLOUDINARY_CLOUD_NAME}/{resource_type}/{action}"
        )

    async def upload(
        self,
        data: bytes,
        folder: str,
        filename: Optional[str] = None,
        resource_type: str = "auto",
    ) -> str:
        """
        Uploads a buffer into a folder.

        Args:
            data: File bytes.
            folder: Destination folder (e.g. 'images/profiles').
            filename: Original filename, forwarded for content sniffing.
            resource_type: 'image', 'raw', 'video' or 'auto'.

        Returns:
            The secure delivery URL of the stored asset.
        """
        if not data:
            raise UploadError("No file buffer provided for upload")

        url = self._endpoint(resource_type, "upload")
        payload = self._signed_payload({"folder": folder})

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    url,
                    data=payload,
                    files={"file": (filename or "upload", data)},
                )

                if response.status_code != 200:
                    logger.error(
                        f"Error uploading to {folder}: {response.status_code} - {response.text}"
                    )
                    response.raise_for_status()

                result = CloudinaryUploadResult(**response.json())

        except httpx.HTTPError as e:
            logger.error(f"HTTP error in upload: {str(e)}")
            raise UploadError(f"Media upload failed: {str(e)}")
        except ValueError as e:
            logger.error(f"Unexpected upload response: {str(e)}")
            raise UploadError("Media upload failed: malformed response from media host")

        logger.info(f"Uploaded asset {result.public_id} to {folder}")
        return result.secure_url

    async def delete(self, reference: MediaReference) -> None:
        """
        Destroys an asset by reference. Failures are logged, never raised.
        """
        url = self._endpoint(reference.resource_type, "destroy")
        payload = self._signed_payload({"public_id": reference.public_id})

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(url, data=payload)

                if response.status_code != 200:
                    logger.error(
                        f"Error deleting {reference.public_id}: {response.status_code} - {response.text}"
                    )
                    return

                result = CloudinaryDestroyResult(**response.json())
                logger.info(f"Destroyed asset {reference.public_id}: {result.result}")

        except Exception as e:
            logger.error(f"Media delete error for {reference.public_id}: {str(e)}")

    def reference_from_url(self, url: Optional[str]) -> Optional[MediaReference]:
        """
        Maps a delivery URL to a reference, or None if it is not ours.

        https://res.cloudinary.com/demo/image/upload/v12345/images/profiles/abc.jpg
        -> MediaReference("images/profiles/abc", "image")
        """
        if not url or not isinstance(url, str):
            return None

        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            return None
        if parsed.hostname != self.settings.CLOUDINARY_DELIVERY_HOST:
            return None

        parts = [part for part in parsed.path.split("/") if part]
        if "upload" not in parts:
            return None

        upload_index = parts.index("upload")
        resource_type = parts[upload_index - 1] if upload_index > 0 else "image"
        if resource_type not in RESOURCE_TYPES:
            resource_type = "image"

        after_upload = parts[upload_index + 1:]
        # Transformation segments sit before the version; the public id follows it.
        for index, part in enumerate(after_upload):
            if part.startswith("v") and part[1:].isdigit():
                after_upload = after_upload[index + 1:]
                break
        if not after_upload:
            return None

        # Raw public ids keep their extension; image/video ids do not.
        if resource_type != "raw":
            after_upload[-1] = after_upload[-1].rsplit(".", 1)[0]

        public_id = "/".join(after_upload)
        if not public_id:
            return None
        return MediaReference(public_id=public_id, resource_type=resource_type)


# Global instance
cloudinary_client = CloudinaryClient()
