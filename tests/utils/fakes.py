"""In-memory stand-ins for remote collaborators."""

from typing import Optional

from src.services.media_store import MediaReference
from src.utils.errors import UploadError

MANAGED_PREFIX = "https://media.test/"


def managed(path: str) -> str:
    """URL of an asset hosted on the fake managed host."""
    return f"{MANAGED_PREFIX}{path}"


class FakeMediaStore:
    """
    Media store that keeps everything in lists.

    Only URLs under MANAGED_PREFIX count as managed; anything else is treated
    as externally hosted.
    """

    def __init__(self):
        self.uploads = []
        self.deleted = []
        self.fail_uploads_for = set()
        self.fail_deletes = False
        self._counter = 0

    async def upload(
        self,
        data: bytes,
        folder: str,
        filename: Optional[str] = None,
        resource_type: str = "auto",
    ) -> str:
        if not data:
            raise UploadError("No file buffer provided for upload")
        if filename in self.fail_uploads_for:
            raise UploadError(f"Upload rejected for {filename}")

        self._counter += 1
        url = managed(f"{folder}/{self._counter}-{filename or 'upload'}")
        self.uploads.append(
            {"url": url, "folder": folder, "filename": filename, "resource_type": resource_type}
        )
        return url

    async def delete(self, reference: MediaReference) -> None:
        self.deleted.append(reference)
        if self.fail_deletes:
            raise RuntimeError("media host unavailable")

    def reference_from_url(self, url: Optional[str]) -> Optional[MediaReference]:
        if not url or not url.startswith(MANAGED_PREFIX):
            return None
        return MediaReference(public_id=url[len(MANAGED_PREFIX):], resource_type="image")

    @property
    def uploaded_urls(self) -> list:
        return [upload["url"] for upload in self.uploads]

    @property
    def deleted_urls(self) -> list:
        return [managed(reference.public_id) for reference in self.deleted]

    @property
    def call_count(self) -> int:
        return len(self.uploads) + len(self.deleted)
