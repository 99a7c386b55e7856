"""
Media store boundary.

The reconciler and the entity services only depend on this interface; the
Cloudinary client in src.integrations.cloudinary is the production
implementation.
"""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class Attachment:
    """A binary file that arrived with a request."""

    data: bytes
    filename: str = "upload"
    content_type: str = "application/octet-stream"

    @property
    def is_pdf(self) -> bool:
        return self.content_type == "application/pdf" or self.filename.lower().endswith(".pdf")


@dataclass(frozen=True)
class MediaReference:
    """Identifies an asset on the managed host."""

    public_id: str
    resource_type: str = "image"


class MediaStore(Protocol):
    """Capability the reconciler needs from a media host."""

    async def upload(
        self,
        data: bytes,
        folder: str,
        filename: Optional[str] = None,
        resource_type: str = "auto",
    ) -> str:
        """Upload bytes into folder and return the delivery URL. Raises UploadError."""
        ...

    async def delete(self, reference: MediaReference) -> None:
        """Delete an asset. Never raises."""
        ...

    def reference_from_url(self, url: Optional[str]) -> Optional[MediaReference]:
        """Return the reference for a managed-host URL, None for anything else."""
        ...
