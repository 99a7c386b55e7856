from typing import Optional
from pydantic import BaseModel


class CloudinaryUploadResult(BaseModel):
    """
    Subset of the upload API response the backend relies on.
    """
    public_id: str
    secure_url: str
    resource_type: Optional[str] = None
    format: Optional[str] = None
    bytes: Optional[int] = None
    version: Optional[int] = None

    # Allow extra fields to capture everything from API without validation error
    model_config = {"extra": "allow"}


class CloudinaryDestroyResult(BaseModel):
    """
    Destroy API response: result is "ok" or "not found".
    """
    result: str

    model_config = {"extra": "allow"}
