"""
Media lifecycle reconciliation.

Keeps the media references stored on an entity field consistent with the
assets on the managed host across create, update and delete:

1. prepare: decode and normalize the client's descriptor (no side effects)
2. stage:   upload new attachments and compute the final value and the
            references that dropped out of the field
3. release: delete dropped references that live on the managed host

Services prepare every field of a request first, stage them, persist the
entity and only then release, so a persisted entity never points at an
asset that was already deleted.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from src.services.media_store import Attachment, MediaStore
from src.utils.constants import config
from src.utils.errors import UploadError, ValidationError
from src.utils.json_fields import ensure_list, parse_json_field

logger = logging.getLogger(__name__)


class Arity(str, Enum):
    SINGLE = "single"
    LIST = "list"


class Shape(str, Enum):
    URL = "url"
    PORTFOLIO = "portfolio"
    BROCHURE = "brochure"


PORTFOLIO_KINDS = ("image", "video")


@dataclass
class MediaPlan:
    """A parsed, side-effect free description of one field's change."""

    field_name: str
    arity: Arity
    shape: Shape
    folder: str
    current: Any
    proposed: Any = None
    attachments: List[Attachment] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return self.proposed is None and not self.attachments

    @property
    def resource_type(self) -> str:
        return "raw" if self.shape == Shape.BROCHURE else "auto"


@dataclass
class ReconcileResult:
    """Outcome of reconciling one field."""

    value: Any
    removed: List[str] = field(default_factory=list)
    uploaded: List[str] = field(default_factory=list)
    deletes_attempted: int = 0


def media_key(item: Any) -> Optional[str]:
    """Identity of a stored media entry: the URL it points at."""
    if isinstance(item, str):
        return item or None
    if isinstance(item, dict):
        return item.get("file_url") or item.get("url")
    return None


def collect_urls(value: Any) -> List[str]:
    """All media URLs held by a single or list field value."""
    urls = []
    for item in ensure_list(value):
        key = media_key(item)
        if key:
            urls.append(key)
    return urls


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_url_entry(entry: Any, field_name: str) -> str:
    key = media_key(entry)
    if not key:
        raise ValidationError(f"Invalid media entry in field '{field_name}'")
    return key


def _normalize_portfolio_entry(entry: Any, field_name: str) -> Dict[str, str]:
    if isinstance(entry, str):
        if not entry:
            raise ValidationError(f"Invalid media entry in field '{field_name}'")
        return {"url": entry, "kind": "image"}
    if not isinstance(entry, dict):
        raise ValidationError(f"Invalid media entry in field '{field_name}'")

    url = entry.get("url") or entry.get("reference")
    kind = entry.get("kind") or entry.get("type") or "image"
    if not url:
        raise ValidationError(f"Portfolio entries in '{field_name}' need a url")
    if kind not in PORTFOLIO_KINDS:
        raise ValidationError(
            f"Invalid portfolio kind '{kind}'. Must be one of: {', '.join(PORTFOLIO_KINDS)}"
        )
    return {"url": url, "kind": kind}


def _normalize_brochure_entry(entry: Any, field_name: str) -> Dict[str, Any]:
    if isinstance(entry, str):
        return {"file_url": entry}
    if not isinstance(entry, dict):
        raise ValidationError(f"Invalid brochure entry in field '{field_name}'")
    return {
        "title": entry.get("title"),
        "language": entry.get("language"),
        "file_url": entry.get("file_url") or None,
        "uploaded_at": entry.get("uploaded_at"),
        "is_file": bool(entry.get("is_file") or entry.get("isFile")),
    }


_NORMALIZERS = {
    Shape.URL: _normalize_url_entry,
    Shape.PORTFOLIO: _normalize_portfolio_entry,
    Shape.BROCHURE: _normalize_brochure_entry,
}


class MediaReconciler:
    """Computes and applies upload/delete operations for media fields."""

    def __init__(self, store: MediaStore):
        self.store = store

    def prepare(
        self,
        field_name: str,
        current: Any,
        proposed: Any,
        attachments: Optional[List[Attachment]],
        folder: str,
        arity: Arity = Arity.LIST,
        shape: Shape = Shape.URL,
    ) -> MediaPlan:
        """
        Parse and normalize a field change without touching the media host.

        Raises:
            ValidationError: On malformed JSON or entries, or several files
                for a single-valued field
        """
        attachments = list(attachments or [])

        if arity == Arity.SINGLE:
            if len(attachments) > 1:
                raise ValidationError(f"Only one file may be uploaded for '{field_name}'")
            if proposed is not None and not isinstance(proposed, str):
                raise ValidationError(f"Field '{field_name}' must be a URL string")
            return MediaPlan(
                field_name=field_name,
                arity=arity,
                shape=shape,
                folder=folder,
                current=current,
                proposed=proposed or None,
                attachments=attachments,
            )

        normalized = None
        parsed = parse_json_field(proposed, field_name)
        if parsed is not None:
            normalize = _NORMALIZERS[shape]
            normalized = [normalize(entry, field_name) for entry in ensure_list(parsed)]

        return MediaPlan(
            field_name=field_name,
            arity=arity,
            shape=shape,
            folder=folder,
            current=list(current or []),
            proposed=normalized,
            attachments=attachments,
        )

    async def _upload_all(self, plan: MediaPlan) -> List[str]:
        """Upload every attachment concurrently; any failure fails the field."""

        async def upload_one(attachment: Attachment) -> str:
            try:
                return await self.store.upload(
                    attachment.data,
                    plan.folder,
                    filename=attachment.filename,
                    resource_type=plan.resource_type,
                )
            except UploadError:
                raise
            except Exception as e:
                raise UploadError(f"Failed to upload '{attachment.filename}': {str(e)}")

        if not plan.attachments:
            return []

        urls = await asyncio.gather(*(upload_one(a) for a in plan.attachments))
        logger.info(f"Uploaded {len(urls)} file(s) for '{plan.field_name}' to {plan.folder}")
        return list(urls)

    def _fill_brochures(
        self, plan: MediaPlan, retained: List[Dict[str, Any]], uploaded: List[str]
    ) -> List[Dict[str, Any]]:
        """Attach uploaded brochure files to placeholder entries, in order."""
        known = {
            media_key(item): item for item in plan.current if isinstance(item, dict)
        }
        pending = list(zip(plan.attachments, uploaded))
        final = []

        for entry in retained:
            is_placeholder = entry.get("is_file") or not entry.get("file_url")
            if is_placeholder and pending:
                attachment, url = pending.pop(0)
                final.append(
                    {
                        "title": entry.get("title") or attachment.filename,
                        "language": entry.get("language") or config.DEFAULT_BROCHURE_LANGUAGE,
                        "file_url": url,
                        "uploaded_at": _now_iso(),
                    }
                )
            elif entry.get("file_url"):
                previous = known.get(entry["file_url"], {})
                final.append(
                    {
                        "title": entry.get("title") or previous.get("title"),
                        "language": entry.get("language")
                        or previous.get("language")
                        or config.DEFAULT_BROCHURE_LANGUAGE,
                        "file_url": entry["file_url"],
                        "uploaded_at": entry.get("uploaded_at")
                        or previous.get("uploaded_at")
                        or _now_iso(),
                    }
                )
            # a placeholder with neither a file nor a URL is dropped

        for attachment, url in pending:
            final.append(
                {
                    "title": attachment.filename,
                    "language": config.DEFAULT_BROCHURE_LANGUAGE,
                    "file_url": url,
                    "uploaded_at": _now_iso(),
                }
            )
        return final

    async def stage(self, plan: MediaPlan) -> ReconcileResult:
        """
        Run the upload phase and compute the final value.

        Nothing is deleted here; removed references are returned so the
        caller can release them once the entity is persisted.
        """
        if plan.is_noop:
            return ReconcileResult(value=plan.current)

        uploaded = await self._upload_all(plan)

        if plan.arity == Arity.SINGLE:
            if uploaded:
                final = uploaded[0]
            elif plan.proposed is not None:
                final = plan.proposed
            else:
                final = plan.current
            removed = [plan.current] if plan.current and plan.current != final else []
            return ReconcileResult(value=final, removed=removed, uploaded=uploaded)

        retained = plan.proposed if plan.proposed is not None else list(plan.current)

        if plan.shape == Shape.BROCHURE:
            final = self._fill_brochures(plan, retained, uploaded)
        elif plan.shape == Shape.PORTFOLIO:
            final = list(retained) + [{"url": url, "kind": "image"} for url in uploaded]
        else:
            final = list(retained) + uploaded

        kept = {media_key(item) for item in final}
        removed = []
        for item in plan.current:
            key = media_key(item)
            if key and key not in kept and key not in removed:
                removed.append(key)

        return ReconcileResult(value=final, removed=removed, uploaded=uploaded)

    async def release(self, urls: Iterable[str], exclude: Iterable[str] = ()) -> int:
        """
        Delete managed-host assets one at a time.

        External URLs and anything in `exclude` are skipped. Delete failures
        are logged and swallowed.

        Returns:
            Number of delete attempts issued
        """
        skip = set(exclude)
        seen = set()
        attempts = 0

        for url in urls:
            if not url or url in seen or url in skip:
                continue
            seen.add(url)

            reference = self.store.reference_from_url(url)
            if reference is None:
                continue

            attempts += 1
            try:
                await self.store.delete(reference)
            except Exception as e:
                logger.warning(f"Failed to delete media {reference.public_id}: {str(e)}")

        return attempts

    async def reconcile(
        self,
        field_name: str,
        current: Any,
        proposed: Any,
        attachments: Optional[List[Attachment]],
        folder: str,
        arity: Arity = Arity.LIST,
        shape: Shape = Shape.URL,
    ) -> ReconcileResult:
        """Prepare, stage and release a single field in one call."""
        plan = self.prepare(field_name, current, proposed, attachments, folder, arity, shape)
        result = await self.stage(plan)
        result.deletes_attempted = await self.release(result.removed)
        return result
