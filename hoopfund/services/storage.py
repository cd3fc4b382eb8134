# hoopfund/services/storage.py
"""Sponsor-logo bucket on the local filesystem.

Objects are written under a fresh random name and never overwritten; the
returned public URL is what gets stored on the sponsor row.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Final, Optional

from werkzeug.utils import secure_filename

from hoopfund.config.settings import Settings
from hoopfund.domain.errors import ValidationError

log = logging.getLogger(__name__)

MAX_LOGO_BYTES: Final[int] = 5 * 1024 * 1024

ALLOWED_LOGO_TYPES: Final[Dict[str, str]] = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/svg+xml": ".svg",
}

_EXT_TO_TYPE: Final[Dict[str, str]] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
}


@dataclass(frozen=True)
class StoredLogo:
    key: str
    url: str
    size: int
    content_type: str


class LogoStorage:
    def __init__(self, root: Path, public_base_url: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "LogoStorage":
        return cls(settings.logo_storage_dir, settings.logo_public_base_url)

    def _content_type(self, content_type: Optional[str], filename: Optional[str]) -> str:
        ctype = (content_type or "").split(";", 1)[0].strip().lower()
        if not ctype or ctype == "application/octet-stream":
            ext = Path(secure_filename(filename or "")).suffix.lower()
            ctype = _EXT_TO_TYPE.get(ext, ctype)
        if ctype not in ALLOWED_LOGO_TYPES:
            raise ValidationError("logo", "Logo must be a PNG, JPEG or SVG image.")
        return ctype

    def save(self, stream: BinaryIO, *, content_type: Optional[str], filename: Optional[str] = None) -> StoredLogo:
        ctype = self._content_type(content_type, filename)

        data = stream.read(MAX_LOGO_BYTES + 1)
        if not data:
            raise ValidationError("logo", "Logo file is empty.")
        if len(data) > MAX_LOGO_BYTES:
            raise ValidationError("logo", "Logo must be 5 MB or smaller.")

        self.root.mkdir(parents=True, exist_ok=True)
        key = f"{uuid.uuid4().hex}{ALLOWED_LOGO_TYPES[ctype]}"
        # "xb" refuses to clobber an existing object
        with open(self.root / key, "xb") as fh:
            fh.write(data)

        log.info("stored sponsor logo %s (%s bytes, %s)", key, len(data), ctype)
        return StoredLogo(key=key, url=f"{self.public_base_url}/{key}", size=len(data), content_type=ctype)

    def path_for(self, key: str) -> Path:
        safe = secure_filename(key)
        if not safe or safe != key:
            raise ValidationError("key", "Invalid logo key.")
        return self.root / safe
