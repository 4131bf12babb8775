# profilehub/infra/storage/local_picture_storage.py
from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

from werkzeug.utils import secure_filename

from profilehub.services._shared.errors import ValidationError
from profilehub.services.profile.dto import PictureUpload

logger = logging.getLogger(__name__)

PICTURES_DIR = "profile-pictures"


class LocalPictureStorage:
    """
    Store profile pictures on the local filesystem.

    Files land in ``<root>/profile-pictures`` under a unique
    ``profile-<uuid>.<ext>`` name; callers keep only the relative path
    (``profile-pictures/profile-....png``) on the user row.

    :param root: Upload root (``UPLOAD_FOLDER``).
    :param max_bytes: Largest accepted picture.
    :param default_picture: File name served when a user has no picture.
    """

    def __init__(self, root: str | os.PathLike[str], *, max_bytes: int, default_picture: str | None = None) -> None:
        self.root = Path(root).resolve()
        self.max_bytes = int(max_bytes)
        self.default_picture = default_picture

    @property
    def pictures_dir(self) -> Path:
        return self.root / PICTURES_DIR

    # ------------------------------ writes -------------------------------

    def save(self, upload: PictureUpload) -> str:
        """
        Persist ``upload`` and return its path relative to the root.

        :raises ValidationError: Not an image, empty, or too large.
        """
        if not (upload.content_type or "").startswith("image/"):
            raise ValidationError("Only image files are allowed!")
        if not upload.data:
            raise ValidationError("Uploaded file is empty")
        if len(upload.data) > self.max_bytes:
            raise ValidationError(
                f"File size too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB."
            )

        ext = Path(secure_filename(upload.filename or "")).suffix.lower()
        name = f"profile-{uuid.uuid4().hex}{ext}"
        self.pictures_dir.mkdir(parents=True, exist_ok=True)
        (self.pictures_dir / name).write_bytes(upload.data)
        return f"{PICTURES_DIR}/{name}"

    def delete(self, relative_path: str | None) -> bool:
        """Remove a stored picture. Failures are logged, never raised."""
        path = self._resolve(relative_path)
        if path is None:
            return False
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("storage.delete_failed", extra={"path": relative_path}, exc_info=True)
            return False
        return True

    # ------------------------------ reads --------------------------------

    def open_path(self, relative_path: str | None) -> Path | None:
        """Absolute path of a stored picture, or the default one, or ``None``."""
        path = self._resolve(relative_path)
        if path is not None and path.is_file():
            return path
        if self.default_picture:
            default = self.pictures_dir / self.default_picture
            if default.is_file():
                return default
        return None

    def _resolve(self, relative_path: str | None) -> Path | None:
        if not relative_path:
            return None
        candidate = (self.root / relative_path).resolve()
        # Stored paths must stay under the upload root.
        if self.root not in candidate.parents:
            return None
        return candidate
