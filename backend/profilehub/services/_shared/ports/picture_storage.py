from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from profilehub.services.profile.dto import PictureUpload


class PictureStorage(Protocol):
    """Port for persisting profile pictures outside the database."""

    def save(self, upload: PictureUpload) -> str: ...

    def delete(self, relative_path: str | None) -> bool: ...

    def open_path(self, relative_path: str | None) -> Path | None: ...
