"""Local media storage for generated audio and uploads."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

from persona_studio.config import settings
from persona_studio.logging import get_logger

logger = get_logger(__name__)


@dataclass
class StoredAsset:
    """Metadata for a stored asset."""

    key: str  # Path relative to the storage root, e.g. "audio/<sha256>.mp3"
    file_path: Path
    url: str
    file_size_bytes: int
    checksum: str


class StorageService:
    """Content-addressed file storage served under a public base URL.

    Identical bytes always map to the same key, so storing twice is
    harmless and concurrent writers of the same asset agree on its name.
    """

    def __init__(
        self,
        base_path: Path | None = None,
        public_base_url: str | None = None,
        create_dirs: bool = True,
    ) -> None:
        """Initialize storage service.

        Args:
            base_path: Base directory for local storage. Defaults to the setting.
            public_base_url: URL prefix under which ``base_path`` is served.
            create_dirs: Whether to create directories if they don't exist
        """
        self.base_path = base_path or Path(settings.storage_path)
        self.public_base_url = (public_base_url or settings.public_media_base_url).rstrip("/")

        if create_dirs:
            self._ensure_dirs()

    def _ensure_dirs(self) -> None:
        for subdir in ("audio", "uploads"):
            (self.base_path / subdir).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _compute_checksum(data: bytes) -> str:
        """Compute SHA256 checksum of data."""
        return hashlib.sha256(data).hexdigest()

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def store_bytes(self, data: bytes, subdir: str, extension: str) -> StoredAsset:
        """Store ``data`` under ``<subdir>/<sha256>.<extension>``."""
        checksum = self._compute_checksum(data)
        key = f"{subdir}/{checksum}.{extension.lstrip('.')}"
        file_path = self.base_path / key

        if not file_path.exists():
            file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
            tmp_path.write_bytes(data)
            tmp_path.replace(file_path)
            logger.info("asset_stored", key=key, size=len(data))

        return StoredAsset(
            key=key,
            file_path=file_path,
            url=self.url_for(key),
            file_size_bytes=len(data),
            checksum=checksum,
        )

    def store_audio(self, data: bytes) -> StoredAsset:
        return self.store_bytes(data, "audio", "mp3")
