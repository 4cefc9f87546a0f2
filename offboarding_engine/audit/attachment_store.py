"""
Attachment Store Module.

File storage for documents attached to offboarding steps: notice letters
and termination orders. Callers keep only the URL returned by ``upload``.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Optional, Union
from urllib.parse import unquote

logger = logging.getLogger(__name__)


class AttachmentStore:
    """
    Local file storage for offboarding attachments.

    Files are written under the storage directory at the path given by the
    caller and are addressed by ``file://`` URLs.
    """

    def __init__(self, storage_dir: str = "attachments"):
        """
        Initialize the attachment store.

        Args:
            storage_dir: Directory to store attachment files
        """
        self.storage_dir = Path(storage_dir).resolve()
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def upload(self, path: str, data: Union[bytes, str]) -> str:
        """
        Store a file and return its download URL.

        Args:
            path: Relative storage path, e.g. ``offboarding/E1/<process>/letter.pdf``
            data: File contents

        Returns:
            URL of the stored file
        """
        target = self._resolve(path)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(data, str):
                target.write_text(data, encoding="utf-8")
            else:
                target.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to store attachment {path}: {e}")
            raise

        url = target.as_uri()
        logger.info(f"Stored attachment at {url}")
        return url

    def get_path(self, url: str) -> Optional[Path]:
        """
        Map a URL returned by ``upload`` back to the stored file.

        Returns:
            Absolute path if the file exists, None otherwise
        """
        prefix = self.storage_dir.as_uri()
        if not url.startswith(prefix):
            return None
        path = Path(self.storage_dir, *PurePosixPath(unquote(url[len(prefix):])).parts[1:])
        return path if path.exists() else None

    def _resolve(self, path: str) -> Path:
        parts = PurePosixPath(path).parts
        if not parts or PurePosixPath(path).is_absolute() or ".." in parts:
            raise ValueError(f"Invalid attachment path: {path}")
        return self.storage_dir.joinpath(*parts)
