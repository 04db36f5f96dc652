"""Local object storage for uploaded images."""

import logging
import mimetypes
import time
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote

from ..core.utils import sanitize_file_name

logger = logging.getLogger(__name__)

BUCKETS = {"landing-pages", "thank-you-pages", "app-assets"}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".ico"}

MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class FileStorage:
    """Stores uploads on disk under ``root/<bucket>/<folder>/``."""

    def __init__(self, root: Union[str, Path], public_url: str = ""):
        self.root = Path(root)
        self.public_base = public_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, bucket: str, path: str) -> Path:
        """Map a stored path to disk, refusing anything outside the bucket."""
        if bucket not in BUCKETS:
            raise ValueError(f"Unknown bucket: {bucket}")
        bucket_root = (self.root / bucket).resolve()
        target = (bucket_root / path).resolve()
        if bucket_root != target and bucket_root not in target.parents:
            raise ValueError("Invalid storage path")
        return target

    def upload(
        self,
        bucket: str,
        folder: str,
        filename: str,
        data: bytes,
        timestamp_ms: Optional[int] = None,
    ) -> str:
        """Store a file and return its path relative to the bucket."""
        safe_name = sanitize_file_name(filename)
        if not safe_name or safe_name in (".", ".."):
            raise ValueError("Invalid file name")

        extension = Path(safe_name).suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValueError(
                f"Unsupported file type '{extension or 'none'}'. "
                f"Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
        if not data:
            raise ValueError("Empty file")
        if len(data) > MAX_UPLOAD_BYTES:
            raise ValueError("File too large (max 5 MB)")

        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        relative = f"{folder.strip('/')}/{stamp}-{safe_name}" if folder else f"{stamp}-{safe_name}"

        target = self._resolve(bucket, relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

        logger.info(f"Stored upload {bucket}/{relative} ({len(data)} bytes)")
        return relative

    def open(self, bucket: str, path: str) -> bytes:
        """Read a stored file."""
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise FileNotFoundError(f"{bucket}/{path}")
        return target.read_bytes()

    def delete(self, bucket: str, path: str) -> bool:
        target = self._resolve(bucket, path)
        if target.is_file():
            target.unlink()
            return True
        return False

    def public_url(self, path: Optional[str], bucket: str = "landing-pages") -> str:
        """Build the public URL for a stored path (empty string for no path)."""
        if not path:
            return ""
        if path.startswith(("http://", "https://")):
            return path
        encoded = "/".join(quote(part) for part in path.split("/"))
        return f"{self.public_base}/storage/v1/object/public/{bucket}/{encoded}"

    @staticmethod
    def content_type(path: str) -> str:
        guessed, _ = mimetypes.guess_type(path)
        return guessed or "application/octet-stream"
