from pathlib import Path
from typing import Optional
import os
import uuid

from chat_api.utils.logger import get_logger

logger = get_logger(__name__)


class LocalFileStorage:
    """
    Filesystem blob store for uploaded images.

    Every blob gets a generated unique filename (the original extension is
    kept) and is referenced by its public path, e.g. ``/files/<name>.png``,
    which the application serves as static files.
    """

    def __init__(self, files_dir: str, url_prefix: str = "/files"):
        self.root = Path(files_dir).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, data: bytes, original_filename: Optional[str] = None) -> str:
        """Write ``data`` to a new file and return its reference."""
        ext = os.path.splitext(original_filename or "")[1].lower()
        name = f"{uuid.uuid4().hex}{ext}"
        path = self.root / name
        with open(path, "wb") as fh:
            fh.write(data)
        ref = f"{self.url_prefix}/{name}"
        logger.info(f"Stored blob {ref} ({len(data)} bytes)")
        return ref

    def path_for(self, ref: str) -> Path:
        """Resolve a reference to its file, refusing anything outside the storage root."""
        prefix = self.url_prefix + "/"
        if not ref.startswith(prefix):
            raise ValueError(f"Not a reference of this storage: {ref}")
        name = ref[len(prefix):]
        path = (self.root / name).resolve()
        if path.parent != self.root:
            raise ValueError(f"Reference escapes storage root: {ref}")
        return path

    def exists(self, ref: str) -> bool:
        try:
            return self.path_for(ref).is_file()
        except ValueError:
            return False

    def delete(self, ref: str) -> None:
        """Remove a stored blob; a missing file is not an error."""
        path = self.path_for(ref)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        logger.info(f"Deleted blob {ref}")
