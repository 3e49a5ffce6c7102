from pathlib import Path
import threading
import time
from fastapi import UploadFile

from filedrop.shared.logging_config import logger

CHUNK_BYTES = 1024 * 1024
# NAME_MAX on common filesystems; also the width of FileRecord.filename
MAX_NAME_BYTES = 255

_stamp_lock = threading.Lock()
_last_stamp = 0

def next_stamp() -> int:
    """Millisecond timestamp, strictly increasing within this process."""
    global _last_stamp
    with _stamp_lock:
        _last_stamp = max(int(time.time() * 1000), _last_stamp + 1)
        return _last_stamp

def _fit(name: str, limit: int) -> str:
    """Trim `name` to `limit` UTF-8 bytes, keeping a short extension."""
    if len(name.encode()) <= limit:
        return name
    suffix = Path(name).suffix
    if len(suffix.encode()) > limit // 2:
        suffix = ""
    stem = name[: len(name) - len(suffix)]
    budget = limit - len(suffix.encode())
    return stem.encode()[:budget].decode("utf-8", "ignore") + suffix

def _safe_name(name: str, limit: int = MAX_NAME_BYTES) -> str:
    # drop any client-supplied directories; "a/b\\c.png" -> "c.png"
    base = Path(name.replace("\\", "/")).name
    return _fit(base or "upload.bin", limit)

def stored_name(original: str, stamp: int | None = None) -> str:
    prefix = f"{stamp if stamp is not None else next_stamp()}-"
    return prefix + _safe_name(original, MAX_NAME_BYTES - len(prefix))

class UploadDirectory:
    """The storage directory holding raw uploaded bytes."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def ensure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def path_for(self, name: str) -> Path:
        return self.root / name

    def _open_unique(self, original: str):
        while True:
            name = stored_name(original)
            try:
                return name, self.path_for(name).open("xb")
            except FileExistsError:
                # another process took this stamp; try the next one
                continue

    async def save(self, file: UploadFile) -> str:
        """
        Stream an uploaded part to disk under a fresh name and return that name.
        OSError propagates to the caller.
        """
        name, out = self._open_unique(file.filename or "")
        size = 0
        with out:
            while True:
                chunk = await file.read(CHUNK_BYTES)
                if not chunk:
                    break
                size += len(chunk)
                out.write(chunk)
        await file.close()
        logger.info(f"Stored upload {file.filename!r} as {name} ({size} bytes)")
        return name

    def remove(self, name: str) -> None:
        self.path_for(name).unlink()
        logger.info(f"Removed {name} from {self.root}")
