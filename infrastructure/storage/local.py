"""Local-disk FileStore.

Files are written under ``upload_dir`` with random names, and the returned
path (``<upload_dir name>/<random>.<ext>``) is what the account stores. The
app mounts the same directory as static files, so a stored path maps directly
onto a public URL.
"""

import os
from typing import Optional

from starlette.concurrency import run_in_threadpool

from infrastructure.storage.protocol import ImageUpload
from shared.generators import generate_file_token
from shared.logging import get_logger

log = get_logger(__name__)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def _extension_for(upload: ImageUpload) -> str:
    ext = _EXTENSIONS.get(upload.content_type or "")
    if ext:
        return ext
    _, raw_ext = os.path.splitext(upload.filename or "")
    raw_ext = raw_ext.lower()
    return raw_ext if raw_ext in _EXTENSIONS.values() else ".bin"


class LocalFileStore:
    def __init__(self, upload_dir: str, public_prefix: Optional[str] = None) -> None:
        self._root = os.path.abspath(upload_dir)
        self._prefix = (public_prefix or os.path.basename(self._root)).strip("/")
        os.makedirs(self._root, exist_ok=True)

    @property
    def root(self) -> str:
        return self._root

    async def save(self, upload: ImageUpload) -> str:
        name = f"{generate_file_token()}{_extension_for(upload)}"
        target = os.path.join(self._root, name)
        await run_in_threadpool(self._write, target, upload.content)
        log.info("upload_saved", file_name=name, size=upload.size)
        return f"{self._prefix}/{name}"

    async def delete(self, path: str) -> None:
        name = os.path.basename(path)
        target = os.path.join(self._root, name)
        try:
            await run_in_threadpool(os.remove, target)
        except FileNotFoundError:
            log.warning("upload_delete_missing", file_name=name)

    @staticmethod
    def _write(target: str, content: bytes) -> None:
        with open(target, "wb") as fh:
            fh.write(content)
