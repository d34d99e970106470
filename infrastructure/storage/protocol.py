"""FileStore protocol and the upload value object it accepts."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class ImageUpload:
    filename: Optional[str]
    content_type: Optional[str]
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class FileStore(Protocol):
    async def save(self, upload: ImageUpload) -> str: ...

    async def delete(self, path: str) -> None: ...
