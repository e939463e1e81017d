"""
Uploaded file handle consumed by the extraction pipeline.
"""

from pathlib import Path
from typing import Optional

import aiofiles
from pydantic import BaseModel, Field

from ..exceptions import ExtractionError


class UploadedFile(BaseModel):
    """A dropped file: its name plus in-memory bytes or a path to read them from."""

    name: str = Field(description="Original file name, including extension")
    content: Optional[bytes] = Field(default=None, description="File bytes if in memory")
    path: Optional[Path] = Field(default=None, description="Location on disk")

    @classmethod
    def from_path(cls, path: Path) -> "UploadedFile":
        path = Path(path)
        return cls(name=path.name, path=path)

    async def read(self) -> bytes:
        """
        Return the file's bytes.

        Raises:
            ExtractionError: If there is nothing to read or the read fails
        """
        if self.content is not None:
            return self.content

        if self.path is None:
            raise ExtractionError(f"No content available for {self.name}")

        try:
            async with aiofiles.open(self.path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise ExtractionError(f"Cannot read {self.name}: {e}") from e
