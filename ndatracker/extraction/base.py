"""
Base class for extraction backends.
"""

from abc import ABC, abstractmethod
from typing import List

from pydantic import BaseModel

from ..models import Draft, UploadedFile


class BackendMetadata(BaseModel):
    """Extraction backend metadata."""

    name: str
    description: str
    supported_extensions: List[str]
    simulated: bool = False


class ExtractionBackend(ABC):
    """
    Turns an uploaded file into a best-effort Draft.

    Backends must not fail on content they do not understand; they fall back
    to weaker guesses and leave fields empty instead. Only a file that cannot
    be read at all is an ExtractionError.
    """

    def __init__(self):
        self.metadata = self._get_metadata()

    @abstractmethod
    def _get_metadata(self) -> BackendMetadata:
        pass

    @abstractmethod
    async def extract(self, file: UploadedFile) -> Draft:
        """
        Extract contract fields from a file.

        Raises:
            ExtractionError: If the file cannot be read
        """
        pass
