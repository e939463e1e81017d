"""
Single-slot extraction pipeline.

At most one extraction is in flight. Starting another, or calling
``cancel()``, cancels the pending task and advances the generation counter;
a call whose generation is no longer current never returns its draft, even
if the backend finished anyway.
"""

import asyncio
import logging
from typing import Optional

from ..exceptions import ExtractionError, ExtractionSupersededError
from ..models import Draft, UploadedFile
from ..utils.logging import log_event
from .base import ExtractionBackend


class ExtractionPipeline:
    """Runs an ExtractionBackend with supersede-on-new-request semantics."""

    def __init__(self, backend: ExtractionBackend):
        self.backend = backend
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def cancel(self) -> bool:
        """
        Cancel the pending extraction, if any.

        Returns:
            True if an extraction was pending
        """
        pending = self.in_flight
        if pending:
            self._task.cancel()
        self._generation += 1
        return pending

    async def extract(self, file: UploadedFile) -> Draft:
        """
        Extract a draft from ``file``, superseding any pending extraction.

        Raises:
            ExtractionError: If the file cannot be read or the backend fails
            ExtractionSupersededError: If a newer extraction or a cancel()
                replaced this one before it finished
        """
        self.cancel()
        generation = self._generation

        task = asyncio.ensure_future(self._run(file, generation))
        self._task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # The caller itself was cancelled
            task.cancel()
            raise
        finally:
            if self._task is task and task.done():
                self._task = None

        if task.cancelled() or not self.is_current(generation):
            if not task.cancelled():
                task.exception()  # mark retrieved; a stale failure is not reported
            log_event(
                "extraction_superseded",
                {"file_name": file.name, "generation": generation},
                level=logging.DEBUG,
            )
            raise ExtractionSupersededError(generation)

        error = task.exception()
        if error is not None:
            log_event(
                "extraction_failed",
                {"file_name": file.name, "error": str(error)},
                level=logging.WARNING,
            )
            if isinstance(error, ExtractionError):
                raise error
            raise ExtractionError(f"Extraction of {file.name} failed: {error}") from error

        return task.result()

    async def _run(self, file: UploadedFile, generation: int) -> Draft:
        log_event(
            "extraction_started",
            {
                "file_name": file.name,
                "generation": generation,
                "backend": self.backend.metadata.name,
            },
        )
        draft = await self.backend.extract(file)
        log_event(
            "extraction_completed",
            {"file_name": file.name, "title": draft.title, "generation": generation},
        )
        return draft
