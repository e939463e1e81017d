"""
Placeholder extraction backend.

Derives a draft from the file name alone and fills the free-text fields with
standard NDA boilerplate. It stands in for a real OCR/NLP backend and keeps
the same latency profile so the rest of the system behaves as it would with
one.
"""

import asyncio
import logging
from datetime import date
from typing import Callable

from dateutil.relativedelta import relativedelta

from ..models import Draft, UploadedFile
from ..utils.logging import log_event
from .base import BackendMetadata, ExtractionBackend

DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt", ".rtf", ".odt")

DEFAULT_TERM = relativedelta(years=2)

BOILERPLATE_LIMITATIONS = "No disclosure to third parties without written consent"
BOILERPLATE_OBLIGATIONS = "Return or destroy confidential information upon termination"
BOILERPLATE_CONFIDENTIALITY_PERIOD = "3 years after termination"


def strip_document_extension(filename: str) -> str:
    """Remove one known document extension (case-insensitive) from a file name."""
    lowered = filename.lower()
    for extension in DOCUMENT_EXTENSIONS:
        if lowered.endswith(extension):
            return filename[: -len(extension)]
    return filename


def guess_counterparty(title: str, suffix: str) -> str:
    """
    The part of the title before the first '-', labelled as an organization.

    "Acme-NDA" -> "Acme Inc.". Returns "" when there is no usable token.
    """
    token = title.split("-", 1)[0].strip()
    if not token:
        return ""
    return f"{token} {suffix}".strip()


class PlaceholderExtractionBackend(ExtractionBackend):
    """File-name heuristics with fixed boilerplate."""

    def __init__(
        self,
        latency_seconds: float = 2.0,
        counterparty_suffix: str = "Inc.",
        clock: Callable[[], date] = date.today,
    ):
        """
        Args:
            latency_seconds: Delay before the draft is returned
            counterparty_suffix: Organizational label for the counterparty
            clock: Source of "today" for the date fields
        """
        self.latency_seconds = latency_seconds
        self.counterparty_suffix = counterparty_suffix
        self._clock = clock
        super().__init__()

    def _get_metadata(self) -> BackendMetadata:
        return BackendMetadata(
            name="extract.placeholder",
            description="Derive contract fields from the file name",
            supported_extensions=list(DOCUMENT_EXTENSIONS),
            simulated=True,
        )

    async def extract(self, file: UploadedFile) -> Draft:
        content = await file.read()

        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        today = self._clock()
        title = strip_document_extension(file.name)

        log_event(
            "placeholder_extraction_applied",
            {"file_name": file.name, "size_bytes": len(content)},
            level=logging.DEBUG,
        )

        return Draft(
            title=title,
            effective_date=today,
            expiry_date=today + DEFAULT_TERM,
            counterparty=guess_counterparty(title, self.counterparty_suffix),
            limitations=BOILERPLATE_LIMITATIONS,
            obligations=BOILERPLATE_OBLIGATIONS,
            confidentiality_period=BOILERPLATE_CONFIDENTIALITY_PERIOD,
            notes="",
        )
