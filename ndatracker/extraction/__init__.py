"""
Document extraction: uploaded file in, pre-filled draft out.
"""

from .base import BackendMetadata, ExtractionBackend
from .pipeline import ExtractionPipeline
from .placeholder import (
    DOCUMENT_EXTENSIONS,
    PlaceholderExtractionBackend,
    guess_counterparty,
    strip_document_extension,
)

__all__ = [
    "BackendMetadata",
    "DOCUMENT_EXTENSIONS",
    "ExtractionBackend",
    "ExtractionPipeline",
    "PlaceholderExtractionBackend",
    "guess_counterparty",
    "strip_document_extension",
]
