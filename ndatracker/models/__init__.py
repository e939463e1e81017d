"""
Pydantic models for NDA Tracker.
"""

from .contract import DRAFT_FIELDS, ContractFields, ContractRecord, Draft
from .upload import UploadedFile

__all__ = [
    "ContractFields",
    "ContractRecord",
    "Draft",
    "DRAFT_FIELDS",
    "UploadedFile",
]
