"""
NDA Tracker - local contract and NDA tracking core.

Stores contract records, flags the ones expiring soon and pre-fills new
records from dropped documents.
"""

__version__ = "0.1.0"

from .models import ContractRecord, Draft, UploadedFile
from .storage import ContractRecordStore
from .tracker import ContractTracker

__all__ = [
    "ContractRecord",
    "ContractRecordStore",
    "ContractTracker",
    "Draft",
    "UploadedFile",
]
