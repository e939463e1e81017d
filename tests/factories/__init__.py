"""
Data factories for creating test objects.
"""

from .contract_factory import FIXED_ADDED_AT, ContractFactory

__all__ = ["ContractFactory", "FIXED_ADDED_AT"]
