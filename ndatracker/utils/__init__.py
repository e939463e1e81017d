"""
Shared utilities for NDA Tracker.
"""
