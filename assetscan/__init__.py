"""Offline-first asset inventory scanning: parse, reconcile, store, and sync scanned records."""

__version__ = "0.3.0"
