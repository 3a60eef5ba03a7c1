from .core import RecordStore, Repository, StoreError, UNIQUE_VIOLATION

__all__ = ["RecordStore", "Repository", "StoreError", "UNIQUE_VIOLATION"]
