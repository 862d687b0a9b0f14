from .store import MediaStore, FileMediaStore, MemoryMediaStore

__all__ = ["MediaStore", "FileMediaStore", "MemoryMediaStore"]
