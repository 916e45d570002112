from storegate.lib.storage.base import StorageReader, StoredBlob
from storegate.lib.storage.local import LocalStorageReader

__all__ = ["LocalStorageReader", "StorageReader", "StoredBlob"]
