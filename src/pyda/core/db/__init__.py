from pyda.core.db.kvstore import KVStore, MemoryKVStore, SQLiteKVStore

__all__ = ["KVStore", "MemoryKVStore", "SQLiteKVStore"]
