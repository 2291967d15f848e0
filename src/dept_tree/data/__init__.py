"""
数据模块
包含行存储后端
"""

from .storage import (
    DataStoreAdapter,
    NodeFilter,
    MemoryStore,
    JSONStore,
    SQLiteStore,
    create_store
)

__all__ = [
    'DataStoreAdapter',
    'NodeFilter',
    'MemoryStore',
    'JSONStore',
    'SQLiteStore',
    'create_store'
]
