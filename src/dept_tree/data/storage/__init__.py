"""
部门行存储

每个后端保存同一种行（id、name、parent_id、level、left_index、right_index、root_id），
并提供可重入事务，嵌套集的结构修改在一个事务中完成。
"""

from .adapter import DataStoreAdapter, NodeFilter
from .memory_store import MemoryStore
from .json_store import JSONStore
from .sqlite_store import SQLiteStore

# 配置中的storage_backend到后端类
STORAGE_TYPES = {
    'memory': MemoryStore,
    'json': JSONStore,
    'sqlite': SQLiteStore
}


def create_store(store_type: str = 'memory', **kwargs) -> DataStoreAdapter:
    """
    按名称创建部门行存储

    Args:
        store_type: 'memory'、'json' 或 'sqlite'，不区分大小写
        **kwargs: 后端构造参数（json用file_path，sqlite用db_path）

    Raises:
        ValueError: 未知的存储类型
    """
    store_class = STORAGE_TYPES.get(store_type.lower())
    if store_class is None:
        raise ValueError(f"不支持的存储类型: {store_type}，可选 {sorted(STORAGE_TYPES)}")
    return store_class(**kwargs)


__all__ = [
    'DataStoreAdapter',
    'NodeFilter',
    'MemoryStore',
    'JSONStore',
    'SQLiteStore',
    'create_store',
    'STORAGE_TYPES'
]
