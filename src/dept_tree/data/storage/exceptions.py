"""
部门行存储的异常

连接类错误在打开存储时抛出（文件无法创建、内容损坏）；
操作类错误在读写部门行时抛出，携带操作名和部门ID。
"""
from typing import Optional

from ...exceptions import DataStoreError


class StorageConnectionError(DataStoreError):
    """部门存储无法打开"""
    def __init__(self, message: str, store_type: str, location: Optional[str] = None, **kwargs):
        super().__init__(
            message=f"无法打开部门存储: {message}",
            operation="CONNECT",
            store_type=store_type,
            **kwargs
        )
        self.location = location
        if location is not None:
            self.details["location"] = location


class StorageOperationError(DataStoreError):
    """读写部门行失败"""
    def __init__(self, message: str, operation: str, store_type: str,
                 node_id: Optional[int] = None, **kwargs):
        super().__init__(
            message=f"部门行{operation}失败: {message}",
            operation=operation,
            store_type=store_type,
            **kwargs
        )
        self.node_id = node_id
        if node_id is not None:
            self.details["node_id"] = node_id


class RowNotFoundError(StorageOperationError):
    """要更新的部门行不存在"""
    def __init__(self, node_id: int, operation: str, store_type: str, **kwargs):
        super().__init__(
            f"ID为 {node_id} 的行不存在",
            operation=operation,
            store_type=store_type,
            node_id=node_id,
            **kwargs
        )
