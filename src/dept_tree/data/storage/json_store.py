"""
JSON文件存储实现
将所有部门行存储在单个JSON文件中，人类可读，轻量级
适用于小项目、原型开发
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable

from .memory_store import MemoryStore
from .adapter import NODE_FIELDS
from .exceptions import StorageConnectionError, StorageOperationError


class JSONStore(MemoryStore):
    """
    JSON文件存储 - 内存中操作，成功提交后整体写回文件

    事务回滚时文件保持不变；事务外的单次写操作立即写回。
    """

    store_type = "json"

    def __init__(self, file_path: str):
        """
        初始化JSON存储

        Args:
            file_path: JSON文件路径
        """
        super().__init__()
        self.file_path = Path(file_path)
        self._ensure_file_exists()
        self._load_data()

    def _ensure_file_exists(self):
        """确保JSON文件存在"""
        if not self.file_path.exists():
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageConnectionError(str(e), store_type=self.store_type,
                                         location=str(self.file_path))
            self._save_data()

    def _load_data(self):
        """加载JSON文件"""
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageConnectionError(f"JSON文件损坏: {e}", store_type=self.store_type,
                                         location=str(self.file_path))
        except OSError as e:
            raise StorageConnectionError(f"读取JSON文件失败: {e}", store_type=self.store_type,
                                         location=str(self.file_path))

        self._nodes = {}
        for row in data.get('nodes', []):
            self._nodes[row['id']] = {field: row.get(field) for field in NODE_FIELDS}
        self._next_id = data.get('next_id', max(self._nodes, default=0) + 1)

    def _save_data(self):
        """保存JSON文件"""
        data = {
            'next_id': self._next_id,
            'nodes': [self._nodes[node_id] for node_id in sorted(self._nodes)]
        }
        try:
            with open(self.file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StorageOperationError(f"写入JSON文件失败: {e}", operation="save",
                                        store_type=self.store_type)

    def _autosave(self):
        """事务外的写操作立即落盘"""
        if not self.in_transaction:
            self._save_data()

    # ========== 事务 ==========

    def _commit(self) -> None:
        try:
            self._save_data()
        except StorageOperationError:
            # 文件未写成功，内存也回到事务前
            self._rollback()
            raise
        super()._commit()

    # ========== 写操作 ==========

    def insert_node(self, row: Dict[str, Any]) -> int:
        with self._lock:
            node_id = super().insert_node(row)
            self._autosave()
            return node_id

    def update_node(self, node_id: int, **fields: Any) -> None:
        with self._lock:
            super().update_node(node_id, **fields)
            self._autosave()

    def delete_nodes(self, node_ids: Iterable[int]) -> int:
        with self._lock:
            deleted = super().delete_nodes(node_ids)
            self._autosave()
            return deleted

    def shift_indexes(self, root_id, field, from_index, delta, exclude_ids=()) -> int:
        with self._lock:
            affected = super().shift_indexes(root_id, field, from_index, delta, exclude_ids)
            self._autosave()
            return affected

    def move_nodes(self, node_ids, index_offset, level_delta, root_id) -> int:
        with self._lock:
            affected = super().move_nodes(node_ids, index_offset, level_delta, root_id)
            self._autosave()
            return affected

    def clear(self):
        """清空所有数据（测试用）"""
        with self._lock:
            super().clear()
            self._save_data()

    def __str__(self):
        return f"JSONStore(file={self.file_path}, nodes={len(self._nodes)})"
