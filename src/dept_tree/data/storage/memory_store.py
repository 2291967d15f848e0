"""
内存存储实现
数据保存在内存中，程序结束即消失
"""
from typing import Dict, List, Any, Optional, Iterable

from .adapter import DataStoreAdapter, NodeFilter, NODE_FIELDS, sort_rows
from .exceptions import RowNotFoundError


class MemoryStore(DataStoreAdapter):
    """内存存储实现，事务通过快照回滚"""

    store_type = "memory"

    def __init__(self):
        super().__init__()

        # 内存数据结构
        self._nodes: Dict[int, Dict[str, Any]] = {}  # id -> row
        self._next_id = 1

        # 事务快照
        self._snapshot: Optional[tuple] = None

    # ========== 事务 ==========

    def _begin(self) -> None:
        self._snapshot = (
            {node_id: row.copy() for node_id, row in self._nodes.items()},
            self._next_id
        )

    def _commit(self) -> None:
        self._snapshot = None

    def _rollback(self) -> None:
        if self._snapshot is not None:
            self._nodes, self._next_id = self._snapshot
            self._snapshot = None

    # ========== 查询 ==========

    def load_node(self, node_id: int) -> Optional[Dict[str, Any]]:
        """按ID加载一行"""
        with self._lock:
            row = self._nodes.get(node_id)
            return row.copy() if row is not None else None

    def query_nodes(self, node_filter: Optional[NodeFilter] = None) -> List[Dict[str, Any]]:
        """按条件查询"""
        with self._lock:
            rows = self._nodes.values()
            if node_filter is not None:
                rows = [row for row in rows if node_filter.matches(row)]
            return [row.copy() for row in sort_rows(rows)]

    # ========== 写操作 ==========

    def insert_node(self, row: Dict[str, Any]) -> int:
        """插入一行"""
        with self._lock:
            node_id = self._next_id
            self._next_id += 1

            new_row = {field: row.get(field) for field in NODE_FIELDS}
            new_row['id'] = node_id
            if new_row['root_id'] is None:
                new_row['root_id'] = node_id

            self._nodes[node_id] = new_row
            return node_id

    def update_node(self, node_id: int, **fields: Any) -> None:
        """更新单行"""
        with self._lock:
            if node_id not in self._nodes:
                raise RowNotFoundError(node_id, operation="update_node", store_type=self.store_type)
            for field in fields:
                if field not in NODE_FIELDS or field == 'id':
                    raise ValueError(f"不支持更新的字段: {field}")
            self._nodes[node_id].update(fields)

    def delete_nodes(self, node_ids: Iterable[int]) -> int:
        """删除若干行"""
        with self._lock:
            deleted = 0
            for node_id in node_ids:
                if self._nodes.pop(node_id, None) is not None:
                    deleted += 1
            return deleted

    def shift_indexes(
            self,
            root_id: int,
            field: str,
            from_index: int,
            delta: int,
            exclude_ids: Iterable[int] = ()
    ) -> int:
        """树内范围平移"""
        self._check_field(field)
        excluded = set(exclude_ids)
        with self._lock:
            affected = 0
            for row in self._nodes.values():
                if row['root_id'] != root_id or row['id'] in excluded:
                    continue
                if row[field] >= from_index:
                    row[field] += delta
                    affected += 1
            return affected

    def move_nodes(
            self,
            node_ids: Iterable[int],
            index_offset: int,
            level_delta: int,
            root_id: int
    ) -> int:
        """整体平移一组行"""
        with self._lock:
            affected = 0
            for node_id in node_ids:
                row = self._nodes.get(node_id)
                if row is None:
                    continue
                row['left_index'] += index_offset
                row['right_index'] += index_offset
                row['level'] += level_delta
                row['root_id'] = root_id
                affected += 1
            return affected

    # ========== 管理 ==========

    def close(self):
        """关闭存储连接（内存存储无操作）"""
        pass

    def clear(self):
        """清空所有数据（测试用）"""
        with self._lock:
            self._nodes.clear()
            self._next_id = 1

    def __str__(self):
        """字符串表示"""
        roots = sum(1 for row in self._nodes.values() if row['parent_id'] is None)
        return f"MemoryStore(trees={roots}, nodes={len(self._nodes)})"
