"""
存储适配器接口
定义统一的行存储操作接口：点查、按树范围平移、插入/删除、原子提交
"""
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, List, Any, Optional, Iterable, Iterator

# 所有行都包含的字段
NODE_FIELDS = ('id', 'name', 'parent_id', 'level', 'left_index', 'right_index', 'root_id')

# 可以进行范围平移的字段
INDEX_FIELDS = ('left_index', 'right_index')


@dataclass
class NodeFilter:
    """
    行查询条件，所有条件之间为AND关系，区间边界均为开区间

    Attributes:
        root_id: 限定在某棵树内
        parent_id: 父部门ID等于该值
        roots_only: 只返回parent_id为空的行
        left_gt / left_lt: left_index的上下界
        right_gt / right_lt: right_index的上下界
        name_contains: 名称包含（不区分大小写）
    """
    root_id: Optional[int] = None
    parent_id: Optional[int] = None
    roots_only: bool = False
    left_gt: Optional[int] = None
    left_lt: Optional[int] = None
    right_gt: Optional[int] = None
    right_lt: Optional[int] = None
    name_contains: Optional[str] = None

    def matches(self, row: Dict[str, Any]) -> bool:
        """内存实现使用的匹配逻辑"""
        if self.root_id is not None and row['root_id'] != self.root_id:
            return False
        if self.parent_id is not None and row['parent_id'] != self.parent_id:
            return False
        if self.roots_only and row['parent_id'] is not None:
            return False
        if self.left_gt is not None and not row['left_index'] > self.left_gt:
            return False
        if self.left_lt is not None and not row['left_index'] < self.left_lt:
            return False
        if self.right_gt is not None and not row['right_index'] > self.right_gt:
            return False
        if self.right_lt is not None and not row['right_index'] < self.right_lt:
            return False
        if self.name_contains is not None:
            if self.name_contains.casefold() not in row['name'].casefold():
                return False
        return True


def sort_rows(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """按left_index升序（同值时按root_id、id）排列"""
    return sorted(rows, key=lambda r: (r['left_index'], r['root_id'] or 0, r['id']))


class DataStoreAdapter(ABC):
    """数据存储适配器抽象基类"""

    store_type = "abstract"

    def __init__(self):
        # 事务期间一直持有，同一线程可重入
        self._lock = threading.RLock()
        self._tx_depth = 0

    # ========== 事务 ==========

    @abstractmethod
    def _begin(self) -> None:
        """开始最外层事务"""
        pass

    @abstractmethod
    def _commit(self) -> None:
        """提交最外层事务"""
        pass

    @abstractmethod
    def _rollback(self) -> None:
        """回滚最外层事务"""
        pass

    @contextmanager
    def transaction(self) -> Iterator['DataStoreAdapter']:
        """
        原子事务上下文，可重入：嵌套调用加入外层事务

        块内抛出任何异常时，整个事务回滚，异常原样向外传播
        """
        with self._lock:
            if self._tx_depth > 0:
                self._tx_depth += 1
                try:
                    yield self
                finally:
                    self._tx_depth -= 1
                return

            self._begin()
            self._tx_depth = 1
            try:
                yield self
            except BaseException:
                self._tx_depth = 0
                self._rollback()
                raise
            else:
                self._tx_depth = 0
                self._commit()

    @property
    def in_transaction(self) -> bool:
        """当前是否处于事务中"""
        return self._tx_depth > 0

    # ========== 点查与查询 ==========

    @abstractmethod
    def load_node(self, node_id: int) -> Optional[Dict[str, Any]]:
        """按ID加载一行，不存在返回None"""
        pass

    @abstractmethod
    def query_nodes(self, node_filter: Optional[NodeFilter] = None) -> List[Dict[str, Any]]:
        """按条件查询，结果按left_index升序"""
        pass

    def count_nodes(self, node_filter: Optional[NodeFilter] = None) -> int:
        """按条件计数"""
        return len(self.query_nodes(node_filter))

    def exists_node(self, node_id: int) -> bool:
        """检查部门是否存在"""
        return self.load_node(node_id) is not None

    # ========== 写操作 ==========

    @abstractmethod
    def insert_node(self, row: Dict[str, Any]) -> int:
        """
        插入一行，由存储分配ID

        Args:
            row: 行数据，root_id为None时设置为新分配的ID

        Returns:
            新分配的ID
        """
        pass

    @abstractmethod
    def update_node(self, node_id: int, **fields: Any) -> None:
        """更新单行的若干字段"""
        pass

    @abstractmethod
    def delete_nodes(self, node_ids: Iterable[int]) -> int:
        """删除若干行，返回删除数量"""
        pass

    @abstractmethod
    def shift_indexes(
            self,
            root_id: int,
            field: str,
            from_index: int,
            delta: int,
            exclude_ids: Iterable[int] = ()
    ) -> int:
        """
        范围平移：root_id树内 field >= from_index 的行 field += delta

        Args:
            root_id: 树ID（必填，防止跨树干扰）
            field: 'left_index' 或 'right_index'
            from_index: 起始编号（含）
            delta: 平移量，可为负
            exclude_ids: 不参与平移的行

        Returns:
            受影响的行数
        """
        pass

    @abstractmethod
    def move_nodes(
            self,
            node_ids: Iterable[int],
            index_offset: int,
            level_delta: int,
            root_id: int
    ) -> int:
        """整体平移一组行的区间和层级，并设置其root_id"""
        pass

    # ========== 管理 ==========

    @abstractmethod
    def close(self):
        """关闭存储连接"""
        pass

    @abstractmethod
    def clear(self):
        """清空所有数据（测试用）"""
        pass

    @staticmethod
    def _check_field(field: str) -> None:
        if field not in INDEX_FIELDS:
            raise ValueError(f"不支持平移的字段: {field}")

