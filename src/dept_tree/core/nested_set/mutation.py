"""
结构修改

插入、移动、删除先生成一组有序操作，再在同一个存储事务中执行。
parent_id只能和区间、层级一起修改（SetParent总是跟在MoveSubtree之后）。
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from ..node.entity import Department
from ...data.storage.adapter import DataStoreAdapter


@dataclass(frozen=True)
class ShiftIndexes:
    """root_id树内 field >= from_index 的行平移delta"""
    root_id: int
    field: str
    from_index: int
    delta: int
    exclude_ids: Tuple[int, ...] = ()

    def apply(self, storage: DataStoreAdapter) -> int:
        return storage.shift_indexes(
            self.root_id, self.field, self.from_index, self.delta, self.exclude_ids
        )


@dataclass(frozen=True)
class InsertRow:
    """插入一个新部门"""
    department: Department

    def apply(self, storage: DataStoreAdapter) -> int:
        row = self.department.to_dict()
        row.pop('id')
        return storage.insert_node(row)


@dataclass(frozen=True)
class MoveSubtree:
    """整体平移子树的区间和层级，并改写root_id"""
    node_ids: Tuple[int, ...]
    index_offset: int
    level_delta: int
    root_id: int

    def apply(self, storage: DataStoreAdapter) -> int:
        return storage.move_nodes(self.node_ids, self.index_offset, self.level_delta, self.root_id)


@dataclass(frozen=True)
class SetParent:
    """改写被移动部门的parent_id"""
    node_id: int
    parent_id: Optional[int]

    def apply(self, storage: DataStoreAdapter) -> None:
        storage.update_node(self.node_id, parent_id=self.parent_id)


@dataclass(frozen=True)
class DeleteRows:
    """删除一组部门"""
    node_ids: Tuple[int, ...]

    def apply(self, storage: DataStoreAdapter) -> int:
        return storage.delete_nodes(self.node_ids)


@dataclass(frozen=True)
class RenameRow:
    """修改部门名称"""
    node_id: int
    name: str

    def apply(self, storage: DataStoreAdapter) -> None:
        storage.update_node(self.node_id, name=self.name)


@dataclass(frozen=True)
class RenumberRow:
    """重建编号时直接写入区间、层级和root_id"""
    node_id: int
    left_index: int
    right_index: int
    level: int
    root_id: int

    def apply(self, storage: DataStoreAdapter) -> None:
        storage.update_node(
            self.node_id,
            left_index=self.left_index,
            right_index=self.right_index,
            level=self.level,
            root_id=self.root_id
        )


class StructuralMutation:
    """一次结构修改：有序操作列表，整体原子提交"""

    def __init__(self, kind: str):
        self.kind = kind
        self.operations: List[Any] = []

    def add(self, operation) -> 'StructuralMutation':
        self.operations.append(operation)
        return self

    def apply(self, storage: DataStoreAdapter) -> Optional[int]:
        """
        在一个事务中依次执行所有操作

        Returns:
            InsertRow分配的新ID（如果有）
        """
        inserted_id = None
        with storage.transaction():
            for operation in self.operations:
                result = operation.apply(storage)
                if isinstance(operation, InsertRow):
                    inserted_id = result
        return inserted_id

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        names = ", ".join(type(op).__name__ for op in self.operations)
        return f"StructuralMutation(kind={self.kind!r}, operations=[{names}])"
