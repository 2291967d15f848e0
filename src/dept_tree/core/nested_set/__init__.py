"""
嵌套集模块 - 区间判断、结构修改、索引维护和完整性检查
"""

from .interval import is_in_subtree, insertion_point_after_vacate
from .mutation import (
    StructuralMutation, ShiftIndexes, InsertRow, MoveSubtree, SetParent,
    DeleteRows, RenameRow, RenumberRow
)
from .index import NestedSetIndex, KEEP_PARENT
from .integrity import IntegrityChecker

__all__ = [
    'is_in_subtree',
    'insertion_point_after_vacate',
    'StructuralMutation',
    'ShiftIndexes',
    'InsertRow',
    'MoveSubtree',
    'SetParent',
    'DeleteRows',
    'RenameRow',
    'RenumberRow',
    'NestedSetIndex',
    'KEEP_PARENT',
    'IntegrityChecker',
]
