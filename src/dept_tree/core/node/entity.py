"""
部门实体模块
定义部门节点，每个节点携带嵌套集区间 (left_index, right_index)
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class Department:
    """
    部门 - 森林中的一个节点

    每个节点包含：
    1. 身份信息：id, name
    2. 树关系：parent_id, root_id, level
    3. 嵌套集区间：left_index < right_index，严格包含所有后代的区间

    区间比较只在同一root_id的树内有意义，不同树各自从1开始编号。
    """

    id: Optional[int]
    name: str
    parent_id: Optional[int] = None
    level: int = 0
    left_index: int = 1
    right_index: int = 2
    root_id: Optional[int] = None

    @property
    def is_root(self) -> bool:
        """是否为根部门"""
        return self.parent_id is None

    @property
    def is_leaf(self) -> bool:
        """是否为叶子部门"""
        return self.right_index == self.left_index + 1

    @property
    def width(self) -> int:
        """子树占用的编号数（包含自身）"""
        return self.right_index - self.left_index + 1

    @property
    def descendant_count(self) -> int:
        """后代数量"""
        return (self.right_index - self.left_index - 1) // 2

    def contains(self, other: 'Department') -> bool:
        """
        包含判断：self是否为other的祖先

        Args:
            other: 另一个部门

        Returns:
            同一棵树内self的区间严格包含other的区间时为True
        """
        return (self.root_id == other.root_id
                and self.left_index < other.left_index
                and other.right_index < self.right_index)

    def to_dict(self) -> Dict[str, Any]:
        """转换为存储行"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Department':
        """从存储行创建部门"""
        return cls(
            id=data.get('id'),
            name=data['name'],
            parent_id=data.get('parent_id'),
            level=data.get('level', 0),
            left_index=data['left_index'],
            right_index=data['right_index'],
            root_id=data.get('root_id')
        )

    def __str__(self) -> str:
        return (f"Department(id={self.id}, name={self.name!r}, level={self.level}, "
                f"[{self.left_index}, {self.right_index}], root={self.root_id})")
