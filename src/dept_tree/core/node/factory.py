"""
部门工厂 - 为新部门计算初始区间和层级
"""
from .entity import Department


class DepartmentFactory:
    """部门工厂，负责构造尚未持久化的部门"""

    def create_root_department(self, name: str) -> Department:
        """
        创建根部门：新的独立编号空间，区间(1, 2)

        root_id留空，插入时由存储设为新分配的ID
        """
        return Department(
            id=None,
            name=name,
            parent_id=None,
            level=0,
            left_index=1,
            right_index=2,
            root_id=None
        )

    def create_child_department(self, parent: Department, name: str) -> Department:
        """
        创建子部门：作为parent最右侧的子部门

        使用parent插入前的right_index，调用方需先为新区间腾出位置
        """
        insertion_point = parent.right_index
        return Department(
            id=None,
            name=name,
            parent_id=parent.id,
            level=parent.level + 1,
            left_index=insertion_point,
            right_index=insertion_point + 1,
            root_id=parent.root_id
        )
