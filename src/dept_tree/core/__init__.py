"""
核心模块包
包含部门实体、区间查询、嵌套集维护和分页
"""

# 导入部门模块
from .node import Department, DepartmentFactory, DepartmentRepository

# 导入嵌套集模块
from .nested_set import NestedSetIndex, IntegrityChecker, StructuralMutation

from .pagination import Page

__all__ = [
    # 部门模块
    'Department',
    'DepartmentFactory',
    'DepartmentRepository',

    # 嵌套集模块
    'NestedSetIndex',
    'IntegrityChecker',
    'StructuralMutation',

    'Page',
]
