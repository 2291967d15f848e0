"""
部门树管理系统 - 基于嵌套集区间索引
"""

__version__ = "1.0.0"

from .system import DepartmentTreeSystem

__all__ = ['DepartmentTreeSystem']
