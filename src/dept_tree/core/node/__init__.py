"""
部门模块 - 部门实体、工厂和查询仓库
"""

from .entity import Department
from .factory import DepartmentFactory
from .repository import DepartmentRepository

__all__ = ['Department', 'DepartmentFactory', 'DepartmentRepository']
