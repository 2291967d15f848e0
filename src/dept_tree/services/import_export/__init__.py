"""
导入导出模块
基于pandas读取和写出部门表格
"""

from .base_importer import DataImporter
from .outline_importer import OutlineTableImporter
from .table_exporter import DepartmentTableExporter

__all__ = ['DataImporter', 'OutlineTableImporter', 'DepartmentTableExporter']
