"""
部门树管理系统主入口
集成配置、存储、嵌套集索引、查询和导入导出，提供完整的管理接口
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Any, Union
from datetime import datetime

from .config.settings import SystemSettings
from .config.validator import NameValidator
from .core.node import Department, DepartmentRepository
from .core.nested_set import NestedSetIndex, IntegrityChecker, KEEP_PARENT
from .core.pagination import Page
from .data.storage import DataStoreAdapter, create_store

DepartmentList = Union[List[Department], Page[Department]]


class DepartmentTreeSystem:
    """
    部门树管理系统主类

    所有修改操作都经过NestedSetIndex，在一个存储事务中完成；
    查询操作只读，可选分页（传入page后返回Page）。
    """

    def __init__(
            self,
            config: Union[Dict[str, Any], str, Path, None] = None,
            storage: Optional[DataStoreAdapter] = None
    ):
        """
        初始化系统

        Args:
            config: 系统配置字典，或JSON配置文件路径
            storage: 存储适配器（默认按配置中的storage_backend创建）
        """
        # 加载配置
        if isinstance(config, (str, Path)):
            self.settings = SystemSettings.from_json_file(config)
        else:
            self.settings = SystemSettings.from_dict(config) if config else SystemSettings()

        # 初始化日志
        self._setup_logging()
        self.logger = logging.getLogger(__name__)

        # 存储适配器
        self._storage = storage if storage is not None else self._create_storage()
        self.logger.info(f"使用存储引擎: {self._storage.__class__.__name__}")

        # 核心组件
        self._validator = NameValidator(self.settings.max_name_length)
        self._repository = DepartmentRepository(self._storage)
        self._index = NestedSetIndex(self._storage, self._validator, self._repository)
        self._checker = IntegrityChecker(self._storage)

        self._start_time = datetime.now()
        self.logger.info(f"{self.settings.system_name}初始化完成")

    def _setup_logging(self):
        """配置日志系统"""
        if not self.settings.enable_logging:
            logging.getLogger(__package__).setLevel(logging.CRITICAL + 1)
            return

        handlers = [logging.StreamHandler()]
        if self.settings.log_file:
            handlers.append(logging.FileHandler(self.settings.log_file, encoding='utf-8'))

        logging.basicConfig(
            level=getattr(logging, self.settings.log_level),
            format=self.settings.log_format,
            handlers=handlers
        )
        logging.getLogger(__package__).setLevel(self.settings.log_level)

    def _create_storage(self) -> DataStoreAdapter:
        """按配置创建存储"""
        backend = self.settings.storage_backend
        if backend == 'json':
            return create_store('json', file_path=self.settings.storage_path)
        if backend == 'sqlite':
            return create_store('sqlite', db_path=self.settings.storage_path)
        return create_store('memory')

    @property
    def storage(self) -> DataStoreAdapter:
        return self._storage

    @property
    def repository(self) -> DepartmentRepository:
        return self._repository

    # ========== 修改操作 ==========

    def create_department(self, name: str, parent_id: Optional[int] = None) -> Department:
        """
        创建部门

        Args:
            name: 部门名称
            parent_id: 父部门ID，为空时创建新的根部门

        Returns:
            创建后的部门
        """
        return self._index.insert(name, parent_id)

    def rename_department(self, department_id: int, name: str) -> Department:
        """修改部门名称"""
        return self._index.rename(department_id, name)

    def relocate_department(self, department_id: int, new_parent_id: Optional[int] = None) -> Department:
        """移动部门（连同子部门）到新的父部门之下，new_parent_id为空时成为根部门"""
        return self._index.relocate(department_id, new_parent_id)

    def update_department(self, department_id: int, name: str,
                          parent_id=KEEP_PARENT) -> Department:
        """同时修改名称和父部门，不传parent_id时保持原父部门，传入None时成为根部门"""
        return self._index.update(department_id, name, parent_id)

    def delete_department(self, department_id: int) -> int:
        """删除部门及其所有子部门，返回删除数量"""
        return self._index.delete(department_id)

    # ========== 查询 ==========

    def _maybe_paginate(self, items: List[Department], page: Optional[int],
                        size: Optional[int]) -> DepartmentList:
        if page is None:
            return items
        if size is None:
            size = self.settings.default_page_size
        return self._repository.paginate(items, page, size)

    def get_department(self, department_id: int) -> Department:
        return self._repository.find_by_id(department_id)

    def get_parent(self, department_id: int) -> Department:
        return self._repository.parent_of(department_id)

    def get_ancestors(self, department_id: int, page: Optional[int] = None,
                      size: Optional[int] = None) -> DepartmentList:
        """祖先部门，从根部门到直接父部门"""
        return self._maybe_paginate(self._repository.ancestors_of(department_id), page, size)

    def get_descendants(self, department_id: int, page: Optional[int] = None,
                        size: Optional[int] = None) -> DepartmentList:
        """所有后代部门"""
        return self._maybe_paginate(self._repository.descendants_of(department_id), page, size)

    def get_sub_departments(self, department_id: int, page: Optional[int] = None,
                            size: Optional[int] = None) -> DepartmentList:
        """直接子部门"""
        return self._maybe_paginate(self._repository.direct_children_of(department_id), page, size)

    def get_root_departments(self, page: Optional[int] = None,
                             size: Optional[int] = None) -> DepartmentList:
        return self._maybe_paginate(self._repository.all_roots(), page, size)

    def get_all_departments(self, page: Optional[int] = None,
                            size: Optional[int] = None) -> DepartmentList:
        return self._maybe_paginate(self._repository.all_nodes(), page, size)

    def search_departments(self, text: str, page: Optional[int] = None,
                           size: Optional[int] = None) -> DepartmentList:
        """按名称搜索（不区分大小写的子串匹配）"""
        return self._maybe_paginate(self._repository.search_by_name(text), page, size)

    # ========== 维护 ==========

    def check_integrity(self, root_id: Optional[int] = None) -> Dict[str, Any]:
        """
        检查嵌套集是否一致

        Returns:
            {"valid": bool, "violations": [...]}
        """
        violations = self._checker.find_violations(root_id)
        if violations:
            self.logger.warning(f"完整性检查发现 {len(violations)} 个问题")
        return {"valid": not violations, "violations": violations}

    def rebuild_indexes(self, root_id: Optional[int] = None) -> int:
        """
        根据parent_id重建编号，root_id为空时重建所有树

        Returns:
            重新编号的部门数
        """
        root_ids = [root_id] if root_id is not None else [r.id for r in self._repository.all_roots()]
        total = 0
        with self._storage.transaction():
            for tree_root_id in root_ids:
                total += self._checker.rebuild(tree_root_id)
        return total

    # ========== 导入导出 ==========

    def import_table(self, source, parent_id: Optional[int] = None, **options) -> List[Department]:
        """
        从表格导入部门层级

        Args:
            source: 文件路径（.xlsx/.csv）或pandas.DataFrame
            parent_id: 导入到已有部门之下，为空时第一层成为根部门
            **options: 传给OutlineTableImporter的配置（name_column、level_column等）
        """
        from .services.import_export import OutlineTableImporter

        importer = OutlineTableImporter(self, options)
        return importer.import_into(source, parent_id)

    def export_table(self, file_path: Optional[str] = None, root_id: Optional[int] = None):
        """
        导出部门表

        file_path为空时返回DataFrame，否则写入文件并返回路径；
        root_id为空时导出全部树，否则只导出该部门及其子树
        """
        from .services.import_export import DepartmentTableExporter

        exporter = DepartmentTableExporter(self._repository)
        if file_path is None:
            return exporter.to_dataframe(root_id)
        return exporter.export(file_path, root_id)

    # ========== 系统信息 ==========

    def get_system_info(self) -> Dict[str, Any]:
        """获取系统信息"""
        return {
            "name": self.settings.system_name,
            "version": self.settings.version,
            "storage": str(self._storage),
            "storage_type": self._storage.store_type,
            "department_count": self._repository.count_nodes(),
            "tree_count": len(self._repository.all_roots()),
            "start_time": self._start_time.isoformat(),
            "uptime": str(datetime.now() - self._start_time),
            "settings": self.settings.to_dict()
        }

    def close(self):
        """关闭存储"""
        self._storage.close()
        self.logger.info("系统已关闭")

    def __repr__(self) -> str:
        return (f"DepartmentTreeSystem(storage={self._storage.store_type}, "
                f"departments={self._repository.count_nodes()})")
