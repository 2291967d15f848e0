"""
部门表格导出
"""
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ...core.node.repository import DepartmentRepository
from ...exceptions import ValidationError

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['id', 'name', 'parent_id', 'level', 'left_index', 'right_index', 'root_id']


class DepartmentTableExporter:
    """把部门导出为DataFrame或文件，每棵树按前序排列"""

    def __init__(self, repository: DepartmentRepository):
        self._repository = repository

    def to_dataframe(self, root_id: Optional[int] = None) -> pd.DataFrame:
        """
        导出为DataFrame

        Args:
            root_id: 只导出该部门及其子树，为空时导出全部树
        """
        if root_id is not None:
            departments = self._repository.subtree_of(root_id)
        else:
            departments = []
            for root in self._repository.all_roots():
                departments.extend(self._repository.tree_of(root.id))

        table = pd.DataFrame([d.to_dict() for d in departments], columns=EXPORT_COLUMNS)
        # 根部门的parent_id为空，使用可空整数类型
        table['parent_id'] = table['parent_id'].astype('Int64')
        return table

    def export(self, file_path: str, root_id: Optional[int] = None) -> str:
        """
        写入 .csv 或 .xlsx 文件

        Returns:
            写入的文件路径
        """
        path = Path(file_path)
        suffix = path.suffix.lower()
        if suffix not in ('.csv', '.xlsx'):
            raise ValidationError(
                f"不支持的导出格式: {suffix}",
                field="file_path",
                value=str(file_path),
                reason="unsupported_format"
            )

        table = self.to_dataframe(root_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        if suffix == '.csv':
            table.to_csv(path, index=False, encoding='utf-8')
        else:
            table.to_excel(path, index=False)

        logger.info(f"导出 {len(table)} 个部门到 {path}")
        return str(path)
