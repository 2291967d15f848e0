"""
大纲表格导入器

表格每行一个部门，按大纲顺序排列（父部门在前，子部门紧随其后）。
层级来自level列，没有level列时按名称前导空格计算（默认每2个空格一级）。
"""
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional

import pandas as pd

from .base_importer import DataImporter
from ...core.node.entity import Department
from ...exceptions import TableImportError

logger = logging.getLogger(__name__)


class OutlineTableImporter(DataImporter):
    """
    大纲表格导入器

    配置项：
        name_column: 名称列，默认 "name"，不存在时取第一列
        level_column: 层级列，默认存在 "level" 列时使用
        indent_width: 每级缩进的空格数，默认2
        sheet_name: Excel工作表，默认第一个
    """

    SUPPORTED_SUFFIXES = ('.xlsx', '.csv')

    def __init__(self, system, config: Dict[str, Any] = None):
        super().__init__(config)
        self.system = system
        self.indent_width = self.config.get('indent_width', 2)
        self.sheet_name = self.config.get('sheet_name', 0)

        # 统计信息
        self.stats = {
            'rows_parsed': 0,
            'rows_skipped': 0,
            'departments_created': 0
        }

    def _validate_config(self):
        indent_width = self.config.get('indent_width', 2)
        if not isinstance(indent_width, int) or indent_width <= 0:
            raise TableImportError(f"indent_width必须是正整数: {indent_width}")

    # ============ 抽象方法实现 ============

    def validate_source(self, source) -> bool:
        if isinstance(source, pd.DataFrame):
            return True

        path = Path(source)
        if not path.exists():
            logger.warning(f"文件不存在: {path}")
            return False
        if path.suffix.lower() not in self.SUPPORTED_SUFFIXES:
            logger.warning(f"不支持的文件类型: {path.suffix}")
            return False
        return True

    def read_table(self, source) -> pd.DataFrame:
        if isinstance(source, pd.DataFrame):
            return source.copy()

        path = Path(source)
        try:
            if path.suffix.lower() == '.csv':
                # 名称按原样读取，保留前导空格
                return pd.read_csv(path, dtype=str, keep_default_na=False, encoding='utf-8')
            return pd.read_excel(path, sheet_name=self.sheet_name, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as e:
            raise TableImportError(f"读取文件失败: {path} ({e})")

    def parse_rows(self, table: pd.DataFrame) -> List[Dict[str, Any]]:
        """
        解析为 [{"row": 行号, "name": 名称, "level": 相对层级}, ...]

        层级必须从0开始，且每行最多比上一行深一级
        """
        if table.columns.empty:
            raise TableImportError("表格没有任何列")

        name_column = self._find_name_column(table)
        level_column = self._find_level_column(table)

        parsed = []
        previous_level = -1
        for position, (_, record) in enumerate(table.iterrows(), start=1):
            raw_name = record[name_column]
            if pd.isna(raw_name) or not str(raw_name).strip():
                self.stats['rows_skipped'] += 1
                continue

            raw_name = str(raw_name)
            if level_column is not None:
                level = self._parse_level_value(record[level_column], position)
            else:
                level = self._parse_indent_level(raw_name)

            if level > previous_level + 1:
                raise TableImportError(
                    f"层级从 {max(previous_level, 0)} 跳到 {level}，缺少中间层级", row=position
                )

            parsed.append({'row': position, 'name': raw_name.strip(), 'level': level})
            previous_level = level

        self.stats['rows_parsed'] = len(parsed)
        logger.debug(f"解析完成: {len(parsed)} 行, 跳过 {self.stats['rows_skipped']} 行")
        return parsed

    # ============ 导入 ============

    def import_into(self, source, parent_id: Optional[int] = None) -> List[Department]:
        """
        解析表格并创建部门

        整个表格先解析校验，再在一个事务中依次创建，任何一行失败则全部回滚

        Args:
            source: 文件路径或DataFrame
            parent_id: 第一层部门的父部门，为空时第一层成为根部门

        Returns:
            按表格顺序创建的部门
        """
        rows = self.import_data(source)
        metadata = self.extract_metadata(source)

        created = []
        with self.system.storage.transaction():
            # stack[level] 是当前路径上该层级的部门ID
            stack: List[int] = []
            for row in rows:
                level = row['level']
                del stack[level:]
                parent = stack[-1] if stack else parent_id
                department = self.system.create_department(row['name'], parent)
                stack.append(department.id)
                created.append(department)

        self.stats['departments_created'] = len(created)
        logger.info(f"导入完成: {metadata.get('file_name', metadata.get('source'))}, "
                    f"创建 {len(created)} 个部门")
        return created

    # ============ 辅助方法 ============

    def _find_name_column(self, table: pd.DataFrame):
        name_column = self.config.get('name_column')
        if name_column is not None:
            if name_column not in table.columns:
                raise TableImportError(f"未找到名称列: {name_column}")
            return name_column
        if 'name' in table.columns:
            return 'name'
        return table.columns[0]

    def _find_level_column(self, table: pd.DataFrame):
        level_column = self.config.get('level_column')
        if level_column is not None:
            if level_column not in table.columns:
                raise TableImportError(f"未找到层级列: {level_column}")
            return level_column
        return 'level' if 'level' in table.columns else None

    def _parse_indent_level(self, raw_name: str) -> int:
        """按前导空格计算层级"""
        expanded = raw_name.expandtabs(self.indent_width)
        leading_spaces = len(expanded) - len(expanded.lstrip(' '))
        return leading_spaces // self.indent_width

    @staticmethod
    def _parse_level_value(value, row: int) -> int:
        if pd.isna(value) or not str(value).strip():
            raise TableImportError("层级为空", row=row)
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise TableImportError(f"层级不是数字: {value}", row=row)
        if not number.is_integer() or number < 0:
            raise TableImportError(f"层级必须是非负整数: {value}", row=row)
        return int(number)
