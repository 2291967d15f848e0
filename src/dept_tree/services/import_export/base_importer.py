"""
数据导入器基类
"""
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Any

import pandas as pd

from ...exceptions import TableImportError


class DataImporter(ABC):
    """数据导入器抽象基类"""

    def __init__(self, config: Dict[str, Any] = None):
        self.config = config or {}
        self._validate_config()

    def _validate_config(self):
        """验证配置参数"""
        pass

    @abstractmethod
    def validate_source(self, source) -> bool:
        """验证数据源是否可导入"""
        pass

    @abstractmethod
    def read_table(self, source) -> pd.DataFrame:
        """读取数据源为DataFrame"""
        pass

    @abstractmethod
    def parse_rows(self, table: pd.DataFrame) -> List[Dict[str, Any]]:
        """解析为标准化的行"""
        pass

    def extract_metadata(self, source) -> Dict[str, Any]:
        """提取数据源元数据"""
        metadata = {
            'import_time': datetime.now().isoformat(),
            'config': self.config
        }
        if isinstance(source, pd.DataFrame):
            metadata['source'] = 'DataFrame'
            metadata['row_count'] = len(source)
            return metadata

        path = Path(source)
        metadata['file_path'] = str(path)
        metadata['file_name'] = path.name
        if path.exists():
            file_stat = os.stat(path)
            metadata['file_size'] = file_stat.st_size
            metadata['modified_time'] = datetime.fromtimestamp(file_stat.st_mtime).isoformat()
        return metadata

    def import_data(self, source) -> List[Dict[str, Any]]:
        """
        导入数据的完整流程
        1. 验证数据源
        2. 读取表格
        3. 解析为标准化的行
        """
        if not self.validate_source(source):
            raise TableImportError(f"数据源验证失败: {source}")

        table = self.read_table(source)
        return self.parse_rows(table)
