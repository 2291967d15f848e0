"""
系统配置设置
"""
import json
import os
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, asdict

from ..exceptions import ConfigError


@dataclass
class SystemSettings:
    """
    系统配置类
    使用dataclass确保配置的类型安全
    """

    # 系统基本配置
    system_name: str = "部门树管理系统"
    version: str = "1.0.0"

    # 日志配置
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_logging: bool = True

    # 部门名称配置
    max_name_length: int = 100

    # 存储配置
    storage_backend: str = "memory"  # memory, json, sqlite
    storage_path: Optional[str] = None

    # 分页配置
    default_page_size: int = 20

    def __post_init__(self):
        """初始化后处理，验证配置"""
        self._validate_settings()
        self._set_defaults()

    def _validate_settings(self):
        """验证配置值"""
        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if not isinstance(self.log_level, str) or self.log_level.upper() not in valid_log_levels:
            raise ConfigError(
                message=f"无效的日志级别: {self.log_level}",
                config_key="log_level"
            )
        self.log_level = self.log_level.upper()

        # bool是int的子类，需要单独排除
        if (not isinstance(self.max_name_length, int) or isinstance(self.max_name_length, bool)
                or self.max_name_length <= 0):
            raise ConfigError(
                message=f"部门名称最大长度必须是正整数: {self.max_name_length}",
                config_key="max_name_length"
            )

        valid_storages = ["memory", "json", "sqlite"]
        if self.storage_backend not in valid_storages:
            raise ConfigError(
                message=f"无效的存储后端: {self.storage_backend}，必须是 {valid_storages} 之一",
                config_key="storage_backend"
            )

        if not isinstance(self.default_page_size, int) or self.default_page_size <= 0:
            raise ConfigError(
                message=f"默认分页大小必须是正整数: {self.default_page_size}",
                config_key="default_page_size"
            )

    def _set_defaults(self):
        """设置默认值"""
        # 设置默认存储路径
        if self.storage_backend in ["json", "sqlite"] and not self.storage_path:
            suffix = "json" if self.storage_backend == "json" else "db"
            self.storage_path = os.path.join(os.getcwd(), "data", f"departments.{suffix}")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'SystemSettings':
        """从字典创建配置"""
        # 过滤无效的配置键
        valid_keys = {field.name for field in cls.__dataclass_fields__.values()}
        filtered_config = {k: v for k, v in config_dict.items() if k in valid_keys}

        return cls(**filtered_config)

    @classmethod
    def from_json_file(cls, file_path: Union[str, Path]) -> 'SystemSettings':
        """从JSON配置文件创建配置"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config_dict = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"读取配置文件失败: {file_path} ({e})")

        if not isinstance(config_dict, dict):
            raise ConfigError(f"配置文件内容必须是JSON对象: {file_path}")

        return cls.from_dict(config_dict)
