"""
配置模块
"""

from .settings import SystemSettings
from .validator import NameValidator, validate_page

__all__ = ['SystemSettings', 'NameValidator', 'validate_page']
