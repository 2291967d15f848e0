"""
部门树异常体系
"""
from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """所有异常的基类"""
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.context = context or {}
        self.timestamp = datetime.now()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，便于序列化"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# ==================== 配置和验证异常 ====================
class ConfigError(BaseError):
    """配置错误"""
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details, **kwargs)


class ValidationError(BaseError):
    """数据验证错误"""
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        reason: Optional[str] = None,
        **kwargs
    ):
        details = {
            "field": field,
            "value": value,
            "reason": reason
        }
        super().__init__(message, code="VALIDATION_ERROR", details=details, **kwargs)


# ==================== 树结构相关异常 ====================
class TreeError(BaseError):
    """树结构错误基类"""
    pass


class NotFoundError(TreeError):
    """部门不存在"""
    def __init__(self, node_id: Any = None, message: Optional[str] = None,
                 code: str = "NOT_FOUND", **kwargs):
        details = {"node_id": node_id} if node_id is not None else {}
        if message is None:
            message = f"部门不存在: id={node_id}"
        super().__init__(message, code=code, details=details, **kwargs)


class ParentNotFoundError(NotFoundError):
    """父部门不存在（传入的或已存储的parent_id无法解析）"""
    def __init__(self, parent_id: Any = None, **kwargs):
        super().__init__(
            node_id=parent_id,
            message=f"父部门不存在: id={parent_id}",
            code="PARENT_NOT_FOUND",
            **kwargs
        )


class NoParentError(TreeError):
    """根部门没有父部门"""
    def __init__(self, node_id: Any, **kwargs):
        super().__init__(
            message=f"部门没有父部门: id={node_id}",
            code="NO_PARENT",
            details={"node_id": node_id},
            **kwargs
        )


class CycleError(TreeError):
    """移动会形成环：以自身或自身后代为父部门"""
    def __init__(self, node_id: Any, parent_id: Any, reason: str = "", **kwargs):
        message = f"不能将部门 {node_id} 移动到 {parent_id} 之下"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message=message,
            code="CYCLE_DETECTED",
            details={"node_id": node_id, "parent_id": parent_id, "reason": reason},
            **kwargs
        )


class DataIntegrityError(TreeError):
    """已存储的数据违反树结构约束，只报告不修复"""
    def __init__(self, message: str, node_id: Any = None,
                 violations: Optional[list] = None, **kwargs):
        details = {"node_id": node_id, "violations": violations or []}
        super().__init__(
            message=f"数据完整性错误: {message}",
            code="DATA_INTEGRITY_ERROR",
            details=details,
            **kwargs
        )


# ==================== 存储相关异常 ====================
class StorageError(BaseError):
    """存储错误"""
    pass


class DataStoreError(StorageError):
    """数据存储异常"""
    def __init__(self, message: str, operation: str = None, store_type: str = None, **kwargs):
        details = {"operation": operation, "store_type": store_type}
        super().__init__(
            message=f"存储错误[{operation or 'unknown'}]: {message}",
            code="DATA_STORE_ERROR",
            details=details,
            **kwargs
        )


# ==================== 导入导出异常 ====================
class TableImportError(BaseError):
    """表格导入失败"""
    def __init__(self, message: str, row: Optional[int] = None, **kwargs):
        super().__init__(
            message=f"导入失败: {message}" + (f" (第{row}行)" if row is not None else ""),
            code="IMPORT_ERROR",
            details={"row": row},
            **kwargs
        )
