"""
部门名称与分页参数验证器
"""
from typing import Any

from ..exceptions import ValidationError


class NameValidator:
    """部门名称验证器，在任何索引计算之前调用"""

    def __init__(self, max_name_length: int = 100):
        self.max_name_length = max_name_length

    def validate_name(self, name: Any) -> None:
        """
        验证部门名称

        Args:
            name: 部门名称

        Raises:
            ValidationError: 名称为空、不是字符串或超过最大长度
        """
        if name is None:
            raise ValidationError(
                message="部门名称不能为空",
                field="name",
                value=name,
                reason="required_field_missing"
            )

        if not isinstance(name, str):
            raise ValidationError(
                message="部门名称必须是字符串",
                field="name",
                value=name,
                reason="invalid_type"
            )

        if len(name) == 0:
            raise ValidationError(
                message="部门名称不能为空",
                field="name",
                value=name,
                reason="empty"
            )

        if len(name) > self.max_name_length:
            raise ValidationError(
                message=f"部门名称不能超过{self.max_name_length}个字符",
                field="name",
                value=name,
                reason="too_long"
            )


def validate_page(page: Any, size: Any) -> None:
    """验证分页参数（page从0开始）"""
    if not isinstance(page, int) or isinstance(page, bool) or page < 0:
        raise ValidationError(
            message="页码必须是非负整数",
            field="page",
            value=page,
            reason="invalid_page"
        )

    if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
        raise ValidationError(
            message="分页大小必须是正整数",
            field="size",
            value=size,
            reason="invalid_size"
        )
