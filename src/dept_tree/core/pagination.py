"""
分页结果
"""
import math
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar, Dict, Any

T = TypeVar('T')


@dataclass
class Page(Generic[T]):
    """分页结果，page从0开始"""

    content: List[T] = field(default_factory=list)
    page: int = 0
    size: int = 20
    total_elements: int = 0
    total_pages: int = 0

    @classmethod
    def of(cls, items: List[T], page: int, size: int) -> 'Page[T]':
        """从完整的有序列表中截取一页"""
        start = page * size
        return cls(
            content=items[start:start + size],
            page=page,
            size=size,
            total_elements=len(items),
            total_pages=math.ceil(len(items) / size) if size else 0
        )

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，元素有to_dict时一并转换"""
        return {
            'content': [item.to_dict() if hasattr(item, 'to_dict') else item
                        for item in self.content],
            'page': self.page,
            'size': self.size,
            'total_elements': self.total_elements,
            'total_pages': self.total_pages
        }
