"""
部门仓库模块
基于区间包含关系的只读查询：祖先、后代、子部门、根部门、名称搜索
"""

import logging
from typing import Optional, List

from .entity import Department
from ..pagination import Page
from ...config.validator import validate_page
from ...data.storage.adapter import DataStoreAdapter, NodeFilter
from ...exceptions import NotFoundError, ParentNotFoundError, NoParentError

logger = logging.getLogger(__name__)


class DepartmentRepository:
    """
    部门仓库，所有查询都是对行存储的一次区间扫描

    结果统一按left_index升序（前序），祖先查询因此是"根到父"的顺序。
    """

    def __init__(self, storage: DataStoreAdapter):
        """
        初始化部门仓库

        Args:
            storage: 行存储适配器
        """
        self._storage = storage

    @property
    def storage(self) -> DataStoreAdapter:
        return self._storage

    def _to_entities(self, rows) -> List[Department]:
        return [Department.from_dict(row) for row in rows]

    def get(self, node_id: int) -> Optional[Department]:
        """根据ID获取部门，不存在返回None"""
        row = self._storage.load_node(node_id)
        return Department.from_dict(row) if row else None

    def find_by_id(self, node_id: int) -> Department:
        """
        根据ID获取部门

        Raises:
            NotFoundError: 部门不存在
        """
        department = self.get(node_id)
        if department is None:
            raise NotFoundError(node_id)
        return department

    def ancestors_of(self, node_id: int) -> List[Department]:
        """祖先部门，从根到直接父部门；根部门返回空列表"""
        node = self.find_by_id(node_id)
        return self._to_entities(self._storage.query_nodes(NodeFilter(
            root_id=node.root_id,
            left_lt=node.left_index,
            right_gt=node.right_index
        )))

    def descendants_of(self, node_id: int) -> List[Department]:
        """所有后代部门（前序），不含自身"""
        node = self.find_by_id(node_id)
        return self.descendants_of_node(node)

    def descendants_of_node(self, node: Department) -> List[Department]:
        """已解析部门的所有后代"""
        if node.is_leaf:
            return []
        return self._to_entities(self._storage.query_nodes(NodeFilter(
            root_id=node.root_id,
            left_gt=node.left_index,
            right_lt=node.right_index
        )))

    def subtree_of(self, node_id: int) -> List[Department]:
        """部门自身及其所有后代（前序）"""
        node = self.find_by_id(node_id)
        return [node] + self.descendants_of_node(node)

    def direct_children_of(self, node_id: int) -> List[Department]:
        """直接子部门，按插入顺序"""
        self.find_by_id(node_id)
        return self._to_entities(self._storage.query_nodes(NodeFilter(parent_id=node_id)))

    def parent_of(self, node_id: int) -> Department:
        """
        父部门

        Raises:
            NotFoundError: 部门不存在
            NoParentError: 部门是根部门
            ParentNotFoundError: 存储的parent_id无法解析（数据损坏的征兆）
        """
        node = self.find_by_id(node_id)
        if node.parent_id is None:
            raise NoParentError(node_id)

        parent = self.get(node.parent_id)
        if parent is None:
            logger.error(f"部门 {node_id} 的父部门 {node.parent_id} 不存在")
            raise ParentNotFoundError(node.parent_id)
        return parent

    def all_roots(self) -> List[Department]:
        """所有根部门"""
        return self._to_entities(self._storage.query_nodes(NodeFilter(roots_only=True)))

    def all_nodes(self) -> List[Department]:
        """所有部门，按left_index升序"""
        return self._to_entities(self._storage.query_nodes())

    def tree_of(self, root_id: int) -> List[Department]:
        """一棵树的所有部门"""
        return self._to_entities(self._storage.query_nodes(NodeFilter(root_id=root_id)))

    def search_by_name(self, text: Optional[str]) -> List[Department]:
        """名称包含text的部门（不区分大小写），无匹配时返回空列表"""
        if not text:
            return []
        return self._to_entities(self._storage.query_nodes(NodeFilter(name_contains=text)))

    def count_nodes(self, root_id: Optional[int] = None) -> int:
        """部门数量，可限定在一棵树内"""
        return self._storage.count_nodes(NodeFilter(root_id=root_id))

    # ========== 分页 ==========

    def paginate(self, items: List[Department], page: int, size: int) -> Page[Department]:
        """
        对有序查询结果分页

        Args:
            items: 已排序的查询结果
            page: 页码，从0开始
            size: 每页大小

        Raises:
            ValidationError: 页码或大小无效
        """
        validate_page(page, size)
        return Page.of(items, page, size)
