"""
嵌套集索引维护
插入、子树移动（含环检测）、子树删除
"""

import logging
from typing import Optional

from .interval import is_in_subtree, insertion_point_after_vacate
from .mutation import (
    StructuralMutation, ShiftIndexes, InsertRow, MoveSubtree, SetParent,
    DeleteRows, RenameRow
)
from ..node.entity import Department
from ..node.factory import DepartmentFactory
from ..node.repository import DepartmentRepository
from ...config.validator import NameValidator
from ...data.storage.adapter import DataStoreAdapter
from ...exceptions import (
    ParentNotFoundError, CycleError, DataIntegrityError
)

logger = logging.getLogger(__name__)

# update() 未传入parent_id时保持当前父部门
KEEP_PARENT = object()


class NestedSetIndex:
    """
    嵌套集索引

    每个修改操作：
    1. 先验证名称（不开启事务）
    2. 在事务中解析并校验引用的部门
    3. 生成StructuralMutation并在同一事务中提交

    任何一步失败都不会留下部分修改。
    """

    def __init__(
            self,
            storage: DataStoreAdapter,
            validator: Optional[NameValidator] = None,
            repository: Optional[DepartmentRepository] = None
    ):
        self._storage = storage
        self._validator = validator or NameValidator()
        self._repository = repository or DepartmentRepository(storage)
        self._factory = DepartmentFactory()

    @property
    def repository(self) -> DepartmentRepository:
        return self._repository

    # ========== 插入 ==========

    def insert(self, name: str, parent_id: Optional[int] = None) -> Department:
        """
        插入部门：parent_id为空时创建新树，否则作为父部门最右侧的子部门

        Raises:
            ValidationError: 名称无效
            ParentNotFoundError: 父部门不存在
        """
        self._validator.validate_name(name)

        with self._storage.transaction():
            mutation = StructuralMutation("insert")

            if parent_id is None:
                department = self._factory.create_root_department(name)
            else:
                parent = self._resolve_parent(parent_id)
                department = self._factory.create_child_department(parent, name)

                # 为新区间腾出两个编号
                insertion_point = parent.right_index
                mutation.add(ShiftIndexes(parent.root_id, 'right_index', insertion_point, 2))
                mutation.add(ShiftIndexes(parent.root_id, 'left_index', insertion_point, 2))

            mutation.add(InsertRow(department))
            new_id = mutation.apply(self._storage)
            created = self._repository.find_by_id(new_id)

        logger.info(f"创建部门成功: {created}")
        return created

    # ========== 重命名 ==========

    def rename(self, node_id: int, name: str) -> Department:
        """
        修改部门名称，不影响区间和层级

        Raises:
            ValidationError: 名称无效
            NotFoundError: 部门不存在
        """
        self._validator.validate_name(name)

        with self._storage.transaction():
            node = self._repository.find_by_id(node_id)
            if node.name != name:
                StructuralMutation("rename").add(RenameRow(node_id, name)).apply(self._storage)
                node = self._repository.find_by_id(node_id)

        logger.info(f"部门重命名: id={node_id}, name={name}")
        return node

    # ========== 移动 ==========

    def relocate(self, node_id: int, new_parent_id: Optional[int] = None) -> Department:
        """
        移动子树到新的父部门之下（new_parent_id为空时成为新树的根）

        移动到当前父部门是空操作：仍然校验父部门，但不写任何行。

        Raises:
            NotFoundError: 部门不存在
            ParentNotFoundError: 新父部门不存在
            CycleError: 以自身或自身后代为父部门
            DataIntegrityError: 新父部门的祖先链已损坏
        """
        with self._storage.transaction():
            node = self._repository.find_by_id(node_id)

            if new_parent_id is not None and new_parent_id == node_id:
                logger.warning(f"拒绝移动: 部门 {node_id} 不能成为自己的父部门")
                raise CycleError(node_id, new_parent_id, reason="不能以自身为父部门")

            new_parent = None
            if new_parent_id is not None:
                new_parent = self._resolve_parent(new_parent_id)

                if is_in_subtree(new_parent, node):
                    logger.warning(f"拒绝移动: 部门 {new_parent_id} 是部门 {node_id} 的后代")
                    raise CycleError(node_id, new_parent_id, reason="新父部门是该部门的后代")

                self._walk_ancestor_chain(new_parent, forbidden_id=node_id)

            if new_parent_id == node.parent_id:
                logger.debug(f"部门 {node_id} 已在父部门 {new_parent_id} 之下，跳过移动")
                return node

            mutation = self._plan_relocation(node, new_parent)
            mutation.apply(self._storage)
            moved = self._repository.find_by_id(node_id)

        logger.info(f"移动部门成功: {moved}")
        return moved

    def _plan_relocation(self, node: Department, new_parent: Optional[Department]) -> StructuralMutation:
        """生成移动子树的操作序列"""
        # 子树在任何平移之前确定
        subtree_ids = tuple(
            [node.id] + [d.id for d in self._repository.descendants_of_node(node)]
        )
        width = node.width
        mutation = StructuralMutation("relocate")

        # 1. 在原树中关闭子树留下的空缺
        mutation.add(ShiftIndexes(node.root_id, 'left_index', node.right_index + 1, -width, subtree_ids))
        mutation.add(ShiftIndexes(node.root_id, 'right_index', node.right_index + 1, -width, subtree_ids))

        # 2. 确定目标位置
        if new_parent is None:
            insertion_point = 1
            target_root_id = node.id
            target_level = 0
        else:
            insertion_point = insertion_point_after_vacate(node, new_parent)
            target_root_id = new_parent.root_id
            target_level = new_parent.level + 1

            # 3. 在目标树中腾出位置
            mutation.add(ShiftIndexes(target_root_id, 'right_index', insertion_point, width, subtree_ids))
            mutation.add(ShiftIndexes(target_root_id, 'left_index', insertion_point, width, subtree_ids))

        # 4. 平移子树本身
        mutation.add(MoveSubtree(
            node_ids=subtree_ids,
            index_offset=insertion_point - node.left_index,
            level_delta=target_level - node.level,
            root_id=target_root_id
        ))
        mutation.add(SetParent(node.id, new_parent.id if new_parent else None))

        logger.debug(f"移动计划: node={node.id}, width={width}, insertion_point={insertion_point}, "
                     f"target_root={target_root_id}, {mutation}")
        return mutation

    # ========== 更新（重命名+移动） ==========

    def update(self, node_id: int, name: str, parent_id=KEEP_PARENT) -> Department:
        """
        在一个事务中修改名称和父部门

        不传parent_id时只改名称；显式传入None时移动为根部门
        """
        self._validator.validate_name(name)

        with self._storage.transaction():
            renamed = self.rename(node_id, name)
            if parent_id is KEEP_PARENT:
                return renamed
            return self.relocate(node_id, parent_id)

    # ========== 删除 ==========

    def delete(self, node_id: int) -> int:
        """
        删除部门及其整个子树，并关闭编号空缺

        Returns:
            删除的部门数量

        Raises:
            NotFoundError: 部门不存在
            ParentNotFoundError: 存储的父部门不存在
            DataIntegrityError: 祖先链未在根部门终止，或区间宽度与后代数不符
        """
        with self._storage.transaction():
            node = self._repository.find_by_id(node_id)

            if node.parent_id is not None and not self._storage.exists_node(node.parent_id):
                logger.error(f"部门 {node_id} 的父部门 {node.parent_id} 不存在")
                raise ParentNotFoundError(node.parent_id)

            self._walk_ancestor_chain(node)

            descendants = self._repository.descendants_of_node(node)
            if len(descendants) != node.descendant_count:
                raise DataIntegrityError(
                    f"部门 {node_id} 的区间宽度与后代数 {len(descendants)} 不符", node_id=node_id
                )
            subtree_ids = tuple([node.id] + [d.id for d in descendants])
            width = node.width

            mutation = StructuralMutation("delete")
            mutation.add(DeleteRows(subtree_ids))
            mutation.add(ShiftIndexes(node.root_id, 'left_index', node.right_index + 1, -width))
            mutation.add(ShiftIndexes(node.root_id, 'right_index', node.right_index + 1, -width))
            mutation.apply(self._storage)

        logger.info(f"删除部门成功: id={node_id}, 共删除 {len(subtree_ids)} 个部门")
        return len(subtree_ids)

    # ========== 校验 ==========

    def _resolve_parent(self, parent_id: int) -> Department:
        parent = self._repository.get(parent_id)
        if parent is None:
            logger.warning(f"父部门不存在: {parent_id}")
            raise ParentNotFoundError(parent_id)
        return parent

    def _walk_ancestor_chain(self, start: Department, forbidden_id: Optional[int] = None) -> None:
        """
        沿parent_id走到根部门，步数不超过所在树的大小

        Args:
            start: 起点部门
            forbidden_id: 链上出现该ID时视为环（移动时传入被移动的部门）

        Raises:
            CycleError: 链经过forbidden_id
            DataIntegrityError: 链重复、悬空或超出步数仍未到达根部门
        """
        limit = max(self._repository.count_nodes(start.root_id), 1)
        seen = {start.id}
        current = start
        steps = 0

        while current.parent_id is not None:
            if forbidden_id is not None and current.parent_id == forbidden_id:
                raise CycleError(forbidden_id, start.id, reason="父部门链指回被移动的部门")

            steps += 1
            if steps > limit or current.parent_id in seen:
                logger.error(f"部门 {start.id} 的祖先链存在环或过长")
                raise DataIntegrityError("祖先链未在根部门终止", node_id=start.id)

            parent = self._repository.get(current.parent_id)
            if parent is None:
                logger.error(f"部门 {current.id} 的父部门 {current.parent_id} 不存在")
                raise DataIntegrityError(
                    f"祖先链中的父部门不存在: {current.parent_id}", node_id=start.id
                )

            seen.add(parent.id)
            current = parent

        if current.root_id != current.id:
            logger.error(f"根部门 {current.id} 的root_id为 {current.root_id}")
            raise DataIntegrityError(f"根部门的root_id与自身ID不一致: {current.id}",
                                     node_id=start.id)
