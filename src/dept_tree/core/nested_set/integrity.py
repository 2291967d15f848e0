"""
嵌套集完整性检查与重建

检查器只报告问题；重建是显式的管理操作，任何修改操作都不会自动调用。
"""

import bisect
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Any

from .mutation import StructuralMutation, RenumberRow
from ...data.storage.adapter import DataStoreAdapter, NodeFilter
from ...exceptions import DataIntegrityError, NotFoundError

logger = logging.getLogger(__name__)


class IntegrityChecker:
    """检查每棵树的区间、层级、parent_id是否互相一致"""

    def __init__(self, storage: DataStoreAdapter):
        self._storage = storage

    def find_violations(self, root_id: Optional[int] = None) -> List[str]:
        """
        检查一棵树（或全部树），返回问题描述列表，为空表示一致

        检查内容：
        - 区间合法且编号恰好占满 1..2n
        - 叶子区间宽度为2，区间宽度 = 1 + 2 * 后代数
        - 区间要么嵌套要么不相交
        - parent_id是最小的包含区间，层级 = 父层级 + 1
        - 根部门 parent_id为空且 root_id == id
        - parent_id链无环
        """
        rows = self._storage.query_nodes(NodeFilter(root_id=root_id))
        trees: Dict[Any, List[Dict[str, Any]]] = defaultdict(list)
        for row in rows:
            trees[row['root_id']].append(row)

        violations = []
        for tree_root_id, tree_rows in trees.items():
            violations.extend(self._check_tree(tree_root_id, tree_rows))
        violations.extend(self._check_parent_cycles(rows))
        return violations

    def assert_valid(self, root_id: Optional[int] = None) -> None:
        """检查失败时抛出DataIntegrityError"""
        violations = self.find_violations(root_id)
        if violations:
            logger.error(f"完整性检查失败: {len(violations)} 个问题")
            raise DataIntegrityError(
                f"发现 {len(violations)} 个结构问题: {violations[0]}",
                node_id=root_id,
                violations=violations
            )

    def _check_tree(self, root_id, rows: List[Dict[str, Any]]) -> List[str]:
        problems = []
        by_id = {row['id']: row for row in rows}

        # 根部门
        roots = [row for row in rows if row['parent_id'] is None]
        if len(roots) != 1 or roots[0]['id'] != root_id:
            problems.append(f"树 {root_id}: 根部门应唯一且ID等于root_id，实际为 "
                            f"{[row['id'] for row in roots]}")

        # 编号恰好占满 1..2n
        indexes = sorted([row['left_index'] for row in rows] + [row['right_index'] for row in rows])
        if indexes != list(range(1, 2 * len(rows) + 1)):
            problems.append(f"树 {root_id}: 编号不连续或重复")

        lefts = [row['left_index'] for row in rows]  # rows已按left_index升序
        stack: List[Dict[str, Any]] = []
        for row in rows:
            node_id = row['id']
            left, right = row['left_index'], row['right_index']

            if left >= right:
                problems.append(f"部门 {node_id}: left_index >= right_index")
                continue

            descendants = bisect.bisect_left(lefts, right) - bisect.bisect_right(lefts, left)
            if right - left != 1 + 2 * descendants:
                problems.append(f"部门 {node_id}: 区间宽度与后代数 {descendants} 不符")

            while stack and stack[-1]['right_index'] < left:
                stack.pop()

            container = stack[-1] if stack else None
            if container is not None and right > container['right_index']:
                problems.append(f"部门 {node_id}: 区间与部门 {container['id']} 部分重叠")

            expected_parent = container['id'] if container else None
            if row['parent_id'] != expected_parent:
                problems.append(f"部门 {node_id}: parent_id={row['parent_id']}，"
                                f"按区间应为 {expected_parent}")

            expected_level = container['level'] + 1 if container else 0
            if row['level'] != expected_level:
                problems.append(f"部门 {node_id}: level={row['level']}，应为 {expected_level}")

            if row['parent_id'] is not None and row['parent_id'] not in by_id:
                problems.append(f"部门 {node_id}: 父部门 {row['parent_id']} 不在同一棵树中")

            stack.append(row)

        return problems

    def _check_parent_cycles(self, rows: List[Dict[str, Any]]) -> List[str]:
        parent_of = {row['id']: row['parent_id'] for row in rows}
        acyclic = set()
        problems = []
        for node_id in parent_of:
            path = []
            on_path = set()
            current = node_id
            while current is not None and current not in acyclic:
                if current in on_path:
                    problems.append(f"部门 {current}: parent_id链存在环")
                    break
                path.append(current)
                on_path.add(current)
                current = parent_of.get(current)
            acyclic.update(path)
        return problems

    # ========== 重建 ==========

    def rebuild(self, root_id: int) -> int:
        """
        按parent_id重建一棵树的编号，子部门顺序沿用当前left_index顺序

        Returns:
            重新编号的部门数

        Raises:
            NotFoundError: 根部门不存在
            DataIntegrityError: parent_id链有环，或有部门无法从根部门到达
        """
        with self._storage.transaction():
            root = self._storage.load_node(root_id)
            if root is None:
                raise NotFoundError(root_id)
            if root['parent_id'] is not None:
                raise DataIntegrityError(f"部门 {root_id} 不是根部门", node_id=root_id)

            # 前序遍历
            order = []
            children: Dict[int, List[Dict[str, Any]]] = {}
            seen = set()
            stack = [(root, 0)]
            while stack:
                row, level = stack.pop()
                if row['id'] in seen:
                    raise DataIntegrityError("parent_id链存在环", node_id=row['id'])
                seen.add(row['id'])
                order.append((row, level))
                kids = self._storage.query_nodes(NodeFilter(parent_id=row['id']))
                children[row['id']] = kids
                stack.extend((kid, level + 1) for kid in reversed(kids))

            unreachable = [row['id'] for row in self._storage.query_nodes(NodeFilter(root_id=root_id))
                           if row['id'] not in seen]
            if unreachable:
                raise DataIntegrityError(
                    f"无法从根部门 {root_id} 到达的部门: {unreachable}", node_id=root_id
                )

            sizes: Dict[int, int] = {}
            for row, _ in reversed(order):
                sizes[row['id']] = 1 + sum(sizes[kid['id']] for kid in children[row['id']])

            lefts = {root_id: 1}
            mutation = StructuralMutation("rebuild")
            for row, level in order:
                node_id = row['id']
                left = lefts[node_id]
                cursor = left + 1
                for kid in children[node_id]:
                    lefts[kid['id']] = cursor
                    cursor += 2 * sizes[kid['id']]
                mutation.add(RenumberRow(
                    node_id=node_id,
                    left_index=left,
                    right_index=left + 2 * sizes[node_id] - 1,
                    level=level,
                    root_id=root_id
                ))

            mutation.apply(self._storage)

        logger.info(f"重建树编号完成: root_id={root_id}, 共 {len(order)} 个部门")
        return len(order)
