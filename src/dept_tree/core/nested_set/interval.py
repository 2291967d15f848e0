"""
嵌套集区间判断
"""
from ..node.entity import Department


def is_in_subtree(candidate: Department, node: Department) -> bool:
    """candidate是否是node自身或node的后代"""
    return candidate.id == node.id or node.contains(candidate)


def insertion_point_after_vacate(node: Department, new_parent: Department) -> int:
    """
    node的子树腾出后，new_parent的right_index

    只有同一棵树内位于空缺右侧的区间会左移width
    """
    insertion_point = new_parent.right_index
    if new_parent.root_id == node.root_id and new_parent.right_index > node.right_index:
        insertion_point -= node.width
    return insertion_point
