"""
测试部门实体、工厂和区间判断
"""
from dept_tree.core.node import Department, DepartmentFactory
from dept_tree.core.nested_set import is_in_subtree, insertion_point_after_vacate


def dept(node_id, left, right, level=0, parent_id=None, root_id=1):
    return Department(id=node_id, name=f"部门{node_id}", parent_id=parent_id, level=level,
                      left_index=left, right_index=right, root_id=root_id)


def test_department_properties():
    """测试部门属性"""
    root = dept(1, 1, 10)
    leaf = dept(3, 3, 4, level=2, parent_id=2)

    assert root.is_root and not root.is_leaf
    assert leaf.is_leaf and not leaf.is_root
    assert root.width == 10
    assert root.descendant_count == 4
    assert leaf.descendant_count == 0
    print("✓ 部门属性测试通过")


def test_to_dict_round_trip():
    leaf = dept(3, 3, 4, level=2, parent_id=2)
    data = leaf.to_dict()

    assert data == {"id": 3, "name": "部门3", "parent_id": 2, "level": 2,
                    "left_index": 3, "right_index": 4, "root_id": 1}
    assert Department.from_dict(data) == leaf


def test_containment_is_scoped_by_tree():
    root = dept(1, 1, 10)
    inside = dept(2, 2, 5, level=1, parent_id=1)
    other_tree = dept(7, 2, 5, level=1, parent_id=6, root_id=6)

    assert root.contains(inside)
    assert not root.contains(other_tree)
    assert not inside.contains(root)
    assert not root.contains(root)

    assert is_in_subtree(root, root)
    assert is_in_subtree(inside, root)
    assert not is_in_subtree(root, inside)


def test_insertion_point_after_vacate():
    """只有同树、位于空缺右侧的父部门需要减去宽度"""
    node = dept(3, 3, 4, level=2, parent_id=2)
    right_parent = dept(5, 8, 9, level=1, parent_id=1)
    left_parent = dept(2, 2, 7, level=1, parent_id=1)
    other_tree = dept(6, 1, 2, root_id=6)

    assert insertion_point_after_vacate(node, right_parent) == 7
    assert insertion_point_after_vacate(node, left_parent) == 5
    assert insertion_point_after_vacate(node, other_tree) == 2


def test_factory():
    factory = DepartmentFactory()
    root = factory.create_root_department("总公司")
    assert (root.id, root.left_index, root.right_index, root.level, root.root_id) == (None, 1, 2, 0, None)

    parent = dept(2, 2, 7, level=1, parent_id=1)
    child = factory.create_child_department(parent, "新组")
    assert (child.left_index, child.right_index, child.level) == (7, 8, 2)
    assert child.parent_id == 2
    assert child.root_id == 1
