"""
测试插入：根部门、子部门、深层插入、多棵树互不影响
"""
import pytest

from dept_tree.exceptions import ParentNotFoundError, ValidationError, NotFoundError
from conftest import intervals


class TestInsert:

    def test_insert_root(self, system):
        """新根部门占用 (1,2)，root_id等于自身ID"""
        root = system.create_department("X")
        found = system.get_department(root.id)

        assert found.left_index == 1
        assert found.right_index == 2
        assert found.level == 0
        assert found.root_id == found.id
        assert found.parent_id is None
        print("✓ 根部门插入测试通过")

    def test_insert_child_under_leaf_parent(self, system):
        root = system.create_department("总公司")
        child = system.create_department("研发部", root.id)

        assert (child.left_index, child.right_index, child.level) == (2, 3, 1)
        assert child.parent_id == root.id
        assert child.root_id == root.id

        root = system.get_department(root.id)
        assert (root.left_index, root.right_index) == (1, 4)

    def test_deep_insert(self, system):
        """根部门 (1,6) 下有 (2,3)、(4,5)，在第一个子部门下插入孙部门"""
        root = system.create_department("根")
        first = system.create_department("一", root.id)
        system.create_department("二", root.id)
        assert intervals(system) == {"根": (1, 6, 0), "一": (2, 3, 1), "二": (4, 5, 1)}

        grandchild = system.create_department("孙", first.id)

        assert (grandchild.left_index, grandchild.right_index, grandchild.level) == (3, 4, 2)
        assert intervals(system) == {
            "根": (1, 8, 0), "一": (2, 5, 1), "孙": (3, 4, 2), "二": (6, 7, 1)
        }

    def test_new_child_is_rightmost(self, company):
        system = company["system"]
        late = system.create_department("财务部", company["root"])

        children = system.get_sub_departments(company["root"])
        assert [d.name for d in children] == ["研发部", "市场部", "财务部"]
        assert late.right_index + 1 == system.get_department(company["root"]).right_index

    def test_insert_does_not_touch_other_trees(self, system):
        first = system.create_department("A")
        second = system.create_department("B")
        system.create_department("A1", first.id)
        system.create_department("A2", first.id)

        other = system.get_department(second.id)
        assert (other.left_index, other.right_index) == (1, 2)
        assert intervals(system, second.id) == {"B": (1, 2, 0)}

    def test_missing_parent(self, system):
        system.create_department("总公司")
        before = intervals(system)

        with pytest.raises(ParentNotFoundError) as exc_info:
            system.create_department("孤儿", 999)

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.code == "PARENT_NOT_FOUND"
        assert intervals(system) == before

    def test_invalid_name_writes_nothing(self, system):
        root = system.create_department("总公司")

        for bad_name in (None, "", "x" * 101):
            with pytest.raises(ValidationError):
                system.create_department(bad_name, root.id)

        assert system.repository.count_nodes() == 1
        assert intervals(system) == {"总公司": (1, 2, 0)}
