"""
测试删除：叶子、子树级联、根部门、错误情况
"""
import pytest

from dept_tree.exceptions import NotFoundError, ParentNotFoundError, DataIntegrityError
from conftest import intervals


class TestDelete:

    def test_delete_leaf_closes_gap(self, system):
        """链 (1,6) -> (2,5) -> (3,4)，删除叶子后为 (1,4) -> (2,3)"""
        root = system.create_department("根")
        child = system.create_department("子", root.id)
        leaf = system.create_department("叶", child.id)
        assert intervals(system) == {"根": (1, 6, 0), "子": (2, 5, 1), "叶": (3, 4, 2)}

        removed = system.delete_department(leaf.id)

        assert removed == 1
        assert intervals(system) == {"根": (1, 4, 0), "子": (2, 3, 1)}
        with pytest.raises(NotFoundError):
            system.get_department(leaf.id)

    def test_delete_subtree_cascades(self, company):
        system = company["system"]
        removed = system.delete_department(company["rd"])

        assert removed == 3
        for department_id in (company["rd"], company["backend"], company["frontend"]):
            assert system.repository.get(department_id) is None
        assert intervals(system) == {"总公司": (1, 4, 0), "市场部": (2, 3, 1)}
        assert system.check_integrity()["valid"]

    def test_delete_root_removes_tree(self, company):
        system = company["system"]
        other = system.create_department("分公司")
        system.create_department("分公司财务", other.id)

        system.delete_department(company["root"])

        assert system.repository.count_nodes() == 2
        assert intervals(system) == {"分公司": (1, 4, 0), "分公司财务": (2, 3, 1)}

    def test_delete_only_affects_own_tree(self, company):
        system = company["system"]
        other = system.create_department("分公司")
        branch_child = system.create_department("分公司财务", other.id)

        system.delete_department(company["backend"])

        untouched = system.get_department(branch_child.id)
        assert (untouched.left_index, untouched.right_index) == (2, 3)
        assert system.get_department(other.id).right_index == 4

    def test_delete_missing(self, company):
        with pytest.raises(NotFoundError):
            company["system"].delete_department(999)

    def test_delete_with_dangling_parent(self, company):
        system = company["system"]
        system.storage.update_node(company["market"], parent_id=999)

        with pytest.raises(ParentNotFoundError):
            system.delete_department(company["market"])
        assert system.repository.get(company["market"]) is not None

    def test_delete_with_cyclic_ancestor_chain(self, company):
        system = company["system"]
        system.storage.update_node(company["root"], parent_id=company["backend"])

        with pytest.raises(DataIntegrityError):
            system.delete_department(company["market"])
        assert system.repository.count_nodes() == 5

    def test_delete_with_width_mismatch(self, company):
        """区间宽度与实际后代数不符时拒绝删除"""
        system = company["system"]
        system.storage.update_node(company["rd"], right_index=9)

        with pytest.raises(DataIntegrityError):
            system.delete_department(company["rd"])
        assert system.repository.count_nodes() == 5
