"""
测试完整性检查与重建，以及随机操作序列下的不变量
"""
import random

import pytest

from dept_tree import DepartmentTreeSystem
from dept_tree.core.nested_set import IntegrityChecker
from dept_tree.data.storage import MemoryStore, SQLiteStore
from dept_tree.exceptions import CycleError, DataIntegrityError, NotFoundError
from conftest import intervals


def model_is_in_subtree(parents, candidate, node):
    """按模型中的父指针判断candidate是否是node自身或其后代"""
    current = candidate
    while current is not None:
        if current == node:
            return True
        current = parents[current]
    return False


def model_subtree(parents, node):
    return {n for n in parents if model_is_in_subtree(parents, n, node)}


class TestIntegrityChecker:

    def test_consistent_tree_has_no_violations(self, company):
        system = company["system"]
        assert system.check_integrity() == {"valid": True, "violations": []}
        IntegrityChecker(system.storage).assert_valid(company["root"])

    def test_detects_wrong_level(self, company):
        system = company["system"]
        system.storage.update_node(company["backend"], level=5)

        report = system.check_integrity()
        assert not report["valid"]
        assert any("level" in v for v in report["violations"])

    def test_detects_overlap_and_gaps(self, company):
        system = company["system"]
        system.storage.update_node(company["market"], left_index=6, right_index=9)

        checker = IntegrityChecker(system.storage)
        with pytest.raises(DataIntegrityError) as exc_info:
            checker.assert_valid()
        assert exc_info.value.details["violations"]

    def test_detects_parent_cycle(self, company):
        system = company["system"]
        system.storage.update_node(company["root"], parent_id=company["backend"])

        violations = system.check_integrity()["violations"]
        assert any("环" in v for v in violations)

    def test_check_single_tree(self, company):
        system = company["system"]
        other = system.create_department("分公司")
        system.storage.update_node(company["backend"], right_index=40)

        assert system.check_integrity(other.id)["valid"]
        assert not system.check_integrity(company["root"])["valid"]


class TestRebuild:

    def test_rebuild_restores_intervals(self, company):
        system = company["system"]
        expected = intervals(system)
        system.storage.update_node(company["market"], left_index=20, right_index=21, level=7)
        system.storage.update_node(company["root"], right_index=3)
        assert not system.check_integrity()["valid"]

        renumbered = system.rebuild_indexes(company["root"])

        assert renumbered == 5
        assert intervals(system) == expected
        assert system.check_integrity()["valid"]

    def test_rebuild_follows_parent_pointers(self, company):
        """只改了parent_id时，按parent_id重建区间"""
        system = company["system"]
        system.storage.update_node(company["frontend"], parent_id=company["market"])

        system.rebuild_indexes()

        assert [d.name for d in system.get_sub_departments(company["market"])] == ["前端组"]
        assert system.get_department(company["frontend"]).level == 2
        assert system.check_integrity()["valid"]

    def test_rebuild_refuses_unreachable_rows(self, company):
        system = company["system"]
        system.storage.update_node(company["rd"], parent_id=company["backend"])
        before = intervals(system)

        with pytest.raises(DataIntegrityError):
            system.rebuild_indexes(company["root"])
        assert intervals(system) == before

    def test_rebuild_missing_root(self, company):
        with pytest.raises(NotFoundError):
            company["system"].rebuild_indexes(999)


@pytest.mark.parametrize("backend", ["memory", "sqlite"])
def test_random_operations_keep_invariants(backend, tmp_path):
    """随机插入、移动、删除后，区间、层级、父指针始终一致"""
    rng = random.Random(20240501)
    store = MemoryStore() if backend == "memory" else SQLiteStore(str(tmp_path / "random.db"))
    system = DepartmentTreeSystem(config={"log_level": "WARNING"}, storage=store)

    parents = {}  # 模型：id -> parent_id
    for step in range(150):
        existing = list(parents)
        action = rng.random()

        if not existing or action < 0.45:
            parent_id = rng.choice(existing + [None]) if existing else None
            created = system.create_department(f"部门{step}", parent_id)
            parents[created.id] = parent_id

        elif action < 0.8:
            node_id = rng.choice(existing)
            new_parent_id = rng.choice(existing + [None])
            if new_parent_id is not None and model_is_in_subtree(parents, new_parent_id, node_id):
                with pytest.raises(CycleError):
                    system.relocate_department(node_id, new_parent_id)
            else:
                system.relocate_department(node_id, new_parent_id)
                parents[node_id] = new_parent_id

        else:
            node_id = rng.choice(existing)
            removed = model_subtree(parents, node_id)
            assert system.delete_department(node_id) == len(removed)
            for removed_id in removed:
                del parents[removed_id]

        report = system.check_integrity()
        assert report["valid"], f"第{step}步后: {report['violations']}"

    stored = {d.id: d.parent_id for d in system.get_all_departments()}
    assert stored == parents
