"""
pytest配置文件
用于设置测试环境和共享fixtures
"""
import sys
import os

import pytest

# 将src目录添加到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from dept_tree import DepartmentTreeSystem
from dept_tree.data.storage import MemoryStore, JSONStore, SQLiteStore


def make_store(kind, tmp_path):
    """按类型创建存储"""
    if kind == 'memory':
        return MemoryStore()
    elif kind == 'json':
        return JSONStore(str(tmp_path / "departments.json"))
    else:  # sqlite
        return SQLiteStore(str(tmp_path / "departments.db"))


@pytest.fixture(params=['memory', 'json', 'sqlite'])
def store(request, tmp_path):
    """参数化三种存储实现"""
    storage = make_store(request.param, tmp_path)
    yield storage
    storage.close()


@pytest.fixture
def system(store):
    """使用参数化存储的系统"""
    return DepartmentTreeSystem(config={"log_level": "WARNING"}, storage=store)


@pytest.fixture
def memory_system():
    return DepartmentTreeSystem(config={"log_level": "WARNING"})


@pytest.fixture
def company(system):
    """
    示例组织:

    总公司
    ├── 研发部
    │   ├── 后端组
    │   └── 前端组
    └── 市场部
    """
    root = system.create_department("总公司")
    rd = system.create_department("研发部", root.id)
    backend = system.create_department("后端组", rd.id)
    frontend = system.create_department("前端组", rd.id)
    market = system.create_department("市场部", root.id)
    return {
        "system": system,
        "root": root.id,
        "rd": rd.id,
        "backend": backend.id,
        "frontend": frontend.id,
        "market": market.id,
    }


def intervals(system, root_id=None):
    """{名称: (left, right, level)}，便于断言"""
    departments = system.repository.tree_of(root_id) if root_id else system.get_all_departments()
    return {d.name: (d.left_index, d.right_index, d.level) for d in departments}
