"""
测试系统主入口
"""
import json

import pytest

from dept_tree import DepartmentTreeSystem, __version__
from dept_tree.data.storage import JSONStore, SQLiteStore, MemoryStore
from dept_tree.exceptions import ValidationError, ConfigError


def test_system_creation():
    """测试系统创建"""
    system = DepartmentTreeSystem()
    info = system.get_system_info()

    assert info["name"] == "部门树管理系统"
    assert info["version"] == __version__
    assert info["storage_type"] == "memory"
    assert info["department_count"] == 0
    assert isinstance(system.storage, MemoryStore)
    print("✓ 系统创建成功")


def test_backend_from_config(tmp_path):
    json_system = DepartmentTreeSystem(config={
        "storage_backend": "json",
        "storage_path": str(tmp_path / "depts.json"),
    })
    sqlite_system = DepartmentTreeSystem(config={
        "storage_backend": "sqlite",
        "storage_path": str(tmp_path / "depts.db"),
    })

    assert isinstance(json_system.storage, JSONStore)
    assert isinstance(sqlite_system.storage, SQLiteStore)


def test_persistent_system_reopen(tmp_path):
    """SQLite后端重新打开后数据和结构保持一致"""
    config = {"storage_backend": "sqlite", "storage_path": str(tmp_path / "depts.db")}
    system = DepartmentTreeSystem(config=config)
    root = system.create_department("总公司")
    system.create_department("研发部", root.id)
    system.close()

    reopened = DepartmentTreeSystem(config=config)
    assert [d.name for d in reopened.get_descendants(root.id)] == ["研发部"]
    assert reopened.check_integrity()["valid"]


def test_max_name_length_from_config():
    system = DepartmentTreeSystem(config={"max_name_length": 4})
    system.create_department("四个字符")

    with pytest.raises(ValidationError):
        system.create_department("五个字符啊")


def test_config_from_json_file(tmp_path):
    """config可以是JSON配置文件路径"""
    config_path = tmp_path / "dept_tree.json"
    config_path.write_text(
        json.dumps({"max_name_length": 4, "system_name": "测试系统", "log_level": "WARNING"}),
        encoding="utf-8"
    )

    system = DepartmentTreeSystem(config=str(config_path))
    assert system.get_system_info()["name"] == "测试系统"
    system.create_department("四个字符")
    with pytest.raises(ValidationError):
        system.create_department("五个字符啊")

    assert DepartmentTreeSystem(config=config_path).settings.max_name_length == 4


def test_config_file_missing(tmp_path):
    with pytest.raises(ConfigError):
        DepartmentTreeSystem(config=str(tmp_path / "missing.json"))


def test_system_info_counts(company):
    system = company["system"]
    system.create_department("分公司")

    info = system.get_system_info()
    assert info["department_count"] == 6
    assert info["tree_count"] == 2
    assert "departments=6" in repr(system)


def test_logging_disabled():
    system = DepartmentTreeSystem(config={"enable_logging": False})
    system.create_department("总公司")
    assert system.get_system_info()["settings"]["enable_logging"] is False
