"""
测试异常体系
"""
from dept_tree.exceptions import (
    BaseError, TreeError, ValidationError, ConfigError, NotFoundError,
    ParentNotFoundError, NoParentError, CycleError, DataIntegrityError,
    DataStoreError, StorageError, TableImportError
)
from dept_tree.data.storage.exceptions import StorageOperationError


def test_exception_codes():
    """测试错误码"""
    assert ValidationError("x").code == "VALIDATION_ERROR"
    assert ConfigError("x").code == "CONFIG_ERROR"
    assert NotFoundError(1).code == "NOT_FOUND"
    assert ParentNotFoundError(1).code == "PARENT_NOT_FOUND"
    assert NoParentError(1).code == "NO_PARENT"
    assert CycleError(1, 2).code == "CYCLE_DETECTED"
    assert DataIntegrityError("x").code == "DATA_INTEGRITY_ERROR"
    assert DataStoreError("x").code == "DATA_STORE_ERROR"
    assert TableImportError("x").code == "IMPORT_ERROR"
    print("✓ 错误码测试通过")


def test_exception_inheritance():
    """测试异常继承关系"""
    assert issubclass(ParentNotFoundError, NotFoundError)
    for cls in (NotFoundError, NoParentError, CycleError, DataIntegrityError):
        assert issubclass(cls, TreeError)
        assert issubclass(cls, BaseError)
    assert issubclass(DataStoreError, StorageError)
    assert issubclass(StorageOperationError, DataStoreError)
    print("✓ 异常继承关系测试通过")


def test_exception_details():
    """测试异常详情"""
    error = CycleError(node_id=3, parent_id=7, reason="新父部门是该部门的后代")

    assert str(error).startswith("[CYCLE_DETECTED]")
    assert "新父部门是该部门的后代" in str(error)
    assert error.details == {"node_id": 3, "parent_id": 7, "reason": "新父部门是该部门的后代"}

    data = error.to_dict()
    assert data["code"] == "CYCLE_DETECTED"
    assert "timestamp" in data

    integrity = DataIntegrityError("编号重复", node_id=5, violations=["a", "b"])
    assert integrity.message.startswith("数据完整性错误")
    assert integrity.details["violations"] == ["a", "b"]

    assert "第3行" in TableImportError("层级为空", row=3).message
    print("✓ 异常详情测试通过")
