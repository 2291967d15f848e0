"""
SQLite数据库存储实现
部门行保存在SQLite数据库中，范围平移用单条UPDATE完成
"""
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Any, Optional, Iterable

from .adapter import DataStoreAdapter, NodeFilter, NODE_FIELDS
from .exceptions import StorageConnectionError, RowNotFoundError


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class SQLiteStore(DataStoreAdapter):
    """
    SQLite数据库存储实现

    事务使用 BEGIN IMMEDIATE，开始时即获取写锁，
    同一数据库文件上的并发结构修改因此串行执行。
    """

    store_type = "sqlite"

    def __init__(self, db_path: str):
        """
        初始化SQLite存储

        Args:
            db_path: 数据库文件路径
        """
        super().__init__()
        self.db_path = Path(db_path)
        self._tx_conn: Optional[sqlite3.Connection] = None

        # 确保目录存在
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db_path.touch(exist_ok=True)
        except OSError as e:
            raise StorageConnectionError(f"无法创建数据库文件: {e}", store_type=self.store_type,
                                         location=str(self.db_path))

        # 初始化数据库
        try:
            self._init_database()
        except sqlite3.Error as e:
            raise StorageConnectionError(f"初始化数据库失败: {e}", store_type=self.store_type,
                                         location=str(self.db_path))

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=30.0,
            isolation_level=None  # 手动控制事务
        )
        conn.row_factory = sqlite3.Row  # 返回字典式行
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @contextmanager
    def _get_connection(self):
        """获取数据库连接（上下文管理器），事务中复用事务连接"""
        if self._tx_conn is not None:
            yield self._tx_conn
            return

        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def _init_database(self):
        """初始化数据库表结构"""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS departments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    parent_id INTEGER,
                    level INTEGER NOT NULL,
                    left_index INTEGER NOT NULL,
                    right_index INTEGER NOT NULL,
                    root_id INTEGER
                )
            """)

            # 创建索引
            conn.execute("CREATE INDEX IF NOT EXISTS idx_dept_left ON departments(root_id, left_index)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_dept_right ON departments(root_id, right_index)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_dept_parent ON departments(parent_id)")

    # ========== 事务 ==========

    def _begin(self) -> None:
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error:
            conn.close()
            raise
        self._tx_conn = conn

    def _commit(self) -> None:
        conn, self._tx_conn = self._tx_conn, None
        try:
            conn.execute("COMMIT")
        except sqlite3.Error:
            conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def _rollback(self) -> None:
        conn, self._tx_conn = self._tx_conn, None
        if conn is None:
            return
        try:
            conn.execute("ROLLBACK")
        finally:
            conn.close()

    # ========== 查询 ==========

    def load_node(self, node_id: int) -> Optional[Dict[str, Any]]:
        """按ID加载一行"""
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("SELECT * FROM departments WHERE id = ?", (node_id,))
                row = cursor.fetchone()
                return dict(row) if row else None

    @staticmethod
    def _build_where(node_filter: Optional[NodeFilter]):
        """把查询条件转换为WHERE子句"""
        clauses = []
        params: List[Any] = []
        if node_filter is None:
            return "", params

        if node_filter.root_id is not None:
            clauses.append("root_id = ?")
            params.append(node_filter.root_id)
        if node_filter.parent_id is not None:
            clauses.append("parent_id = ?")
            params.append(node_filter.parent_id)
        if node_filter.roots_only:
            clauses.append("parent_id IS NULL")
        if node_filter.left_gt is not None:
            clauses.append("left_index > ?")
            params.append(node_filter.left_gt)
        if node_filter.left_lt is not None:
            clauses.append("left_index < ?")
            params.append(node_filter.left_lt)
        if node_filter.right_gt is not None:
            clauses.append("right_index > ?")
            params.append(node_filter.right_gt)
        if node_filter.right_lt is not None:
            clauses.append("right_index < ?")
            params.append(node_filter.right_lt)
        if node_filter.name_contains is not None:
            clauses.append("instr(casefold(name), ?) > 0")
            params.append(node_filter.name_contains.casefold())

        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def query_nodes(self, node_filter: Optional[NodeFilter] = None) -> List[Dict[str, Any]]:
        """按条件查询，结果按left_index升序"""
        where, params = self._build_where(node_filter)
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    f"SELECT * FROM departments{where} ORDER BY left_index, root_id, id",
                    params
                )
                return [dict(row) for row in cursor.fetchall()]

    def count_nodes(self, node_filter: Optional[NodeFilter] = None) -> int:
        """按条件计数"""
        where, params = self._build_where(node_filter)
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(f"SELECT COUNT(*) FROM departments{where}", params)
                return cursor.fetchone()[0]

    # ========== 写操作 ==========

    def insert_node(self, row: Dict[str, Any]) -> int:
        """插入一行，root_id为空时设为自身ID"""
        with self.transaction():
            conn = self._tx_conn
            cursor = conn.execute("""
                INSERT INTO departments (name, parent_id, level, left_index, right_index, root_id)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (
                row['name'],
                row.get('parent_id'),
                row.get('level', 0),
                row['left_index'],
                row['right_index'],
                row.get('root_id')
            ))
            node_id = cursor.lastrowid

            if row.get('root_id') is None:
                conn.execute("UPDATE departments SET root_id = ? WHERE id = ?", (node_id, node_id))

            return node_id

    def update_node(self, node_id: int, **fields: Any) -> None:
        """更新单行"""
        for field in fields:
            if field not in NODE_FIELDS or field == 'id':
                raise ValueError(f"不支持更新的字段: {field}")
        if not fields:
            return

        assignments = ", ".join(f"{field} = ?" for field in fields)
        with self.transaction():
            cursor = self._tx_conn.execute(
                f"UPDATE departments SET {assignments} WHERE id = ?",
                (*fields.values(), node_id)
            )
            if cursor.rowcount == 0:
                raise RowNotFoundError(node_id, operation="update_node", store_type=self.store_type)

    def delete_nodes(self, node_ids: Iterable[int]) -> int:
        """删除若干行"""
        ids = [(node_id,) for node_id in node_ids]
        with self.transaction():
            deleted = 0
            for params in ids:
                cursor = self._tx_conn.execute("DELETE FROM departments WHERE id = ?", params)
                deleted += cursor.rowcount
            return deleted

    def shift_indexes(
            self,
            root_id: int,
            field: str,
            from_index: int,
            delta: int,
            exclude_ids: Iterable[int] = ()
    ) -> int:
        """树内范围平移"""
        self._check_field(field)
        excluded = list(exclude_ids)

        query = f"UPDATE departments SET {field} = {field} + ? WHERE root_id = ? AND {field} >= ?"
        params: List[Any] = [delta, root_id, from_index]
        if excluded:
            query += f" AND id NOT IN ({', '.join('?' for _ in excluded)})"
            params.extend(excluded)

        with self.transaction():
            cursor = self._tx_conn.execute(query, params)
            return cursor.rowcount

    def move_nodes(
            self,
            node_ids: Iterable[int],
            index_offset: int,
            level_delta: int,
            root_id: int
    ) -> int:
        """整体平移一组行"""
        ids = list(node_ids)
        with self.transaction():
            affected = 0
            for node_id in ids:
                cursor = self._tx_conn.execute("""
                    UPDATE departments
                    SET left_index = left_index + ?,
                        right_index = right_index + ?,
                        level = level + ?,
                        root_id = ?
                    WHERE id = ?
                """, (index_offset, index_offset, level_delta, root_id, node_id))
                affected += cursor.rowcount
            return affected

    # ========== 管理 ==========

    def close(self):
        """关闭数据库连接"""
        # 连接按操作/事务管理，无需显式关闭
        pass

    def clear(self):
        """清空所有数据（测试用）"""
        with self.transaction():
            self._tx_conn.execute("DELETE FROM departments")
            self._tx_conn.execute("DELETE FROM sqlite_sequence WHERE name = 'departments'")

    def __str__(self):
        """字符串表示"""
        with self._lock:
            with self._get_connection() as conn:
                node_count = conn.execute("SELECT COUNT(*) FROM departments").fetchone()[0]
                tree_count = conn.execute(
                    "SELECT COUNT(*) FROM departments WHERE parent_id IS NULL"
                ).fetchone()[0]
                return f"SQLiteStore(db={self.db_path}, trees={tree_count}, nodes={node_count})"
