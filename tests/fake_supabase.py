"""
In-memory stand-in for the parts of supabase.Client the services use:
table().select/insert/update/delete with filters, ordering and paging, and
auth sign_up/sign_in_with_password/get_user/sign_out/admin.delete_user.
"""

import copy
import re
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


def _ilike(value: Any, pattern: str) -> bool:
    if value is None:
        return False
    wildcards = {"%": ".*", "_": "."}
    regex = "^" + "".join(wildcards.get(ch, re.escape(ch)) for ch in pattern) + "$"
    return re.match(regex, str(value), re.IGNORECASE | re.DOTALL) is not None


def _parse_or(expression: str) -> List[Callable[[Dict[str, Any]], bool]]:
    conditions = []
    for clause in expression.split(","):
        column, operator, value = clause.split(".", 2)
        if operator == "ilike":
            conditions.append(lambda row, c=column, v=value: _ilike(row.get(c), v))
        elif operator == "eq":
            conditions.append(lambda row, c=column, v=value: str(row.get(c)) == v)
        else:
            raise ValueError(f"Unsupported or_ operator: {operator}")
    return conditions


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.columns: Optional[List[str]] = None
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.ordering: List[tuple] = []
        self.limit_value: Optional[int] = None
        self.offset_value = 0

    # Actions

    def select(self, columns: str = "*"):
        self.action = "select"
        parts = [c.strip() for c in columns.split(",") if c.strip()]
        self.columns = None if "*" in parts else parts
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    # Filters

    def eq(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def gt(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) is not None and row[column] > value)
        return self

    def gte(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def lt(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) is not None and row[column] < value)
        return self

    def in_(self, column: str, values: List[Any]):
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def is_(self, column: str, value: Any):
        expected = None if value in (None, "null") else value
        self.filters.append(lambda row: row.get(column) is expected)
        return self

    def ilike(self, column: str, pattern: str):
        self.filters.append(lambda row: _ilike(row.get(column), pattern))
        return self

    def or_(self, expression: str):
        conditions = _parse_or(expression)
        self.filters.append(lambda row: any(cond(row) for cond in conditions))
        return self

    # Modifiers

    def order(self, column: str, desc: bool = False):
        self.ordering.append((column, desc))
        return self

    def limit(self, size: int):
        self.limit_value = size
        return self

    def offset(self, start: int):
        self.offset_value = start
        return self

    # Execution

    def _matching(self) -> List[Dict[str, Any]]:
        rows = self.db.tables.setdefault(self.table_name, [])
        return [row for row in rows if all(f(row) for f in self.filters)]

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.action))
        if (self.table_name, self.action) in self.db.failures:
            raise Exception(f"simulated {self.action} failure on {self.table_name}")
        return getattr(self, f"_execute_{self.action}")()

    def _execute_select(self) -> FakeResponse:
        rows = self._matching()
        for column, desc in reversed(self.ordering):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            rows = sorted(present, key=lambda r: r[column], reverse=desc) + missing
        rows = rows[self.offset_value:]
        if self.limit_value is not None:
            rows = rows[:self.limit_value]
        if self.columns is not None:
            rows = [{c: row.get(c) for c in self.columns} for row in rows]
        else:
            rows = [copy.deepcopy(row) for row in rows]
        return FakeResponse(rows)

    def _execute_insert(self) -> FakeResponse:
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        table = self.db.tables.setdefault(self.table_name, [])
        inserted = []
        for item in payload:
            row = {"id": str(uuid.uuid4()), "created_at": datetime.now(timezone.utc).isoformat()}
            row.update(copy.deepcopy(item))
            table.append(row)
            inserted.append(copy.deepcopy(row))
        return FakeResponse(inserted)

    def _execute_update(self) -> FakeResponse:
        updated = []
        for row in self._matching():
            row.update(copy.deepcopy(self.payload))
            updated.append(copy.deepcopy(row))
        return FakeResponse(updated)

    def _execute_delete(self) -> FakeResponse:
        doomed = self._matching()
        table = self.db.tables.setdefault(self.table_name, [])
        self.db.tables[self.table_name] = [row for row in table if row not in doomed]
        return FakeResponse([copy.deepcopy(row) for row in doomed])


class FakeAdminAuth:
    def __init__(self, auth: "FakeAuth"):
        self.auth = auth
        self.deleted: List[str] = []

    def delete_user(self, user_id: str):
        self.auth.users = {e: u for e, u in self.auth.users.items() if u["id"] != user_id}
        self.deleted.append(user_id)


class FakeAuth:
    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, str] = {}
        self.admin = FakeAdminAuth(self)
        self.sign_up_calls = 0

    def _user(self, record: Dict[str, Any]) -> SimpleNamespace:
        return SimpleNamespace(
            id=record["id"],
            email=record["email"],
            user_metadata=record.get("user_metadata", {}),
            created_at=record["created_at"]
        )

    def sign_up(self, credentials: Dict[str, Any]):
        self.sign_up_calls += 1
        email = credentials["email"]
        if email in self.users:
            raise Exception("User already registered")
        record = {
            "id": str(uuid.uuid4()),
            "email": email,
            "password": credentials["password"],
            "user_metadata": credentials.get("options", {}).get("data", {}),
            "created_at": datetime.now(timezone.utc).isoformat()
        }
        self.users[email] = record
        return SimpleNamespace(user=self._user(record), session=None)

    def sign_in_with_password(self, credentials: Dict[str, Any]):
        record = self.users.get(credentials["email"])
        if record is None or record["password"] != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = f"token-{uuid.uuid4()}"
        self.tokens[token] = credentials["email"]
        return SimpleNamespace(user=self._user(record), session=SimpleNamespace(access_token=token))

    def get_user(self, jwt: str):
        email = self.tokens.get(jwt)
        if email is None or email not in self.users:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self._user(self.users[email]))

    def sign_out(self):
        return None


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.auth = FakeAuth()
        self.failures = set()
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail_on(self, table: str, action: str) -> None:
        """Make the next and all later `action` calls on `table` raise"""
        self.failures.add((table, action))

    def rows(self, table: str, **filters) -> List[Dict[str, Any]]:
        return [
            row for row in self.tables.get(table, [])
            if all(row.get(k) == v for k, v in filters.items())
        ]
