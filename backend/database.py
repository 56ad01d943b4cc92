import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from models import Task

logger = logging.getLogger(__name__)

BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))


def resolve_database_path(path: str) -> str:
    """Relative paths are taken from the backend directory, where alembic runs."""
    return os.path.join(BACKEND_DIR, os.path.expanduser(path))


DATABASE_PATH = resolve_database_path(os.getenv("DATABASE_PATH", "tasks.db"))

@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()

def init_db():
    """Initialize database by running Alembic migrations."""
    import subprocess
    import sys

    # Run alembic upgrade from the backend directory against the same file get_db opens
    logger.info("Running migrations for %s", DATABASE_PATH)
    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=BACKEND_DIR,
        env={**os.environ, "DATABASE_PATH": DATABASE_PATH},
        check=True
    )

def _row_to_task(row) -> Task:
    """Convert a database row to a Task model."""
    return Task(
        id=row["id"],
        title=row["title"],
        description=row["description"] or "",
        status=row["status"],
        priority=row["priority"],
        due_date=row["due_date"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def get_all_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None
) -> list[Task]:
    """
    Get tasks, newest first.
    status/priority filter by exact value; "all" or None means no filter.
    search matches a case-insensitive substring of title or description.
    """
    clauses = []
    params = []
    if status and status != "all":
        clauses.append("status = ?")
        params.append(status)
    if priority and priority != "all":
        clauses.append("priority = ?")
        params.append(priority)
    if search:
        clauses.append("(instr(lower(title), lower(?)) > 0 OR instr(lower(description), lower(?)) > 0)")
        params.extend([search, search])

    query = "SELECT * FROM tasks"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    query += " ORDER BY created_at DESC"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()
        return [_row_to_task(row) for row in rows]

def get_task_db(task_id: str) -> Optional[Task]:
    with get_db() as conn:
        row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if row:
            return _row_to_task(row)
    return None

def create_task_db(
    task_id: str,
    title: str,
    description: str = "",
    status: str = "To Do",
    priority: str = "Medium",
    due_date: Optional[str] = None
) -> Task:
    """Create a task. due_date is YYYY-MM-DD or None."""
    now = datetime.now().isoformat()
    with get_db() as conn:
        conn.execute(
            """INSERT INTO tasks
               (id, title, description, status, priority, due_date, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (task_id, title, description, status, priority, due_date, now, now)
        )
        conn.commit()

    return Task(
        id=task_id,
        title=title,
        description=description,
        status=status,
        priority=priority,
        due_date=due_date,
        created_at=now,
        updated_at=now,
    )

def update_task_db(task_id: str, **updates) -> Optional[Task]:
    """
    Update a task with any fields provided.
    Only updates fields that differ from current values; updated_at changes only when something did.

    Args:
        task_id: Task ID to update
        **updates: Field names and values to update (title, description, status, priority, due_date)
    """
    with get_db() as conn:
        row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if not row:
            return None

        keys = row.keys()

        changes = {}
        for field, new_value in updates.items():
            if field not in keys or field in ("id", "created_at", "updated_at"):
                continue
            if new_value != row[field]:
                changes[field] = new_value

        if changes:
            changes["updated_at"] = datetime.now().isoformat()
            set_clause = ", ".join(f"{field} = ?" for field in changes.keys())
            values = list(changes.values()) + [task_id]
            conn.execute(f"UPDATE tasks SET {set_clause} WHERE id = ?", values)
            conn.commit()

        # Return updated task (re-fetch to get current state)
        updated_row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return _row_to_task(updated_row)

def delete_task_db(task_id: str) -> bool:
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        conn.commit()
        return cursor.rowcount > 0
