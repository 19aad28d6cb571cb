# PURPOSE: owner-scoped task CRUD against the database, exposed as async calls.
#
# Every public operation takes the caller's identity explicitly, validates its
# input, then runs the blocking SQLAlchemy work in a worker thread with its own
# session. Results are plain `Task` schemas; failures are `StoreError`s.

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, date, datetime, timedelta
from typing import Any, Callable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .db import SessionLocal
from .db_models import PRIORITIES, TaskDB, now_utc
from .exceptions import NotFound, RemoteUnavailable, StoreError, Unauthenticated, ValidationError
from .models import TITLE_MAX_LENGTH, Task, UserPublic

logger = logging.getLogger("todo_app.task_store")

EDITABLE_FIELDS = ("title", "description", "due_date", "priority")


# --- Validation ------------------------------------------------------------


def _check_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title must not be empty")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"title must be at most {TITLE_MAX_LENGTH} characters")
    return title


def _check_description(description: Any) -> Optional[str]:
    if description is not None and not isinstance(description, str):
        raise ValidationError("description must be text")
    return description


def _check_due_date(due_date: Any) -> Optional[date]:
    # datetime subclasses date; only plain calendar dates are accepted
    if due_date is not None and (not isinstance(due_date, date) or isinstance(due_date, datetime)):
        raise ValidationError("due_date must be a calendar date")
    return due_date


def _check_priority(priority: Any) -> str:
    if not isinstance(priority, str) or priority not in PRIORITIES:
        raise ValidationError("priority must be one of: high, medium, low")
    return priority


_VALIDATORS: dict[str, Callable[[Any], Any]] = {
    "title": _check_title,
    "description": _check_description,
    "due_date": _check_due_date,
    "priority": _check_priority,
}


def _user_id(user: Optional[UserPublic]) -> str:
    if user is None:
        raise Unauthenticated("sign in required")
    return user.id


# --- Row helpers (run inside a worker thread) ------------------------------


def _touch(row: TaskDB) -> None:
    """Refresh updated_at so it strictly increases, even on a coarse clock."""
    now = now_utc()
    previous = row.updated_at
    if previous is not None:
        if previous.tzinfo is None:
            previous = previous.replace(tzinfo=UTC)
        now = max(now, previous + timedelta(microseconds=1))
    row.updated_at = now


def _require_owned(db: Session, user_id: str, task_id: str) -> TaskDB:
    row = (
        db.query(TaskDB)
        .filter(TaskDB.id == task_id, TaskDB.user_id == user_id)
        .one_or_none()
    )
    if row is None:
        raise NotFound(f"Task {task_id} not found")
    return row


def _list_rows(db: Session, user_id: str) -> List[Task]:
    rows = (
        db.query(TaskDB)
        .filter(TaskDB.user_id == user_id)
        # unset due dates last, then stable secondary ordering
        .order_by(
            TaskDB.due_date.is_(None),
            TaskDB.due_date.asc(),
            TaskDB.created_at.asc(),
            TaskDB.id.asc(),
        )
        .all()
    )
    return [Task.model_validate(row) for row in rows]


def _get_row(db: Session, user_id: str, task_id: str) -> Task:
    return Task.model_validate(_require_owned(db, user_id, task_id))


def _insert_row(db: Session, user_id: str, fields: dict) -> Task:
    now = now_utc()
    row = TaskDB(
        user_id=user_id,
        status="pending",
        created_at=now,
        updated_at=now,
        **fields,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return Task.model_validate(row)


def _patch_row(db: Session, user_id: str, task_id: str, fields: dict) -> Task:
    row = _require_owned(db, user_id, task_id)
    for name, value in fields.items():
        setattr(row, name, value)
    _touch(row)
    db.commit()
    db.refresh(row)
    return Task.model_validate(row)


def _write_status(db: Session, user_id: str, task_id: str, status: str) -> Task:
    row = _require_owned(db, user_id, task_id)
    row.status = status
    _touch(row)
    db.commit()
    db.refresh(row)
    return Task.model_validate(row)


def _delete_row(db: Session, user_id: str, task_id: str) -> None:
    row = _require_owned(db, user_id, task_id)
    db.delete(row)
    db.commit()


# --- Store -----------------------------------------------------------------


class TaskStore:
    """Task CRUD for one caller at a time; the database is the only state."""

    def __init__(self, session_factory: sessionmaker = SessionLocal, timeout: Optional[float] = None):
        self._session_factory = session_factory
        self.timeout = timeout

    def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        with self._session_factory() as db:
            return fn(db, *args)

    async def _call(self, op: str, user_id: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            pending = asyncio.to_thread(self._run, fn, *args)
            if self.timeout is not None:
                return await asyncio.wait_for(pending, self.timeout)
            return await pending
        except StoreError as exc:
            logger.info("op=%s user_id=%s outcome=%s", op, user_id, exc.kind)
            raise
        except asyncio.TimeoutError as exc:
            logger.warning("op=%s user_id=%s outcome=timeout timeout_s=%s", op, user_id, self.timeout)
            raise RemoteUnavailable(f"{op} timed out after {self.timeout}s") from exc
        except SQLAlchemyError as exc:
            logger.warning("op=%s user_id=%s outcome=error error=%r", op, user_id, exc)
            raise RemoteUnavailable(f"{op} failed: {exc.__class__.__name__}") from exc

    async def list_tasks(self, user: Optional[UserPublic]) -> List[Task]:
        """Return the caller's tasks by due date ascending, undated tasks last."""
        user_id = _user_id(user)
        return await self._call("list_tasks", user_id, _list_rows, user_id)

    async def get_task(self, user: Optional[UserPublic], task_id: str) -> Task:
        user_id = _user_id(user)
        return await self._call("get_task", user_id, _get_row, user_id, task_id)

    async def create_task(
        self,
        user: Optional[UserPublic],
        *,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
        priority: Optional[str] = None,
    ) -> Task:
        """Insert a pending task owned by the caller; priority defaults to medium."""
        user_id = _user_id(user)
        fields = {
            "title": _check_title(title),
            "description": _check_description(description),
            "due_date": _check_due_date(due_date),
            "priority": _check_priority("medium" if priority is None else priority),
        }
        task = await self._call("create_task", user_id, _insert_row, user_id, fields)
        logger.info("op=create_task user_id=%s task_id=%s", user_id, task.id)
        return task

    async def update_task(
        self, user: Optional[UserPublic], task_id: str, changes: Mapping[str, Any]
    ) -> Task:
        """Patch only the supplied fields.

        An explicit None clears description or due_date; title and priority
        cannot be cleared.
        """
        user_id = _user_id(user)
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"fields cannot be edited: {', '.join(unknown)}")
        fields = {name: _VALIDATORS[name](value) for name, value in changes.items()}
        return await self._call("update_task", user_id, _patch_row, user_id, task_id, fields)

    async def toggle_status(self, user: Optional[UserPublic], task_id: str) -> Task:
        """Flip pending <-> completed.

        Read then write, not compare-and-swap: overlapping toggles that both
        read the same status both write the same result (last write wins).
        """
        current = await self.get_task(user, task_id)
        new_status = "pending" if current.status == "completed" else "completed"
        user_id = _user_id(user)
        return await self._call("toggle_status", user_id, _write_status, user_id, task_id, new_status)

    async def delete_task(self, user: Optional[UserPublic], task_id: str) -> None:
        """Remove the task permanently; NotFound if it is missing or not the caller's."""
        user_id = _user_id(user)
        await self._call("delete_task", user_id, _delete_row, user_id, task_id)
        logger.info("op=delete_task user_id=%s task_id=%s", user_id, task_id)


def get_task_store() -> TaskStore:
    """FastAPI dependency: a store bound to the app's session factory."""
    return TaskStore(SessionLocal, timeout=settings.STORE_TIMEOUT_SECONDS)
