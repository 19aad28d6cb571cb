# PURPOSE: /tasks JSON endpoints; each one forwards to a single TaskStore operation.
# Store failures propagate as StoreError and are mapped to HTTP by api/errors.py.

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..auth import get_current_user
from ..models import Task, TaskCreate, TaskUpdate, UserPublic
from ..task_store import TaskStore, get_task_store

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/", response_model=List[Task])
async def list_tasks(
    store: TaskStore = Depends(get_task_store),
    user: UserPublic = Depends(get_current_user),
):
    return await store.list_tasks(user)


@router.post("/", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    item: TaskCreate,
    response: Response,
    store: TaskStore = Depends(get_task_store),
    user: UserPublic = Depends(get_current_user),
):
    task = await store.create_task(user, **item.model_dump())
    response.headers["Location"] = f"/api/v1/tasks/{task.id}"
    return task


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    store: TaskStore = Depends(get_task_store),
    user: UserPublic = Depends(get_current_user),
):
    return await store.get_task(user, task_id)


@router.patch("/{task_id}", response_model=Task)
async def patch_task(
    task_id: str,
    item: TaskUpdate,
    store: TaskStore = Depends(get_task_store),
    user: UserPublic = Depends(get_current_user),
):
    # Only fields present in the body; an explicit null clears description/due_date
    return await store.update_task(user, task_id, item.model_dump(exclude_unset=True))


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(
    task_id: str,
    store: TaskStore = Depends(get_task_store),
    user: UserPublic = Depends(get_current_user),
):
    return await store.toggle_status(user, task_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    store: TaskStore = Depends(get_task_store),
    user: UserPublic = Depends(get_current_user),
):
    await store.delete_task(user, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
