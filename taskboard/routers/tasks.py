"""Task router: CRUD, attachments and filtering."""
from typing import Any, Dict, List, Optional, Tuple

import pydantic
from fastapi import APIRouter, Depends, Query, Request, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from taskboard.config import MAX_ATTACHMENTS_PER_REQUEST
from taskboard.middleware.auth import CurrentUser, get_current_user
from taskboard.repositories.task_repository import TaskFilter
from taskboard.routers.deps import get_task_service
from taskboard.schemas.task import DeleteResponse, TaskCreate, TaskResponse, TaskUpdate
from taskboard.services.attachment_store import IncomingFile
from taskboard.services.errors import ValidationError
from taskboard.services.task_service import TaskChanges, TaskFields, TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])

ATTACHMENTS_FIELD = "attachments"


async def read_task_payload(request: Request) -> Tuple[Dict[str, Any], List[IncomingFile]]:
    """
    Read a JSON or multipart/form-data task body.

    Returns the fields actually present in the request and the uploaded files.
    Keys that were not sent are absent from the dict, which the update route
    needs to tell "leave unchanged" apart from "clear".
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Request body is not valid JSON")
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body, []

    if not (content_type.startswith("multipart/form-data")
            or content_type.startswith("application/x-www-form-urlencoded")):
        return {}, []

    form = await request.form()
    fields: Dict[str, Any] = {}
    files: List[IncomingFile] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key != ATTACHMENTS_FIELD:
                continue
            files.append(IncomingFile(
                data=await value.read(),
                original_name=value.filename or "attachment",
                mime_type=value.content_type or "application/octet-stream"
            ))
        else:
            fields[key] = value

    if len(files) > MAX_ATTACHMENTS_PER_REQUEST:
        raise ValidationError(
            f"At most {MAX_ATTACHMENTS_PER_REQUEST} attachments per request",
            details={"field": ATTACHMENTS_FIELD}
        )
    return fields, files


def parse_model(schema, data: Dict[str, Any]):
    """Validate ``data`` against ``schema`` and raise the service ValidationError on failure."""
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(
            f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request"),
            details={"errors": e.errors(include_url=False, include_context=False)}
        )


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status", description="pending, in-progress or completed"),
    category: Optional[str] = Query(None, description="Category ID"),
    priority: Optional[str] = Query(None, description="low, medium or high"),
    search: Optional[str] = Query(None, description="Search keyword for title/description"),
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """List the caller's tasks, newest first."""
    task_filter = TaskFilter(status=status_filter, category_id=category, priority=priority, search=search)

    def load():
        tasks = service.list_tasks(current_user.user_id, task_filter)
        return service.present_many(tasks, current_user.user_id)

    return await run_in_threadpool(load)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Get a specific task by ID."""
    def load():
        return service.present(service.get_task(task_id, current_user.user_id))

    return await run_in_threadpool(load)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a task. Accepts JSON, or multipart form data with ``attachments`` files."""
    data, files = await read_task_payload(request)
    task_data: TaskCreate = parse_model(TaskCreate, data)

    fields = TaskFields(
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
        due_date=task_data.due_date,
        priority=task_data.priority,
        category_id=task_data.category_id,
    )

    def create():
        task = service.create_task(
            current_user.user_id,
            fields,
            files,
            want_calendar_sync=task_data.add_to_calendar
        )
        return service.present(task)

    return await run_in_threadpool(create)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Update a task. Omitted fields are kept; empty description/dueDate/categoryId clear them."""
    data, files = await read_task_payload(request)
    task_data: TaskUpdate = parse_model(TaskUpdate, data)

    changes = TaskChanges(**{
        name: getattr(task_data, name) for name in task_data.model_fields_set
    })

    def update():
        task = service.update_task(task_id, current_user.user_id, changes, files)
        return service.present(task)

    return await run_in_threadpool(update)


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Delete a task with its attachments and calendar event."""
    result = await run_in_threadpool(service.delete_task, task_id, current_user.user_id)
    return DeleteResponse(message=result.message, id=result.id)


@router.delete("/{task_id}/attachments/{attachment_id}", response_model=TaskResponse)
async def remove_attachment(
    task_id: str,
    attachment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Remove one attachment from a task."""
    def remove():
        task = service.remove_attachment(task_id, attachment_id, current_user.user_id)
        return service.present(task)

    return await run_in_threadpool(remove)
