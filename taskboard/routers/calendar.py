"""Calendar router: link, unlink and bulk-sync tasks with the external calendar."""
from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from taskboard.middleware.auth import CurrentUser, get_current_user
from taskboard.routers.deps import get_task_service
from taskboard.schemas.task import CalendarSyncResponse, TaskResponse
from taskboard.services.task_service import TaskService

router = APIRouter(prefix="/calendar", tags=["Calendar"])


@router.post("/task/{task_id}", response_model=TaskResponse)
async def link_task(
    task_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """
    Add a task to the calendar.

    If the calendar is unreachable the task is returned unlinked
    (``googleCalendarEventId`` stays null).
    """
    def link():
        return service.present(service.link_calendar(task_id, current_user.user_id))

    return await run_in_threadpool(link)


@router.delete("/task/{task_id}", response_model=TaskResponse)
async def unlink_task(
    task_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Remove a task from the calendar."""
    def unlink():
        return service.present(service.unlink_calendar(task_id, current_user.user_id))

    return await run_in_threadpool(unlink)


@router.post("/sync", response_model=CalendarSyncResponse)
async def sync_tasks(
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Add every task with a due date that is not in the calendar yet."""
    synced = await run_in_threadpool(service.sync_calendar, current_user.user_id)
    return CalendarSyncResponse(message=f"Synced {synced} task(s) with the calendar", synced=synced)
