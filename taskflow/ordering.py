"""
Kanban ordering.

A task's place in its column is the float ``position``; sorting a column
(one project, one status) by position gives the order shown on the board.
New tasks and tasks dropped into a column without a target slot go to the
end (max + 1, or 0 for an empty column). A task dropped at an explicit slot
takes the midpoint of its new neighbours, or first - 1 / last + 1 at the
edges, so a move only ever writes the row being moved.

Positions are never compacted. Repeated drops into the same gap halve it
each time and will eventually run out of float precision; that has not been
a practical problem at board sizes.
"""
import logging
import numbers

from sqlalchemy import func

from taskflow import db
from taskflow.errors import InvalidDestination, NotFound
from taskflow.models.task import TASK_STATUSES, Task
from taskflow.utils.activity import log_activity, status_change_event
from taskflow.utils.transactions import atomic

logger = logging.getLogger(__name__)


def validate_status(status):
    if status not in TASK_STATUSES:
        raise InvalidDestination(f"Invalid status: {status!r}")
    return status


def _position_of(sibling):
    if isinstance(sibling, numbers.Real):
        return float(sibling)
    if isinstance(sibling, dict):
        return float(sibling['position'])
    return float(sibling.position)


def max_position(project_id, status, exclude_task_id=None):
    query = db.session.query(func.max(Task.position)).filter(
        Task.project_id == project_id,
        Task.status == status
    )
    if exclude_task_id is not None:
        query = query.filter(Task.id != exclude_task_id)
    return query.scalar()


def column_tasks(project_id, status, exclude_task_id=None):
    query = Task.query.filter_by(project_id=project_id, status=status)
    if exclude_task_id is not None:
        query = query.filter(Task.id != exclude_task_id)
    return query.order_by(Task.position.asc(), Task.id.asc()).all()


def _append_position(project_id, status, exclude_task_id=None):
    last = max_position(project_id, status, exclude_task_id)
    return last + 1 if last is not None else 0


def assign_create_position(project_id, status):
    """Position for a new task: the end of its column."""
    validate_status(status)
    return _append_position(project_id, status)


def assign_status_change_position(project_id, new_status, exclude_task_id):
    """Position for a task entering ``new_status`` without a target slot."""
    validate_status(new_status)
    return _append_position(project_id, new_status, exclude_task_id)


def assign_reorder_position(siblings, destination_index):
    """
    Position for a task dropped at ``destination_index`` of a column.

    Args:
        siblings: the other tasks of the destination column, ordered by
            position (tasks, dicts with a ``position`` key, or numbers)
        destination_index: zero-based slot the task should land in

    Returns:
        a float that sorts strictly between the intended neighbours
    """
    if destination_index < 0:
        raise InvalidDestination(f"Invalid destination index: {destination_index}")

    positions = [_position_of(sibling) for sibling in siblings]

    if destination_index == 0:
        return positions[0] - 1 if positions else 0
    if destination_index >= len(positions):
        return positions[-1] + 1 if positions else 0

    before = positions[destination_index - 1]
    after = positions[destination_index]
    return (before + after) / 2


def apply_move(task_id, destination_status, destination_index=None, *, user, project_id=None):
    """
    Move a task to ``destination_status``, optionally at a given slot.

    Status and position are written in one commit. A status change adds a
    moved/completed activity in the same transaction; reordering inside a
    column does not.
    """
    validate_status(destination_status)

    with atomic(f'move task {task_id}'):
        task = db.session.get(Task, task_id)
        if task is None or (project_id is not None and task.project_id != project_id):
            raise NotFound('Task not found')

        old_status = task.status
        if destination_index is None:
            if destination_status == old_status:
                new_position = task.position
            else:
                new_position = assign_status_change_position(task.project_id, destination_status, task.id)
        else:
            siblings = column_tasks(task.project_id, destination_status, exclude_task_id=task.id)
            new_position = assign_reorder_position(siblings, destination_index)

        task.status = destination_status
        task.position = new_position

        if old_status != destination_status:
            log_activity(status_change_event(task, old_status), task.project_id, user.id, task_id=task.id)

    logger.info(f"Task {task.id} moved {old_status} -> {task.status} at position {task.position}")
    return task
