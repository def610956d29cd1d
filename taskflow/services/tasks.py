import logging
import math
import numbers

from taskflow import db
from taskflow.errors import InvalidDestination, NotFound, ValidationFailed
from taskflow.models import Activity, ProjectMember, Task
from taskflow.models.task import TASK_PRIORITIES, TASK_STATUSES
from taskflow.ordering import (
    apply_move,
    assign_create_position,
    assign_status_change_position,
    column_tasks,
    validate_status,
)
from taskflow.utils.activity import TaskCreated, TaskDeleted, TaskUpdated, log_activity, status_change_event
from taskflow.utils.transactions import atomic

logger = logging.getLogger(__name__)

# Fields reported in TASK_UPDATED activities; status and position changes
# are reported as moves instead
TRACKED_FIELDS = ['title', 'description', 'priority', 'assignee_id', 'due_date']

STATUS_ORDER = db.case({status: index for index, status in enumerate(TASK_STATUSES)}, value=Task.status)


def clean_title(title):
    title = (title or '').strip()
    if not title:
        raise ValidationFailed('Task title is required')
    return title


def _clean_description(description):
    return (description or '').strip() or None


def _validate_priority(priority):
    if priority not in TASK_PRIORITIES:
        raise ValidationFailed(f"Invalid priority: {priority!r}")
    return priority


def _validate_assignee(project_id, assignee_id):
    if assignee_id is None:
        return None
    if ProjectMember.query.filter_by(project_id=project_id, user_id=assignee_id).first() is None:
        raise ValidationFailed('Assignee must be a member of the project')
    return assignee_id


def _validate_position(position):
    if isinstance(position, bool) or not isinstance(position, numbers.Real) or not math.isfinite(position):
        raise InvalidDestination(f"Invalid position: {position!r}")
    return float(position)


def get_task(project, task_id):
    task = Task.query.filter_by(id=task_id, project_id=project.id).first()
    if task is None:
        raise NotFound('Task not found')
    return task


def list_tasks(project, status=None):
    query = Task.query.filter_by(project_id=project.id)
    if status is not None:
        query = query.filter_by(status=validate_status(status))
    return query.order_by(STATUS_ORDER, Task.position.asc(), Task.id.asc()).all()


def board_columns(project):
    return {status: column_tasks(project.id, status) for status in TASK_STATUSES}


def create_task(project, user, title, status='TODO', description=None, priority='MEDIUM',
                assignee_id=None, due_date=None):
    validate_status(status)
    title = clean_title(title)
    _validate_priority(priority)
    _validate_assignee(project.id, assignee_id)

    with atomic('create task'):
        task = Task(
            title=title,
            description=_clean_description(description),
            status=status,
            priority=priority,
            assignee_id=assignee_id,
            due_date=due_date,
            project_id=project.id,
            position=assign_create_position(project.id, status)
        )
        db.session.add(task)
        db.session.flush()  # Flush to get the task ID
        log_activity(TaskCreated(task_title=task.title, status=task.status, priority=task.priority),
                     project.id, user.id, task_id=task.id)

    logger.info(f"Task {task.id} created in project {project.id} ({task.status} @ {task.position})")
    return task


def update_task(task, user, changes):
    """
    Apply ``changes`` to ``task``.

    A status change without a position appends the task to its new column.
    An explicit position is stored as given; callers compute it with
    ``assign_reorder_position``.
    """
    changes = dict(changes)
    if 'status' in changes:
        validate_status(changes['status'])
    if 'position' in changes:
        changes['position'] = _validate_position(changes['position'])
    if 'title' in changes:
        changes['title'] = clean_title(changes['title'])
    if 'description' in changes:
        changes['description'] = _clean_description(changes['description'])
    if 'priority' in changes:
        _validate_priority(changes['priority'])
    if 'assignee_id' in changes:
        _validate_assignee(task.project_id, changes['assignee_id'])

    with atomic(f'update task {task.id}'):
        changed_fields = []
        for field in TRACKED_FIELDS:
            if field in changes and getattr(task, field) != changes[field]:
                setattr(task, field, changes[field])
                changed_fields.append(field)

        old_status = task.status
        new_status = changes.get('status', old_status)
        if 'position' in changes:
            task.position = changes['position']
        elif new_status != old_status:
            task.position = assign_status_change_position(task.project_id, new_status, task.id)
        task.status = new_status

        if new_status != old_status:
            log_activity(status_change_event(task, old_status), task.project_id, user.id, task_id=task.id)
        elif changed_fields:
            event = TaskUpdated(task_title=task.title, changed_fields=changed_fields,
                                priority=task.priority, assignee_id=task.assignee_id)
            log_activity(event, task.project_id, user.id, task_id=task.id)

    return task


def move_task(project, task_id, status, index, user):
    return apply_move(task_id, status, index, user=user, project_id=project.id)


def delete_task(task, user):
    """Delete ``task``. Sibling positions are left as they are."""
    task_id = task.id
    project_id = task.project_id

    with atomic(f'delete task {task_id}'):
        # Earlier feed entries outlive the task
        Activity.query.filter_by(task_id=task_id).update({'task_id': None})
        log_activity(TaskDeleted(task_title=task.title, deleted_task_id=task_id), project_id, user.id)
        db.session.delete(task)

    logger.info(f"Task {task_id} deleted from project {project_id}")
