"""
Project activity feed.

Every mutation that shows up in the feed is described by one of the event
classes below. The event carries the typed payload that ends up in
``Activity.metadata``; keys this version does not know about are kept in
``extra`` so rows written by newer code survive a read/write cycle.
"""
from dataclasses import dataclass, field, fields
from typing import ClassVar, Optional

from taskflow import db
from taskflow.models.activity import Activity


def format_status(status):
    return status.replace('_', ' ').lower()


@dataclass(frozen=True, kw_only=True)
class ActivityEvent:
    kind: ClassVar[str] = ''

    extra: dict = field(default_factory=dict)

    def describe(self):
        return self.kind.replace('_', ' ').capitalize()

    def to_metadata(self):
        data = dict(self.extra)
        for f in fields(self):
            if f.name != 'extra':
                data[f.name] = getattr(self, f.name)
        return data


@dataclass(frozen=True)
class ProjectCreated(ActivityEvent):
    kind: ClassVar[str] = 'PROJECT_CREATED'

    project_name: str = ''

    def describe(self):
        return f'Created project "{self.project_name}"'


@dataclass(frozen=True)
class ProjectUpdated(ActivityEvent):
    kind: ClassVar[str] = 'PROJECT_UPDATED'

    project_name: str = ''
    changed_fields: list = field(default_factory=list)

    def describe(self):
        return f'Updated project "{self.project_name}"'


@dataclass(frozen=True)
class MemberAdded(ActivityEvent):
    kind: ClassVar[str] = 'MEMBER_ADDED'

    member_id: Optional[int] = None
    member_name: str = ''
    role: str = 'MEMBER'

    def describe(self):
        return f'Added {self.member_name} to the project'


@dataclass(frozen=True)
class MemberRemoved(ActivityEvent):
    kind: ClassVar[str] = 'MEMBER_REMOVED'

    member_id: Optional[int] = None
    member_name: str = ''

    def describe(self):
        return f'Removed {self.member_name} from the project'


@dataclass(frozen=True)
class TaskCreated(ActivityEvent):
    kind: ClassVar[str] = 'TASK_CREATED'

    task_title: str = ''
    status: str = 'TODO'
    priority: str = 'MEDIUM'

    def describe(self):
        return f'Created task "{self.task_title}"'


@dataclass(frozen=True)
class TaskUpdated(ActivityEvent):
    kind: ClassVar[str] = 'TASK_UPDATED'

    task_title: str = ''
    changed_fields: list = field(default_factory=list)
    priority: Optional[str] = None
    assignee_id: Optional[int] = None

    def describe(self):
        return f'Updated task "{self.task_title}"'


@dataclass(frozen=True)
class TaskMoved(ActivityEvent):
    kind: ClassVar[str] = 'TASK_MOVED'

    task_title: str = ''
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    priority: Optional[str] = None
    assignee_id: Optional[int] = None

    def describe(self):
        return f'Moved task "{self.task_title}" to {format_status(self.new_status)}'


@dataclass(frozen=True)
class TaskCompleted(TaskMoved):
    kind: ClassVar[str] = 'TASK_COMPLETED'

    def describe(self):
        return f'Completed task "{self.task_title}"'


@dataclass(frozen=True)
class TaskDeleted(ActivityEvent):
    kind: ClassVar[str] = 'TASK_DELETED'

    task_title: str = ''
    deleted_task_id: Optional[int] = None

    def describe(self):
        return f'Deleted task "{self.task_title}"'


@dataclass(frozen=True)
class CommentAdded(ActivityEvent):
    kind: ClassVar[str] = 'COMMENT_ADDED'

    task_title: str = ''
    comment_id: Optional[int] = None

    def describe(self):
        return f'Added a comment to "{self.task_title}"'


@dataclass(frozen=True)
class UnknownEvent(ActivityEvent):
    """Payload of an activity type this version cannot interpret."""

    raw_type: str = ''

    @property
    def kind(self):
        return self.raw_type

    def to_metadata(self):
        return dict(self.extra)


EVENT_TYPES = {
    cls.kind: cls for cls in (
        ProjectCreated, ProjectUpdated, MemberAdded, MemberRemoved,
        TaskCreated, TaskUpdated, TaskMoved, TaskCompleted, TaskDeleted,
        CommentAdded,
    )
}

ACTIVITY_TYPES = tuple(EVENT_TYPES)


def status_change_event(task, old_status):
    """Event for a task that left ``old_status``; DONE counts as completion."""
    event_cls = TaskCompleted if task.status == 'DONE' else TaskMoved
    return event_cls(
        task_title=task.title,
        old_status=old_status,
        new_status=task.status,
        priority=task.priority,
        assignee_id=task.assignee_id,
    )


def event_from_metadata(activity_type, metadata):
    metadata = dict(metadata or {})
    event_cls = EVENT_TYPES.get(activity_type)
    if event_cls is None:
        return UnknownEvent(raw_type=activity_type, extra=metadata)

    known = {f.name for f in fields(event_cls) if f.name != 'extra'}
    kwargs = {name: metadata.pop(name) for name in list(metadata) if name in known}
    return event_cls(extra=metadata, **kwargs)


def log_activity(event, project_id, user_id, task_id=None):
    """
    Add an activity row for ``event`` to the current session.

    Nothing is committed here: the caller commits together with the change
    being described, so the feed never shows an event whose write failed.
    """
    activity = Activity(
        type=event.kind,
        message=event.describe(),
        project_id=project_id,
        task_id=task_id,
        user_id=user_id,
        event_data=event.to_metadata()
    )
    db.session.add(activity)
    return activity


def list_activities(project_ids, activity_type=None, limit=50, offset=0):
    if not project_ids:
        return [], 0

    query = Activity.query.filter(Activity.project_id.in_(project_ids))
    if activity_type:
        query = query.filter_by(type=activity_type)

    total = query.count()
    activities = query.order_by(Activity.created_at.desc(), Activity.id.desc()) \
        .offset(offset).limit(limit).all()
    return activities, total
