import logging
import re
from datetime import datetime

from taskflow import db
from taskflow.errors import NotFound, ValidationFailed
from taskflow.models import Project, ProjectMember, Task, User
from taskflow.models.project import PROJECT_STATUSES
from taskflow.models.task import TASK_PRIORITIES, TASK_STATUSES
from taskflow.utils.activity import (
    MemberAdded,
    MemberRemoved,
    ProjectCreated,
    ProjectUpdated,
    log_activity,
)
from taskflow.utils.transactions import atomic

logger = logging.getLogger(__name__)

COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')

# Roles that can be granted through the members endpoint
ASSIGNABLE_ROLES = ('ADMIN', 'MEMBER')


def _clean_name(name):
    name = (name or '').strip()
    if not name:
        raise ValidationFailed('Project name is required')
    return name


def _validate_color(color):
    if color is not None and not COLOR_RE.match(color):
        raise ValidationFailed(f"Invalid color: {color!r}")
    return color


def projects_for_user(user):
    return Project.query.filter(
        Project.id.in_(db.session.query(ProjectMember.project_id).filter_by(user_id=user.id))
    ).order_by(Project.updated_at.desc()).all()


def create_project(user, name, description=None, color=None):
    name = _clean_name(name)
    _validate_color(color)

    with atomic('create project'):
        project = Project(name=name, description=(description or '').strip() or None)
        if color:
            project.color = color
        db.session.add(project)
        db.session.flush()
        db.session.add(ProjectMember(project_id=project.id, user_id=user.id, role='OWNER'))
        log_activity(ProjectCreated(project_name=project.name), project.id, user.id)

    logger.info(f"Project {project.id} created by user {user.id}")
    return project


def update_project(project, user, changes):
    changes = dict(changes)
    if 'name' in changes:
        changes['name'] = _clean_name(changes['name'])
    if 'description' in changes:
        changes['description'] = (changes['description'] or '').strip() or None
    if 'color' in changes:
        _validate_color(changes['color'])
    if 'status' in changes and changes['status'] not in PROJECT_STATUSES:
        raise ValidationFailed(f"Invalid project status: {changes['status']!r}")

    with atomic(f'update project {project.id}'):
        changed_fields = []
        for field in ('name', 'description', 'color', 'status'):
            if field in changes and getattr(project, field) != changes[field]:
                setattr(project, field, changes[field])
                changed_fields.append(field)
        if changed_fields:
            project.updated_at = datetime.utcnow()
            log_activity(ProjectUpdated(project_name=project.name, changed_fields=changed_fields),
                         project.id, user.id)
    return project


def delete_project(project):
    project_id = project.id
    with atomic(f'delete project {project_id}'):
        db.session.delete(project)
    logger.info(f"Project {project_id} deleted")


def add_member(project, actor, email, role='MEMBER'):
    email = (email or '').strip().lower()
    if not email:
        raise ValidationFailed('Email is required')
    if role not in ASSIGNABLE_ROLES:
        raise ValidationFailed(f"Invalid role: {role!r}")

    user = User.query.filter_by(email=email).first()
    if user is None:
        raise NotFound('User not found')
    if project.get_member(user.id) is not None:
        raise ValidationFailed('User is already a member of this project')

    with atomic(f'add member to project {project.id}'):
        member = ProjectMember(project_id=project.id, user_id=user.id, role=role)
        db.session.add(member)
        event = MemberAdded(member_id=user.id, member_name=user.display_name, role=role)
        log_activity(event, project.id, actor.id)

    logger.info(f"User {user.id} added to project {project.id} with role {role}")
    return member


def remove_member(project, actor, member_id):
    member = ProjectMember.query.filter_by(id=member_id, project_id=project.id).first()
    if member is None:
        raise NotFound('Member not found')
    if member.role == 'OWNER':
        raise ValidationFailed('Cannot remove project owner')

    user = member.user
    with atomic(f'remove member from project {project.id}'):
        # Tasks stay on the board, unassigned
        Task.query.filter_by(project_id=project.id, assignee_id=user.id).update({'assignee_id': None})
        db.session.delete(member)
        log_activity(MemberRemoved(member_id=user.id, member_name=user.display_name), project.id, actor.id)

    logger.info(f"User {user.id} removed from project {project.id}")


def project_stats(project):
    tasks = Task.query.filter_by(project_id=project.id)
    total = tasks.count()
    by_status = {status: tasks.filter_by(status=status).count() for status in TASK_STATUSES}
    by_priority = {priority: tasks.filter_by(priority=priority).count() for priority in TASK_PRIORITIES}
    overdue = tasks.filter(
        Task.due_date < datetime.utcnow(),
        Task.status != 'DONE'
    ).count()

    return {
        'total': total,
        'by_status': by_status,
        'by_priority': by_priority,
        'overdue': overdue,
        'completion_rate': round((by_status['DONE'] / total * 100) if total > 0 else 0, 1),
        'members': project.members.count()
    }
