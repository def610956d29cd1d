"""
Project access policy.

Every endpoint asks the same question, "does this user hold at least this
role on this project?", through ``authorize``. Non-members are told the
project does not exist rather than that they lack access.
"""
import logging
from typing import Optional

from taskflow import db
from taskflow.errors import NotFound, PermissionDenied
from taskflow.models.project import ROLES, Project, ProjectMember

logger = logging.getLogger(__name__)

ROLE_RANK = {role: rank for rank, role in enumerate(ROLES)}


def get_role(user, project) -> Optional[str]:
    if user is None or project is None or not getattr(user, 'is_authenticated', False):
        return None
    membership = ProjectMember.query.filter_by(project_id=project.id, user_id=user.id).first()
    return membership.role if membership else None


def role_satisfies(role, required_role):
    if required_role not in ROLE_RANK:
        raise ValueError(f"Unknown role: {required_role}")
    return role is not None and ROLE_RANK[role] >= ROLE_RANK[required_role]


def authorize(user, project, required_role: str = 'MEMBER') -> bool:
    return role_satisfies(get_role(user, project), required_role)


def require_role(user, project, required_role: str = 'MEMBER') -> str:
    """Return the user's role, raising when it does not satisfy ``required_role``."""
    role = get_role(user, project)
    if role is None:
        raise NotFound('Project not found or access denied')
    if not role_satisfies(role, required_role):
        logger.warning(f"User {user.id} ({role}) needs {required_role} on project {project.id}")
        raise PermissionDenied('Insufficient permissions')
    return role


def load_project(user, project_id, required_role: str = 'MEMBER'):
    """Fetch a project the user may act on with ``required_role``."""
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFound('Project not found or access denied')
    require_role(user, project, required_role)
    return project
