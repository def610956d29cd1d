from taskflow import db
from .user import User
from .project import Project, ProjectMember
from .task import Task, Comment
from .activity import Activity

__all__ = ['db', 'User', 'Project', 'ProjectMember', 'Task', 'Comment', 'Activity']
