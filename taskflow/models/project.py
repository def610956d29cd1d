import random

from taskflow import db
from datetime import datetime

PROJECT_STATUSES = ('ACTIVE', 'ARCHIVED', 'COMPLETED')

# Ranked lowest to highest
ROLES = ('MEMBER', 'ADMIN', 'OWNER')

PROJECT_COLORS = [
    '#3B82F6',  # blue
    '#10B981',  # green
    '#F59E0B',  # yellow
    '#EF4444',  # red
    '#8B5CF6',  # purple
    '#06B6D4',  # cyan
    '#F97316',  # orange
    '#84CC16',  # lime
    '#EC4899',  # pink
    '#6B7280',  # gray
]


def random_color():
    return random.choice(PROJECT_COLORS)


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    color = db.Column(db.String(7), default=random_color)
    status = db.Column(db.String(20), default='ACTIVE', nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tasks = db.relationship('Task', backref='project', lazy='dynamic', cascade='all, delete-orphan')
    members = db.relationship('ProjectMember', backref='project', lazy='dynamic', cascade='all, delete-orphan')
    activities = db.relationship('Activity', backref='project', lazy='dynamic', cascade='all, delete-orphan')

    @property
    def owner(self):
        membership = self.members.filter_by(role='OWNER').first()
        return membership.user if membership else None

    def get_member(self, user_id):
        return self.members.filter_by(user_id=user_id).first()

    def to_dict(self, include_members=False):
        owner = self.owner
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'color': self.color,
            'status': self.status,
            'owner': owner.to_dict() if owner else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'task_count': self.tasks.count(),
            'member_count': self.members.count()
        }
        if include_members:
            data['members'] = [member.to_dict() for member in self.members.order_by(ProjectMember.joined_at)]
        return data

    def __repr__(self):
        return f'<Project {self.name}>'


class ProjectMember(db.Model):
    __tablename__ = 'project_members'

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    role = db.Column(db.String(20), default='MEMBER', nullable=False)  # OWNER, ADMIN, MEMBER
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('project_id', 'user_id'),)

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'user': self.user.to_dict(),
            'role': self.role,
            'joined_at': self.joined_at.isoformat() if self.joined_at else None
        }

    def __repr__(self):
        return f'<ProjectMember {self.user_id} -> {self.project_id} ({self.role})>'
