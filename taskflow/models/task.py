from taskflow import db
from datetime import datetime

# Kanban columns, in board order
TASK_STATUSES = ('TODO', 'IN_PROGRESS', 'IN_REVIEW', 'DONE')
TASK_PRIORITIES = ('LOW', 'MEDIUM', 'HIGH', 'URGENT')


class Task(db.Model):
    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), default='TODO', nullable=False)
    priority = db.Column(db.String(20), default='MEDIUM', nullable=False)
    position = db.Column(db.Float, default=0, nullable=False)
    due_date = db.Column(db.DateTime)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    assignee_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignee = db.relationship('User', foreign_keys=[assignee_id])
    comments = db.relationship('Comment', backref='task', lazy='dynamic', cascade='all, delete-orphan')

    __table_args__ = (db.Index('ix_tasks_column', 'project_id', 'status', 'position'),)

    def is_overdue(self):
        if self.due_date and self.status != 'DONE':
            return datetime.utcnow() > self.due_date
        return False

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'position': self.position,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'is_overdue': self.is_overdue(),
            'project_id': self.project_id,
            'assignee': self.assignee.to_dict() if self.assignee else None,
            'comment_count': self.comments.count(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }

    def __repr__(self):
        return f'<Task {self.title}>'


class Comment(db.Model):
    __tablename__ = 'comments'

    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'content': self.content,
            'task_id': self.task_id,
            'user': self.user.to_dict(),
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<Comment {self.id} on Task {self.task_id}>'
