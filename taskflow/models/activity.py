from taskflow import db
from datetime import datetime


class Activity(db.Model):
    __tablename__ = 'activities'

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(30), nullable=False, index=True)
    message = db.Column(db.String(500), nullable=False)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id', ondelete='SET NULL'))
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    # "metadata" is reserved on declarative models
    event_data = db.Column('metadata', db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User')
    task = db.relationship('Task')

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'message': self.message,
            'project_id': self.project_id,
            'project_name': self.project.name if self.project else None,
            'task_id': self.task_id,
            'user': self.user.to_dict() if self.user else None,
            'metadata': self.event_data or {},
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<Activity {self.type} on Project {self.project_id}>'
