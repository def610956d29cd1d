from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from taskflow.models import Task
from taskflow.models.task import TASK_STATUSES
from taskflow.services.projects import projects_for_user
from taskflow.utils.activity import list_activities
from datetime import datetime

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return jsonify({'service': 'taskflow', 'status': 'ok'})


@main_bp.route('/dashboard')
@login_required
def dashboard():
    projects = projects_for_user(current_user)
    project_ids = [project.id for project in projects]
    tasks = Task.query.filter(Task.project_id.in_(project_ids))

    stats = {
        'projects': len(projects),
        'total': tasks.count(),
        'by_status': {status: tasks.filter_by(status=status).count() for status in TASK_STATUSES},
        'assigned_to_me': tasks.filter(Task.assignee_id == current_user.id, Task.status != 'DONE').count(),
        'overdue': tasks.filter(Task.due_date < datetime.utcnow(), Task.status != 'DONE').count()
    }

    # Calculate completion rate
    if stats['total'] > 0:
        stats['completion_rate'] = round((stats['by_status']['DONE'] / stats['total']) * 100, 1)
    else:
        stats['completion_rate'] = 0

    upcoming_tasks = tasks.filter(
        Task.due_date >= datetime.utcnow(),
        Task.status != 'DONE'
    ).order_by(Task.due_date.asc()).limit(5).all()

    recent_activity, _ = list_activities(project_ids, limit=10)

    return jsonify({
        'user': current_user.to_dict(),
        'stats': stats,
        'projects': [project.to_dict() for project in projects],
        'upcoming_tasks': [task.to_dict() for task in upcoming_tasks],
        'recent_activity': [activity.to_dict() for activity in recent_activity]
    })
