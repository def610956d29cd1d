from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from taskflow import db
from taskflow.errors import ValidationFailed
from taskflow.models import ProjectMember
from taskflow.permissions import load_project
from taskflow.utils.activity import ACTIVITY_TYPES, list_activities

activities_bp = Blueprint('activities', __name__)

MAX_PAGE_SIZE = 100


@activities_bp.route('', methods=['GET'])
@login_required
def get_activities():
    project_id = request.args.get('project_id', type=int)
    activity_type = request.args.get('type') or None
    limit = request.args.get('limit', current_app.config['ACTIVITY_PAGE_SIZE'], type=int)
    limit = max(min(limit, MAX_PAGE_SIZE), 1)
    offset = max(request.args.get('offset', 0, type=int), 0)

    if activity_type is not None and activity_type not in ACTIVITY_TYPES:
        raise ValidationFailed(f"Invalid activity type: {activity_type!r}")

    if project_id is not None:
        project_ids = [load_project(current_user, project_id).id]
    else:
        project_ids = [
            row.project_id for row in
            db.session.query(ProjectMember.project_id).filter_by(user_id=current_user.id)
        ]

    activities, total = list_activities(project_ids, activity_type, limit=limit, offset=offset)
    return jsonify({
        'activities': [activity.to_dict() for activity in activities],
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'has_more': offset + len(activities) < total
        }
    })
