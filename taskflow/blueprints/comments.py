from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from wtforms import TextAreaField
from wtforms.validators import DataRequired, Length
from taskflow.permissions import load_project
from taskflow.services.comments import add_comment, list_comments
from taskflow.services.tasks import get_task
from taskflow.utils.forms import JsonForm, json_body, validate_form

comments_bp = Blueprint('comments', __name__)


class CommentForm(JsonForm):
    content = TextAreaField('Comment', validators=[DataRequired(), Length(max=5000)])


@comments_bp.route('', methods=['GET'])
@login_required
def task_comments(project_id, task_id):
    task = get_task(load_project(current_user, project_id), task_id)
    return jsonify([comment.to_dict() for comment in list_comments(task)])


@comments_bp.route('', methods=['POST'])
@login_required
def create_comment(project_id, task_id):
    task = get_task(load_project(current_user, project_id), task_id)
    form = validate_form(CommentForm, json_body())
    comment = add_comment(task, current_user, form.content.data)
    return jsonify(comment.to_dict()), 201
