from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from wtforms import StringField, TextAreaField, DateTimeField, SelectField, IntegerField, FloatField
from wtforms.validators import DataRequired, Length, Optional
from taskflow.models.task import TASK_PRIORITIES
from taskflow.permissions import load_project
from taskflow.services import tasks as task_service
from taskflow.utils.forms import DATETIME_FORMATS, JsonForm, json_body, present_fields, validate_form

tasks_bp = Blueprint('tasks', __name__)

PRIORITY_CHOICES = [(priority, priority.capitalize()) for priority in TASK_PRIORITIES]


class TaskForm(JsonForm):
    title = StringField('Title', validators=[
        DataRequired(),
        Length(max=200)
    ])
    description = TextAreaField('Description', validators=[Optional()])
    # Checked by the ordering engine so an unknown column is reported as such
    status = StringField('Status', validators=[Optional()], default='TODO')
    priority = SelectField('Priority', choices=PRIORITY_CHOICES, default='MEDIUM')
    assignee_id = IntegerField('Assignee', validators=[Optional()])
    due_date = DateTimeField('Due Date', format=DATETIME_FORMATS, validators=[Optional()])


class TaskUpdateForm(JsonForm):
    title = StringField('Title', validators=[Optional(), Length(max=200)])
    description = TextAreaField('Description', validators=[Optional()])
    status = StringField('Status', validators=[Optional()])
    priority = StringField('Priority', validators=[Optional()])
    assignee_id = IntegerField('Assignee', validators=[Optional()])
    due_date = DateTimeField('Due Date', format=DATETIME_FORMATS, validators=[Optional()])
    position = FloatField('Position', validators=[Optional()])


class MoveForm(JsonForm):
    status = StringField('Status', validators=[DataRequired()])
    index = IntegerField('Index', validators=[Optional()])


@tasks_bp.route('', methods=['GET'])
@login_required
def list_tasks(project_id):
    project = load_project(current_user, project_id)
    tasks = task_service.list_tasks(project, status=request.args.get('status') or None)
    return jsonify([task.to_dict() for task in tasks])


@tasks_bp.route('', methods=['POST'])
@login_required
def create_task(project_id):
    project = load_project(current_user, project_id)
    form = validate_form(TaskForm, json_body())
    task = task_service.create_task(
        project,
        current_user,
        form.title.data,
        status=form.status.data or 'TODO',
        description=form.description.data,
        priority=form.priority.data,
        assignee_id=form.assignee_id.data,
        due_date=form.due_date.data
    )
    return jsonify(task.to_dict()), 201


@tasks_bp.route('/<int:task_id>', methods=['GET'])
@login_required
def get_task(project_id, task_id):
    project = load_project(current_user, project_id)
    return jsonify(task_service.get_task(project, task_id).to_dict())


@tasks_bp.route('/<int:task_id>', methods=['PUT', 'PATCH'])
@login_required
def update_task(project_id, task_id):
    project = load_project(current_user, project_id)
    task = task_service.get_task(project, task_id)
    data = json_body()
    form = validate_form(TaskUpdateForm, data)
    changes = present_fields(form, data, [
        'title', 'description', 'status', 'priority', 'assignee_id', 'due_date', 'position'
    ])
    # A null position means "no explicit slot"
    if changes.get('position') is None:
        changes.pop('position', None)
    task = task_service.update_task(task, current_user, changes)
    return jsonify(task.to_dict())


@tasks_bp.route('/<int:task_id>/move', methods=['POST'])
@login_required
def move_task(project_id, task_id):
    project = load_project(current_user, project_id)
    form = validate_form(MoveForm, json_body())
    task = task_service.move_task(project, task_id, form.status.data, form.index.data, current_user)
    return jsonify(task.to_dict())


@tasks_bp.route('/<int:task_id>', methods=['DELETE'])
@login_required
def delete_task(project_id, task_id):
    project = load_project(current_user, project_id)
    task = task_service.get_task(project, task_id)
    task_service.delete_task(task, current_user)
    return jsonify({'success': True})
