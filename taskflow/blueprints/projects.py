from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from wtforms import StringField, IntegerField
from wtforms.validators import DataRequired, Email, Length, Optional
from taskflow.models import ProjectMember
from taskflow.permissions import load_project
from taskflow.services import projects as project_service
from taskflow.services.tasks import board_columns
from taskflow.utils.forms import JsonForm, json_body, present_fields, validate_form

projects_bp = Blueprint('projects', __name__)


class ProjectForm(JsonForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    description = StringField('Description', validators=[Optional()])
    color = StringField('Color', validators=[Optional(), Length(min=7, max=7)])


class ProjectUpdateForm(JsonForm):
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    description = StringField('Description', validators=[Optional()])
    color = StringField('Color', validators=[Optional(), Length(min=7, max=7)])
    status = StringField('Status', validators=[Optional()])


class MemberForm(JsonForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    role = StringField('Role', validators=[Optional()], default='MEMBER')


class RemoveMemberForm(JsonForm):
    member_id = IntegerField('Member', validators=[DataRequired()])


@projects_bp.route('', methods=['GET'])
@login_required
def list_projects():
    projects = project_service.projects_for_user(current_user)
    return jsonify([project.to_dict() for project in projects])


@projects_bp.route('', methods=['POST'])
@login_required
def create_project():
    form = validate_form(ProjectForm, json_body())
    project = project_service.create_project(
        current_user,
        form.name.data,
        description=form.description.data,
        color=form.color.data or None
    )
    return jsonify(project.to_dict(include_members=True)), 201


@projects_bp.route('/<int:project_id>', methods=['GET'])
@login_required
def get_project(project_id):
    project = load_project(current_user, project_id)
    return jsonify(project.to_dict(include_members=True))


@projects_bp.route('/<int:project_id>', methods=['PUT'])
@login_required
def update_project(project_id):
    project = load_project(current_user, project_id, 'ADMIN')
    data = json_body()
    form = validate_form(ProjectUpdateForm, data)
    changes = present_fields(form, data, ['name', 'description', 'color', 'status'])
    project = project_service.update_project(project, current_user, changes)
    return jsonify(project.to_dict(include_members=True))


@projects_bp.route('/<int:project_id>', methods=['DELETE'])
@login_required
def delete_project(project_id):
    project = load_project(current_user, project_id, 'OWNER')
    project_service.delete_project(project)
    return jsonify({'success': True})


@projects_bp.route('/<int:project_id>/members', methods=['GET'])
@login_required
def list_members(project_id):
    project = load_project(current_user, project_id)
    members = project.members.order_by(ProjectMember.joined_at).all()
    return jsonify([member.to_dict() for member in members])


@projects_bp.route('/<int:project_id>/members', methods=['POST'])
@login_required
def add_member(project_id):
    project = load_project(current_user, project_id, 'ADMIN')
    form = validate_form(MemberForm, json_body())
    member = project_service.add_member(project, current_user, form.email.data, role=form.role.data or 'MEMBER')
    return jsonify(member.to_dict()), 201


@projects_bp.route('/<int:project_id>/members', methods=['DELETE'])
@login_required
def remove_member(project_id):
    project = load_project(current_user, project_id, 'ADMIN')
    form = validate_form(RemoveMemberForm, json_body())
    project_service.remove_member(project, current_user, form.member_id.data)
    return jsonify({'success': True})


@projects_bp.route('/<int:project_id>/stats', methods=['GET'])
@login_required
def project_stats(project_id):
    project = load_project(current_user, project_id)
    return jsonify(project_service.project_stats(project))


@projects_bp.route('/<int:project_id>/board', methods=['GET'])
@login_required
def board(project_id):
    project = load_project(current_user, project_id)
    columns = board_columns(project)
    return jsonify({
        'project': project.to_dict(),
        'columns': {status: [task.to_dict() for task in tasks] for status, tasks in columns.items()}
    })
