import logging

from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Email, Length, Optional
from taskflow import db, login_manager
from taskflow.models import User
from taskflow.utils.forms import JsonForm, json_body, validate_form
from taskflow.utils.transactions import atomic

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


class LoginForm(JsonForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=[DataRequired()])
    remember_me = BooleanField('Remember Me')


class RegistrationForm(JsonForm):
    email = StringField('Email', validators=[
        DataRequired(),
        Email()
    ])
    name = StringField('Name', validators=[
        Optional(),
        Length(max=120)
    ])
    password = PasswordField('Password', validators=[
        DataRequired(),
        Length(min=6)
    ])


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': 'Unauthorized'}), 401


@auth_bp.route('/register', methods=['POST'])
def register():
    data = json_body()
    form = validate_form(RegistrationForm, data)
    email = form.email.data.strip().lower()

    if User.query.filter_by(email=email).first():
        return jsonify({'error': 'Email already registered'}), 400

    with atomic('register user'):
        user = User(email=email, name=(form.name.data or '').strip() or None)
        user.set_password(form.password.data)
        db.session.add(user)

    logger.info(f"User {user.id} registered")
    login_user(user)
    return jsonify(user.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    form = validate_form(LoginForm, json_body())
    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if user is None or not user.check_password(form.password.data):
        logger.warning(f"Failed login for {form.email.data}")
        return jsonify({'error': 'Invalid email or password'}), 401

    login_user(user, remember=form.remember_me.data)
    return jsonify(user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(current_user.to_dict())
