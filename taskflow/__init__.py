import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
csrf = CSRFProtect()


def create_app(config_class=Config):
    # Configure Flask for serverless environment
    app = Flask(__name__, instance_relative_config=False, instance_path='/tmp')
    app.config.from_object(config_class)

    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logging.getLogger('taskflow').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)

    from taskflow.blueprints.auth import auth_bp
    from taskflow.blueprints.main import main_bp
    from taskflow.blueprints.projects import projects_bp
    from taskflow.blueprints.tasks import tasks_bp
    from taskflow.blueprints.comments import comments_bp
    from taskflow.blueprints.activities import activities_bp

    # The JSON API authenticates with the session cookie and never serves forms
    for blueprint in (auth_bp, projects_bp, tasks_bp, comments_bp, activities_bp):
        csrf.exempt(blueprint)

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')
    app.register_blueprint(tasks_bp, url_prefix='/api/projects/<int:project_id>/tasks')
    app.register_blueprint(comments_bp, url_prefix='/api/projects/<int:project_id>/tasks/<int:task_id>/comments')
    app.register_blueprint(activities_bp, url_prefix='/api/activities')

    from taskflow.errors import register_error_handlers
    register_error_handlers(app)

    from taskflow.commands import init_db_command, seed_command
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_command)

    # Import models to ensure they are registered with SQLAlchemy
    from taskflow.models import User, Project, ProjectMember, Task, Comment, Activity

    return app
