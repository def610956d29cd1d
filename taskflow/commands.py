import click
from flask.cli import with_appcontext

from taskflow import db
from taskflow.models import User

DEMO_PASSWORD = 'password123'

DEMO_USERS = [
    ('demo@taskflow.com', 'Demo User'),
    ('alice@taskflow.com', 'Alice Johnson'),
    ('bob@taskflow.com', 'Bob Smith'),
]

# (title, status, priority, assignee index into DEMO_USERS)
DEMO_TASKS = [
    ('Set up project repository', 'DONE', 'HIGH', 0),
    ('Design database schema', 'DONE', 'HIGH', 1),
    ('Implement user authentication', 'IN_REVIEW', 'URGENT', 0),
    ('Build kanban board', 'IN_PROGRESS', 'HIGH', 1),
    ('Add drag and drop ordering', 'IN_PROGRESS', 'MEDIUM', 2),
    ('Write API documentation', 'TODO', 'LOW', None),
    ('Add activity feed', 'TODO', 'MEDIUM', 2),
    ('Set up deployment', 'TODO', 'MEDIUM', None),
]


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create all tables."""
    db.create_all()
    click.echo('Initialized the database.')


@click.command('seed')
@with_appcontext
def seed_command():
    """Load demo users, a project and its board."""
    from taskflow.services.projects import add_member, create_project
    from taskflow.services.tasks import create_task

    db.create_all()

    users = []
    for email, name in DEMO_USERS:
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, name=name)
            user.set_password(DEMO_PASSWORD)
            db.session.add(user)
        users.append(user)
    db.session.commit()
    click.echo('Users created')

    owner = users[0]
    project = create_project(owner, 'TaskFlow Demo Project',
                             description='A sample project to showcase TaskFlow features',
                             color='#3B82F6')
    add_member(project, owner, users[1].email, role='ADMIN')
    add_member(project, owner, users[2].email, role='MEMBER')
    click.echo(f'Project "{project.name}" created')

    for title, status, priority, assignee in DEMO_TASKS:
        create_task(project, owner, title, status=status, priority=priority,
                    assignee_id=users[assignee].id if assignee is not None else None)
    click.echo(f'{len(DEMO_TASKS)} tasks created')
    click.echo(f'Log in as {owner.email} / {DEMO_PASSWORD}')
