"""Tests for the task service: validation, activity logging and transactions."""

from datetime import datetime

import pytest
from sqlalchemy.exc import SQLAlchemyError

from taskflow import db
from taskflow.errors import InvalidDestination, NotFound, PersistenceFailure, ValidationFailed
from taskflow.models import Activity, Task
from taskflow.ordering import apply_move
from taskflow.services.tasks import (
    board_columns,
    create_task,
    delete_task,
    get_task,
    list_tasks,
    update_task,
)


def activity_types(project):
    return [activity.type for activity in
            Activity.query.filter_by(project_id=project.id).order_by(Activity.id)]


class TestCreateTask:
    def test_defaults(self, project, owner):
        task = create_task(project, owner, '  Write docs  ')
        assert task.title == 'Write docs'
        assert task.status == 'TODO'
        assert task.priority == 'MEDIUM'
        assert task.assignee_id is None

    def test_logs_created_activity(self, project, owner):
        task = create_task(project, owner, 'Write docs', priority='HIGH')
        activity = Activity.query.filter_by(task_id=task.id).one()
        assert activity.type == 'TASK_CREATED'
        assert activity.message == 'Created task "Write docs"'
        assert activity.event_data['priority'] == 'HIGH'

    def test_blank_title(self, project, owner):
        with pytest.raises(ValidationFailed):
            create_task(project, owner, '   ')

    def test_invalid_priority(self, project, owner):
        with pytest.raises(ValidationFailed):
            create_task(project, owner, 'A', priority='CRITICAL')

    def test_invalid_status(self, project, owner):
        with pytest.raises(InvalidDestination):
            create_task(project, owner, 'A', status='BACKLOG')
        assert Task.query.count() == 0

    def test_assignee_must_be_member(self, project, owner, outsider):
        with pytest.raises(ValidationFailed):
            create_task(project, owner, 'A', assignee_id=outsider.id)

    def test_assignee_member(self, project, owner, member):
        task = create_task(project, owner, 'A', assignee_id=member.id)
        assert task.assignee.email == 'member@example.com'


class TestUpdateTask:
    def test_status_change_appends(self, project, owner):
        create_task(project, owner, 'X', status='DONE')
        task = create_task(project, owner, 'A')

        update_task(task, owner, {'status': 'DONE'})

        assert task.status == 'DONE'
        assert task.position == 1
        assert activity_types(project)[-1] == 'TASK_COMPLETED'

    def test_explicit_position_wins_over_status_change(self, project, owner):
        create_task(project, owner, 'X', status='IN_PROGRESS')
        create_task(project, owner, 'Y', status='IN_PROGRESS')
        task = create_task(project, owner, 'A')

        update_task(task, owner, {'status': 'IN_PROGRESS', 'position': 0.5})

        assert task.status == 'IN_PROGRESS'
        assert task.position == 0.5
        assert activity_types(project)[-1] == 'TASK_MOVED'

    def test_field_change_logs_updated(self, project, owner):
        task = create_task(project, owner, 'A')

        update_task(task, owner, {'title': 'A2', 'priority': 'URGENT'})

        activity = Activity.query.order_by(Activity.id.desc()).first()
        assert activity.type == 'TASK_UPDATED'
        assert activity.event_data['changed_fields'] == ['title', 'priority']

    def test_position_only_change_is_silent(self, project, owner):
        task = create_task(project, owner, 'A')
        before = activity_types(project)

        update_task(task, owner, {'position': -4})

        assert task.position == -4
        assert activity_types(project) == before

    def test_unchanged_values_are_silent(self, project, owner):
        task = create_task(project, owner, 'A')
        before = activity_types(project)

        update_task(task, owner, {'title': 'A', 'status': 'TODO'})

        assert activity_types(project) == before

    def test_due_date(self, project, owner):
        task = create_task(project, owner, 'A')
        update_task(task, owner, {'due_date': datetime(2030, 1, 1)})
        assert task.due_date == datetime(2030, 1, 1)

    @pytest.mark.parametrize('position', [float('nan'), float('inf'), 'top', True])
    def test_unusable_position(self, project, owner, position):
        task = create_task(project, owner, 'A')
        with pytest.raises(InvalidDestination):
            update_task(task, owner, {'position': position})

    def test_invalid_status(self, project, owner):
        task = create_task(project, owner, 'A')
        with pytest.raises(InvalidDestination):
            update_task(task, owner, {'status': 'todo'})


class TestPersistenceFailure:
    def test_move_rolls_back(self, project, owner, monkeypatch):
        task = create_task(project, owner, 'A')
        task_id = task.id
        count = Activity.query.count()

        def failing_commit():
            raise SQLAlchemyError('database is locked')

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        with pytest.raises(PersistenceFailure) as excinfo:
            apply_move(task_id, 'DONE', user=owner)
        monkeypatch.undo()

        assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
        stored = db.session.get(Task, task_id)
        assert (stored.status, stored.position) == ('TODO', 0)
        assert Activity.query.count() == count

    def test_create_rolls_back(self, project, owner, monkeypatch):
        def failing_commit():
            raise SQLAlchemyError('disk full')

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        with pytest.raises(PersistenceFailure):
            create_task(project, owner, 'A')
        monkeypatch.undo()

        assert Task.query.count() == 0


class TestQueries:
    def test_list_tasks_in_board_order(self, project, owner):
        create_task(project, owner, 'Done', status='DONE')
        create_task(project, owner, 'Todo 1')
        create_task(project, owner, 'Review', status='IN_REVIEW')
        todo2 = create_task(project, owner, 'Todo 2')
        update_task(todo2, owner, {'position': -1})

        titles = [task.title for task in list_tasks(project)]
        assert titles == ['Todo 2', 'Todo 1', 'Review', 'Done']

    def test_list_tasks_by_status(self, project, owner):
        create_task(project, owner, 'A')
        create_task(project, owner, 'B', status='DONE')
        assert [task.title for task in list_tasks(project, status='DONE')] == ['B']

    def test_board_has_every_column(self, project, owner):
        create_task(project, owner, 'A')
        columns = board_columns(project)
        assert list(columns) == ['TODO', 'IN_PROGRESS', 'IN_REVIEW', 'DONE']
        assert [task.title for task in columns['TODO']] == ['A']
        assert columns['DONE'] == []

    def test_get_task_scoped_to_project(self, project, owner):
        from taskflow.services.projects import create_project

        other = create_project(owner, 'Other')
        task = create_task(other, owner, 'A')
        with pytest.raises(NotFound):
            get_task(project, task.id)


class TestDeleteTask:
    def test_history_survives(self, project, owner):
        task = create_task(project, owner, 'A')
        task_id = task.id

        delete_task(task, owner)

        assert db.session.get(Task, task_id) is None
        assert activity_types(project)[-2:] == ['TASK_CREATED', 'TASK_DELETED']
        assert Activity.query.filter_by(task_id=task_id).count() == 0
