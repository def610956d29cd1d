"""Tests for the HTTP client, with the requests session stubbed out."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from taskflow.board import BoardSnapshot, OptimisticBoard
from taskflow.client import ApiError, TaskFlowClient


def make_response(status_code, payload=None, reason='OK'):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = json.dumps(payload).encode() if payload is not None else b''
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session):
    return TaskFlowClient('http://taskflow.test/', session=session, timeout=5)


class TestRequests:
    def test_login(self, api, session):
        session.request.return_value = make_response(200, {'id': 1, 'email': 'a@example.com'})

        assert api.login('a@example.com', 'secret')['id'] == 1
        session.request.assert_called_once_with(
            'POST', 'http://taskflow.test/auth/login', timeout=5,
            json={'email': 'a@example.com', 'password': 'secret'}
        )

    def test_move_task(self, api, session):
        session.request.return_value = make_response(200, {'id': 7, 'status': 'DONE', 'position': 0})

        api.move_task(3, 7, 'DONE', index=0)

        args, kwargs = session.request.call_args
        assert args == ('POST', 'http://taskflow.test/api/projects/3/tasks/7/move')
        assert kwargs['json'] == {'status': 'DONE', 'index': 0}

    def test_list_tasks_by_status(self, api, session):
        session.request.return_value = make_response(200, [])

        assert api.list_tasks(3, status='TODO') == []
        assert session.request.call_args.kwargs['params'] == {'status': 'TODO'}

    def test_empty_body(self, api, session):
        session.request.return_value = make_response(204)
        assert api.delete_task(3, 7) is None


class TestErrors:
    def test_error_message_from_body(self, api, session):
        session.request.return_value = make_response(404, {'error': 'Task not found'}, reason='NOT FOUND')

        with pytest.raises(ApiError) as excinfo:
            api.update_task(3, 7, title='x')
        assert excinfo.value.status_code == 404
        assert excinfo.value.message == 'Task not found'

    def test_non_json_error(self, api, session):
        response = make_response(502, reason='Bad Gateway')
        response._content = b'upstream down'
        session.request.return_value = response

        with pytest.raises(ApiError) as excinfo:
            api.board(3)
        assert excinfo.value.message == 'upstream down'

    def test_connection_error(self, api, session):
        session.request.side_effect = requests.ConnectionError('refused')

        with pytest.raises(ApiError) as excinfo:
            api.board(3)
        assert excinfo.value.status_code is None


class TestSender:
    def test_sends_computed_position(self, api, session):
        session.request.return_value = make_response(200, {'id': 2, 'status': 'DONE', 'position': 0})
        board = OptimisticBoard(BoardSnapshot.from_tasks([
            {'id': 1, 'status': 'TODO', 'position': 0},
            {'id': 2, 'status': 'TODO', 'position': 1},
        ]))

        board.move(2, 'TODO', 1, 'DONE', 0, api.sender(3))

        args, kwargs = session.request.call_args
        assert args == ('PUT', 'http://taskflow.test/api/projects/3/tasks/2')
        assert kwargs['json'] == {'status': 'DONE', 'position': 0}
        assert [card.id for card in board.confirmed.column('DONE')] == [2]

    def test_failed_send_reverts_board(self, api, session):
        session.request.return_value = make_response(403, {'error': 'Insufficient permissions'})
        board = OptimisticBoard(BoardSnapshot.from_tasks([{'id': 1, 'status': 'TODO', 'position': 0}]))

        with pytest.raises(ApiError):
            board.move(1, 'TODO', 0, 'DONE', 0, api.sender(3))

        assert [card.id for card in board.view.column('TODO')] == [1]
