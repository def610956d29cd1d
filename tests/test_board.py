"""Tests for the optimistic board used by drag-and-drop clients."""

import pytest

from taskflow.board import BoardSnapshot, Card, OptimisticBoard
from taskflow.errors import InvalidDestination


@pytest.fixture
def board():
    return OptimisticBoard(BoardSnapshot.from_tasks([
        {'id': 1, 'status': 'TODO', 'position': 0},
        {'id': 2, 'status': 'TODO', 'position': 1},
        {'id': 3, 'status': 'TODO', 'position': 2},
        {'id': 4, 'status': 'IN_PROGRESS', 'position': 5},
        {'id': 5, 'status': 'IN_PROGRESS', 'position': 10},
    ]))


def ids(snapshot, status):
    return [card.id for card in snapshot.column(status)]


class TestSnapshot:
    def test_column_sorted_by_position_then_id(self):
        snapshot = BoardSnapshot((Card(2, 'DONE', 1.0), Card(1, 'DONE', 1.0), Card(3, 'DONE', 0.0)))
        assert ids(snapshot, 'DONE') == [3, 1, 2]

    def test_with_and_without_card(self):
        snapshot = BoardSnapshot((Card(1, 'TODO', 0.0),))
        snapshot = snapshot.with_card(Card(2, 'TODO', 1.0)).with_card(Card(1, 'DONE', 0.0))
        assert ids(snapshot, 'TODO') == [2]
        assert ids(snapshot, 'DONE') == [1]
        assert ids(snapshot.without_card(2), 'TODO') == []


class TestDragEnd:
    def test_reorder_within_column(self, board):
        pending = board.drag_end(3, 'TODO', 2, 'TODO', 0)

        assert pending.position == -1
        assert not pending.status_changed
        assert ids(board.view, 'TODO') == [3, 1, 2]
        assert ids(board.confirmed, 'TODO') == [1, 2, 3]

    def test_move_between_columns(self, board):
        pending = board.drag_end(1, 'TODO', 0, 'IN_PROGRESS', 1)

        assert pending.position == 7.5
        assert pending.status_changed
        assert ids(board.view, 'IN_PROGRESS') == [4, 1, 5]
        assert ids(board.view, 'TODO') == [2, 3]

    def test_dropped_outside(self, board):
        assert board.drag_end(1, 'TODO', 0, None, None) is None
        assert board.view is board.confirmed

    def test_dropped_in_place(self, board):
        assert board.drag_end(2, 'TODO', 1, 'TODO', 1) is None
        assert board.pending is None

    def test_unknown_card(self, board):
        assert board.drag_end(99, 'TODO', 0, 'DONE', 0) is None

    def test_invalid_column(self, board):
        with pytest.raises(InvalidDestination):
            board.drag_end(1, 'TODO', 0, 'ARCHIVED', 0)
        assert board.view is board.confirmed


class TestMove:
    def test_confirmed_with_server_copy(self, board):
        sent = []

        def send(move):
            sent.append(move)
            return {'id': move.task_id, 'status': move.destination_status, 'position': move.position}

        card = board.move(1, 'TODO', 0, 'DONE', 0, send)

        assert sent[0].destination_status == 'DONE'
        assert card == Card(1, 'DONE', 0.0)
        assert ids(board.confirmed, 'DONE') == [1]
        assert board.view is board.confirmed
        assert board.pending is None

    def test_reverted_on_failure(self, board):
        def send(move):
            raise ConnectionError('offline')

        with pytest.raises(ConnectionError):
            board.move(3, 'TODO', 2, 'IN_PROGRESS', 0, send)

        assert ids(board.view, 'TODO') == [1, 2, 3]
        assert ids(board.view, 'IN_PROGRESS') == [4, 5]
        assert board.pending is None

    def test_no_send_for_noop(self, board):
        def send(move):
            raise AssertionError('should not be called')

        assert board.move(1, 'TODO', 0, 'TODO', 0, send) is None

    def test_local_result_when_server_returns_nothing(self, board):
        card = board.move(5, 'IN_PROGRESS', 1, 'IN_PROGRESS', 0, lambda move: None)
        assert card == Card(5, 'IN_PROGRESS', 4.0)
        assert ids(board.confirmed, 'IN_PROGRESS') == [5, 4]
