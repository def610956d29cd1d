"""
Client-side board state for drag-and-drop.

The board keeps two immutable snapshots: ``confirmed`` (what the server last
acknowledged) and ``view`` (what the user sees). A drop updates ``view``
straight away and records a ``PendingMove``; once the server answers the move
is either confirmed or ``view`` is replaced by ``confirmed`` again.
"""
import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from taskflow.ordering import assign_reorder_position, validate_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Card:
    id: int
    status: str
    position: float

    @classmethod
    def from_task(cls, task):
        if isinstance(task, dict):
            return cls(id=task['id'], status=task['status'], position=float(task['position']))
        return cls(id=task.id, status=task.status, position=float(task.position))


@dataclass(frozen=True)
class BoardSnapshot:
    cards: Tuple[Card, ...] = ()

    @classmethod
    def from_tasks(cls, tasks):
        return cls(tuple(Card.from_task(task) for task in tasks))

    def get(self, card_id) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def column(self, status, exclude=None):
        cards = [card for card in self.cards if card.status == status and card.id != exclude]
        return sorted(cards, key=lambda card: (card.position, card.id))

    def with_card(self, card):
        if self.get(card.id) is None:
            return BoardSnapshot(self.cards + (card,))
        return BoardSnapshot(tuple(card if existing.id == card.id else existing for existing in self.cards))

    def without_card(self, card_id):
        return BoardSnapshot(tuple(card for card in self.cards if card.id != card_id))


@dataclass(frozen=True)
class PendingMove:
    task_id: int
    source_status: str
    destination_status: str
    destination_index: int
    position: float

    @property
    def status_changed(self):
        return self.source_status != self.destination_status


class OptimisticBoard:
    def __init__(self, snapshot: BoardSnapshot):
        self.confirmed = snapshot
        self.view = snapshot
        self.pending: Optional[PendingMove] = None

    def drag_end(self, task_id, source_status, source_index, destination_status,
                 destination_index) -> Optional[PendingMove]:
        """
        Apply a drop to ``view``.

        Returns the pending move, or None when the drop changes nothing
        (dropped outside a column, on its own slot, or for an unknown card).
        """
        if destination_status is None:
            return None
        if destination_status == source_status and destination_index == source_index:
            return None

        card = self.view.get(task_id)
        if card is None:
            return None

        validate_status(destination_status)
        siblings = self.view.column(destination_status, exclude=task_id)
        position = assign_reorder_position(siblings, destination_index)

        self.pending = PendingMove(
            task_id=task_id,
            source_status=card.status,
            destination_status=destination_status,
            destination_index=destination_index,
            position=position
        )
        self.view = self.view.with_card(replace(card, status=destination_status, position=position))
        return self.pending

    def confirm(self, card: Card):
        self.confirmed = self.confirmed.with_card(card)
        self.view = self.confirmed
        self.pending = None

    def revert(self):
        self.view = self.confirmed
        self.pending = None

    def move(self, task_id, source_status, source_index, destination_status, destination_index,
             send: Callable[[PendingMove], Optional[dict]]) -> Optional[Card]:
        """
        Drop a card and push the move to the server with ``send``.

        ``send`` returns the server's copy of the task (or None to accept the
        local result). If it raises, the view goes back to the last confirmed
        snapshot and the error propagates.
        """
        pending = self.drag_end(task_id, source_status, source_index, destination_status, destination_index)
        if pending is None:
            return None

        try:
            result = send(pending)
        except Exception as e:
            logger.warning(f"Move of task {task_id} failed, reverting: {e}")
            self.revert()
            raise

        if result is None:
            card = Card(id=task_id, status=pending.destination_status, position=pending.position)
        else:
            card = Card.from_task(result)
        self.confirm(card)
        return card
