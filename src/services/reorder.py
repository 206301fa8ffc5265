"""
Optimistic drag-and-drop reordering.

The displayed order changes immediately; the new positions are persisted after.
If persisting fails the display goes back to the order it had before the move.
There is no store-side rollback: nothing was written.
"""
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar
from uuid import UUID

from schemas.bookmark import ReorderItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


def move_item(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """
    Return a copy of `items` with the element at `from_index` moved to `to_index`.

    Raises:
        IndexError: If either index is outside the list.
    """
    if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
        raise IndexError(f"cannot move {from_index} -> {to_index} in a list of {len(items)}")
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def positions_for(ids: Sequence[UUID]) -> list[ReorderItem]:
    """1-based positions matching the given display order."""
    return [ReorderItem(id=bookmark_id, position=index + 1) for index, bookmark_id in enumerate(ids)]


async def optimistic_reorder(
    current: Sequence[UUID],
    from_index: int,
    to_index: int,
    persist: Callable[[list[ReorderItem]], Awaitable[object]],
) -> list[UUID]:
    """
    Move one bookmark and persist the resulting positions.

    Args:
        current: Bookmark ids in their displayed order.
        from_index: Index of the dragged bookmark.
        to_index: Index it was dropped at.
        persist: Writes the positions (e.g. a call to the bulk reorder endpoint).

    Returns:
        The order to display: the moved order when `persist` succeeds, the
        original order when it raises.
    """
    previous = list(current)
    moved = move_item(previous, from_index, to_index)
    try:
        await persist(positions_for(moved))
    except Exception:
        logger.warning("Persisting new order failed; reverting", exc_info=True)
        return previous
    return moved
