# -----------------------------------------------------------------------------
# /*
#  * Copyright (C) 2025 GitStage
#  *
#  * This program is free software; you can redistribute it and/or modify
#  * it under the terms of the GNU General Public License as published by
#  * the Free Software Foundation; Version 2.
#  *
#  * This program is distributed in the hope that it will be useful,
#  * but WITHOUT ANY WARRANTY; without even the implied warranty of
#  * MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
#  * GNU General Public License for more details.
#  *
#  * You should have received a copy of the GNU General Public License
#  * along with this program; if not, see <https://www.gnu.org/licenses/>.
#  */
# -----------------------------------------------------------------------------

from collections.abc import Callable
from dataclasses import replace
from typing import Generic, TypeVar

from loguru import logger

S = TypeVar("S")

Listener = Callable[[S], None]


class ObservableState(Generic[S]):
    """
    Holds an immutable state snapshot and tells listeners when it changes.

    Subclasses change state only through `_update`, which swaps in a new
    snapshot before any listener runs.
    """

    def __init__(self, initial: S) -> None:
        self._state = initial
        self._listeners: list[Listener] = []

    @property
    def state(self) -> S:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _update(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                # keep notifying the rest
                logger.exception(f"State listener {listener!r} raised")
