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

from dataclasses import dataclass

from gitstage.core.state.observable import ObservableState


@dataclass(frozen=True)
class Counter:
    value: int = 0
    label: str = ""


class CounterState(ObservableState[Counter]):
    def increment(self):
        self._update(value=self.state.value + 1)


def test_listeners_see_new_snapshot():
    counter = CounterState(Counter())
    seen = []
    counter.subscribe(lambda s: seen.append(s.value))

    counter.increment()
    counter.increment()

    assert seen == [1, 2]
    assert counter.state == Counter(value=2)


def test_unsubscribe():
    counter = CounterState(Counter())
    seen = []
    unsubscribe = counter.subscribe(seen.append)

    counter.increment()
    unsubscribe()
    unsubscribe()
    counter.increment()

    assert len(seen) == 1


def test_failing_listener_does_not_block_others():
    counter = CounterState(Counter())
    seen = []

    def broken(_):
        raise ValueError("listener bug")

    counter.subscribe(broken)
    counter.subscribe(seen.append)
    counter.increment()

    assert [s.value for s in seen] == [1]


def test_clear_listeners():
    counter = CounterState(Counter())
    seen = []
    counter.subscribe(seen.append)
    counter.clear_listeners()
    counter.increment()
    assert seen == []
