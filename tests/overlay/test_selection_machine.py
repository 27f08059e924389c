from __future__ import annotations

from hypothesis import settings
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, precondition, rule, run_state_machine_as_test

from theatre.domain.types import BattleSite
from theatre.overlay.selection import BattleSelection
from tests.helpers.factories import make_battle

SITES = {battle_id: make_battle(battle_id) for battle_id in ("alpha", "bravo", "charlie", "delta")}


class BattleSelectionMachine(RuleBasedStateMachine):
    def __init__(self) -> None:
        super().__init__()
        self.selection = BattleSelection()
        self.expected: str | None = None
        self.notifications: list[BattleSite | None] = []
        self.selection.subscribe(self.notifications.append)

    @rule(battle_id=st.sampled_from(sorted(SITES)))
    def click(self, battle_id: str) -> None:
        before = len(self.notifications)
        previous = self.expected
        result = self.selection.click(SITES[battle_id])

        assert len(self.notifications) == before + 1
        if previous == battle_id:
            self.expected = None
            assert result is None
            assert self.notifications[-1] is None
        else:
            # Swapping from one site to another never passes through Idle.
            self.expected = battle_id
            assert result is not None and result.id == battle_id
            assert self.notifications[-1] is not None

    @precondition(lambda self: self.expected is not None)
    @rule()
    def close_selected(self) -> None:
        before = len(self.notifications)
        self.selection.close()
        self.expected = None
        assert len(self.notifications) == before + 1

    @precondition(lambda self: self.expected is None)
    @rule()
    def close_idle(self) -> None:
        before = len(self.notifications)
        self.selection.close()
        assert len(self.notifications) == before

    @invariant()
    def at_most_one_selected(self) -> None:
        selected = self.selection.selected
        if self.expected is None:
            assert selected is None
            assert self.selection.is_idle
        else:
            assert selected is not None and selected.id == self.expected


def test_battle_selection_state_machine() -> None:
    run_state_machine_as_test(
        BattleSelectionMachine,
        settings=settings(max_examples=10, stateful_step_count=25),
    )


def test_swap_sends_single_notification() -> None:
    selection = BattleSelection()
    seen: list[BattleSite | None] = []
    selection.subscribe(seen.append)

    selection.click(SITES["alpha"])
    selection.click(SITES["bravo"])
    assert [s.id if s else None for s in seen] == ["alpha", "bravo"]

    selection.click(SITES["bravo"])
    assert seen[-1] is None
    assert selection.is_idle
