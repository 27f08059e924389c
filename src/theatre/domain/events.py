"""UI events emitted by the overlay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UiEvent:
    kind: str  # "battle_selected" | "battle_closed" | "troop_clicked" | "conflict_switched"
    message: str
    data: dict[str, Any] | None = None
