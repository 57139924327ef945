from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from ..layout.tree import LayoutTree
from .pointer import PRIMARY_BUTTON, PointerState


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementInteraction:
    hovered: bool = False
    clicked: bool = False


IDLE = ElementInteraction()


@dataclass(frozen=True)
class InteractionDelta:
    """Transitions produced by a single `InteractionTracker.update` call."""

    hover_entered: tuple[str, ...] = ()
    hover_left: tuple[str, ...] = ()
    click_started: tuple[str, ...] = ()
    click_ended: tuple[str, ...] = ()
    pruned: tuple[str, ...] = ()


@dataclass(frozen=True)
class InteractionSnapshot:
    states: Mapping[str, ElementInteraction] = field(default_factory=dict)
    delta: InteractionDelta = field(default_factory=InteractionDelta)
    hovered_id: str | None = None

    def state_for(self, element_id: str) -> ElementInteraction:
        return self.states.get(element_id, IDLE)


class InteractionTracker:
    """Process-wide hover/click state keyed by stable element id.

    `update` is the only mutator. Ids absent from the layout passed to `update`
    are dropped in the same call.
    """

    def __init__(self) -> None:
        self._states: dict[str, ElementInteraction] = {}
        self._previous_buttons = 0
        self._snapshot = InteractionSnapshot()

    @property
    def snapshot(self) -> InteractionSnapshot:
        return self._snapshot

    def update(self, layout: LayoutTree, pointer: PointerState) -> InteractionSnapshot:
        target = layout.hit_test(pointer.x, pointer.y)
        hovered_id = target.element_id if target is not None else None
        pressed = pointer.primary_down
        press_down = pressed and not (self._previous_buttons & PRIMARY_BUTTON)

        entered: list[str] = []
        left: list[str] = []
        started: list[str] = []
        ended: list[str] = []
        states: dict[str, ElementInteraction] = {}
        for element_id in layout.element_ids:
            prev = self._states.get(element_id, IDLE)
            hovered = element_id == hovered_id
            if not pressed or not hovered:
                clicked = False
            elif press_down:
                clicked = True
            else:
                clicked = prev.clicked
            states[element_id] = ElementInteraction(hovered=hovered, clicked=clicked)
            if hovered and not prev.hovered:
                entered.append(element_id)
            elif prev.hovered and not hovered:
                left.append(element_id)
            if clicked and not prev.clicked:
                started.append(element_id)
            elif prev.clicked and not clicked:
                ended.append(element_id)

        pruned = tuple(element_id for element_id in self._states if element_id not in states)
        if pruned:
            LOGGER.debug("pruned %d interaction entries", len(pruned))
        self._states = states
        self._previous_buttons = pointer.buttons
        self._snapshot = InteractionSnapshot(
            states=dict(states),
            delta=InteractionDelta(
                hover_entered=tuple(entered),
                hover_left=tuple(left),
                click_started=tuple(started),
                click_ended=tuple(ended),
                pruned=pruned,
            ),
            hovered_id=hovered_id,
        )
        return self._snapshot
