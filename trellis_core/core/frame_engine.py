from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Mapping

from trellis_ui.binding import BindingContext, Diagnostic
from trellis_ui.controls.events import CallbackEventSink, EventEmitter, EventSink, UIEvent
from trellis_ui.controls.pointer import PointerState
from trellis_ui.controls.tracker import InteractionSnapshot, InteractionTracker
from trellis_ui.layout.solver import solve
from trellis_ui.layout.tree import LayoutTree, Viewport
from trellis_ui.text.measure import TextMeasurer

from .layout_renderer import LayoutRenderer
from .template_store import TemplateStore


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    revision: int
    layout: LayoutTree
    interaction: InteractionSnapshot
    events: tuple[UIEvent, ...] = ()
    frame: object | None = None


class FrameEngine:
    """Per-frame pipeline: snapshot, solve, track interaction, emit, render."""

    def __init__(
        self,
        store: TemplateStore,
        *,
        sink: EventSink | None = None,
        measurer: TextMeasurer | None = None,
        renderer: LayoutRenderer | None = None,
        tracker: InteractionTracker | None = None,
        emitter: EventEmitter | None = None,
    ) -> None:
        self._store = store
        self._sink: EventSink = sink or CallbackEventSink(strict=False)
        self._measurer = measurer
        self._renderer = renderer
        self._tracker = tracker or InteractionTracker()
        self._emitter = emitter or EventEmitter()
        self._revision = 0
        self._diagnostics: frozenset[Diagnostic] = frozenset()
        self._frame_index = 0

    @property
    def interaction(self) -> InteractionSnapshot:
        return self._tracker.snapshot

    @property
    def frame_index(self) -> int:
        return self._frame_index

    def run_frame(
        self,
        bindings: BindingContext,
        pointer: PointerState,
        *,
        viewport: Viewport | tuple[float, float],
        page: str | None = None,
        scroll_offsets: Mapping[str, tuple[float, float]] | None = None,
    ) -> FrameResult:
        revision, template = self._store.snapshot()
        if template is None:
            raise RuntimeError("no template has been published")
        if revision != self._revision:
            LOGGER.info("frame %d uses template revision %d", self._frame_index, revision)
            self._revision = revision

        layout = solve(
            template,
            bindings,
            viewport,
            self._tracker.snapshot.states,
            page=page,
            measurer=self._measurer,
            scroll_offsets=scroll_offsets,
        )
        interaction = self._tracker.update(layout, pointer)
        self._log_diagnostics(layout)
        events = self._emitter.emit(layout, interaction.delta, self._sink)
        frame = self._renderer.render(layout) if self._renderer is not None else None
        LOGGER.debug(
            "frame %d: %d nodes, hovered=%s, %d event(s)",
            self._frame_index,
            len(layout.nodes),
            interaction.hovered_id,
            len(events),
        )
        self._frame_index += 1
        return FrameResult(revision=revision, layout=layout, interaction=interaction, events=events, frame=frame)

    def _log_diagnostics(self, layout: LayoutTree) -> None:
        current = frozenset(layout.diagnostics)
        if current == self._diagnostics:
            return
        for diagnostic in layout.diagnostics:
            if diagnostic not in self._diagnostics:
                LOGGER.warning("layout diagnostic [%s] %s", diagnostic.code, diagnostic.message)
        cleared = len(self._diagnostics - current)
        if cleared:
            LOGGER.info("%d layout diagnostic(s) cleared", cleared)
        self._diagnostics = current
