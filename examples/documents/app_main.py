from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path

from trellis_core.core import (
    EngineConfig,
    FrameEngine,
    FrameResult,
    HotReloader,
    MatrixLayoutRenderer,
    TemplateStore,
    load_engine_config,
)
from trellis_ui.binding import MappingBindingContext
from trellis_ui.controls.events import CallbackEventSink, UIEvent
from trellis_ui.controls.pointer import PointerState, parse_pointer_payload


APP_DIR = Path(__file__).resolve().parent
LOGGER = logging.getLogger(__name__)


@dataclass
class DocumentsState:
    titles: list[str] = field(default_factory=lambda: ["Quarterly report", "Roadmap", "Meeting notes"])
    selected: int | None = None

    def bindings(self) -> MappingBindingContext:
        selection = self.titles[self.selected] if self.selected is not None else ""
        return MappingBindingContext(
            {
                "heading": f"Documents ({len(self.titles)})",
                "Documents": [{"title": title} for title in self.titles],
                "has_documents": bool(self.titles),
                "has_selection": self.selected is not None,
                "selection": selection,
            }
        )


class DocumentsApp:
    """Host for the documents example: owns state, wires events, drives frames."""

    def __init__(self, config: EngineConfig, *, render: bool = False) -> None:
        if config.layout_path is None:
            raise ValueError("documents example requires [layout].path")
        self.config = config
        self.state = DocumentsState()
        self.store = TemplateStore()
        result = self.store.publish_file(config.layout_path)
        if not result.ok:
            raise RuntimeError(f"layout failed to compile: {result.error}")
        self.reloader = HotReloader(self.store) if config.hot_reload else None
        sink = CallbackEventSink(strict=config.strict_events)
        sink.register_handler("Clicked", self._on_clicked)
        self.engine = FrameEngine(
            self.store,
            sink=sink,
            renderer=MatrixLayoutRenderer(clear_color=config.clear_color) if render else None,
        )
        self.pointer = PointerState(-1.0, -1.0)

    def _on_clicked(self, event: UIEvent) -> None:
        if not event.item_indices:
            return
        self.state.selected = event.item_indices[0]
        LOGGER.info("selected document %d via %s", self.state.selected, event.element_id)

    def source_changed(self) -> None:
        if self.reloader is not None and self.config.layout_path is not None:
            self.reloader.notify_changed(self.config.layout_path)
            self.reloader.drain()

    def tick(self, pointer_payload: dict | None = None) -> FrameResult:
        if pointer_payload is not None:
            parsed = parse_pointer_payload(pointer_payload, previous=self.pointer)
            if parsed is not None:
                self.pointer = parsed
        return self.engine.run_frame(
            self.state.bindings(),
            self.pointer,
            viewport=self.config.viewport,
            page=self.config.default_page,
        )


def build_app(app_dir: Path = APP_DIR, *, render: bool = False) -> DocumentsApp:
    return DocumentsApp(load_engine_config(app_dir), render=render)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    app = build_app()
    first = app.tick()
    row = first.layout.find("doc[1]")
    if row is None:
        raise RuntimeError("expected a second document row")
    cx, cy = row.rect.x + row.rect.width / 2.0, row.rect.y + row.rect.height / 2.0
    app.tick({"x": cx, "y": cy})
    clicked = app.tick({"phase": "down"})
    app.tick({"phase": "up"})
    print(f"events={[e.name for e in clicked.events]} selected={app.state.selected}")


if __name__ == "__main__":
    main()
