from __future__ import annotations

import unittest

from trellis_core.core.frame_engine import FrameEngine
from trellis_core.core.template_store import TemplateStore
from trellis_ui.binding import MappingBindingContext
from trellis_ui.controls.events import CallbackEventSink, UIEvent
from trellis_ui.controls.pointer import PRIMARY_BUTTON, PointerState


MARKUP = """
<page name="Main">
  <element id="save">
    <element-config>
      <width-fixed at="50"/><height-fixed at="20"/>
      <clicked emit="Save"/>
    </element-config>
  </element>
  <element id="label" if="show_label"/>
</page>
"""


class _RecordingRenderer:
    def __init__(self) -> None:
        self.pages: list[str] = []

    def render(self, layout):
        self.pages.append(layout.page)
        return "frame-%d" % len(self.pages)


class FrameEngineTests(unittest.TestCase):
    def test_requires_published_template(self) -> None:
        engine = FrameEngine(TemplateStore())
        with self.assertRaises(RuntimeError):
            engine.run_frame(MappingBindingContext(), PointerState(0, 0), viewport=(100, 100))

    def test_runs_click_through_to_sink_and_renderer(self) -> None:
        saved: list[UIEvent] = []
        renderer = _RecordingRenderer()
        engine = FrameEngine(
            TemplateStore(MARKUP),
            sink=CallbackEventSink({"Save": saved.append}),
            renderer=renderer,
        )
        bindings = MappingBindingContext({"show_label": False})
        first = engine.run_frame(bindings, PointerState(10, 10), viewport=(100, 100))
        self.assertEqual(first.revision, 1)
        self.assertEqual(first.interaction.hovered_id, "save")
        self.assertEqual(first.events, ())
        self.assertEqual(first.frame, "frame-1")

        second = engine.run_frame(bindings, PointerState(10, 10, PRIMARY_BUTTON), viewport=(100, 100))
        self.assertEqual(second.events, (UIEvent("Save", "save"),))
        self.assertEqual(saved, [UIEvent("Save", "save")])
        self.assertEqual(engine.frame_index, 2)

    def test_picks_up_new_revision_between_frames(self) -> None:
        store = TemplateStore(MARKUP)
        engine = FrameEngine(store)
        bindings = MappingBindingContext({"show_label": True})
        self.assertEqual(
            engine.run_frame(bindings, PointerState(0, 0), viewport=(100, 100)).layout.element_ids,
            ("save", "label"),
        )
        store.publish('<page name="Main"><element id="other"/></page>')
        result = engine.run_frame(bindings, PointerState(0, 0), viewport=(100, 100))
        self.assertEqual(result.revision, 2)
        self.assertEqual(result.layout.element_ids, ("other",))
        self.assertEqual(result.interaction.delta.pruned, ("save", "label"))

    def test_logs_diagnostics_only_when_they_change(self) -> None:
        engine = FrameEngine(TemplateStore(MARKUP))
        with self.assertLogs("trellis_core.core.frame_engine", level="WARNING") as logs:
            engine.run_frame(MappingBindingContext(), PointerState(0, 0), viewport=(100, 100))
        self.assertIn("show_label", logs.output[0])
        with self.assertNoLogs("trellis_core.core.frame_engine", level="WARNING"):
            engine.run_frame(MappingBindingContext(), PointerState(0, 0), viewport=(100, 100))


if __name__ == "__main__":
    unittest.main()
