from __future__ import annotations

import unittest

from trellis_ui.binding import MappingBindingContext
from trellis_ui.controls.events import CallbackEventSink, EventEmitter, UIEvent
from trellis_ui.controls.pointer import PRIMARY_BUTTON, PointerState, parse_pointer_payload
from trellis_ui.controls.tracker import InteractionTracker
from trellis_ui.layout.solver import solve
from trellis_ui.template.compiler import compile_markup


DOCUMENTS = compile_markup(
    """
    <page name="Main">
      <element id="list">
        <element-config><direction is="ttb"/></element-config>
        <list src="Documents">
          <element id="doc">
            <element-config>
              <width-fixed at="100"/><height-fixed at="20"/>
              <clicked emit="Clicked"><color is="#ff0000"/></clicked>
            </element-config>
          </element>
        </list>
      </element>
    </page>
    """
)

BINDINGS = MappingBindingContext({"Documents": [{"title": "a"}, {"title": "b"}, {"title": "c"}]})


def _frame(tracker: InteractionTracker, pointer: PointerState, bindings=BINDINGS):
    layout = solve(DOCUMENTS, bindings, (200, 100), tracker.snapshot.states)
    return layout, tracker.update(layout, pointer)


class InteractionTrackerTests(unittest.TestCase):
    def test_every_list_instance_gets_a_stable_entry(self) -> None:
        tracker = InteractionTracker()
        _, snapshot = _frame(tracker, PointerState(500, 500))
        self.assertEqual(sorted(snapshot.states), ["doc[0]", "doc[1]", "doc[2]", "list"])
        self.assertIsNone(snapshot.hovered_id)

    def test_false_conditional_contributes_no_entries(self) -> None:
        template = compile_markup(
            """
            <page name="Main">
              <element id="panel">
                <element id="details" if="show_details">
                  <element id="details-body"><element-config><width-fixed at="10"/></element-config></element>
                </element>
              </element>
            </page>
            """
        )
        tracker = InteractionTracker()
        shown = solve(template, MappingBindingContext({"show_details": True}), (100, 100))
        self.assertIn("details-body", tracker.update(shown, PointerState(1, 1)).states)

        hidden = solve(template, MappingBindingContext({"show_details": False}), (100, 100))
        snapshot = tracker.update(hidden, PointerState(1, 1))
        self.assertEqual(sorted(snapshot.states), ["panel"])
        self.assertEqual(sorted(snapshot.delta.pruned), ["details", "details-body"])

    def test_hover_is_exclusive_to_topmost_hit(self) -> None:
        tracker = InteractionTracker()
        _, snapshot = _frame(tracker, PointerState(10, 25))
        self.assertEqual(snapshot.hovered_id, "doc[1]")
        self.assertEqual([k for k, v in snapshot.states.items() if v.hovered], ["doc[1]"])
        self.assertEqual(snapshot.delta.hover_entered, ("doc[1]",))

        _, snapshot = _frame(tracker, PointerState(10, 45))
        self.assertEqual(snapshot.delta.hover_entered, ("doc[2]",))
        self.assertEqual(snapshot.delta.hover_left, ("doc[1]",))

    def test_click_requires_press_edge_while_hovered(self) -> None:
        tracker = InteractionTracker()
        _frame(tracker, PointerState(10, 5, buttons=PRIMARY_BUTTON))
        # pressed before the element was hovered: dragging onto it does not click
        _, snapshot = _frame(tracker, PointerState(10, 25, buttons=PRIMARY_BUTTON))
        self.assertFalse(snapshot.state_for("doc[1]").clicked)

        _frame(tracker, PointerState(10, 25))
        _, snapshot = _frame(tracker, PointerState(10, 25, buttons=PRIMARY_BUTTON))
        self.assertTrue(snapshot.state_for("doc[1]").clicked)
        self.assertEqual(snapshot.delta.click_started, ("doc[1]",))

        _, snapshot = _frame(tracker, PointerState(10, 25, buttons=PRIMARY_BUTTON))
        self.assertTrue(snapshot.state_for("doc[1]").clicked)
        self.assertEqual(snapshot.delta.click_started, ())

        _, snapshot = _frame(tracker, PointerState(10, 25))
        self.assertFalse(snapshot.state_for("doc[1]").clicked)
        self.assertEqual(snapshot.delta.click_ended, ("doc[1]",))

    def test_clicked_variant_applies_next_frame(self) -> None:
        tracker = InteractionTracker()
        _frame(tracker, PointerState(10, 25))
        _frame(tracker, PointerState(10, 25, buttons=PRIMARY_BUTTON))
        layout, _ = _frame(tracker, PointerState(10, 25, buttons=PRIMARY_BUTTON))
        self.assertEqual(layout.find("doc[1]").paint.color, (255, 0, 0, 255))
        self.assertIsNone(layout.find("doc[0]").paint.color)

    def test_absent_ids_are_pruned(self) -> None:
        tracker = InteractionTracker()
        _frame(tracker, PointerState(10, 45))
        shorter = MappingBindingContext({"Documents": [{"title": "a"}]})
        _, snapshot = _frame(tracker, PointerState(10, 45), bindings=shorter)
        self.assertEqual(set(snapshot.delta.pruned), {"doc[1]", "doc[2]"})
        self.assertNotIn("doc[2]", snapshot.states)
        self.assertIsNone(snapshot.hovered_id)


class EventEmitterTests(unittest.TestCase):
    def test_clicking_second_item_emits_one_event(self) -> None:
        received: list[UIEvent] = []
        sink = CallbackEventSink({"Clicked": received.append})
        tracker = InteractionTracker()
        emitter = EventEmitter()
        _frame(tracker, PointerState(10, 25))
        layout, snapshot = _frame(tracker, PointerState(10, 25, buttons=PRIMARY_BUTTON))
        events = emitter.emit(layout, snapshot.delta, sink)
        self.assertEqual(events, (UIEvent("Clicked", "doc[1]", (1,)),))
        self.assertEqual(received, list(events))

        layout, snapshot = _frame(tracker, PointerState(10, 25, buttons=PRIMARY_BUTTON))
        self.assertEqual(emitter.emit(layout, snapshot.delta, sink), ())

    def test_strict_sink_raises_for_unhandled_event(self) -> None:
        with self.assertRaisesRegex(RuntimeError, "missing handler for event: Clicked"):
            CallbackEventSink().send(UIEvent("Clicked", "doc[0]"))

    def test_lenient_sink_drops_unhandled_event(self) -> None:
        sink = CallbackEventSink(strict=False)
        with self.assertLogs("trellis_ui.controls.events", level="WARNING"):
            sink.send(UIEvent("Clicked", "doc[0]"))
        seen: list[str] = []
        sink.register_handler("Clicked", lambda event: seen.append(event.element_id))
        sink.send(UIEvent("Clicked", "doc[0]"))
        self.assertEqual(seen, ["doc[0]"])

    def test_event_requires_name_and_element(self) -> None:
        with self.assertRaises(ValueError):
            UIEvent("", "doc[0]")
        with self.assertRaises(ValueError):
            UIEvent("Clicked", " ")


class PointerPayloadTests(unittest.TestCase):
    def test_phase_toggles_primary_button(self) -> None:
        down = parse_pointer_payload({"x": 3, "y": 4, "phase": "down"})
        self.assertEqual(down, PointerState(3.0, 4.0, PRIMARY_BUTTON))
        moved = parse_pointer_payload({"x": 5, "y": 6}, previous=down)
        self.assertTrue(moved.primary_down)
        up = parse_pointer_payload({"phase": "up"}, previous=moved)
        self.assertEqual(up, PointerState(5.0, 6.0, 0))

    def test_rejects_invalid_payloads(self) -> None:
        self.assertIsNone(parse_pointer_payload(None))
        self.assertIsNone(parse_pointer_payload({"x": "left", "y": 1}))
        self.assertIsNone(parse_pointer_payload({"x": 1, "y": 1, "buttons": -1}))


if __name__ == "__main__":
    unittest.main()
