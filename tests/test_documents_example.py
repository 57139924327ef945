from __future__ import annotations

import unittest

from examples.documents.app_main import APP_DIR, build_app
from trellis_core.core.config import load_engine_config


class DocumentsExampleTests(unittest.TestCase):
    def test_config_points_at_layout(self) -> None:
        config = load_engine_config(APP_DIR)
        self.assertEqual(config.viewport, (480, 320))
        self.assertTrue(config.layout_path.exists())

    def test_first_frame_lays_out_each_document(self) -> None:
        app = build_app()
        result = app.tick()
        self.assertEqual(result.revision, 1)
        ids = result.layout.element_ids
        self.assertEqual([i for i in ids if i.startswith("doc[")], ["doc[0]", "doc[1]", "doc[2]"])
        self.assertNotIn("badge", ids)
        self.assertEqual(result.layout.diagnostics, ())
        root = result.layout.find("root")
        self.assertEqual((root.rect.width, root.rect.height), (480, 320))

    def test_clicking_a_row_selects_it_and_shows_badge(self) -> None:
        app = build_app()
        row = app.tick().layout.find("doc[1]")
        x, y = row.rect.x + 5, row.rect.y + 5
        app.tick({"x": x, "y": y})
        clicked = app.tick({"phase": "down"})
        self.assertEqual([(e.name, e.element_id) for e in clicked.events], [("Clicked", "doc[1]")])
        self.assertEqual(app.state.selected, 1)

        after = app.tick({"phase": "up"})
        badge = after.layout.find("badge")
        header = after.layout.find("header")
        self.assertIsNotNone(badge)
        self.assertTrue(badge.floating)
        self.assertEqual(badge.rect.right, header.rect.right - 4)

    def test_rendered_frame_matches_viewport(self) -> None:
        app = build_app(render=True)
        frame = app.tick().frame
        self.assertEqual(tuple(frame.shape), (320, 480, 4))

    def test_reload_bumps_revision(self) -> None:
        app = build_app()
        app.source_changed()
        self.assertEqual(app.store.revision, 2)


if __name__ == "__main__":
    unittest.main()
