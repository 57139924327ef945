from __future__ import annotations

import unittest

from trellis_ui.binding import MappingBindingContext
from trellis_ui.layout.solver import solve
from trellis_ui.layout.tree import Rect, Viewport
from trellis_ui.template.compiler import compile_markup


def _solve(markup: str, values: dict | None = None, viewport=(800, 600), **kwargs):
    return solve(compile_markup(markup), MappingBindingContext(values or {}), viewport, **kwargs)


DASHBOARD = """
<page name="Main">
  <element id="root">
    <element-config>
      <grow/>
      <padding-all is="16"/>
      <child-gap is="16"/>
      <direction is="ttb"/>
    </element-config>
    <element id="header"><element-config><width-grow/><height-fixed at="60"/></element-config></element>
    <element id="body"><element-config><width-grow/><height-grow/></element-config></element>
  </element>
</page>
"""


class LayoutSolverTests(unittest.TestCase):
    def test_header_and_growing_body_fill_viewport(self) -> None:
        tree = _solve(DASHBOARD)
        self.assertEqual(tree.find("root").rect, Rect(0, 0, 800, 600))
        self.assertEqual(tree.find("header").rect, Rect(16, 16, 768, 60))
        self.assertEqual(tree.find("body").rect, Rect(16, 92, 768, 492))
        self.assertEqual(tree.diagnostics, ())

    def test_solve_is_idempotent(self) -> None:
        template = compile_markup(DASHBOARD)
        first = solve(template, MappingBindingContext(), Viewport(800, 600))
        second = solve(template, MappingBindingContext(), Viewport(800, 600))
        self.assertEqual([n.rect for n in first.nodes], [n.rect for n in second.nodes])
        self.assertEqual(first.element_ids, second.element_ids)

    def test_fit_container_sums_fixed_children_and_gaps(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element id="row">
                <element-config><padding-all is="4"/><child-gap is="10"/></element-config>
                <element><element-config><width-fixed at="30"/><height-fixed at="20"/></element-config></element>
                <element><element-config><width-fixed at="50"/><height-fixed at="40"/></element-config></element>
              </element>
            </page>
            """
        )
        self.assertEqual(tree.find("row").rect, Rect(0, 0, 98, 48))
        self.assertEqual([n.rect.x for n in tree.nodes[1:]], [4, 44])

    def test_growing_siblings_share_leftover_and_respect_max(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element>
                <element-config><width-fixed at="300"/></element-config>
                <element id="a"><element-config><width-grow max="50"/></element-config></element>
                <element id="b"><element-config><width-grow/></element-config></element>
                <element id="c"><element-config><width-percent at="0.25"/></element-config></element>
              </element>
            </page>
            """
        )
        self.assertEqual(tree.find("c").rect.width, 75)
        self.assertEqual(tree.find("a").rect.width, 50)
        self.assertEqual(tree.find("b").rect.width, 175)
        self.assertEqual(tree.find("b").rect.x, 50)

    def test_alignment_uses_leftover_space(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element>
                <element-config>
                  <width-fixed at="200"/><height-fixed at="100"/>
                  <align-children-x to="center"/><align-children-y to="bottom"/>
                </element-config>
                <element id="box"><element-config><width-fixed at="50"/><height-fixed at="20"/></element-config></element>
              </element>
            </page>
            """
        )
        self.assertEqual(tree.find("box").rect, Rect(75, 80, 50, 20))

    def test_floating_anchor_bottom_right_with_offset(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element>
                <element-config><grow/><padding-left is="100"/><padding-top is="50"/></element-config>
                <element id="anchor">
                  <element-config><width-fixed at="40"/><height-fixed at="40"/></element-config>
                  <element id="tip">
                    <element-config>
                      <width-fixed at="40"/><height-fixed at="40"/>
                      <floating anchor="bottom-right"/>
                      <floating-offset x="0" y="35"/>
                    </element-config>
                  </element>
                </element>
              </element>
            </page>
            """
        )
        self.assertEqual(tree.find("anchor").rect, Rect(100, 50, 40, 40))
        tip = tree.find("tip")
        self.assertEqual(tip.rect, Rect(100, 85, 40, 40))
        self.assertTrue(tip.floating)
        self.assertIs(tree.nodes[-1], tip)

    def test_floats_draw_by_z_index_then_declaration(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element>
                <element id="high"><element-config><floating/><floating-z-index z="5"/></element-config></element>
                <element id="low-a"><element-config><floating/></element-config></element>
                <element id="low-b"><element-config><floating/></element-config></element>
              </element>
            </page>
            """
        )
        self.assertEqual([n.element_id for n in tree.nodes if n.floating], ["low-a", "low-b", "high"])

    def test_unknown_float_target_falls_back_to_parent(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element id="holder">
                <element-config><width-fixed at="10"/><height-fixed at="10"/></element-config>
                <element id="tip"><element-config><floating-attach-to-element id="ghost"/></element-config></element>
              </element>
            </page>
            """
        )
        self.assertEqual(tree.find("tip").rect.x, 0)
        self.assertIn("unknown-float-target", [d.code for d in tree.diagnostics])

    def test_float_attached_to_later_float_waits_for_its_placement(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element id="holder">
                <element id="a">
                  <element-config>
                    <width-fixed at="10"/><height-fixed at="10"/>
                    <floating-attach-to-element id="b"/>
                  </element-config>
                </element>
                <element id="inner-tip">
                  <element-config>
                    <width-fixed at="4"/><height-fixed at="4"/>
                    <floating-attach-to-element id="c"/>
                  </element-config>
                </element>
                <element id="b">
                  <element-config>
                    <width-fixed at="20"/><height-fixed at="20"/><padding-all is="5"/>
                    <floating-attach-to-root/>
                    <floating-offset x="300" y="200"/>
                  </element-config>
                  <element id="c"><element-config><width-fixed at="10"/><height-fixed at="10"/></element-config></element>
                </element>
              </element>
            </page>
            """
        )
        self.assertEqual(tree.find("b").rect, Rect(300, 200, 20, 20))
        self.assertEqual(tree.find("c").rect, Rect(305, 205, 10, 10))
        self.assertEqual(tree.find("a").rect, Rect(300, 200, 10, 10))
        self.assertEqual(tree.find("inner-tip").rect, Rect(305, 205, 4, 4))
        self.assertEqual(tree.diagnostics, ())

    def test_fixed_only_template_ignores_viewport(self) -> None:
        markup = """
        <page name="Main">
          <element id="card">
            <element-config><width-fixed at="120"/><height-fixed at="80"/><padding-all is="8"/></element-config>
            <element id="icon"><element-config><width-fixed at="24"/><height-fixed at="24"/></element-config></element>
          </element>
        </page>
        """
        for viewport in ((0, 0), (10, 10), (800, 600)):
            with self.subTest(viewport=viewport):
                tree = _solve(markup, viewport=viewport)
                self.assertEqual(tree.find("card").rect, Rect(0, 0, 120, 80))
                self.assertEqual(tree.find("icon").rect, Rect(8, 8, 24, 24))

    def test_infinite_numbers_are_clamped(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element id="row">
                <element id="box"><element-config><width-fixed from="w"/><height-fixed at="10"/></element-config></element>
                <element id="next"><element-config><width-fixed at="5"/><height-fixed at="5"/></element-config></element>
              </element>
            </page>
            """,
            {"w": float("inf")},
        )
        self.assertEqual(tree.find("box").rect.width, 0)
        self.assertEqual(tree.find("next").rect.x, 0)
        self.assertEqual(tree.diagnostics[0].code, "clamped")

    def test_conditional_children_follow_bindings(self) -> None:
        markup = """
        <page name="Main">
          <element id="banner" if="show_banner"/>
          <element id="empty" if-not="show_banner"/>
        </page>
        """
        self.assertEqual(_solve(markup, {"show_banner": True}).element_ids, ("banner",))
        self.assertEqual(_solve(markup, {"show_banner": False}).element_ids, ("empty",))
        missing = _solve(markup)
        self.assertEqual(missing.element_ids, ("empty",))
        self.assertEqual(missing.diagnostics[0].code, "unbound-key")

    def test_list_instances_get_indexed_ids(self) -> None:
        markup = """
        <page name="Main">
          <list src="Documents">
            <get-text local="name" from="title"/>
            <element id="row"><text-element><dyn-content from="name"/></text-element></element>
          </list>
          <list src="Tags"><element/></list>
        </page>
        """
        tree = _solve(markup, {"Documents": [{"title": "a"}, {"title": "b"}], "Tags": [{}]})
        self.assertEqual(tree.element_ids, ("row[0]", "row[1]", "Main/1.0[0]"))
        self.assertEqual([n.text.text for n in tree.nodes if n.kind == "text"], ["a", "b"])
        self.assertEqual(tree.find("row[1]").item_indices, (1,))
        self.assertEqual(_solve(markup, {"Documents": [], "Tags": []}).nodes, ())

    def test_duplicate_ids_are_disambiguated(self) -> None:
        tree = _solve('<page name="Main"><element id="x"/><element id="x"/></page>')
        self.assertEqual(tree.element_ids, ("x", "x#2"))
        self.assertEqual([d.code for d in tree.diagnostics], ["duplicate-id"])

    def test_scroll_container_clips_and_offsets_children(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element id="pane">
                <element-config>
                  <width-fixed at="100"/><height-fixed at="50"/><direction is="ttb"/>
                  <scroll vertical="true"/>
                </element-config>
                <element id="item"><element-config><width-fixed at="100"/><height-fixed at="200"/></element-config></element>
              </element>
            </page>
            """,
            scroll_offsets={"pane": (0.0, -30.0)},
        )
        item = tree.find("item")
        self.assertEqual(item.rect.y, -30)
        self.assertEqual(item.clip, Rect(0, 0, 100, 50))
        self.assertIsNone(tree.hit_test(50, 60))
        self.assertEqual(tree.hit_test(50, 10).element_id, "item")

    def test_negative_numbers_are_clamped_with_diagnostic(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <element id="box"><element-config><width-fixed from="w"/><height-fixed at="10"/></element-config></element>
            </page>
            """,
            {"w": -5},
        )
        self.assertEqual(tree.find("box").rect.width, 0)
        self.assertEqual(tree.diagnostics[0].code, "clamped")

    def test_text_uses_measurer_metrics(self) -> None:
        tree = _solve(
            """
            <page name="Main">
              <text-element><text-config><font-size is="10"/></text-config><content>abcd</content></text-element>
            </page>
            """
        )
        (text,) = tree.nodes
        self.assertEqual(text.kind, "text")
        self.assertAlmostEqual(text.rect.width, 24.0)
        self.assertAlmostEqual(text.rect.height, 12.0)

    def test_to_dict_reports_nodes(self) -> None:
        data = _solve(DASHBOARD).to_dict()
        self.assertEqual(data["page"], "Main")
        self.assertEqual([n["id"] for n in data["nodes"]], ["root", "header", "body"])
        self.assertEqual(data["nodes"][2]["rect"]["height"], 492)


if __name__ == "__main__":
    unittest.main()
