from __future__ import annotations

import unittest

from trellis_ui.errors import CompileError, CyclicReuse, MalformedMarkup, UnboundLocal, UnknownReusable
from trellis_ui.template.compiler import compile_markup
from trellis_ui.template.nodes import (
    BindingRef,
    ConditionalNode,
    ElementNode,
    ListNode,
    LiteralValue,
    Sizing,
    TextNode,
    walk,
)


CARD_MARKUP = """
<reusable name="Card">
  <get-text local="title" from="default_title"/>
  <set-color local="bg" to="#202020"/>
  <element>
    <element-config>
      <dyn-color from="bg"/>
      <padding-all is="8"/>
    </element-config>
    <text-element><dyn-content from="title"/></text-element>
  </element>
</reusable>
<page name="Main">
  <use name="Card"><set-text local="title" to="Hello"/></use>
  <use name="Card"><get-text local="title" from="headline"/></use>
</page>
"""


class CompilerTests(unittest.TestCase):
    def test_compiles_pages_and_assigns_paths(self) -> None:
        template = compile_markup(
            """<?xml version="1.0"?>
            <page name="Main">
              <element id="root">
                <element-config><width-fixed at="120"/><height-grow/></element-config>
                <text-element><content>Hi</content></text-element>
              </element>
            </page>
            <page name="Settings"><element/></page>
            """
        )
        self.assertEqual(template.page_names, ("Main", "Settings"))
        root = template.page("Main").children[0]
        self.assertIsInstance(root, ElementNode)
        self.assertEqual(root.element_id, "root")
        self.assertEqual(root.path, (0,))
        self.assertEqual(root.style.props["width"], Sizing("fixed", LiteralValue(120.0)))
        self.assertEqual(root.style.props["height"], Sizing("grow"))
        text = root.children[0]
        self.assertIsInstance(text, TextNode)
        self.assertEqual(text.path, (0, 0))
        self.assertEqual(text.content, LiteralValue("Hi"))
        with self.assertRaises(KeyError):
            template.page("Missing")

    def test_reusable_expansion_substitutes_locals(self) -> None:
        template = compile_markup(CARD_MARKUP)
        first, second = template.page().children
        self.assertIsInstance(first, ElementNode)
        self.assertEqual(first.style.props["color"], LiteralValue((0x20, 0x20, 0x20, 255)))
        self.assertEqual(first.children[0].content, LiteralValue("Hello"))
        self.assertEqual(second.children[0].content, BindingRef("headline", "text"))
        self.assertEqual((first.path, second.path), ((0,), (1,)))
        self.assertFalse(any(type(n).__name__ == "ComponentUse" for n in walk(template.page().children)))

    def test_unknown_reusable_names_the_referencing_owner(self) -> None:
        with self.assertRaises(UnknownReusable) as ctx:
            compile_markup('<page name="Main"><use name="Ghost"/></page>')
        self.assertEqual(ctx.exception.name, "Ghost")
        self.assertEqual(ctx.exception.referenced_from, "Main")

    def test_cyclic_reuse_reports_cycle_path(self) -> None:
        markup = """
        <reusable name="A"><element><use name="B"/></element></reusable>
        <reusable name="B"><use name="A"/></reusable>
        <page name="Main"><use name="A"/></page>
        """
        with self.assertRaises(CyclicReuse) as ctx:
            compile_markup(markup)
        self.assertEqual(ctx.exception.cycle, ("A", "B", "A"))
        self.assertIn("A -> B -> A", str(ctx.exception))

    def test_self_reuse_is_cyclic(self) -> None:
        with self.assertRaises(CyclicReuse):
            compile_markup('<reusable name="Loop"><use name="Loop"/></reusable><page name="P"><element/></page>')

    def test_unbound_local_without_default_fails(self) -> None:
        markup = """
        <reusable name="Label">
          <param local="caption"/>
          <text-element><dyn-content from="caption"/></text-element>
        </reusable>
        <page name="Main"><use name="Label"/></page>
        """
        with self.assertRaises(UnboundLocal) as ctx:
            compile_markup(markup)
        self.assertEqual(ctx.exception.local, "caption")
        self.assertEqual(ctx.exception.reusable, "Label")

    def test_literal_conditionals_fold_at_compile_time(self) -> None:
        markup = """
        <reusable name="Maybe">
          <set-bool local="show" to="false"/>
          <element id="always"/>
          <element id="hidden" if="show"/>
          <element id="shown" if-not="show"/>
        </reusable>
        <page name="Main"><use name="Maybe"/></page>
        """
        children = compile_markup(markup).page().children
        self.assertEqual([c.element_id for c in children], ["always", "shown"])
        self.assertFalse(any(isinstance(c, ConditionalNode) for c in children))

    def test_binding_conditionals_survive(self) -> None:
        children = compile_markup('<page name="Main"><element if="is_open"/></page>').page().children
        self.assertIsInstance(children[0], ConditionalNode)
        self.assertEqual(children[0].predicate, BindingRef("is_open", "bool"))
        self.assertEqual(children[0].body.path, (0, 0))

    def test_list_item_locals_shadow_reusable_params(self) -> None:
        markup = """
        <reusable name="Rows">
          <get-text local="name" from="fallback_name"/>
          <list src="Documents">
            <get-text local="name" from="title"/>
            <text-element><dyn-content from="name"/></text-element>
          </list>
        </reusable>
        <page name="Main"><use name="Rows"/></page>
        """
        (listing,) = compile_markup(markup).page().children
        self.assertIsInstance(listing, ListNode)
        self.assertEqual(listing.source_key, "Documents")
        self.assertEqual(listing.item_bindings, {"name": "title"})
        self.assertEqual(listing.body[0].content, BindingRef("name", "text"))

    def test_clicked_emit_and_hovered_overrides(self) -> None:
        markup = """
        <page name="Main">
          <element>
            <element-config>
              <color is="#000000"/>
              <hovered><color is="#ffffff"/></hovered>
              <clicked emit="Clicked"><color is="#ff0000"/></clicked>
            </element-config>
          </element>
        </page>
        """
        (el,) = compile_markup(markup).page().children
        self.assertEqual(el.style.clicked_emit, LiteralValue("Clicked"))
        self.assertEqual(el.style.hovered["color"], LiteralValue((255, 255, 255, 255)))
        self.assertEqual(el.style.variant(hovered=True, clicked=True)["color"], LiteralValue((255, 0, 0, 255)))
        self.assertEqual(el.style.variant(hovered=False, clicked=False)["color"], LiteralValue((0, 0, 0, 255)))

    def test_malformed_markup_is_rejected(self) -> None:
        bad = (
            "<page name='Main'><element>",
            "<page name='Main'><blink/></page>",
            "<widget/>",
            "<reusable name='A'><element/></reusable>",
            "<page name='Main'/><page name='Main'/>",
            "<page name='Main'><element><element-config><width-percent at='2'/></element-config></element></page>",
            "<page name='Main'><text-element/></page>",
            "<page name='Main'><element if='a' if-not='b'/></page>",
        )
        for markup in bad:
            with self.subTest(markup=markup):
                with self.assertRaises(MalformedMarkup):
                    compile_markup(markup)

    def test_compile_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            compile_markup("")
        self.assertTrue(issubclass(UnknownReusable, CompileError))

    def test_toolkit_components_are_rejected(self) -> None:
        with self.assertRaises(MalformedMarkup) as ctx:
            compile_markup('<page name="Main"><element><tk type="treeview" version="1"/></element></page>')
        self.assertIn("<tk>", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
