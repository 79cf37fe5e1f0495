import ast
import unittest
from typing import List
from unittest.mock import patch

from tagwire.compiler.ast_nodes import (
    Element,
    ExpressionAttribute,
    ExpressionSlot,
    Fragment,
    SpreadAttribute,
    StaticAttribute,
    Text,
)
from tagwire.compiler.codegen.template import CompiledTemplate, TemplateCodegen
from tagwire.compiler.exceptions import (
    ClassificationError,
    ExpressionSyntaxError,
    TemplateDepthError,
)
from tagwire.compiler.siblings import SiblingIndex
from tagwire.config import CompilerConfig


class TestCodegenTemplate(unittest.TestCase):
    def setUp(self) -> None:
        self.codegen = TemplateCodegen()

    def unparse(self, nodes: List[ast.expr]) -> List[str]:
        return [ast.unparse(n) for n in nodes]

    def assert_code_in(self, snippet: str, node: ast.AST) -> None:
        """Helper to check if snippet exists in unparsed expression."""
        self.assertIn(snippet, ast.unparse(node))

    def test_static_markup_only(self) -> None:
        # <div className="box"><p>Hi</p></div>
        tree = Element(
            tag="div",
            attributes=[StaticAttribute(name="className", value="box")],
            children=[Element(tag="p", children=[Text("Hi")])],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ['<div  class="box"><p >Hi</p></div>'])
        self.assertEqual(result.expressions, [])
        self.assertEqual(result.part_meta, "")
        self.assertEqual(result.element_count, 2)

    def test_text_expression_text_gets_placeholder(self) -> None:
        # <div>Hello {name}!</div>
        tree = Element(
            tag="div",
            children=[Text("Hello "), ExpressionSlot("name"), Text("!")],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ["<div >Hello <!--{{tagwire}}-->", "!</div>"])
        self.assertEqual(self.unparse(result.expressions), ["name"])
        self.assertEqual(result.part_meta, "1|0|0")

    def test_placeholder_uses_configured_text(self) -> None:
        codegen = TemplateCodegen(CompilerConfig(placeholder="marker"))
        tree = Element(
            tag="span",
            children=[Text("a"), ExpressionSlot("x"), Text("b")],
        )
        result = codegen.compile(tree)
        self.assertEqual(result.strings[0], "<span >a<!--marker-->")

    def test_one_placeholder_per_expression_run(self) -> None:
        # <p>a {x}{y} b</p>
        tree = Element(
            tag="p",
            children=[Text("a "), ExpressionSlot("x"), ExpressionSlot("y"), Text(" b")],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ["<p >a <!--{{tagwire}}-->", "", " b</p>"])
        self.assertEqual(result.part_meta, "1|0|0,2|0|1")

    def test_no_placeholder_without_trailing_text(self) -> None:
        tree = Element(tag="p", children=[Text("Count: "), ExpressionSlot("count")])
        result = self.codegen.compile(tree)
        self.assertEqual(result.strings, ["<p >Count: ", "</p>"])
        self.assertEqual(result.part_meta, "1|0|0")

    def test_consecutive_expressions(self) -> None:
        # <p>{a}{b}</p>
        tree = Element(tag="p", children=[ExpressionSlot("a"), ExpressionSlot("b")])
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ["<p >", "", "</p>"])
        self.assertEqual(result.part_meta, "1|0|,2|0|0")

    def test_expression_between_elements(self) -> None:
        # <ul><li>x</li>{items}<li>y</li></ul>
        tree = Element(
            tag="ul",
            children=[
                Element(tag="li", children=[Text("x")]),
                ExpressionSlot("items"),
                Element(tag="li", children=[Text("y")]),
            ],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ["<ul ><li >x</li>", "<li >y</li></ul>"])
        self.assertEqual(result.part_meta, "1|0|0")
        self.assertEqual(result.element_count, 3)

    def test_nested_anchor_indices(self) -> None:
        # <div><span>{a}</span>{b}</div>
        tree = Element(
            tag="div",
            children=[
                Element(tag="span", children=[ExpressionSlot("a")]),
                ExpressionSlot("b"),
            ],
        )
        result = self.codegen.compile(tree)
        self.assertEqual(result.part_meta, "1|1|,1|0|0")

    def test_fragments_are_transparent(self) -> None:
        # <div><>{a}</><span></span>{b}</div>
        tree = Element(
            tag="div",
            children=[
                Fragment(children=[ExpressionSlot("a")]),
                Element(tag="span"),
                ExpressionSlot("b"),
            ],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ["<div >", "<span ></span>", "</div>"])
        self.assertEqual(result.part_meta, "1|0|,1|0|0")

    def test_adjacent_text_runs_share_an_anchor(self) -> None:
        # <p>a<>b</>{x}</p> and <p>a{/* */}b{x}</p> both render one "ab" text node
        for tree in (
            Element(tag="p", children=[Text("a"), Fragment(children=[Text("b")]), ExpressionSlot("x")]),
            Element(tag="p", children=[Text("a"), ExpressionSlot(None), Text("b"), ExpressionSlot("x")]),
        ):
            result = self.codegen.compile(tree)
            self.assertEqual(result.strings, ["<p >ab", "</p>"])
            self.assertEqual(result.part_meta, "1|0|0")

    def test_merged_text_before_element(self) -> None:
        # <div>a{/* */}b<span></span>{x}c</div>
        tree = Element(
            tag="div",
            children=[
                Text("a"),
                ExpressionSlot(""),
                Text("b"),
                Element(tag="span"),
                ExpressionSlot("x"),
                Text("c"),
            ],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ["<div >ab<span ></span>", "c</div>"])
        self.assertEqual(result.part_meta, "1|0|1")

    def test_siblings_are_indexed_once_per_container(self) -> None:
        tree = Element(
            tag="ul",
            children=[ExpressionSlot(f"item{i}") for i in range(20)],
        )
        with patch(
            "tagwire.compiler.codegen.template.SiblingIndex", wraps=SiblingIndex
        ) as index_cls:
            result = self.codegen.compile(tree)

        index_cls.assert_called_once_with(tree)
        self.assertEqual(len(result.expressions), 20)

    def test_blank_text_and_empty_expressions_are_skipped(self) -> None:
        tree = Element(
            tag="div",
            children=[
                Text("\n    "),
                ExpressionSlot(None),
                Element(tag="b"),
                Text("\n  "),
                ExpressionSlot("value"),
            ],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(result.strings, ["<div ><b ></b>", "</div>"])
        self.assertEqual(result.part_meta, "1|0|0")

    def test_adjacent_dynamic_attributes_merge(self) -> None:
        # <div id={a} title={b} {...rest} class="x" data={c}></div>
        tree = Element(
            tag="div",
            attributes=[
                ExpressionAttribute(name="id", expr="a"),
                ExpressionAttribute(name="title", expr="b"),
                SpreadAttribute(expr="rest"),
                StaticAttribute(name="class", value="x"),
                ExpressionAttribute(name="data", expr="c"),
            ],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(
            self.unparse(result.expressions),
            ["{'id': a, 'title': b, **rest}", "{'data': c}"],
        )
        self.assertEqual(result.strings, ["<div ", '  class="x"', " ></div>"])
        self.assertEqual(result.part_meta, "0|0|0,0|0|1")

    def test_single_spread_stays_bare(self) -> None:
        tree = Element(tag="div", attributes=[SpreadAttribute(expr="props")])
        result = self.codegen.compile(tree)
        self.assertEqual(self.unparse(result.expressions), ["props"])

    def test_spreads_promote_to_aggregate(self) -> None:
        tree = Element(
            tag="div",
            attributes=[SpreadAttribute(expr="a"), SpreadAttribute(expr="b")],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(self.unparse(result.expressions), ["{**a, **b}"])
        self.assertEqual(len(result.parts), 1)

    def test_form_control_value_is_dynamic(self) -> None:
        # <input value="x" type="text" checked />
        tree = Element(
            tag="input",
            attributes=[
                StaticAttribute(name="value", value="x"),
                StaticAttribute(name="type", value="text"),
                StaticAttribute(name="checked"),
            ],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(
            self.unparse(result.expressions), ["{'value': 'x'}", "{'checked': True}"]
        )
        self.assertEqual(result.strings, ["<input ", '  type="text"', " >"])
        self.assertEqual(result.part_meta, "0|0|0,0|0|1")

    def test_static_attribute_quoting(self) -> None:
        tree = Element(
            tag="a",
            attributes=[
                StaticAttribute(name="title", value='say "hi"'),
                StaticAttribute(name="download"),
            ],
        )
        result = self.codegen.compile(tree)
        self.assertEqual(result.strings, ["<a  title='say \"hi\"' download></a>"])

    def test_self_closing_tags_have_no_closing_markup(self) -> None:
        tree = Element(
            tag="div",
            children=[Element(tag="br"), Element(tag="img", children=[Text("x")])],
        )
        result = self.codegen.compile(tree)
        self.assertEqual(result.strings, ["<div ><br ><img >x</div>"])

    def test_component_becomes_jsx_call(self) -> None:
        # <div><Button label="Go" onClick={go} key={k}>Click</Button></div>
        button = Element(
            tag="Button",
            attributes=[
                StaticAttribute(name="label", value="Go"),
                ExpressionAttribute(name="onClick", expr="go"),
                ExpressionAttribute(name="key", expr="k"),
            ],
            children=[Text("Click")],
        )
        result = self.codegen.compile(Element(tag="div", children=[button]))

        self.assertEqual(
            self.unparse(result.expressions),
            [
                "_tagwire_jsx(Button, {'label': 'Go', 'onClick': go, "
                "'children': _tagwire_html(('Click',), (), '')}, k)"
            ],
        )
        self.assertEqual(result.strings, ["<div >", "</div>"])
        self.assertEqual(result.part_meta, "1|0|")
        # the component is not part of the skeleton
        self.assertEqual(result.element_count, 1)

    def test_component_children_are_compiled_recursively(self) -> None:
        # <Card>Hello {name}</Card>
        tree = Element(tag="Card", children=[Text("Hello "), ExpressionSlot("name")])
        expr = self.codegen.generate(tree)

        self.assertEqual(
            ast.unparse(expr),
            "_tagwire_jsx(Card, {'children': _tagwire_html(('Hello ', ''), (name,), '1||0')})",
        )

    def test_component_without_output_children(self) -> None:
        tree = Element(tag="Icon", children=[Text("\n  "), ExpressionSlot(None)])
        self.assertEqual(ast.unparse(self.codegen.generate(tree)), "_tagwire_jsx(Icon, {})")

    def test_member_component_and_spread_props(self) -> None:
        tree = Element(
            tag="ui.forms.Field",
            attributes=[
                SpreadAttribute(expr="props"),
                StaticAttribute(name="required"),
                ExpressionAttribute(name="strokeWidth", expr="w"),
            ],
        )
        self.assertEqual(
            ast.unparse(self.codegen.generate(tree)),
            "_tagwire_jsx(ui.forms.Field, {**props, 'required': True, 'stroke-width': w})",
        )

    def test_keyed_html_element_uses_tag_string(self) -> None:
        tree = Element(
            tag="li",
            attributes=[ExpressionAttribute(name="key", expr="item.id")],
            children=[ExpressionSlot("item.label")],
        )
        self.assertEqual(
            ast.unparse(self.codegen.generate(tree)),
            "_tagwire_jsx('li', {'children': item.label}, item.id)",
        )

    def test_bare_key_is_not_passed(self) -> None:
        tree = Element(tag="li", attributes=[StaticAttribute(name="key")])
        self.assertEqual(ast.unparse(self.codegen.generate(tree)), "_tagwire_jsx('li', {})")

    def test_ref_forces_jsx_call(self) -> None:
        tree = Element(tag="input", attributes=[ExpressionAttribute(name="ref", expr="r")])
        self.assertEqual(
            ast.unparse(self.codegen.generate(tree)), "_tagwire_jsx('input', {'ref': r})"
        )

    def test_literal_svg_stays_markup(self) -> None:
        tree = Element(
            tag="svg",
            attributes=[StaticAttribute(name="viewBox", value="0 0 10 10")],
            children=[Element(tag="circle", attributes=[StaticAttribute(name="r", value="4")])],
        )
        result = self.codegen.compile(tree)

        self.assertEqual(
            result.strings, ['<svg  viewBox="0 0 10 10"><circle  r="4"></circle></svg>']
        )
        self.assertEqual(result.expressions, [])

    def test_dynamic_svg_becomes_jsx_call(self) -> None:
        tree = Element(
            tag="svg",
            attributes=[ExpressionAttribute(name="width", expr="w")],
            children=[Element(tag="path", attributes=[StaticAttribute(name="d", value="M0")])],
        )
        self.assertEqual(
            ast.unparse(self.codegen.generate(tree)),
            "_tagwire_jsx('svg', {'width': w, 'children': "
            "_tagwire_html(('<path  d=\"M0\"></path>',), (), '')})",
        )

    def test_single_expression_collapses(self) -> None:
        tree = Fragment(children=[ExpressionSlot("value")])
        result = self.codegen.compile(tree)

        self.assertTrue(result.is_single_expression)
        self.assertEqual(result.part_meta, "1||")
        self.assertEqual(ast.unparse(result.to_ast()), "value")

    def test_empty_fragment(self) -> None:
        result = self.codegen.compile(Fragment())
        self.assertEqual(result.strings, [""])
        self.assertEqual(ast.unparse(result.to_ast()), "_tagwire_html(('',), (), '')")

    def test_list_root_compiles_as_fragment(self) -> None:
        result = self.codegen.compile([Text("a"), ExpressionSlot("x"), Text("b")])

        self.assertEqual(result.strings, ["a<!--{{tagwire}}-->", "b"])
        self.assertEqual(result.part_meta, "1||0")

    def test_template_call_shape(self) -> None:
        tree = Element(tag="div", children=[ExpressionSlot("x")])
        expr = self.codegen.generate(tree)

        self.assertIsInstance(expr, ast.Call)
        self.assert_code_in("_tagwire_html(('<div >', '</div>'), (x,), '1|0|')", expr)

    def test_configured_helper_names(self) -> None:
        codegen = TemplateCodegen(CompilerConfig(jsx_name="J", html_name="H"))
        tree = Element(tag="div", children=[Element(tag="Child")])
        self.assertEqual(
            ast.unparse(codegen.generate(tree)),
            "H(('<div >', '</div>'), (J(Child, {}),), '1|0|')",
        )

    def test_parsed_expressions_are_accepted(self) -> None:
        node = ast.parse("user.name.upper()", mode="eval").body
        tree = Element(tag="b", children=[ExpressionSlot(node)])
        result = self.codegen.compile(tree)
        self.assertIs(result.expressions[0], node)

    def test_unknown_node_raises(self) -> None:
        tree = Element(tag="div", children=[{"type": "comment"}])  # type: ignore[list-item]
        with self.assertRaises(ClassificationError):
            self.codegen.compile(tree)

    def test_unknown_attribute_raises(self) -> None:
        tree = Element(tag="div", attributes=["hidden"])  # type: ignore[list-item]
        with self.assertRaises(ClassificationError):
            self.codegen.compile(tree)

    def test_namespaced_component_name_raises(self) -> None:
        with self.assertRaises(ClassificationError):
            self.codegen.compile(Element(tag="xlink:use"))

    def test_invalid_expression_raises(self) -> None:
        tree = Element(tag="div", children=[ExpressionSlot("a +", line=3, column=7)])
        with self.assertRaises(ExpressionSyntaxError) as ctx:
            self.codegen.compile(tree)
        self.assertEqual(ctx.exception.line, 3)

    def test_depth_limit(self) -> None:
        codegen = TemplateCodegen(CompilerConfig(max_depth=3))
        tree = Element(tag="div")
        for _ in range(4):
            tree = Element(tag="div", children=[tree])
        with self.assertRaises(TemplateDepthError):
            codegen.compile(tree)

    def test_failed_compile_does_not_affect_next(self) -> None:
        with self.assertRaises(ClassificationError):
            self.codegen.compile(Element(tag="div", children=[object()]))  # type: ignore[list-item]

        result = self.codegen.compile(Element(tag="div", children=[ExpressionSlot("x")]))
        self.assertEqual(result.strings, ["<div >", "</div>"])
        self.assertEqual(result.part_meta, "1|0|")


class TestCompiledTemplateInvariants(unittest.TestCase):
    TREES = [
        Element(
            tag="section",
            attributes=[
                StaticAttribute(name="id", value="main"),
                ExpressionAttribute(name="className", expr="cls"),
            ],
            children=[
                Text("\n  Title: "),
                ExpressionSlot("title"),
                Text(" (draft)\n"),
                Fragment(
                    children=[
                        Element(tag="Badge", children=[ExpressionSlot("count")]),
                        ExpressionSlot("extra"),
                    ]
                ),
                Element(
                    tag="ul",
                    children=[
                        Element(tag="li", children=[Text("one")]),
                        ExpressionSlot("rest"),
                    ],
                ),
            ],
        ),
        Fragment(
            children=[
                Element(tag="input", attributes=[SpreadAttribute(expr="field")]),
                ExpressionSlot("a"),
                ExpressionSlot("b"),
                Element(tag="hr"),
            ]
        ),
    ]

    def test_slots_line_up_with_parts_and_strings(self) -> None:
        for tree in self.TREES:
            result: CompiledTemplate = TemplateCodegen().compile(tree)
            self.assertEqual(len(result.parts), len(result.expressions))
            self.assertEqual(len(result.strings), len(result.expressions) + 1)

    def test_anchor_indices_reference_emitted_elements(self) -> None:
        for tree in self.TREES:
            result = TemplateCodegen().compile(tree)
            for part in result.parts:
                if part.ref_node_index is not None:
                    self.assertLess(part.ref_node_index, result.element_count)
            # encoding validates the same bound
            result.part_meta

    def test_first_tree_layout(self) -> None:
        result = TemplateCodegen().compile(self.TREES[0])

        self.assertEqual(
            result.strings,
            [
                '<section  id="main"',
                " >Title: <!--{{tagwire}}-->",
                " (draft)",
                "",
                "<ul ><li >one</li>",
                "</ul></section>",
            ],
        )
        self.assertEqual(result.part_meta, "0|0|1,1|0|0,1|0|1,2|0|2,1|1|0")


if __name__ == "__main__":
    unittest.main()
