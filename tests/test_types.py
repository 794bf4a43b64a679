"""
Tests for the Type Grammar
==========================
Parsing of the compact type notation and the canonical rendering of
each type constructor.
"""
import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hypothesis import given, strategies as st

from ifuzz.errors import TypeSyntaxError
from ifuzz.types import (
    ArrayType, ChanType, MapType, NamedType, PointerType, QualifiedType,
    parse_complete_type, parse_type, parse_type_list,
)
from strategies import go_types


class TestRendering(unittest.TestCase):

    def test_named(self):
        self.assertEqual(NamedType("int").to_string(), "int")

    def test_array(self):
        self.assertEqual(ArrayType(NamedType("byte")).to_string(), "[](byte)")

    def test_chan(self):
        self.assertEqual(ChanType(NamedType("int")).to_string(), "chan (int)")

    def test_map(self):
        ty = MapType(NamedType("string"), ArrayType(NamedType("int")))
        self.assertEqual(ty.to_string(), "map[string]([](int))")

    def test_pointer(self):
        self.assertEqual(PointerType(NamedType("T")).to_string(), "*(T)")

    def test_qualified(self):
        self.assertEqual(QualifiedType("model", NamedType("Message")).to_string(), "model.Message")

    def test_str_is_rendering(self):
        ty = PointerType(QualifiedType("model", NamedType("Message")))
        self.assertEqual(str(ty), "*(model.Message)")


class TestParseType(unittest.TestCase):

    def test_name(self):
        self.assertEqual(parse_type("int"), (NamedType("int"), ""))

    def test_remainder_is_trimmed(self):
        self.assertEqual(parse_type("  int   string"), (NamedType("int"), "string"))

    def test_slice(self):
        ty, rest = parse_type("[]byte")
        self.assertEqual(ty, ArrayType(NamedType("byte")))
        self.assertEqual(rest, "")

    def test_chan(self):
        ty, _ = parse_type("chan int")
        self.assertEqual(ty, ChanType(NamedType("int")))

    def test_chan_prefix_of_name(self):
        ty, _ = parse_type("channel")
        self.assertEqual(ty, NamedType("channel"))

    def test_bare_chan_is_a_name(self):
        self.assertEqual(parse_type("chan"), (NamedType("chan"), ""))

    def test_nested_bare_chan_is_a_name(self):
        self.assertEqual(parse_complete_type("[](chan)"), ArrayType(NamedType("chan")))
        self.assertEqual(parse_complete_type("map[chan](chan)"), MapType(NamedType("chan"), NamedType("chan")))
        self.assertEqual(parse_complete_type("chan (chan)"), ChanType(NamedType("chan")))

    def test_chan_as_package(self):
        self.assertEqual(parse_complete_type("chan.T"), QualifiedType("chan", NamedType("T")))

    def test_chan_method_comparison_type(self):
        self.assertEqual(parse_type("chan:Equals"), (NamedType("chan"), ":Equals"))

    def test_map(self):
        ty, _ = parse_type("map[string]*model.Message")
        self.assertEqual(ty, MapType(
            NamedType("string"),
            PointerType(QualifiedType("model", NamedType("Message"))),
        ))

    def test_nested_parentheses(self):
        ty, rest = parse_type("((*(int))) tail")
        self.assertEqual(ty, PointerType(NamedType("int")))
        self.assertEqual(rest, "tail")

    def test_parenthesised_map_value(self):
        ty, _ = parse_type("map[k](v)")
        self.assertEqual(ty, MapType(NamedType("k"), NamedType("v")))

    def test_qualified(self):
        ty, rest = parse_type("model.ID:Equals")
        self.assertEqual(ty, QualifiedType("model", NamedType("ID")))
        self.assertEqual(rest, ":Equals")


class TestParseErrors(unittest.TestCase):

    def assertFails(self, text, fragment):
        with self.assertRaises(TypeSyntaxError) as ctx:
            parse_type(text)
        self.assertIn(fragment, str(ctx.exception))

    def test_empty(self):
        self.assertFails("", "expected a type")

    def test_missing_operand(self):
        self.assertFails("[]", "missing type operand")
        self.assertFails("*", "missing type operand")

    def test_unclosed_map_key(self):
        self.assertFails("map[int", "expected ']'")

    def test_unclosed_parenthesis(self):
        self.assertFails("(int", "mismatched parentheses")

    def test_stray_close_parenthesis(self):
        self.assertFails(")", "mismatched parentheses")

    def test_not_a_type(self):
        self.assertFails(":Equals", "expected a type")

    def test_error_names_fragment(self):
        with self.assertRaises(TypeSyntaxError) as ctx:
            parse_type("map[int")
        self.assertEqual(ctx.exception.fragment, "map[int")


class TestTypeLists(unittest.TestCase):

    def test_list(self):
        types = parse_type_list("int []byte  model.ID")
        self.assertEqual(types, [
            NamedType("int"),
            ArrayType(NamedType("byte")),
            QualifiedType("model", NamedType("ID")),
        ])

    def test_empty_list(self):
        self.assertEqual(parse_type_list("   "), [])

    def test_complete_type(self):
        self.assertEqual(parse_complete_type(" *T "), PointerType(NamedType("T")))

    def test_complete_type_leftover(self):
        with self.assertRaises(TypeSyntaxError):
            parse_complete_type("int string")


class TestTypeProperties(unittest.TestCase):

    @given(go_types)
    def test_rendering_parses_back(self, ty):
        self.assertEqual(parse_complete_type(ty.to_string()), ty)

    @given(go_types, st.text(alphabet="abc )(*[]:", max_size=10))
    def test_stops_at_close_parenthesis(self, ty, tail):
        parsed, rest = parse_type(ty.to_string() + ")" + tail)
        self.assertEqual(parsed, ty)
        self.assertEqual(rest, ")" + tail)


if __name__ == "__main__":
    unittest.main()
