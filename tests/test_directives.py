"""
Tests for the Directive Parser
==============================
Special comments describing the fuzzers to generate.
"""
import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ifuzz.directives import (
    Comparison, Generator, parse_block, parse_comparison, parse_function_or_method,
    parse_generator, parse_harnesses, parse_known_correct,
)
from ifuzz.errors import DirectiveError, GrammarError
from ifuzz.interface import MethodSignature
from ifuzz.types import NamedType, PointerType, QualifiedType

STORE_BLOCK = """
Store is a message store.

@fuzz interface: Store

@known correct: & makeStore int model.ID

@comparison: *Message:Equals
@comparison: compareIters *Iter

@generator state: uint(0)
@generator:   genChannel model.Channel
@generator: ! genID      model.ID

@invariant: %var.Len() >= 0
@invariant: %var.Cap() >= %var.Len()
"""


class TestParseBlock(unittest.TestCase):

    def setUp(self):
        specs = parse_block(STORE_BLOCK)
        self.assertEqual(len(specs), 1)
        self.spec = specs[0]

    def test_interface_name(self):
        self.assertEqual(self.spec.interface_name, "Store")

    def test_reference(self):
        self.assertEqual(self.spec.reference, MethodSignature(
            name="makeStore",
            parameters=(NamedType("int"), QualifiedType("model", NamedType("ID"))),
            returns=(NamedType("Store"),),
        ))
        self.assertTrue(self.spec.returns_value)

    def test_comparisons_keyed_by_rendering(self):
        self.assertEqual(set(self.spec.comparisons), {"*(Message)", "*(Iter)"})
        self.assertEqual(
            self.spec.comparisons["*(Message)"],
            Comparison("Equals", PointerType(NamedType("Message")), is_function=False),
        )
        self.assertTrue(self.spec.comparisons["*(Iter)"].is_function)

    def test_generators(self):
        self.assertEqual(self.spec.generators["model.Channel"], Generator("genChannel"))
        self.assertEqual(self.spec.generators["model.ID"], Generator("genID", is_stateful=True))
        self.assertEqual(self.spec.generator_state, "uint(0)")

    def test_invariants_in_order(self):
        self.assertEqual(self.spec.invariants, ["%var.Len() >= 0", "%var.Cap() >= %var.Len()"])


class TestBlockStructure(unittest.TestCase):

    def test_no_directives(self):
        self.assertEqual(parse_block("just a comment\n@ mention"), [])

    def test_two_harnesses_in_one_block(self):
        specs = parse_block(
            "@fuzz interface: A\n@known correct: makeA\n"
            "@fuzz interface: B\n@known correct: makeB\n"
        )
        self.assertEqual([s.interface_name for s in specs], ["A", "B"])
        self.assertEqual(specs[0].reference.name, "makeA")
        self.assertEqual(specs[1].reference.name, "makeB")

    def test_later_directive_replaces_earlier(self):
        specs = parse_block(
            "@fuzz interface: A\n@generator: first int\n@generator: second int\n"
        )
        self.assertEqual(specs[0].generators["int"].name, "second")

    def test_directive_before_fuzz_interface(self):
        with self.assertRaises(DirectiveError):
            parse_block("@known correct: makeA\n@fuzz interface: A")

    def test_leading_whitespace_ignored(self):
        specs = parse_block("   @fuzz interface: A\n\t@invariant: %var.Ok()")
        self.assertEqual(specs[0].invariants, ["%var.Ok()"])

    def test_unknown_lines_ignored(self):
        specs = parse_block("@fuzz interface: A\n@todo: nothing\nprose")
        self.assertEqual(specs[0].interface_name, "A")


class TestParseHarnesses(unittest.TestCase):

    def test_bad_block_does_not_affect_others(self):
        specs, errors = parse_harnesses([
            "@fuzz interface: A",
            "@fuzz interface: B\n@generator: genX\n@generator: genY",
            "@fuzz interface: C",
        ])
        self.assertEqual([s.interface_name for s in specs], ["A", "C"])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], GrammarError)

    def test_one_error_per_block(self):
        _, errors = parse_harnesses(["@fuzz interface:", "@fuzz interface: A B"])
        self.assertEqual(len(errors), 2)

    def test_error_names_directive(self):
        _, errors = parse_harnesses(["@fuzz interface: A\n@generator: genX"])
        self.assertIn("@generator:", str(errors[0]))
        self.assertEqual(errors[0].fragment, "@generator: genX")


class TestKnownCorrect(unittest.TestCase):

    def test_pointer_reference(self):
        function, returns_value = parse_known_correct("makeStore", "Store")
        self.assertEqual(function, MethodSignature("makeStore", (), (NamedType("Store"),)))
        self.assertFalse(returns_value)

    def test_empty(self):
        with self.assertRaises(DirectiveError):
            parse_known_correct("", "Store")

    def test_missing_name(self):
        with self.assertRaises(DirectiveError):
            parse_known_correct("& ", "Store")

    def test_bad_argument_type(self):
        with self.assertRaises(GrammarError):
            parse_known_correct("makeStore map[int", "Store")


class TestComparison(unittest.TestCase):

    def test_method_on_named_type(self):
        self.assertEqual(parse_comparison("Message:Equals"), Comparison("Equals", NamedType("Message")))

    def test_method_on_qualified_type(self):
        comparison = parse_comparison("model.ID : Equals")
        self.assertEqual(comparison.type, QualifiedType("model", NamedType("ID")))
        self.assertEqual(comparison.name, "Equals")

    def test_function(self):
        comparison = parse_comparison("sameMessage *model.Message")
        self.assertEqual(comparison, Comparison(
            "sameMessage",
            PointerType(QualifiedType("model", NamedType("Message"))),
            is_function=True,
        ))

    def test_function_form_leaves_remainder(self):
        comparison, rest = parse_function_or_method("eq int trailing")
        self.assertTrue(comparison.is_function)
        self.assertEqual(rest, "trailing")

    def test_leftover_input(self):
        with self.assertRaises(DirectiveError):
            parse_comparison("eq int trailing")

    def test_missing_method_name(self):
        with self.assertRaises(DirectiveError):
            parse_comparison("int:")

    def test_neither_form(self):
        with self.assertRaises(DirectiveError) as ctx:
            parse_comparison(":Equals")
        self.assertIn("does not appear to be a method or function", str(ctx.exception))


class TestGenerator(unittest.TestCase):

    def test_stateless(self):
        ty, generator = parse_generator("genInt int")
        self.assertEqual(ty, NamedType("int"))
        self.assertEqual(generator, Generator("genInt", is_stateful=False))

    def test_stateful(self):
        _, generator = parse_generator("!genInt int")
        self.assertTrue(generator.is_stateful)

    def test_missing_type(self):
        with self.assertRaises(GrammarError):
            parse_generator("genInt")

    def test_missing_name(self):
        with self.assertRaises(DirectiveError):
            parse_generator("! *int")

    def test_empty_state(self):
        with self.assertRaises(DirectiveError):
            parse_block("@fuzz interface: A\n@generator state:")

    def test_empty_invariant(self):
        with self.assertRaises(DirectiveError):
            parse_block("@fuzz interface: A\n@invariant:   ")


if __name__ == "__main__":
    unittest.main()
