import os
import tempfile
import unittest

from io_utils import (
    load_from_file,
    load_samples,
    parse_blocks,
    parse_pda,
    parse_sections,
    parse_transition,
)
from transition import AcceptanceCriteria, Transition

ANBN = """
type: pda
states: q0 q1 q2
start: q0
start_stack: #
acceptance: empty_stack
# push an A per a, pop one per b
q0, a, eps -> q0, A
q0, b, A -> q1, eps
q1, eps, # -> q2, eps
q1 b A q1 eps
"""

COMMENTED = """
type: pda
states: q0 q1
start: q0
accept: q1
start_stack: #          # or "none"
acceptance: empty_stack  # accepting_state | empty_stack | both
q0, a, eps -> q0, A     # src, input, pop -> tgt, push
q0 b A q1 eps           # whitespace form: src input pop tgt push
"""


class TestParseTransition(unittest.TestCase):
    def test_arrow_form(self):
        self.assertEqual(
            parse_transition("q0, a, eps -> q1, AB"), Transition("q0", "a", "", "AB", "q1")
        )
        self.assertEqual(
            parse_transition("q1, ε, # -> q2, ε"), Transition("q1", None, "#", "", "q2")
        )

    def test_empty_fields_are_epsilon(self):
        self.assertEqual(parse_transition("q0, , -> q1, "), Transition("q0", None, "", "", "q1"))

    def test_whitespace_form(self):
        self.assertEqual(
            parse_transition("q1 b A q1 eps"), Transition("q1", "b", "A", "", "q1")
        )

    def test_malformed(self):
        for line in ("q0, a -> q1, A", "q0 a A q1", "q0, a, A -> q1", ", a, A -> q1, A"):
            with self.assertRaises(ValueError, msg=line):
                parse_transition(line)

    def test_multi_character_input_symbol(self):
        with self.assertRaises(ValueError):
            parse_transition("q0, ab, A -> q1, A")


class TestParsePDA(unittest.TestCase):
    def test_full_definition(self):
        pda = parse_pda(ANBN)
        self.assertEqual(pda.states, ["q0", "q1", "q2"])
        self.assertEqual(pda.initial_state, "q0")
        self.assertEqual(pda.accepting_states, [])
        self.assertEqual(pda.initial_stack_symbol, "#")
        self.assertEqual(pda.acceptance_criteria, AcceptanceCriteria.EMPTY_STACK)
        self.assertEqual(len(pda.transitions), 4)
        self.assertTrue(pda.is_deterministic())
        self.assertEqual(len(pda.find_accepting_computations("aabb")), 1)

    def test_defaults(self):
        pda = parse_pda("q0, a, eps -> q1, eps")
        self.assertEqual(pda.states, ["q0", "q1"])
        self.assertIsNone(pda.initial_state)
        self.assertIsNone(pda.initial_stack_symbol)
        self.assertEqual(pda.acceptance_criteria, AcceptanceCriteria.ACCEPTING_STATE)

    def test_start_stack_none(self):
        self.assertIsNone(parse_pda("start_stack: none\nq0 a eps q0 A").initial_stack_symbol)

    def test_accepting_states_are_created(self):
        pda = parse_pda("start: q0\naccept: q0 q3\nq0 a eps q1 A")
        self.assertEqual(pda.accepting_states, ["q0", "q3"])
        self.assertIn("q3", pda.states)

    def test_duplicate_transitions_are_skipped(self):
        with self.assertLogs("io_utils", level="WARNING"):
            pda = parse_pda("q0 a eps q1 A\nq0, a, eps -> q1, A")
        self.assertEqual(len(pda.transitions), 1)

    def test_unknown_key(self):
        with self.assertRaises(ValueError):
            parse_pda("colour: blue\nq0 a eps q1 A")

    def test_wrong_type(self):
        with self.assertRaises(ValueError):
            parse_pda("type: dfa\nq0 a eps q1 A")

    def test_inline_comments(self):
        pda = parse_pda(COMMENTED)
        self.assertEqual(pda.states, ["q0", "q1"])
        self.assertEqual(pda.accepting_states, ["q1"])
        self.assertEqual(pda.initial_stack_symbol, "#")
        self.assertEqual(pda.acceptance_criteria, AcceptanceCriteria.EMPTY_STACK)
        self.assertEqual(
            pda.transitions,
            [Transition("q0", "a", "", "A", "q0"), Transition("q0", "b", "A", "", "q1")],
        )

    def test_hash_after_single_space_is_a_symbol(self):
        pda = parse_pda("start_stack: #\nq1, eps, # -> q2, eps\nq2 a # q2 #\t# pushes # back")
        self.assertEqual(pda.initial_stack_symbol, "#")
        self.assertEqual(
            pda.transitions,
            [Transition("q1", None, "#", "", "q2"), Transition("q2", "a", "#", "#", "q2")],
        )

    def test_blocks(self):
        pdas = parse_blocks(ANBN + "\n---\nstart: p\naccept: p\np a eps p eps\n")
        self.assertEqual(len(pdas), 2)
        self.assertEqual(pdas[1].initial_state, "p")


class TestSamples(unittest.TestCase):
    def setUp(self):
        self.samples = load_samples()

    def test_all_samples_load(self):
        self.assertEqual(
            list(self.samples), ["sample1", "sample2", "sample3", "sample4", "sample5"]
        )
        for name, pda in self.samples.items():
            self.assertTrue(pda.can_run(), name)

    def test_sample_machines(self):
        self.assertTrue(self.samples["sample1"].is_deterministic())
        self.assertFalse(self.samples["sample2"].is_deterministic())
        self.assertEqual(len(self.samples["sample4"].transitions), 13)

        expected = [
            ("sample1", "aabb", 1),
            ("sample2", "aabb", 1),
            ("sample3", "abba", 1),
            ("sample4", "ABAB", 2),
            ("sample5", "aaabbbb", 3),
        ]
        for name, word, n in expected:
            result = self.samples[name].find_accepting_computations(word)
            self.assertEqual(len(result), n, name)
        self.assertTrue(self.samples["sample3"].find_accepting_computations("ab").rejected)

    def test_parse_sections_names_unnamed_blocks(self):
        automata = parse_sections(ANBN + "\n---\n" + ANBN, "block")
        self.assertEqual(sorted(automata), ["block", "block1"])


class TestLoadFromFile(unittest.TestCase):
    def write(self, content, name="machines.txt"):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        path = os.path.join(directory.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_named_sections(self):
        path = self.write(
            "anbn:\n" + ANBN + "\nloop:\nstart: q0\naccept:\nacceptance: empty_stack\nq0 a eps q0 eps\n"
        )
        automata = load_from_file(path)
        self.assertEqual(sorted(automata), ["anbn", "loop"])
        self.assertEqual(automata["loop"].accepting_states, [])
        self.assertEqual(len(automata["anbn"].transitions), 4)

    def test_unnamed_blocks_use_file_name(self):
        path = self.write(ANBN + "\n---\n" + ANBN, name="samples.pda")
        automata = load_from_file(path)
        self.assertEqual(sorted(automata), ["samples", "samples1"])

    def test_broken_section_is_skipped(self):
        path = self.write("good:\nq0 a eps q0 A\nbad:\nq0, a -> q1\n")
        with self.assertLogs("io_utils", level="WARNING") as logs:
            automata = load_from_file(path)
        self.assertEqual(list(automata), ["good"])
        self.assertIn("bad", logs.output[0])

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_from_file(os.path.join(tempfile.gettempdir(), "no-such-pda-file.txt"))


if __name__ == "__main__":
    unittest.main()
