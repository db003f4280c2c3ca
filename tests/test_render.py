import unittest

from pda import PDA
from transition import Transition


class TestGraphviz(unittest.TestCase):
    def setUp(self):
        self.pda = PDA(
            transitions=[
                Transition("q0", "a", "", "A", "q0"),
                Transition("q0", "b", "A", "", "q1"),
            ],
            initial_state="q0",
            accepting_states=["q1"],
        )

    def test_nodes_and_edges(self):
        source = self.pda.to_graphviz(render=False).source
        self.assertIn("doublecircle", source)
        self.assertIn("__start__", source)
        self.assertIn("a, ε → A", source)
        self.assertIn("b, A → ε", source)
        self.assertNotIn("red", source)

    def test_nondeterministic_edges_are_red(self):
        self.pda.add_transition(Transition("q0", None, "", "", "q1"))
        source = self.pda.to_graphviz(render=False).source
        self.assertIn("red", source)
        self.assertIn("nondeterministic", source)

    def test_highlighting_can_be_turned_off(self):
        self.pda.add_transition(Transition("q0", None, "", "", "q1"))
        source = self.pda.to_graphviz(render=False, highlight_nondeterminism=False).source
        self.assertNotIn("red", source)

    def test_parallel_transitions_share_an_edge(self):
        self.pda.add_transition(Transition("q0", "c", "A", "", "q1"))
        dot = self.pda.to_graphviz(render=False)
        edge_lines = [line for line in dot.body if "->" in line and "__start__" not in line]
        self.assertEqual(len(edge_lines), 2)

    def test_no_start_arrow_without_initial_state(self):
        self.pda.set_initial_state(None)
        self.assertNotIn("__start__", self.pda.to_graphviz(render=False).source)


if __name__ == "__main__":
    unittest.main()
