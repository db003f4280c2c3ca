import unittest

from pda import PDA
from search import Stepper
from transition import AcceptanceCriteria, Transition


class TestStepper(unittest.TestCase):
    def setUp(self):
        self.t1 = Transition("q0", "a", "", "A", "q0")
        self.t2 = Transition("q0", None, "", "", "q1")
        self.t3 = Transition("q1", "b", "A", "", "q1")
        self.pda = PDA(
            transitions=[self.t1, self.t2, self.t3],
            initial_state="q0",
            accepting_states=["q1"],
            acceptance_criteria=AcceptanceCriteria.BOTH,
        )
        self.stepper = Stepper(self.pda, "ab")

    def test_starts_at_initial_configuration(self):
        self.assertEqual(self.stepper.computations, [(self.pda.initial_configuration("ab"),)])
        self.assertEqual(self.stepper.active, 0)
        self.assertFalse(self.stepper.is_accepting())

    def test_forward_splits(self):
        applied = self.stepper.step_forward()
        self.assertEqual(applied, [self.t1, self.t2])
        self.assertEqual(len(self.stepper.computations), 2)
        self.assertEqual(self.stepper.active, 0)

        first, second = self.stepper.computations
        self.assertEqual(first[0], second[0])
        self.assertEqual((first[-1].state, first[-1].index), ("q0", 1))
        self.assertEqual((second[-1].state, second[-1].index), ("q1", 0))
        self.assertTrue(self.stepper.is_stuck(1))

    def test_forward_extends_single_branch(self):
        self.stepper.step_forward()
        self.assertEqual(self.stepper.step_forward(), [self.t2])
        self.assertEqual(self.stepper.step_forward(), [self.t3])
        self.assertEqual(len(self.stepper.computations), 2)
        self.assertEqual(len(self.stepper.computation), 4)
        self.assertTrue(self.stepper.is_accepting())

    def test_stuck_computation_is_unchanged(self):
        self.stepper.step_forward()
        self.stepper.select(1)
        before = self.stepper.computation
        self.assertEqual(self.stepper.step_forward(), [])
        self.assertEqual(self.stepper.computation, before)

    def test_back(self):
        self.assertFalse(self.stepper.step_back())

        self.stepper.step_forward()
        self.stepper.step_forward()
        self.assertEqual(self.stepper.computation[-1].state, "q1")
        self.assertTrue(self.stepper.step_back())
        self.assertEqual(len(self.stepper.computation), 2)
        self.assertEqual(self.stepper.computation[-1].state, "q0")
        self.assertTrue(self.stepper.step_back())
        self.assertFalse(self.stepper.step_back())
        self.assertEqual(self.stepper.computation, (self.pda.initial_configuration("ab"),))

        # stepping forward again branches on the same transitions
        self.assertEqual(self.stepper.step_forward(), [self.t1, self.t2])
        self.assertEqual(len(self.stepper.computations), 3)

    def test_select_and_remove(self):
        self.stepper.step_forward()
        with self.assertRaises(ValueError):
            self.stepper.select(2)

        self.stepper.select(1)
        self.stepper.remove(0)
        self.assertEqual(self.stepper.active, 0)
        self.assertEqual(self.stepper.computation[-1].state, "q1")

        self.stepper.remove(0)
        self.assertIsNone(self.stepper.active)
        self.assertEqual(self.stepper.computations, [])
        with self.assertRaises(ValueError):
            self.stepper.step_forward()
        with self.assertRaises(ValueError):
            self.stepper.remove(0)


if __name__ == "__main__":
    unittest.main()
