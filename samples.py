"""
Example PDAs in the text format read by io_utils.

Load them with io_utils.load_samples() or the "samples" terminal command.
"""

SAMPLES = """
sample1:
# a^n b^n, deterministic, emptying the stack below the initial #
type: pda
states: q0 q1 q2
start: q0
start_stack: #
acceptance: empty_stack
q0, a, eps -> q0, A
q0, b, A -> q1, eps
q1, eps, # -> q2, eps
q1, b, A -> q1, eps

sample2:
# a^n b^n with two states, nondeterministic
type: pda
states: q0 q1
start: q0
accept: q1
acceptance: both
q0, a, eps -> q0, 1
q0, eps, 1 -> q1, 1
q1, b, 1 -> q1, eps

sample3:
# w w^r over {a, b}; runs with transition_function symbol_and_symbol
type: pda
states: q0 q1
start: q0
accept: q1
acceptance: both
q0, a, eps -> q0, a
q0, b, eps -> q0, b
q0, eps, eps -> q1, eps
q1, a, a -> q1, eps
q1, b, b -> q1, eps

sample4:
# equal numbers of As and Bs, in any order
type: pda
states: q0 q1 q2 q3 q4 q5
start: q0
accept: q1
acceptance: accepting_state
q0, eps, eps -> q1, #
q1, A, eps -> q2, A
q2, A, eps -> q2, A
q2, B, A -> q3, eps
q3, B, A -> q3, eps
q3, A, eps -> q2, A
q3, eps, # -> q1, #
q1, B, eps -> q4, B
q4, B, eps -> q4, B
q4, A, B -> q5, eps
q5, B, eps -> q4, B
q5, A, B -> q5, eps
q5, eps, # -> q1, #

sample5:
# a^n b^m with n <= m <= 2n; runs with transition_function symbol_and_string
type: pda
states: q0 q1
start: q0
accept: q1
acceptance: both
q0, a, eps -> q0, 1
q0, a, eps -> q0, 11
q0, eps, eps -> q1, eps
q1, b, 1 -> q1, eps
"""
