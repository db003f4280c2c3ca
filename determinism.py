import logging
from collections import defaultdict
from dataclasses import dataclass, field
from itertools import combinations
from typing_extensions import *

from transition import Transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeterminismReport:
    deterministic: bool = True
    nondeterministic_transitions: FrozenSet[Transition] = field(default_factory=frozenset)


def _inputs_overlap(t1: Transition, t2: Transition) -> bool:
    """Both transitions can fire on the same input: equal symbols or an epsilon."""
    return t1.input_symbol == t2.input_symbol or t1.is_epsilon or t2.is_epsilon


def conflicts(t1: Transition, t2: Transition) -> bool:
    """
    Syntactic nondeterminism test for two transitions leaving the same state.

    1. same non-epsilon input symbol and same pop string
    2. an epsilon input symbol on either side and same pop string
    3. overlapping input (1 or 2) and at least one empty pop string,
       which matches whatever is on the stack
    4. overlapping input and one pop string a proper prefix of the other:
       whenever the longer one matches, so does the shorter one
    """
    if t1.current_state != t2.current_state or t1 == t2:
        return False

    pop1, pop2 = t1.pop_string, t2.pop_string

    if not t1.is_epsilon and t1.input_symbol == t2.input_symbol and pop1 == pop2:
        return True
    if (t1.is_epsilon or t2.is_epsilon) and pop1 == pop2:
        return True

    if not _inputs_overlap(t1, t2):
        return False
    if not pop1 or not pop2:
        return True
    return pop1.startswith(pop2) or pop2.startswith(pop1)


def analyze_determinism(
    states: Iterable[str], transitions: Iterable[Transition]
) -> DeterminismReport:
    by_state: Dict[str, List[Transition]] = defaultdict(list)
    for transition in transitions:
        by_state[transition.current_state].append(transition)

    flagged: Set[Transition] = set()
    for state in states:
        for t1, t2 in combinations(by_state.get(state, ()), 2):
            if conflicts(t1, t2):
                logger.debug("Nondeterministic pair in %s: %s and %s", state, t1, t2)
                flagged.add(t1)
                flagged.add(t2)

    return DeterminismReport(
        deterministic=not flagged,
        nondeterministic_transitions=frozenset(flagged),
    )
