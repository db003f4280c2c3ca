"""
Running a PDA on an input string.

find_accepting_computations enumerates accepting computations with a bounded
depth-first search, random_computation follows one arbitrary path, and
has_infinite_computation tells whether epsilon cycles allow unbounded runs.
Stepper runs a PDA one step at a time, branching where it is nondeterministic.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing_extensions import *

from configuration import Computation, Configuration
from transition import Transition

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 50
DEFAULT_MAX_TOTAL_STEPS = 5000
RANDOM_WALK_LIMIT = 50


class SearchLimit(Enum):
    NONE = 0
    MAX_STEPS = 1  # some computations were cut at max_steps configurations
    MAX_TOTAL_STEPS = 2  # the whole search ran out of budget


@dataclass(frozen=True)
class SearchResult:
    computations: Tuple[Computation, ...] = ()
    limit: SearchLimit = SearchLimit.NONE
    total_steps: int = 0

    @property
    def accepted(self) -> bool:
        return bool(self.computations)

    @property
    def rejected(self) -> bool:
        """No accepting computation of any length exists."""
        return not self.computations and self.limit == SearchLimit.NONE

    @property
    def exhaustive(self) -> bool:
        return self.limit == SearchLimit.NONE

    def __len__(self):
        return len(self.computations)

    def __iter__(self):
        return iter(self.computations)


# -------------------------------------------------------------------------
# Bounded search
# -------------------------------------------------------------------------


def find_accepting_computations(
    pda: "PDA",
    input_string: str,
    max_steps: int = DEFAULT_MAX_STEPS,
    max_total_steps: int = DEFAULT_MAX_TOTAL_STEPS,
) -> SearchResult:
    """
    Depth-first search for accepting computations.

    A computation may hold at most max_steps configurations; longer branches
    are dropped. At most max_total_steps computations are taken from the open
    list over the whole search, after which the search stops. The result is
    sorted shortest first, equal lengths in the order they were found.
    """
    initial = pda.initial_configuration(input_string)
    logger.debug(
        "Searching %r (max_steps=%d, max_total_steps=%d)",
        input_string,
        max_steps,
        max_total_steps,
    )

    accepting: List[Computation] = []
    hit_max_steps = False
    hit_max_total_steps = False

    open_list: List[Computation] = [(initial,)]
    total_steps = 0

    while open_list:
        total_steps += 1
        computation = open_list.pop()
        current = computation[-1]

        if len(computation) == max_steps + 1:
            hit_max_steps = True
        elif total_steps >= max_total_steps:
            hit_max_total_steps = True
            break
        else:
            if pda.is_accepting_configuration(current):
                accepting.append(computation)

            for transition in pda.applicable_transitions(current):
                open_list.append(computation + (pda.apply_transition(current, transition),))

    if hit_max_total_steps:
        limit = SearchLimit.MAX_TOTAL_STEPS
    elif hit_max_steps:
        limit = SearchLimit.MAX_STEPS
    else:
        limit = SearchLimit.NONE

    if limit != SearchLimit.NONE:
        logger.info(
            "Search for %r stopped by %s after %d steps", input_string, limit.name, total_steps
        )
    logger.debug(
        "Search for %r found %d accepting computations", input_string, len(accepting)
    )

    return SearchResult(
        computations=tuple(sorted(accepting, key=len)),
        limit=limit,
        total_steps=total_steps,
    )


# -------------------------------------------------------------------------
# Random walk
# -------------------------------------------------------------------------


def random_computation(
    pda: "PDA", input_string: str, rng: Optional[random.Random] = None
) -> Computation:
    """
    Follow uniformly random applicable transitions until none applies.

    Not necessarily accepting. If epsilon cycles make unbounded computations
    possible, the walk stops at RANDOM_WALK_LIMIT configurations.
    """
    choice = rng.choice if rng is not None else random.choice

    current = pda.initial_configuration(input_string)
    computation: List[Configuration] = [current]
    infinite = has_infinite_computation(pda)

    applicable = pda.applicable_transitions(current)
    while applicable:
        current = pda.apply_transition(current, choice(applicable))
        computation.append(current)
        if infinite and len(computation) == RANDOM_WALK_LIMIT:
            break
        applicable = pda.applicable_transitions(current)

    return tuple(computation)


# -------------------------------------------------------------------------
# Epsilon cycles
# -------------------------------------------------------------------------


def has_infinite_computation(pda: "PDA") -> bool:
    """
    True if, starting from some state, epsilon transitions lead back to a
    state already visited from that start.
    """
    epsilon_transitions = pda.epsilon_transitions()
    if not epsilon_transitions:
        return False

    for start in pda.states:
        open_list = [start]
        visited = set()

        while open_list:
            state = open_list.pop()
            visited.add(state)

            for transition in epsilon_transitions:
                if transition.current_state != state:
                    continue
                if transition.new_state in visited:
                    logger.debug("Epsilon transition %s revisits %s", transition, start)
                    return True
                open_list.append(transition.new_state)

    return False


# -------------------------------------------------------------------------
# Step by step
# -------------------------------------------------------------------------


class Stepper:
    """
    Step-by-step run of a PDA over parallel computations.

    One computation is active at a time. Stepping it forward applies every
    applicable transition: a single transition extends it, several split it
    into one computation per transition, in transition order, taking its
    place in the list. Stepping back drops its last configuration.
    """

    def __init__(self, pda: "PDA", input_string: str):
        self.pda = pda
        self.input_string = input_string
        self.computations: List[Computation] = [(pda.initial_configuration(input_string),)]
        self.active: Optional[int] = 0

    @property
    def computation(self) -> Computation:
        if self.active is None:
            raise ValueError("No computation is selected")
        return self.computations[self.active]

    def select(self, index: int):
        if not 0 <= index < len(self.computations):
            raise ValueError(f"No computation {index + 1}")
        self.active = index

    def remove(self, index: int):
        if not 0 <= index < len(self.computations):
            raise ValueError(f"No computation {index + 1}")
        del self.computations[index]
        if self.active == index:
            self.active = None
        elif self.active is not None and self.active > index:
            self.active -= 1

    def applicable_transitions(self, index: Optional[int] = None) -> List[Transition]:
        computation = self.computation if index is None else self.computations[index]
        return self.pda.applicable_transitions(computation[-1])

    def is_accepting(self, index: Optional[int] = None) -> bool:
        computation = self.computation if index is None else self.computations[index]
        return self.pda.is_accepting_configuration(computation[-1])

    def is_stuck(self, index: Optional[int] = None) -> bool:
        return not self.applicable_transitions(index)

    def step_forward(self) -> List[Transition]:
        """Advance the active computation; returns the transitions applied."""
        computation = self.computation
        current = computation[-1]
        transitions = self.pda.applicable_transitions(current)
        if not transitions:
            return []

        branches = [
            computation + (self.pda.apply_transition(current, t),) for t in transitions
        ]
        self.computations[self.active : self.active + 1] = branches
        if len(branches) > 1:
            logger.debug("Computation %d split into %d", self.active + 1, len(branches))
        return transitions

    def step_back(self) -> bool:
        computation = self.computation
        if len(computation) == 1:
            return False
        self.computations[self.active] = computation[:-1]
        return True
