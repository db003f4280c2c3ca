from dataclasses import dataclass, field
from typing_extensions import *

from transition import EPSILON, AcceptanceCriteria, Transition


Stack = Tuple[str, ...]  # bottom first, top = last element


@dataclass(frozen=True)
class Configuration:
    """
    Snapshot of a running PDA: state, stack and a cursor into the input.

    input_string is the handle to the input of the run that produced this
    configuration. It is not part of equality: two configurations are the
    same when state, stack contents and index agree.
    """

    state: str
    stack: Stack = ()
    index: int = 0
    input_string: str = field(default="", compare=False, repr=False)

    @property
    def input_symbol(self) -> Optional[str]:
        if self.index < len(self.input_string):
            return self.input_string[self.index]
        return None

    @property
    def remaining_input(self) -> str:
        return self.input_string[self.index:]

    @property
    def input_consumed(self) -> bool:
        return self.index >= len(self.input_string)

    def stack_top_down(self) -> str:
        return "".join(reversed(self.stack))

    def __str__(self):
        remaining = self.remaining_input or EPSILON
        stack = self.stack_top_down() or EPSILON
        return f"({self.state}, {remaining}, {stack})"


# A chain of configurations, each obtained from the previous one by a single
# transition. Never empty.
Computation = Tuple[Configuration, ...]


def format_computation(computation: Computation) -> str:
    return " ⊢ ".join(str(config) for config in computation)


# -------------------------------------------------------------------------
# Stack matching
# -------------------------------------------------------------------------


def stack_has_pop_string(stack: Stack, pop_string: str) -> bool:
    if not pop_string:
        return True
    if len(stack) < len(pop_string):
        return False
    # pop_string[0] is compared against the top, pop_string[1] below it, ...
    for offset, symbol in enumerate(pop_string):
        if stack[-1 - offset] != symbol:
            return False
    return True


def apply_transition(config: Configuration, transition: Transition) -> Configuration:
    stack = config.stack
    if transition.pop_string:
        stack = stack[: len(stack) - len(transition.pop_string)]
    if transition.push_string:
        stack = stack + tuple(reversed(transition.push_string))

    index = config.index
    if transition.input_symbol is not None:
        index += 1

    return Configuration(
        state=transition.new_state,
        stack=stack,
        index=index,
        input_string=config.input_string,
    )


def is_applicable(config: Configuration, transition: Transition) -> bool:
    if transition.current_state != config.state:
        return False
    if transition.input_symbol is not None and transition.input_symbol != config.input_symbol:
        return False
    return stack_has_pop_string(config.stack, transition.pop_string)


def applicable_transitions(
    config: Configuration, transitions: Iterable[Transition]
) -> List[Transition]:
    """Applicable transitions, in the order they appear in `transitions`."""
    return [t for t in transitions if is_applicable(config, t)]


def is_accepting_configuration(
    config: Configuration,
    criteria: AcceptanceCriteria,
    accepting_states: Collection[str],
) -> bool:
    # Unconsumed input rules out acceptance under every criterion
    if not config.input_consumed:
        return False

    in_accepting_state = config.state in accepting_states
    stack_empty = not config.stack

    if criteria == AcceptanceCriteria.ACCEPTING_STATE:
        return in_accepting_state
    if criteria == AcceptanceCriteria.EMPTY_STACK:
        return stack_empty
    if criteria == AcceptanceCriteria.BOTH:
        return in_accepting_state and stack_empty
    return False
