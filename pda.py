import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field
from typing_extensions import *

from graphviz import Digraph

import configuration
from configuration import Computation, Configuration
from determinism import DeterminismReport, analyze_determinism
from search import (
    DEFAULT_MAX_STEPS,
    DEFAULT_MAX_TOTAL_STEPS,
    SearchResult,
    find_accepting_computations,
    has_infinite_computation,
    random_computation,
)
from transition import AcceptanceCriteria, Transition, TransitionFunction

logger = logging.getLogger(__name__)


class PDANotRunnableError(ValueError):
    """The PDA is missing something it needs before it can be run."""


@dataclass
class Change:
    """
    What a mutator did to the PDA.

    Truthy when the edit was accepted. A rejected edit (duplicate transition,
    name collision, unknown state) leaves the PDA untouched.
    """

    ok: bool = True
    added_states: List[str] = field(default_factory=list)
    removed_states: List[str] = field(default_factory=list)
    added_transitions: List[Transition] = field(default_factory=list)
    removed_transitions: List[Transition] = field(default_factory=list)
    accepting_added: List[str] = field(default_factory=list)
    accepting_removed: List[str] = field(default_factory=list)
    # names of the scalar fields that were set: initial_state, initial_stack_symbol, ...
    updated: List[str] = field(default_factory=list)
    determinism_changed: bool = False

    def __bool__(self):
        return self.ok

    @property
    def changed(self) -> bool:
        return bool(
            self.added_states
            or self.removed_states
            or self.added_transitions
            or self.removed_transitions
            or self.accepting_added
            or self.accepting_removed
            or self.updated
            or self.determinism_changed
        )


def _rejected() -> Change:
    return Change(ok=False)


@dataclass
class PDA:
    """
    Nondeterministic pushdown automaton.

    states, transitions and accepting_states keep insertion order; the order
    of transitions decides the order in which computations are explored.
    Edit through the mutators so the determinism report stays current.
    """

    states: List[str] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)
    initial_state: Optional[str] = None
    accepting_states: List[str] = field(default_factory=list)
    initial_stack_symbol: Optional[str] = None
    acceptance_criteria: AcceptanceCriteria = AcceptanceCriteria.ACCEPTING_STATE

    _counter: int = field(default=-1, init=False, repr=False, compare=False)
    _report: DeterminismReport = field(
        default_factory=DeterminismReport, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        # duplicates collapse, first occurrence keeps its position
        self.states = list(dict.fromkeys(self.states))
        self.accepting_states = list(dict.fromkeys(self.accepting_states))
        self._check_stack_symbol(self.initial_stack_symbol)

        transitions = list(self.transitions)
        if len(set(transitions)) != len(transitions):
            raise ValueError("PDA transitions must be distinct")
        self.transitions = transitions

        for transition in transitions:
            self._create_transition_states(transition)
        if self.initial_state is not None and self.initial_state not in self.states:
            self.states.append(self.initial_state)
        for state in self.accepting_states:
            if state not in self.states:
                self.states.append(state)

        self._report = analyze_determinism(self.states, self.transitions)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_stack_symbol(symbol: Optional[str]):
        if symbol is not None and len(symbol) != 1:
            raise ValueError(
                f"Initial stack symbol must be a single character or None, got {symbol!r}"
            )

    def _create_transition_states(self, transition: Transition) -> List[str]:
        created = []
        for state in (transition.current_state, transition.new_state):
            if state not in self.states:
                self.states.append(state)
                created.append(state)
        return created

    def _commit(self, change: Change) -> Change:
        """Recompute determinism after an accepted edit."""
        was_deterministic = self._report.deterministic
        self._report = analyze_determinism(self.states, self.transitions)
        change.determinism_changed = was_deterministic != self._report.deterministic
        if change.determinism_changed:
            logger.debug(
                "PDA is now %s",
                "deterministic" if self._report.deterministic else "nondeterministic",
            )
        return change

    def has_state(self, state: str) -> bool:
        return state in self.states

    def has_transition(self, transition: Transition) -> bool:
        return transition in self.transitions

    # -------------------------------------------------------------------------
    # States
    # -------------------------------------------------------------------------

    def add_state(self, name: Optional[str] = None) -> Change:
        """
        Add a state. Without a name, the next unused q<n> is generated and,
        if the PDA has no initial state yet, becomes the initial state.
        """
        generated = name is None
        if generated:
            self._counter += 1
            while self.has_state(f"q{self._counter}"):
                self._counter += 1
            name = f"q{self._counter}"
        elif self.has_state(name):
            return _rejected()

        change = Change(added_states=[name])
        self.states.append(name)
        if generated and self.initial_state is None:
            self.initial_state = name
            change.updated.append("initial_state")
        return self._commit(change)

    def delete_state(self, state: str) -> Change:
        if not self.has_state(state):
            return _rejected()

        removed = [
            t for t in self.transitions if t.current_state == state or t.new_state == state
        ]
        self.transitions = [t for t in self.transitions if t not in removed]
        self.states.remove(state)

        change = Change(removed_states=[state], removed_transitions=removed)
        if state in self.accepting_states:
            self.accepting_states.remove(state)
            change.accepting_removed.append(state)
        if self.initial_state == state:
            self.initial_state = None
            change.updated.append("initial_state")
        return self._commit(change)

    def rename_state(self, state: str, new_name: str) -> Change:
        if state == new_name:
            return Change()
        if state not in self.states or new_name in self.states:
            return _rejected()

        self.states[self.states.index(state)] = new_name
        if state in self.accepting_states:
            self.accepting_states[self.accepting_states.index(state)] = new_name
        if self.initial_state == state:
            self.initial_state = new_name

        change = Change(removed_states=[state], added_states=[new_name])
        for i, transition in enumerate(self.transitions):
            if state not in (transition.current_state, transition.new_state):
                continue
            renamed = transition.with_states(
                new_name if transition.current_state == state else transition.current_state,
                new_name if transition.new_state == state else transition.new_state,
            )
            self.transitions[i] = renamed
            change.removed_transitions.append(transition)
            change.added_transitions.append(renamed)

        return self._commit(change)

    def set_initial_state(self, state: Optional[str]) -> Change:
        change = Change()
        if state is not None and not self.has_state(state):
            self.states.append(state)
            change.added_states.append(state)
        if state != self.initial_state:
            change.updated.append("initial_state")
        self.initial_state = state
        return self._commit(change)

    def toggle_accepting_state(self, state: str) -> Change:
        if not self.has_state(state):
            return _rejected()

        change = Change()
        if state in self.accepting_states:
            self.accepting_states.remove(state)
            change.accepting_removed.append(state)
        else:
            self.accepting_states.append(state)
            change.accepting_added.append(state)
        return self._commit(change)

    def set_initial_stack_symbol(self, symbol: Optional[str]) -> Change:
        if symbol == "":
            symbol = None
        self._check_stack_symbol(symbol)

        change = Change()
        if symbol != self.initial_stack_symbol:
            change.updated.append("initial_stack_symbol")
        self.initial_stack_symbol = symbol
        return self._commit(change)

    def set_acceptance_criteria(
        self, criteria: Union[AcceptanceCriteria, str]
    ) -> Change:
        if isinstance(criteria, str):
            criteria = AcceptanceCriteria.from_string(criteria)

        change = Change()
        if criteria != self.acceptance_criteria:
            change.updated.append("acceptance_criteria")
        self.acceptance_criteria = criteria
        return self._commit(change)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def add_transition(self, transition: Transition) -> Change:
        if self.has_transition(transition):
            return _rejected()

        created = self._create_transition_states(transition)
        self.transitions.append(transition)
        return self._commit(Change(added_states=created, added_transitions=[transition]))

    def delete_transition(self, transition: Transition) -> Change:
        if not self.has_transition(transition):
            return _rejected()

        self.transitions.remove(transition)
        return self._commit(Change(removed_transitions=[transition]))

    def edit_transition(self, old: Transition, new: Transition) -> Change:
        """Replace old by new, keeping old's position in the transition list."""
        if old == new:
            return Change()
        if old not in self.transitions or new in self.transitions:
            return _rejected()

        created = self._create_transition_states(new)
        self.transitions[self.transitions.index(old)] = new
        return self._commit(
            Change(
                added_states=created,
                removed_transitions=[old],
                added_transitions=[new],
            )
        )

    def clear_transitions(self) -> Change:
        removed = self.transitions
        self.transitions = []
        return self._commit(Change(removed_transitions=removed))

    def epsilon_transitions(self) -> List[Transition]:
        return [t for t in self.transitions if t.is_epsilon]

    def invalid_transitions(
        self, transition_function: TransitionFunction
    ) -> List[Transition]:
        return [t for t in self.transitions if not transition_function.allows(t)]

    # -------------------------------------------------------------------------
    # Determinism
    # -------------------------------------------------------------------------

    @property
    def determinism_report(self) -> DeterminismReport:
        return self._report

    def is_deterministic(self) -> bool:
        return self._report.deterministic

    def nondeterministic_transitions(self) -> FrozenSet[Transition]:
        return self._report.nondeterministic_transitions

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def check_runnable(
        self,
        transition_function: TransitionFunction = TransitionFunction.STRING_AND_STRING,
    ):
        if self.initial_state is None:
            raise PDANotRunnableError("The PDA needs an initial state in order to be run")

        if (
            self.acceptance_criteria != AcceptanceCriteria.EMPTY_STACK
            and not self.accepting_states
        ):
            raise PDANotRunnableError(
                f"Acceptance criteria {self.acceptance_criteria.value} requires at least "
                f"one accepting state"
            )

        invalid = self.invalid_transitions(transition_function)
        if invalid:
            listed = ", ".join(str(t) for t in invalid)
            raise PDANotRunnableError(
                f"Transitions not allowed by {transition_function.value}: {listed}"
            )

    def can_run(
        self,
        transition_function: TransitionFunction = TransitionFunction.STRING_AND_STRING,
    ) -> bool:
        try:
            self.check_runnable(transition_function)
        except PDANotRunnableError:
            return False
        return True

    def initial_configuration(self, input_string: str) -> Configuration:
        if self.initial_state is None:
            raise PDANotRunnableError("The PDA has no initial state")

        stack = () if self.initial_stack_symbol is None else (self.initial_stack_symbol,)
        return Configuration(
            state=self.initial_state,
            stack=stack,
            index=0,
            input_string=input_string,
        )

    def applicable_transitions(self, config: Configuration) -> List[Transition]:
        return configuration.applicable_transitions(config, self.transitions)

    def apply_transition(self, config: Configuration, transition: Transition) -> Configuration:
        return configuration.apply_transition(config, transition)

    def is_accepting_configuration(self, config: Configuration) -> bool:
        return configuration.is_accepting_configuration(
            config, self.acceptance_criteria, self.accepting_states
        )

    def find_accepting_computations(
        self,
        input_string: str,
        max_steps: int = DEFAULT_MAX_STEPS,
        max_total_steps: int = DEFAULT_MAX_TOTAL_STEPS,
    ) -> SearchResult:
        return find_accepting_computations(self, input_string, max_steps, max_total_steps)

    def random_computation(
        self, input_string: str, rng: Optional[random.Random] = None
    ) -> Computation:
        return random_computation(self, input_string, rng)

    def has_infinite_computation(self) -> bool:
        return has_infinite_computation(self)

    # -------------------------------------------------------------------------
    # Visualization
    # -------------------------------------------------------------------------

    def _get_state_id(self, state, state_to_id: dict) -> str:
        if state not in state_to_id:
            state_to_id[state] = f"s{len(state_to_id)}"
        return state_to_id[state]

    def to_graphviz(
        self,
        filename: str = "pda",
        view: bool = True,
        render: bool = True,
        highlight_nondeterminism: bool = True,
    ) -> Digraph:
        """Generate a Graphviz diagram; nondeterministic edges are drawn red."""
        dot = Digraph(
            name="PDA",
            format="png",
            graph_attr={
                "rankdir": "LR",
                "splines": "true",
                "nodesep": "0.8",
                "ranksep": "1.2",
                "label": "PDA" if self.is_deterministic() else "PDA (nondeterministic)",
                "labelloc": "t",
                "fontsize": "14",
                "fontname": "Arial",
                "bgcolor": "white",
                "pad": "0.5",
                "dpi": "300",
            },
            node_attr={
                "shape": "circle",
                "fontsize": "14",
                "fontname": "Arial",
                "width": "0.6",
                "height": "0.6",
                "fixedsize": "true",
                "style": "filled",
                "fillcolor": "lightblue",
                "color": "black",
                "penwidth": "2",
            },
            edge_attr={
                "fontsize": "12",
                "fontname": "Arial",
                "arrowsize": "0.8",
                "penwidth": "1.5",
                "color": "black",
            },
        )

        state_to_id: Dict[str, str] = {}

        for state in self.states:
            node_id = self._get_state_id(state, state_to_id)
            if state in self.accepting_states:
                dot.node(
                    node_id,
                    label=state,
                    shape="doublecircle",
                    fillcolor="lightgreen",
                    peripheries="2",
                )
            else:
                dot.node(node_id, label=state)

        if self.initial_state is not None:
            dot.node("__start__", shape="point", width="0.01", style="invis")
            dot.edge("__start__", self._get_state_id(self.initial_state, state_to_id), penwidth="2")

        nondeterministic = self.nondeterministic_transitions()
        edges: Dict[Tuple[str, str], List[Transition]] = defaultdict(list)
        for transition in self.transitions:
            edges[(transition.current_state, transition.new_state)].append(transition)

        for (src, tgt), transitions in edges.items():
            attrs = {"label": "\n".join(t.label() for t in transitions)}
            if highlight_nondeterminism and any(t in nondeterministic for t in transitions):
                attrs["color"] = "red"
                attrs["fontcolor"] = "red"
            if src == tgt:
                attrs["headport"] = "n"
                attrs["tailport"] = "n"
            dot.edge(
                self._get_state_id(src, state_to_id),
                self._get_state_id(tgt, state_to_id),
                **attrs,
            )

        if render:
            dot.render(filename, view=view, cleanup=True)
        return dot

    def __str__(self):
        transitions = ", ".join(str(t) for t in self.transitions)
        return (
            f"{{states=[{', '.join(self.states)}], transitions=[{transitions}], "
            f"initialState={self.initial_state}, "
            f"acceptingStates=[{', '.join(self.accepting_states)}], "
            f"initialStackSymbol={self.initial_stack_symbol}, "
            f"acceptanceCriteria={self.acceptance_criteria.name}}}"
        )
