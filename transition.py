from dataclasses import dataclass
from enum import Enum
from typing_extensions import *


EPSILON = "ε"
EPSILON_TOKENS = ("eps", "epsilon", "ε", "")


def is_epsilon_token(token: str) -> bool:
    return token.strip().lower() in EPSILON_TOKENS


class AcceptanceCriteria(Enum):
    ACCEPTING_STATE = "accepting_state"
    EMPTY_STACK = "empty_stack"
    BOTH = "both"

    @classmethod
    def from_string(cls, text: str) -> "AcceptanceCriteria":
        name = text.strip().lower().replace("-", "_").replace(" ", "_")
        aliases = {
            "accepting_state": cls.ACCEPTING_STATE,
            "accepting": cls.ACCEPTING_STATE,
            "final_state": cls.ACCEPTING_STATE,
            "final": cls.ACCEPTING_STATE,
            "empty_stack": cls.EMPTY_STACK,
            "empty": cls.EMPTY_STACK,
            "both": cls.BOTH,
        }
        if name not in aliases:
            raise ValueError(f"Unknown acceptance criteria: {text}")
        return aliases[name]


class TransitionFunction(Enum):
    """
    Shape of transitions the user allows.

    SYMBOL_AND_SYMBOL: pop at most one symbol, push at most one symbol
    SYMBOL_AND_STRING: pop at most one symbol, push any string
    STRING_AND_STRING: pop and push any string
    """

    SYMBOL_AND_SYMBOL = "symbol_and_symbol"
    SYMBOL_AND_STRING = "symbol_and_string"
    STRING_AND_STRING = "string_and_string"

    def allows(self, transition: "Transition") -> bool:
        if self == TransitionFunction.SYMBOL_AND_SYMBOL:
            return len(transition.pop_string) <= 1 and len(transition.push_string) <= 1
        if self == TransitionFunction.SYMBOL_AND_STRING:
            return len(transition.pop_string) <= 1
        return True

    @classmethod
    def from_string(cls, text: str) -> "TransitionFunction":
        name = text.strip().lower().replace("-", "_")
        for member in cls:
            if member.value == name:
                return member
        raise ValueError(f"Unknown transition function: {text}")


@dataclass(frozen=True)
class Transition:
    """
    (current_state, input_symbol, pop_string) -> (push_string, new_state)

    input_symbol is None for an epsilon transition. The pop string is read
    top of stack first; the push string ends up with its first symbol on top.
    """

    current_state: str
    input_symbol: Optional[str]
    pop_string: str
    push_string: str
    new_state: str

    def __post_init__(self):
        if self.input_symbol == "":
            object.__setattr__(self, "input_symbol", None)
        if self.input_symbol is not None and len(self.input_symbol) != 1:
            raise ValueError(
                f"Input symbol must be a single character or epsilon, got {self.input_symbol!r}"
            )
        if self.pop_string is None:
            object.__setattr__(self, "pop_string", "")
        if self.push_string is None:
            object.__setattr__(self, "push_string", "")

    @property
    def is_epsilon(self) -> bool:
        return self.input_symbol is None

    def with_states(self, current_state: str, new_state: str) -> "Transition":
        return Transition(
            current_state,
            self.input_symbol,
            self.pop_string,
            self.push_string,
            new_state,
        )

    def label(self) -> str:
        inp = EPSILON if self.input_symbol is None else self.input_symbol
        pop = self.pop_string or EPSILON
        push = self.push_string or EPSILON
        return f"{inp}, {pop} → {push}"

    def __str__(self):
        inp = EPSILON if self.input_symbol is None else self.input_symbol
        pop = self.pop_string or EPSILON
        push = self.push_string or EPSILON
        return f"({self.current_state}, {inp}, {pop}) -> ({push}, {self.new_state})"
