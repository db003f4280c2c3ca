import logging
import os
import re
from typing_extensions import *

import samples
from pda import PDA
from transition import AcceptanceCriteria, Transition, is_epsilon_token

logger = logging.getLogger(__name__)

KEYS = (
    "type",
    "states",
    "start",
    "accept",
    "start_stack",
    "acceptance",
    "alphabet",
    "stack_alphabet",
)
# A section name on its own line, which must not be an empty key such as "accept:"
NAME_PATTERN = re.compile(
    r"^(?!(?:%s):)([A-Za-z]\w*):\s*$" % "|".join(KEYS), re.MULTILINE | re.IGNORECASE
)
KNOWN_TYPES = ("pda", "pushdown", "5")
# "#" after two or more spaces or a tab starts a comment; a single space keeps it,
# so "#" still works as a stack symbol in "q1, eps, # -> q2, eps"
INLINE_COMMENT = re.compile(r"(?:\s{2,}|\t)#.*$")


def _symbol(token: str) -> Optional[str]:
    return None if is_epsilon_token(token) else token.strip()


def _string(token: str) -> str:
    return "" if is_epsilon_token(token) else token.strip()


def _stack_symbol(token: str) -> Optional[str]:
    token = token.strip()
    if token.lower() in ("none", "null") or is_epsilon_token(token):
        return None
    return token


def parse_transition(line: str) -> Transition:
    """
    Parse one transition line.

    Arrow form:      q0, a, X -> q1, YZ
    Whitespace form: q0 a X q1 YZ
    """
    if "->" in line:
        left, _, right = line.partition("->")
        left_parts = [p.strip() for p in left.split(",")]
        right_parts = [p.strip() for p in right.split(",")]
        if len(left_parts) != 3 or len(right_parts) != 2:
            raise ValueError(f"Malformed transition: {line}")
        src, input_sym, pop = left_parts
        tgt, push = right_parts
    else:
        parts = line.split()
        if len(parts) != 5:
            raise ValueError(f"Malformed transition: {line}")
        src, input_sym, pop, tgt, push = parts

    if not src or not tgt:
        raise ValueError(f"Transition is missing a state: {line}")

    return Transition(src, _symbol(input_sym), _string(pop), _string(push), tgt)


def parse_pda(block: str) -> PDA:
    states: List[str] = []
    accepting: List[str] = []
    transitions: List[Transition] = []
    start_state = None
    start_stack = None
    criteria = AcceptanceCriteria.ACCEPTING_STATE

    for line in block.strip().split("\n"):
        line = INLINE_COMMENT.sub("", line).strip()

        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition(":")
        key = key.strip().lower()

        if sep and key in KEYS:
            value = value.strip()
            if key == "type":
                if value.lower() not in KNOWN_TYPES:
                    raise ValueError(f"Not a PDA definition (type: {value})")
            elif key == "states":
                states.extend(s for s in value.split() if s not in states)
            elif key == "start":
                start_state = value or None
            elif key == "accept":
                accepting.extend(s for s in value.split() if s not in accepting)
            elif key == "start_stack":
                start_stack = _stack_symbol(value)
            elif key == "acceptance":
                criteria = AcceptanceCriteria.from_string(value)
            # alphabets are implied by the transitions
            continue

        if sep and "->" not in line and re.fullmatch(r"[a-z_]+", key):
            raise ValueError(f"Unknown key: {key}")

        transition = parse_transition(line)
        if transition in transitions:
            logger.warning("Ignoring duplicate transition %s", transition)
            continue
        transitions.append(transition)

    return PDA(
        states=states,
        transitions=transitions,
        initial_state=start_state,
        accepting_states=accepting,
        initial_stack_symbol=start_stack,
        acceptance_criteria=criteria,
    )


def parse_blocks(content: str) -> List[PDA]:
    """Parse one or more PDA blocks separated by ---."""
    return [parse_pda(block) for block in content.split("---") if block.strip()]


def parse_sections(content: str, default_name: str) -> Dict[str, PDA]:
    """
    Parse named PDAs from text.

    Named sections (a NAME: line followed by a definition) are loaded under
    their name; otherwise the --- blocks are named after default_name.
    Sections that fail to parse are skipped with a warning.
    """
    automata: Dict[str, PDA] = {}

    if NAME_PATTERN.search(content):
        sections = NAME_PATTERN.split(content)

        for i in range(1, len(sections), 2):
            if i + 1 >= len(sections):
                continue

            name = sections[i].strip()
            definition = sections[i + 1].strip()

            if not definition:
                continue

            try:
                automata[name] = parse_pda(definition)
            except ValueError as e:
                logger.warning("Failed to load PDA '%s': %s", name, e)
    else:
        for idx, block in enumerate(b for b in content.split("---") if b.strip()):
            key = f"{default_name}{idx if idx > 0 else ''}"
            try:
                automata[key] = parse_pda(block)
            except ValueError as e:
                logger.warning("Failed to load PDA '%s': %s", key, e)

    return automata


def load_from_file(filename: str) -> Dict[str, PDA]:
    """Load named PDAs from a file; unnamed blocks are named after the file."""
    with open(filename, "r", encoding="utf-8") as f:
        content = f.read()

    base_name = os.path.basename(filename).rsplit(".", 1)[0]
    return parse_sections(content, base_name)


def load_samples() -> Dict[str, PDA]:
    """The bundled example PDAs, sample1 to sample5."""
    return parse_sections(samples.SAMPLES, "sample")
