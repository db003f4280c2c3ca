import logging
from typing_extensions import *

from configuration import format_computation
from io_utils import load_from_file, load_samples, parse_transition
from pda import PDA, PDANotRunnableError
from search import DEFAULT_MAX_STEPS, DEFAULT_MAX_TOTAL_STEPS, SearchLimit, Stepper
from transition import AcceptanceCriteria, TransitionFunction, is_epsilon_token

HELP = """
Commands:
  LOADING:
    load <file>                        - Load PDAs from file
    samples                            - Load the example PDAs sample1 to sample5
    list                               - List all loaded PDAs
    new <name>                         - Create an empty PDA

  EDITING:
    add_state <name> [state]           - Add a state (auto-named if omitted)
    delete_state <name> <state>        - Delete a state and its transitions
    rename_state <name> <old> <new>    - Rename a state
    add_transition <name> <t>          - Add a transition, e.g. q0, a, eps -> q1, A
    delete_transition <name> <t>       - Delete a transition
    edit_transition <name> <t> | <t2>  - Replace transition t by t2 in place
    initial <name> <state>             - Set the initial state
    accept <name> <state>              - Toggle whether a state is accepting
    stack_symbol <name> <sym|none>     - Set the initial stack symbol
    criteria <name> <criteria>         - accepting_state | empty_stack | both

  INSPECTING:
    show <name>                        - Show PDA info
    deterministic <name>               - Show nondeterministic transitions
    graph <name>                       - Visualize PDA (nondeterminism in red)

  RUNNING:
    run <name> [word]                  - Find accepting computations
    walk <name> [word]                 - Follow one random computation
    step <name> [word]                 - Step through computations one transition at a time

  SETTINGS:
    set max_steps <n>                  - Computation length limit
    set max_total_steps <n>            - Total step limit per run
    set transition_function <f>        - symbol_and_symbol | symbol_and_string | string_and_string
    set verbose <on|off>               - Debug logging

  GENERAL:
    delete <name>                      - Delete PDA
    clear                              - Clear all
    exit                               - Exit
"""


class Session:
    """Settings that live for one terminal session."""

    def __init__(self):
        self.max_steps: int = DEFAULT_MAX_STEPS
        self.max_total_steps: int = DEFAULT_MAX_TOTAL_STEPS
        self.transition_function = TransitionFunction.STRING_AND_STRING

    def set(self, key: str, value: str):
        if key == "max_steps":
            self.max_steps = _positive_int(value)
        elif key == "max_total_steps":
            self.max_total_steps = _positive_int(value)
        elif key == "transition_function":
            self.transition_function = TransitionFunction.from_string(value)
        elif key == "verbose":
            level = logging.DEBUG if value.lower() in ("on", "true", "1") else logging.WARNING
            logging.getLogger().setLevel(level)
        else:
            raise ValueError(f"Unknown setting: {key}")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise ValueError(f"Expected a positive number, got {value}")
    return number


def _word(parts: List[str], position: int) -> str:
    if len(parts) <= position or is_epsilon_token(parts[position]):
        return ""
    return parts[position]


def show_pda(name: str, pda: PDA):
    print(f"\n{name}:")
    print(f"  States: {', '.join(pda.states) or '-'}")
    print(f"  Initial: {pda.initial_state}")
    print(f"  Accepting: {', '.join(pda.accepting_states) or '-'}")
    print(f"  Initial stack symbol: {pda.initial_stack_symbol}")
    print(f"  Acceptance: {pda.acceptance_criteria.value}")
    print(f"  Deterministic: {'yes' if pda.is_deterministic() else 'no'}")
    print(f"  Transitions ({len(pda.transitions)}):")
    nondeterministic = pda.nondeterministic_transitions()
    for transition in pda.transitions:
        marker = " *" if transition in nondeterministic else ""
        print(f"    {transition}{marker}")
    print()


def run_pda(
    pda: PDA, word: str, session: Session, ask: Optional[Callable[[str], str]] = None
):
    """
    Search for accepting computations, offering to double the computation
    length limit while nothing is found within it.
    """
    ask = ask or input
    pda.check_runnable(session.transition_function)

    max_steps = session.max_steps
    while True:
        result = pda.find_accepting_computations(word, max_steps, session.max_total_steps)

        if result.rejected:
            print("REJECTED: the input has no accepting computations.")
            return result

        if result.accepted:
            print(f"ACCEPTED: {len(result)} accepting computation(s)")
            for i, computation in enumerate(result, start=1):
                print(f"  {i}. [{len(computation)}] {format_computation(computation)}")
            if result.limit == SearchLimit.MAX_TOTAL_STEPS:
                print(f"  (stopped after {result.total_steps} steps, list may be incomplete)")
            return result

        if result.limit == SearchLimit.MAX_TOTAL_STEPS:
            print(
                f"No accepting computations found within {session.max_total_steps} total steps."
            )
        else:
            print(f"No accepting computations of length {max_steps} or less.")

        answer = ask(f"Try again with a computation length limit of {2 * max_steps}? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            return result
        max_steps *= 2


def walk_pda(pda: PDA, word: str, session: Session):
    pda.check_runnable(session.transition_function)
    computation = pda.random_computation(word)
    verdict = "accepting" if pda.is_accepting_configuration(computation[-1]) else "not accepting"
    print(f"[{len(computation)}, {verdict}] {format_computation(computation)}")
    return computation


STEP_HELP = """
Step commands:
  f, forward                           - Apply every applicable transition to the active computation
  b, back                              - Undo the last step of the active computation
  s <n>, select <n>                    - Make computation n active
  r <n>, remove <n>                    - Remove computation n
  l, list                              - Show all computations
  q, quit                              - Leave step mode
"""


def show_computations(stepper: Stepper):
    if not stepper.computations:
        print("  No computations left")
    for i, computation in enumerate(stepper.computations):
        marker = ">" if i == stepper.active else " "
        if stepper.is_accepting(i):
            status = " (accepting)"
        elif stepper.is_stuck(i):
            status = " (stuck)"
        else:
            status = ""
        print(f" {marker} {i + 1}. {format_computation(computation)}{status}")


def step_pda(
    pda: PDA, word: str, session: Session, ask: Optional[Callable[[str], str]] = None
) -> Stepper:
    """Step-by-step mode; returns the stepper when the user leaves it."""
    ask = ask or input
    pda.check_runnable(session.transition_function)
    stepper = Stepper(pda, word)

    print(STEP_HELP)
    show_computations(stepper)

    while True:
        parts = ask("step> ").split()
        if not parts:
            continue
        cmd = parts[0].lower()

        if cmd in ("q", "quit", "exit"):
            return stepper

        try:
            if cmd in ("f", "forward"):
                applied = stepper.step_forward()
                if not applied:
                    print("No applicable transitions")
                elif len(applied) > 1:
                    print(f"Split into {len(applied)} computations")

            elif cmd in ("b", "back"):
                if not stepper.step_back():
                    print("Already at the initial configuration")

            elif cmd in ("s", "select", "r", "remove"):
                if len(parts) < 2:
                    print(f"Usage: {cmd} <n>")
                    continue
                index = int(parts[1]) - 1
                if cmd in ("s", "select"):
                    stepper.select(index)
                else:
                    stepper.remove(index)

            elif cmd in ("l", "list"):
                pass

            elif cmd == "help":
                print(STEP_HELP)
                continue

            else:
                print(f"Unknown command: {cmd}")
                continue

        except ValueError as e:
            print(f"Error: {e}")
            continue

        show_computations(stepper)


def main():
    """Simple interactive terminal for building and running pushdown automata."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    automata: Dict[str, PDA] = {}
    session = Session()

    print("PDA Terminal - Type 'help' for commands\n")

    while True:
        try:
            command = input("> ").strip()
            if not command:
                continue

            parts = command.split()
            cmd = parts[0].lower()

            # Exit
            if cmd in ["exit", "quit"]:
                break

            # Help
            elif cmd == "help":
                print(HELP)

            # Load
            elif cmd == "load":
                if len(parts) < 2:
                    print("Usage: load <filename>")
                    continue
                loaded = load_from_file(parts[1])
                automata.update(loaded)
                if loaded:
                    print(f"Loaded {len(loaded)} PDAs: {', '.join(loaded.keys())}")
                else:
                    print("No PDAs loaded")

            # Samples
            elif cmd == "samples":
                loaded = load_samples()
                automata.update(loaded)
                print(f"Loaded {len(loaded)} PDAs: {', '.join(loaded.keys())}")

            # List
            elif cmd == "list":
                if automata:
                    for name, pda in sorted(automata.items()):
                        kind = "DPDA" if pda.is_deterministic() else "PDA"
                        print(
                            f"  {name}: {kind}, {len(pda.states)} states, "
                            f"{len(pda.transitions)} transitions"
                        )
                else:
                    print("Nothing loaded")

            # New
            elif cmd == "new":
                if len(parts) < 2:
                    print("Usage: new <name>")
                elif parts[1] in automata:
                    print(f"PDA already exists: {parts[1]}")
                else:
                    automata[parts[1]] = PDA()
                    print(f"Created: {parts[1]}")

            # Settings
            elif cmd == "set":
                if len(parts) < 3:
                    print("Usage: set <setting> <value>")
                else:
                    session.set(parts[1].lower(), parts[2])
                    print(f"{parts[1]} = {parts[2]}")

            # Delete PDA
            elif cmd == "delete":
                if len(parts) < 2:
                    print("Usage: delete <name>")
                elif parts[1] in automata:
                    del automata[parts[1]]
                    print(f"Deleted: {parts[1]}")
                else:
                    print(f"Not found: {parts[1]}")

            # Clear all
            elif cmd == "clear":
                automata.clear()
                print("Cleared all")

            # Everything below operates on a named PDA
            elif len(parts) < 2:
                print(f"Usage: {cmd} <name> ...")

            elif parts[1] not in automata:
                print(f"PDA not found: {parts[1]}")

            else:
                handle_pda_command(cmd, parts, command, automata[parts[1]], session)

        except KeyboardInterrupt:
            print("\nUse 'exit' to quit")
        except EOFError:
            break
        except Exception as e:
            print(f"Error: {e}")

    print("Goodbye!")


def handle_pda_command(cmd: str, parts: List[str], command: str, pda: PDA, session: Session):
    name = parts[1]

    if cmd == "show":
        show_pda(name, pda)

    elif cmd == "graph":
        pda.to_graphviz(filename=name, view=True)
        print(f"Created: {name}.png")

    elif cmd == "deterministic":
        report = pda.determinism_report
        if report.deterministic:
            print("Deterministic")
        else:
            print("Nondeterministic transitions:")
            for transition in pda.transitions:
                if transition in report.nondeterministic_transitions:
                    print(f"  {transition}")

    elif cmd in ("run", "walk", "step"):
        try:
            if cmd == "run":
                run_pda(pda, _word(parts, 2), session)
            elif cmd == "walk":
                walk_pda(pda, _word(parts, 2), session)
            else:
                step_pda(pda, _word(parts, 2), session)
        except PDANotRunnableError as e:
            print(f"Cannot run {name}: {e}")

    elif cmd == "add_state":
        state = parts[2] if len(parts) > 2 else None
        change = pda.add_state(state)
        print(f"Added state: {change.added_states[0]}" if change else f"State exists: {state}")

    elif cmd == "delete_state":
        if len(parts) < 3:
            print("Usage: delete_state <name> <state>")
        else:
            change = pda.delete_state(parts[2])
            if change:
                print(
                    f"Deleted state {parts[2]} and {len(change.removed_transitions)} transition(s)"
                )
            else:
                print(f"State not found: {parts[2]}")
            _print_determinism(pda, change)

    elif cmd == "rename_state":
        if len(parts) < 4:
            print("Usage: rename_state <name> <old> <new>")
        else:
            change = pda.rename_state(parts[2], parts[3])
            print(f"Renamed {parts[2]} to {parts[3]}" if change else "Rename failed")

    elif cmd in ("add_transition", "delete_transition"):
        text = command.split(None, 2)[2] if len(parts) > 2 else ""
        if not text:
            print(f"Usage: {cmd} <name> <src>, <input>, <pop> -> <tgt>, <push>")
            return
        transition = parse_transition(text)
        if cmd == "add_transition":
            change = pda.add_transition(transition)
            print(f"Added: {transition}" if change else f"Transition exists: {transition}")
        else:
            change = pda.delete_transition(transition)
            print(f"Deleted: {transition}" if change else f"Transition not found: {transition}")
        _print_determinism(pda, change)

    elif cmd == "edit_transition":
        text = command.split(None, 2)[2] if len(parts) > 2 else ""
        old_text, bar, new_text = text.partition("|")
        if not bar or not old_text.strip() or not new_text.strip():
            print(f"Usage: {cmd} <name> <old transition> | <new transition>")
            return
        old, new = parse_transition(old_text.strip()), parse_transition(new_text.strip())
        change = pda.edit_transition(old, new)
        if change:
            print(f"Replaced {old} with {new}")
        elif not pda.has_transition(old):
            print(f"Transition not found: {old}")
        else:
            print(f"Transition exists: {new}")
        _print_determinism(pda, change)

    elif cmd == "initial":
        if len(parts) < 3:
            print("Usage: initial <name> <state>")
        else:
            pda.set_initial_state(parts[2])
            print(f"Initial state: {parts[2]}")

    elif cmd == "accept":
        if len(parts) < 3:
            print("Usage: accept <name> <state>")
        elif pda.toggle_accepting_state(parts[2]):
            accepting = parts[2] in pda.accepting_states
            print(f"{parts[2]} is {'now' if accepting else 'no longer'} accepting")
        else:
            print(f"State not found: {parts[2]}")

    elif cmd == "stack_symbol":
        if len(parts) < 3:
            print("Usage: stack_symbol <name> <symbol|none>")
        else:
            symbol = None if parts[2].lower() == "none" else parts[2]
            pda.set_initial_stack_symbol(symbol)
            print(f"Initial stack symbol: {pda.initial_stack_symbol}")

    elif cmd == "criteria":
        if len(parts) < 3:
            print("Usage: criteria <name> <accepting_state|empty_stack|both>")
        else:
            pda.set_acceptance_criteria(AcceptanceCriteria.from_string(parts[2]))
            print(f"Acceptance: {pda.acceptance_criteria.value}")

    else:
        print(f"Unknown command: {cmd}")


def _print_determinism(pda: PDA, change):
    if change.determinism_changed:
        print("PDA is now " + ("deterministic" if pda.is_deterministic() else "nondeterministic"))
