from dataclasses import dataclass

from simulator.definition import MachineDefinition, State, TransitionRule


@dataclass(frozen=True)
class Example:
    id: str
    name: str
    description: str
    category: str
    definition: MachineDefinition
    sample_inputs: tuple


def _rules(table):
    return tuple(TransitionRule(*row) for row in table)


BINARY_INCREMENT = MachineDefinition(
    name="Binary Increment",
    description="Adds 1 to a binary number",
    states=(State("q0"), State("q1"), State("accept", is_accept=True)),
    alphabet={"0", "1"},
    tape_alphabet={"0", "1", "_"},
    initial_state="q0",
    blank_symbol="_",
    transitions=_rules([
        # scan right to the end of the number
        ("q0", "0", "0", "R", "q0"),
        ("q0", "1", "1", "R", "q0"),
        ("q0", "_", "_", "L", "q1"),
        # propagate the carry leftwards
        ("q1", "0", "1", "S", "accept"),
        ("q1", "1", "0", "L", "q1"),
        ("q1", "_", "1", "S", "accept"),
    ]),
)

# Erases the outermost symbols pairwise; q1/q3 remember a 0, q2/q4 a 1.
PALINDROME_CHECKER = MachineDefinition(
    name="Palindrome Checker",
    description="Accepts palindromic binary strings",
    states=(
        State("q0"), State("q1"), State("q2"), State("q3"), State("q4"), State("q5"),
        State("accept", is_accept=True),
        State("reject", is_reject=True),
    ),
    alphabet={"0", "1"},
    tape_alphabet={"0", "1", "_"},
    initial_state="q0",
    blank_symbol="_",
    transitions=_rules([
        ("q0", "0", "_", "R", "q1"),
        ("q0", "1", "_", "R", "q2"),
        ("q0", "_", "_", "S", "accept"),

        ("q1", "0", "0", "R", "q1"),
        ("q1", "1", "1", "R", "q1"),
        ("q1", "_", "_", "L", "q3"),

        ("q2", "0", "0", "R", "q2"),
        ("q2", "1", "1", "R", "q2"),
        ("q2", "_", "_", "L", "q4"),

        ("q3", "0", "_", "L", "q5"),
        ("q3", "1", "1", "S", "reject"),
        ("q3", "_", "_", "S", "accept"),

        ("q4", "1", "_", "L", "q5"),
        ("q4", "0", "0", "S", "reject"),
        ("q4", "_", "_", "S", "accept"),

        ("q5", "0", "0", "L", "q5"),
        ("q5", "1", "1", "L", "q5"),
        ("q5", "_", "_", "R", "q0"),
    ]),
)

UNARY_ADDITION = MachineDefinition(
    name="Unary Addition",
    description="Adds two unary numbers (1+11 = 111)",
    states=(State("q0"), State("q1"), State("q2"), State("accept", is_accept=True)),
    alphabet={"1", "+"},
    tape_alphabet={"1", "+", "_"},
    initial_state="q0",
    blank_symbol="_",
    transitions=_rules([
        ("q0", "1", "1", "R", "q0"),
        ("q0", "+", "1", "R", "q1"),
        ("q1", "1", "1", "R", "q1"),
        ("q1", "_", "_", "L", "q2"),
        ("q2", "1", "_", "S", "accept"),
    ]),
)

EXAMPLES = (
    Example(
        id="binary-increment",
        name="Binary Increment",
        description="Increments a binary number by 1",
        category="Arithmetic",
        definition=BINARY_INCREMENT,
        sample_inputs=("101", "110", "111", "1010"),
    ),
    Example(
        id="palindrome-checker",
        name="Palindrome Checker",
        description="Checks if a binary string is a palindrome",
        category="String Processing",
        definition=PALINDROME_CHECKER,
        sample_inputs=("101", "1001", "11011", "0110", "10"),
    ),
    Example(
        id="unary-addition",
        name="Unary Addition",
        description="Adds two unary numbers separated by +",
        category="Arithmetic",
        definition=UNARY_ADDITION,
        sample_inputs=("1+1", "11+111", "1111+11"),
    ),
)


def get_example(example_id):
    for example in EXAMPLES:
        if example.id == example_id:
            return example
    known = ", ".join(example.id for example in EXAMPLES)
    raise KeyError(f"Unknown example {example_id!r} (known: {known})")
