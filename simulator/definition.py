from dataclasses import dataclass, field, replace
from enum import IntEnum


class DefinitionError(ValueError):
    """Raised when a machine definition cannot be loaded."""

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class Direction(IntEnum):
    L = -1
    S = 0
    R = 1

    @classmethod
    def parse(cls, value):
        if isinstance(value, Direction):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Invalid move direction: {value!r} (expected L, R or S)") from None


@dataclass(frozen=True)
class State:
    name: str
    is_accept: bool = False
    is_reject: bool = False

    @property
    def is_final(self):
        return self.is_accept or self.is_reject


@dataclass(frozen=True)
class TransitionRule:
    current_state: str
    read_symbol: str
    write_symbol: str
    move: Direction
    next_state: str

    def __post_init__(self):
        object.__setattr__(self, "move", Direction.parse(self.move))

    @property
    def key(self):
        return (self.current_state, self.read_symbol)

    def compact(self):
        """Short ``write move next`` form, e.g. ``1RB``."""
        return f"{self.write_symbol}{self.move.name}{self.next_state}"


@dataclass(frozen=True)
class MachineDefinition:
    states: tuple
    alphabet: frozenset
    tape_alphabet: frozenset
    initial_state: str
    blank_symbol: str = "_"
    transitions: tuple = ()
    name: str = ""
    description: str = field(default="", compare=False)

    def __post_init__(self):
        object.__setattr__(self, "states", tuple(self.states))
        object.__setattr__(self, "alphabet", frozenset(self.alphabet))
        object.__setattr__(self, "tape_alphabet", frozenset(self.tape_alphabet))
        object.__setattr__(self, "transitions", tuple(self.transitions))

    # === Queries ===
    @property
    def state_names(self):
        return [state.name for state in self.states]

    def state(self, name):
        for state in self.states:
            if state.name == name:
                return state
        return None

    def dead_rules(self):
        """Rules shadowed by an earlier rule with the same (state, symbol) key."""
        seen = set()
        dead = []
        for rule in self.transitions:
            if rule.key in seen:
                dead.append(rule)
            else:
                seen.add(rule.key)
        return dead

    # === Validation ===
    def problems(self):
        problems = []
        names = self.state_names

        if any(not name for name in names):
            problems.append("State names must not be empty")
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            problems.append(f"Duplicate state names: {', '.join(duplicates)}")
        if self.initial_state not in names:
            problems.append(f"Initial state {self.initial_state!r} is not a defined state")
        for state in self.states:
            if state.is_accept and state.is_reject:
                problems.append(f"State {state.name!r} cannot be both accept and reject")

        if not self.blank_symbol:
            problems.append("Blank symbol must not be empty")
        if any(not symbol for symbol in self.tape_alphabet):
            problems.append("Tape alphabet contains an empty symbol")
        if self.blank_symbol not in self.tape_alphabet:
            problems.append(f"Blank symbol {self.blank_symbol!r} is not in the tape alphabet")
        missing = sorted(self.alphabet - self.tape_alphabet)
        if missing:
            problems.append(f"Input symbols missing from the tape alphabet: {', '.join(missing)}")

        known = set(names)
        for index, rule in enumerate(self.transitions):
            where = f"Rule {index} ({rule.current_state}, {rule.read_symbol})"
            if rule.current_state not in known:
                problems.append(f"{where}: unknown current state {rule.current_state!r}")
            if rule.next_state not in known:
                problems.append(f"{where}: unknown next state {rule.next_state!r}")
            if rule.read_symbol not in self.tape_alphabet:
                problems.append(f"{where}: read symbol {rule.read_symbol!r} not in tape alphabet")
            if rule.write_symbol not in self.tape_alphabet:
                problems.append(f"{where}: write symbol {rule.write_symbol!r} not in tape alphabet")
        return problems

    def validate(self):
        problems = self.problems()
        if problems:
            raise DefinitionError(problems)
        return self

    # === Editing ===
    # Every edit returns a new, validated definition; the receiver is unchanged.
    def _edited(self, **changes):
        return replace(self, **changes).validate()

    def with_state(self, name, is_accept=False, is_reject=False):
        name = name.strip()
        if not name:
            raise DefinitionError("Please enter a state name")
        if self.state(name) is not None:
            raise DefinitionError(f"State {name!r} already exists")
        return self._edited(states=self.states + (State(name, is_accept, is_reject),))

    def without_state(self, name):
        if self.state(name) is None:
            raise DefinitionError(f"Unknown state {name!r}")
        if len(self.states) <= 1:
            raise DefinitionError("Machine must have at least one state")
        if name == self.initial_state:
            raise DefinitionError("Cannot delete the initial state")
        return self._edited(
            states=tuple(s for s in self.states if s.name != name),
            transitions=tuple(
                r for r in self.transitions
                if r.current_state != name and r.next_state != name
            ),
        )

    def renamed_state(self, old, new):
        new = new.strip()
        if self.state(old) is None:
            raise DefinitionError(f"Unknown state {old!r}")
        if not new:
            raise DefinitionError("Please enter a state name")
        if new != old and self.state(new) is not None:
            raise DefinitionError(f"State {new!r} already exists")

        def rename(value):
            return new if value == old else value

        return self._edited(
            states=tuple(replace(s, name=rename(s.name)) for s in self.states),
            transitions=tuple(
                replace(r, current_state=rename(r.current_state), next_state=rename(r.next_state))
                for r in self.transitions
            ),
            initial_state=rename(self.initial_state),
        )

    def toggled_accept(self, name):
        return self._toggled(name, "accept")

    def toggled_reject(self, name):
        return self._toggled(name, "reject")

    def _toggled(self, name, kind):
        state = self.state(name)
        if state is None:
            raise DefinitionError(f"Unknown state {name!r}")
        if kind == "accept":
            updated = replace(state, is_accept=not state.is_accept, is_reject=False)
        else:
            updated = replace(state, is_reject=not state.is_reject, is_accept=False)
        return self._edited(states=tuple(updated if s.name == name else s for s in self.states))

    def with_initial_state(self, name):
        if self.state(name) is None:
            raise DefinitionError(f"Unknown state {name!r}")
        return self._edited(initial_state=name)

    def with_transition(self, rule, index=None):
        transitions = list(self.transitions)
        if index is None:
            transitions.append(rule)
        else:
            if not 0 <= index < len(transitions):
                raise DefinitionError(f"No transition at index {index}")
            transitions[index] = rule
        return self._edited(transitions=tuple(transitions))

    def without_transition(self, index):
        if not 0 <= index < len(self.transitions):
            raise DefinitionError(f"No transition at index {index}")
        return self._edited(
            transitions=self.transitions[:index] + self.transitions[index + 1:]
        )
