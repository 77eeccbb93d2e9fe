import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from simulator.definition import Direction, TransitionRule
from simulator.resolver import TransitionResolver
from simulator.scheduler import Scheduler
from simulator.tape import Tape

logger = logging.getLogger(__name__)

DEFAULT_SPEED_MS = 500


class Phase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    HALTED = "halted"


class Verdict(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class InvalidOperation(RuntimeError):
    """A command that is not allowed in the engine's current phase."""


@dataclass(frozen=True)
class ExecutionSnapshot:
    current_state: Optional[str]
    head_position: int
    steps: int
    phase: Phase
    verdict: Optional[Verdict]
    tape: Tape
    speed_ms: int

    @property
    def halted(self):
        return self.phase is Phase.HALTED

    @property
    def accepted(self):
        return self.verdict is Verdict.ACCEPTED


@dataclass(frozen=True)
class StepEvent:
    steps: int
    position: int
    read_symbol: str
    rule: Optional[TransitionRule]
    previous_state: str
    current_state: str
    head_position: int

    @property
    def wrote(self):
        return self.rule is not None and self.rule.write_symbol != self.read_symbol

    @property
    def moved(self):
        return self.rule is not None and self.rule.move is not Direction.S

    @property
    def state_changed(self):
        return self.previous_state != self.current_state


@dataclass(frozen=True)
class HaltEvent:
    verdict: Verdict
    state: str
    steps: int
    head_position: int


@dataclass(frozen=True)
class PhaseEvent:
    previous: Phase
    phase: Phase


class ExecutionEngine:
    """Runs one machine definition on one input.

    ``step()`` is for manual stepping; while RUNNING only the scheduler may
    advance the machine. Reaching a state with no applicable rule is a normal
    halt, not an error.
    """

    def __init__(self, definition=None, input_text="", speed_ms=DEFAULT_SPEED_MS):
        self._listeners = []
        self.scheduler = Scheduler(
            self._scheduled_step,
            lambda: self.phase is Phase.HALTED,
            on_error=self._scheduled_step_failed,
        )
        self.speed_ms = speed_ms
        self.definition = None
        self._resolver = None
        self.input_text = input_text
        self._init_state()
        if definition is not None:
            self.load_definition(definition)

    # === Events ===
    def subscribe(self, listener):
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener):
        self._listeners.remove(listener)

    def _emit(self, event):
        for listener in list(self._listeners):
            listener(event)

    # === Loading ===
    def _init_state(self):
        blank = self.definition.blank_symbol if self.definition else "_"
        self._tape = Tape.from_input(self.input_text, blank)
        self.head_position = 0
        self.current_state = self.definition.initial_state if self.definition else None
        self.steps = 0
        self.phase = Phase.IDLE
        self.verdict = None

    def _require_not_running(self, action):
        if self.phase is Phase.RUNNING:
            raise InvalidOperation(f"Cannot {action} while the machine is running; pause it first")

    def load_definition(self, definition):
        self._require_not_running("load a definition")
        definition.validate()
        self._resolver = TransitionResolver(definition)
        self.definition = definition
        logger.info("Loaded machine %r with %d rules", definition.name, len(self._resolver))
        self.reset()

    def load_input(self, text):
        self._require_not_running("load an input")
        self.input_text = text
        self.reset()

    # === Controls ===
    def reset(self):
        self.scheduler.stop()
        previous = self.phase
        self._init_state()
        self._emit(PhaseEvent(previous, Phase.IDLE))

    def play(self):
        if self.definition is None:
            raise InvalidOperation("No machine definition loaded")
        if self.phase is Phase.HALTED:
            return False
        if self.phase is Phase.RUNNING and self.scheduler.active:
            return True

        previous = self.phase
        self.phase = Phase.RUNNING
        try:
            self.scheduler.start(self.speed_ms)
        except RuntimeError:
            self.phase = previous
            raise
        self._emit(PhaseEvent(previous, Phase.RUNNING))
        return True

    def pause(self):
        if self.phase is not Phase.RUNNING:
            return False
        self.scheduler.stop()
        self.phase = Phase.PAUSED
        self._emit(PhaseEvent(Phase.RUNNING, Phase.PAUSED))
        return True

    def set_speed(self, speed_ms):
        if speed_ms <= 0:
            raise ValueError(f"Speed must be a positive number of milliseconds, got {speed_ms}")
        self.speed_ms = speed_ms
        if self.scheduler.active:
            self.scheduler.reschedule(speed_ms)

    def step(self):
        self._require_not_running("step manually")
        self._advance()
        return self.snapshot()

    def run_to_halt(self, max_steps):
        """Step synchronously until halted or ``max_steps`` more steps ran."""
        self._require_not_running("run to halt")
        for _ in range(max_steps):
            if self.phase is Phase.HALTED:
                break
            self._advance()
        return self.snapshot()

    def edit_cell(self, position, symbol=None):
        self._require_not_running("edit the tape")
        self._tape.write(position, symbol or self._tape.blank)

    def _scheduled_step(self):
        if self.phase is Phase.RUNNING:
            self._advance()

    def _scheduled_step_failed(self):
        # a listener raised under the scheduler; hand control back to the caller
        if self.phase is Phase.RUNNING:
            self.phase = Phase.PAUSED

    # === Step ===
    def _advance(self):
        if self.definition is None:
            raise InvalidOperation("No machine definition loaded")
        if self.phase is Phase.HALTED:
            return

        position = self.head_position
        previous_state = self.current_state
        symbol = self._tape.read(position)
        rule = self._resolver.lookup(previous_state, symbol)

        if rule is None:
            self.steps += 1
            self._emit(StepEvent(self.steps, position, symbol, None, previous_state, previous_state, position))
            state = self._resolver.state(previous_state)
            accepted = state is not None and state.is_accept
            self._halt(Verdict.ACCEPTED if accepted else Verdict.REJECTED)
            return

        self._tape.write(position, rule.write_symbol)
        self.head_position += int(rule.move)
        self.current_state = rule.next_state
        self.steps += 1
        self._emit(StepEvent(
            self.steps, position, symbol, rule, previous_state, self.current_state, self.head_position,
        ))

        state = self._resolver.state(self.current_state)
        if state.is_accept:
            self._halt(Verdict.ACCEPTED)
        elif state.is_reject:
            self._halt(Verdict.REJECTED)

    def _halt(self, verdict):
        previous = self.phase
        self.phase = Phase.HALTED
        self.verdict = verdict
        logger.info("Halted in %r after %d steps: %s", self.current_state, self.steps, verdict.value)
        self._emit(PhaseEvent(previous, Phase.HALTED))
        self._emit(HaltEvent(verdict, self.current_state, self.steps, self.head_position))

    # === Queries ===
    def read_cell(self, position):
        return self._tape.read(position)

    def tape_window(self, start, stop):
        return self._tape.window(start, stop)

    @property
    def tape(self):
        return self._tape.snapshot()

    def snapshot(self):
        return ExecutionSnapshot(
            current_state=self.current_state,
            head_position=self.head_position,
            steps=self.steps,
            phase=self.phase,
            verdict=self.verdict,
            tape=self._tape.snapshot(),
            speed_ms=self.speed_ms,
        )
