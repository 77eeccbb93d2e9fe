import json
import os
from datetime import datetime, timezone

from simulator.engine import HaltEvent, StepEvent

class JSONLogger:
    def __init__(self, output_directory="logs/", log_file_prefix="turing_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(self.output_directory, exist_ok=True)
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def _get_log_filename(self):
        filename = f"{self.log_file_prefix}{self.today}.jsonl"  # JSON lines format
        return os.path.join(self.output_directory, filename)

    def _log_to_file(self, filename, entries):
        path = os.path.join(self.output_directory, filename)
        with open(path, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")

    def log(self, entry: dict):
        """Log a single entry to the main run log."""
        self.log_batch([entry])

    def log_batch(self, entries: list):
        """Log a batch of entries to the main run log."""
        self._rotate_if_stale()
        with open(self.current_log, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")

    def rotate(self):
        """Force start a new main log file for the current UTC date."""
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def _rotate_if_stale(self):
        if datetime.now(timezone.utc).strftime("%Y-%m-%d") != self.today:
            self.rotate()

    def log_halting(self, entries: list):
        """Log final results of halted runs."""
        self._rotate_if_stale()
        filename = f"halting_{self.today}.jsonl"
        self._log_to_file(filename, entries)

    def attach(self, engine, log_steps=False):
        """Subscribe to an engine; returns the listener for ``unsubscribe``."""
        def listener(event):
            machine = engine.definition.name if engine.definition else ""
            if isinstance(event, StepEvent) and log_steps:
                self.log(step_entry(machine, event))
            elif isinstance(event, HaltEvent):
                entry = halt_entry(machine, engine.input_text, event, engine.tape.content())
                self.log(entry)
                self.log_halting([entry])

        return engine.subscribe(listener)


def step_entry(machine, event):
    rule = event.rule
    return {
        "event": "step",
        "machine": machine,
        "steps": event.steps,
        "position": event.position,
        "read": event.read_symbol,
        "write": rule.write_symbol if rule else None,
        "move": rule.move.name if rule else None,
        "from_state": event.previous_state,
        "to_state": event.current_state,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def halt_entry(machine, input_text, event, tape_content):
    return {
        "event": "halt",
        "machine": machine,
        "input": input_text,
        "verdict": event.verdict.value,
        "state": event.state,
        "steps": event.steps,
        "head_position": event.head_position,
        "tape": tape_content,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
