# tools/run_machine.py

import argparse
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table

from config.config_loader import DEFAULT_CONFIG_PATH, load_config
from logger.logger import JSONLogger
from simulator.definition import DefinitionError
from simulator.engine import ExecutionEngine, StepEvent
from simulator.examples import EXAMPLES, get_example

console = Console()


def render_tape(engine, window=7):
    """Two text lines: the cells around the head and a ``^`` under the head."""
    head = engine.head_position
    start = head - window
    symbols = engine.tape_window(start, head + window + 1)
    width = max(len(symbol) for symbol in symbols)

    tape_str = " ".join(symbol.center(width) for symbol in symbols)
    head_str = " ".join(("^" if start + i == head else " ").center(width) for i in range(len(symbols)))
    return tape_str, head_str.rstrip()


def trace_listener(engine, window):
    def listener(event):
        if not isinstance(event, StepEvent):
            return
        tape_str, head_str = render_tape(engine, window)
        console.print(f"step {event.steps:>5}  {event.previous_state} -> {event.current_state}", markup=False)
        console.print(f"  {tape_str}", markup=False, highlight=False)
        console.print(f"  {head_str}", markup=False, highlight=False)
    return listener


def run_inputs(definition, inputs, max_steps, trace=False, window=7, json_logger=None):
    """Run ``definition`` on each input; returns one result dict per input."""
    engine = ExecutionEngine(definition)
    if trace:
        engine.subscribe(trace_listener(engine, window))

    results = []
    for text in inputs:
        engine.load_input(text)
        snapshot = engine.run_to_halt(max_steps)
        results.append({
            "input": text,
            "verdict": snapshot.verdict.value if snapshot.verdict else "timeout",
            "steps": snapshot.steps,
            "state": snapshot.current_state,
            "head_position": snapshot.head_position,
            "tape": snapshot.tape.content(),
        })

    if json_logger is not None:
        log_results(json_logger, definition.name, results)
    return results


def log_results(json_logger, machine, results):
    timestamp = datetime.now(timezone.utc).isoformat()
    entries = [{"event": "result", "machine": machine, **result, "timestamp": timestamp} for result in results]
    json_logger.log_batch(entries)
    halted = [entry for entry in entries if entry["verdict"] != "timeout"]
    if halted:
        json_logger.log_halting(halted)


def print_results(title, results):
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Input", justify="left")
    table.add_column("Verdict", justify="center")
    table.add_column("Steps", justify="right")
    table.add_column("Final State", justify="center")
    table.add_column("Tape", justify="left")

    for result in results:
        color = {"accepted": "green", "rejected": "red"}.get(result["verdict"], "yellow")
        table.add_row(
            repr(result["input"]),
            f"[{color}]{result['verdict']}[/{color}]",
            f"{result['steps']:,}",
            result["state"],
            result["tape"] or "(blank)",
        )
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Run a Turing machine on one or more inputs.")
    parser.add_argument("--example", choices=[e.id for e in EXAMPLES], help="Built-in example machine")
    parser.add_argument("--input", action="append", dest="inputs",
                        help="Input string (repeatable, default: the example's sample inputs)")
    parser.add_argument("--max_steps", type=int, help="Maximum steps per input before giving up")
    parser.add_argument("--trace", action="store_true", help="Print the tape after every step")
    parser.add_argument("--window", type=int, help="Cells shown either side of the head when tracing")
    parser.add_argument("--log", action="store_true", help="Append results to the JSON-lines run log")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to runtime_config.json")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    example = get_example(args.example or config["default_example"])
    inputs = args.inputs or list(example.sample_inputs)
    max_steps = args.max_steps or config["max_steps"]
    window = args.window if args.window is not None else config["tape_window"]

    json_logger = None
    if args.log:
        json_logger = JSONLogger(config["output_directory"], config["log_file_prefix"])

    try:
        results = run_inputs(
            example.definition,
            inputs,
            max_steps,
            trace=args.trace,
            window=window,
            json_logger=json_logger,
        )
    except DefinitionError as e:
        console.print(f"[red]Invalid machine definition: {e}[/red]")
        raise SystemExit(1)

    print_results(example.name, results)

if __name__ == "__main__":
    main()
