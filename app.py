# app.py

import argparse
import asyncio

from rich.console import Console
from rich.prompt import Prompt, IntPrompt, Confirm
from rich.table import Table

from config.config_loader import DEFAULT_CONFIG_PATH, load_config, save_config
from logger.logger import JSONLogger
from simulator.definition import DefinitionError
from simulator.engine import ExecutionEngine, HaltEvent, InvalidOperation, StepEvent, Verdict
from simulator.examples import EXAMPLES, get_example
from tools.machine_inspect import print_definition
from tools.run_machine import render_tape

console = Console()

# === Utilities ===
def load_runtime_config(path=DEFAULT_CONFIG_PATH):
    try:
        return load_config(path)
    except FileNotFoundError:
        console.print("[red]Error: runtime_config.json not found![/red]")
        raise SystemExit(1)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Error: invalid configuration: {e}[/red]")
        raise SystemExit(1)

def create_engine(config, example_id=None, input_text=None):
    example = get_example(example_id or config["default_example"])
    if input_text is None:
        input_text = config["default_input"]
    if input_text is None:
        input_text = example.sample_inputs[0] if example.sample_inputs else ""

    engine = ExecutionEngine(example.definition, input_text, speed_ms=config["speed_ms"])
    engine.subscribe(halt_notifier)

    json_logger = JSONLogger(config["output_directory"], config["log_file_prefix"])
    json_logger.attach(engine, log_steps=config["log_steps"])
    return engine

def halt_notifier(event):
    if isinstance(event, HaltEvent):
        if event.verdict is Verdict.ACCEPTED:
            console.print(f"[bold green]Input Accepted![/bold green] Execution finished in {event.steps} steps")
        else:
            console.print(f"[bold red]Input Rejected![/bold red] Execution finished in {event.steps} steps")

def show_machine(engine, window):
    snapshot = engine.snapshot()
    tape_str, head_str = render_tape(engine, window)

    table = Table(show_header=False, box=None)
    table.add_row("Machine", engine.definition.name)
    table.add_row("Input", repr(engine.input_text))
    table.add_row("State", snapshot.current_state)
    table.add_row("Head", str(snapshot.head_position))
    table.add_row("Steps", f"{snapshot.steps:,}")
    table.add_row("Phase", snapshot.phase.value)
    table.add_row("Verdict", snapshot.verdict.value if snapshot.verdict else "-")
    table.add_row("Speed", f"{snapshot.speed_ms} ms")
    console.print(table)
    console.print(f"  {tape_str}", markup=False, highlight=False)
    console.print(f"  {head_str}", markup=False, highlight=False)

def show_main_menu():
    console.print("\n[bold cyan]Turing Machine Simulator[/bold cyan]")
    console.print("[1] Load Example")
    console.print("[2] Load Input")
    console.print("[3] Step")
    console.print("[4] Play (Ctrl+C pauses)")
    console.print("[5] Reset")
    console.print("[6] Set Speed")
    console.print("[7] Edit Tape Cell")
    console.print("[8] Toggle Accept/Reject State")
    console.print("[9] Inspect Machine")
    console.print("[10] Edit Config")
    console.print("[11] Exit")

# === Handlers ===
def handle_load_example(engine):
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Index", justify="center")
    table.add_column("Example", justify="left")
    table.add_column("Category", justify="center")
    table.add_column("Samples", justify="left")
    for idx, example in enumerate(EXAMPLES):
        table.add_row(str(idx), example.name, example.category, ", ".join(example.sample_inputs))
    console.print(table)

    idx_choice = IntPrompt.ask("Choose an example by Index")
    if idx_choice < 0 or idx_choice >= len(EXAMPLES):
        console.print("[red]Invalid choice.[/red]")
        return
    example = EXAMPLES[idx_choice]
    engine.load_definition(example.definition)
    engine.load_input(example.sample_inputs[0] if example.sample_inputs else "")
    console.print(f"[green]Loaded: {example.name}[/green] - {example.description}")

def handle_load_input(engine):
    text = Prompt.ask("Input string", default=engine.input_text)
    engine.load_input(text)
    console.print(f"[green]Input Loaded:[/green] {text!r}")

def handle_step(engine, window):
    if engine.snapshot().halted:
        console.print("[yellow]Machine has halted. Reset to run again.[/yellow]")
        return
    engine.step()
    show_machine(engine, window)

async def play_until_halt(engine, window, trace=True):
    tracer = None
    if trace:
        def tracer(event):
            if isinstance(event, StepEvent):
                tape_str, _ = render_tape(engine, window)
                console.print(f"step {event.steps:>5}  {event.current_state:<8} {tape_str}", markup=False, highlight=False)
        engine.subscribe(tracer)
    try:
        if engine.play():
            await engine.scheduler.wait()
    finally:
        if tracer is not None:
            engine.unsubscribe(tracer)

def handle_play(engine, window):
    if engine.snapshot().halted:
        console.print("[yellow]Machine has halted. Reset to run again.[/yellow]")
        return
    try:
        asyncio.run(play_until_halt(engine, window))
    except KeyboardInterrupt:
        engine.pause()
        console.print(f"\n[yellow]Paused at step {engine.steps:,}[/yellow]")
    show_machine(engine, window)

def handle_set_speed(engine):
    speed = IntPrompt.ask("Milliseconds between steps", default=engine.speed_ms)
    engine.set_speed(speed)
    console.print(f"[green]Speed set to {speed} ms.[/green]")

def handle_edit_cell(engine, window):
    position = IntPrompt.ask("Cell position", default=engine.head_position)
    current = engine.read_cell(position)
    symbol = Prompt.ask(
        f"Symbol for cell {position} (empty clears to blank '{engine.definition.blank_symbol}')",
        default=current,
    )
    engine.edit_cell(position, symbol or None)
    show_machine(engine, window)

def handle_toggle_state(engine):
    definition = engine.definition
    name = Prompt.ask("State", choices=definition.state_names)
    kind = Prompt.ask("Toggle", choices=["accept", "reject"], default="accept")
    if kind == "accept":
        updated = definition.toggled_accept(name)
    else:
        updated = definition.toggled_reject(name)
    engine.load_definition(updated)
    state = updated.state(name)
    console.print(f"[green]{name}: accept={state.is_accept} reject={state.is_reject}[/green]")

def handle_edit_config(config, path):
    console.print("\n[bold]Edit Configuration[/bold]")

    speed_ms = IntPrompt.ask("Milliseconds between steps", default=config["speed_ms"])
    max_steps = IntPrompt.ask("Max Steps", default=config["max_steps"])
    tape_window = IntPrompt.ask("Tape cells shown either side of the head", default=config["tape_window"])
    default_example = Prompt.ask("Default example", choices=[e.id for e in EXAMPLES],
                                 default=config["default_example"])
    log_steps = Confirm.ask("Log every step?", default=config["log_steps"])

    config.update({
        "speed_ms": speed_ms,
        "max_steps": max_steps,
        "tape_window": tape_window,
        "default_example": default_example,
        "log_steps": log_steps,
    })

    save_config(config, path)
    console.print("[green]Configuration updated successfully.[/green]")

def interactive_main(config, engine, config_path):
    window = config["tape_window"]
    show_machine(engine, window)

    while True:
        show_main_menu()
        choices = [str(i) for i in range(1, 12)]
        choice = Prompt.ask("\nChoose an option", choices=choices, default="3")

        try:
            if choice == "1":
                handle_load_example(engine)
            elif choice == "2":
                handle_load_input(engine)
            elif choice == "3":
                handle_step(engine, window)
            elif choice == "4":
                handle_play(engine, window)
            elif choice == "5":
                engine.reset()
                console.print("[green]Machine Reset[/green] - ready for execution")
                show_machine(engine, window)
            elif choice == "6":
                handle_set_speed(engine)
            elif choice == "7":
                handle_edit_cell(engine, window)
            elif choice == "8":
                handle_toggle_state(engine)
            elif choice == "9":
                print_definition(engine.definition)
            elif choice == "10":
                handle_edit_config(config, config_path)
                window = config["tape_window"]
            elif choice == "11":
                console.print("[bold green]Goodbye![/bold green]")
                break
        except (DefinitionError, InvalidOperation, ValueError, TypeError) as e:
            console.print(f"[red]{e}[/red]")

# === CLI Mode for Automation ===
def cli_main(config, engine):
    asyncio.run(play_until_halt(engine, config["tape_window"], trace=True))
    show_machine(engine, config["tape_window"])

def main():
    parser = argparse.ArgumentParser(description="Turing Machine Simulator")
    parser.add_argument("--example", choices=[e.id for e in EXAMPLES], help="Example machine to load")
    parser.add_argument("--input", help="Input string to load")
    parser.add_argument("--run", action="store_true", help="Play until halted instead of opening the menu")
    parser.add_argument("--speed", type=int, help="Milliseconds between steps")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to runtime_config.json")
    args = parser.parse_args()

    config = load_runtime_config(args.config)
    engine = create_engine(config, args.example, args.input)
    if args.speed is not None:
        try:
            engine.set_speed(args.speed)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise SystemExit(1)

    if args.run:
        cli_main(config, engine)
    else:
        interactive_main(config, engine, args.config)

if __name__ == "__main__":
    main()
