import argparse

from rich.console import Console
from rich.table import Table

from simulator.examples import EXAMPLES, get_example
from simulator.resolver import TransitionResolver

console = Console()


def transition_rows(definition):
    """State x symbol grid of compact actions, ``HALT`` where no rule applies."""
    resolver = TransitionResolver(definition)
    table = resolver.to_array()
    states = definition.state_names
    symbols = sorted(definition.tape_alphabet)

    rows = []
    idx = 0
    for state in states:
        row = []
        for _ in symbols:
            write_idx, move, next_idx = (int(v) for v in table[idx])
            if next_idx == -1:
                row.append("HALT")
            else:
                move_name = {-1: "L", 0: "S", 1: "R"}[move]
                row.append(f"{symbols[write_idx]}{move_name}{states[next_idx]}")
            idx += 1
        rows.append((state, row))
    return symbols, rows, resolver.dead_rules


def state_label(definition, name):
    state = definition.state(name)
    marks = []
    if name == definition.initial_state:
        marks.append("start")
    if state.is_accept:
        marks.append("accept")
    if state.is_reject:
        marks.append("reject")
    return f"{name} ({', '.join(marks)})" if marks else name


def latex_table(symbols, rows):
    lines = [r"\begin{array}{c|" + "c" * len(symbols) + "}"]
    lines.append("State/Symbol & " + " & ".join([f"\\text{{{s}}}" for s in symbols]) + r" \\ \hline")
    for state, row in rows:
        lines.append(" & ".join([state] + row) + r" \\")
    lines.append(r"\end{array}")
    return "\n".join(lines)


def print_definition(definition, latex=True):
    symbols, rows, dead_rules = transition_rows(definition)

    table = Table(title=f"{definition.name or 'Machine'} - Transition Table", header_style="bold magenta")
    table.add_column("State", justify="left")
    for symbol in symbols:
        label = f"{symbol} (blank)" if symbol == definition.blank_symbol else symbol
        table.add_column(label, justify="center")
    for state, row in rows:
        cells = [f"[red]{cell}[/red]" if cell == "HALT" else cell for cell in row]
        table.add_row(state_label(definition, state), *cells)
    console.print(table)

    if dead_rules:
        console.print(f"[yellow]{len(dead_rules)} dead rule(s), shadowed by earlier rules:[/yellow]")
        for rule in dead_rules:
            console.print(f"  ({rule.current_state}, {rule.read_symbol}) -> {rule.compact()}")

    if latex:
        console.print("\n=== LaTeX Table ===", markup=False)
        console.print(latex_table(symbols, rows), markup=False, highlight=False)


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Definition Inspector")
    parser.add_argument("--example", choices=[e.id for e in EXAMPLES], required=True,
                        help="Built-in example machine to inspect")
    parser.add_argument("--no-latex", action="store_true", help="Skip the LaTeX rendering")
    args = parser.parse_args()

    example = get_example(args.example)
    console.print(f"[INFO] {example.name}: {example.description}", markup=False)
    console.print(f"  Category: {example.category}", markup=False)
    console.print(f"  Sample inputs: {', '.join(example.sample_inputs)}", markup=False)
    print_definition(example.definition, latex=not args.no_latex)

if __name__ == "__main__":
    main()
