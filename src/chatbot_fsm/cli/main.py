"""Chatbot FSM CLI tool for inspecting and exercising machine documents.

This module provides a command-line interface for:
- Validating machine documents
- Showing the states, events and transitions of a document
- Walking a sequence of events from the start state
- Chatting with a machine interactively
- Printing the JSON schema of the named-section document form
"""

import json
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.pretty import Pretty
from rich.table import Table

from .. import __version__
from ..api import load_machine, new_instance
from ..config.schema import BuildOptions, ConflictPolicy, generate_json_schema
from ..config.validator import DocumentValidator
from ..core.definition import MachineDefinition
from ..core.event import sort_by_order
from ..exceptions import ChatbotFSMError, IllegalTransitionError

console = Console()

QUIT_COMMANDS = {"quit", "exit", "q"}


def _render(message: Any) -> Any:
    """Make an opaque state/event payload printable."""
    if message is None or isinstance(message, str):
        return message or ""
    return Pretty(message)


def _load(ctx: click.Context, file: str) -> MachineDefinition:
    try:
        return load_machine(file, ctx.obj["options"])
    except (ChatbotFSMError, OSError) as e:
        console.print(f"[red]Failed to load {file}: {e}[/red]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='WARNING',
    help='Logging level',
)
@click.option('--start-state', default=None, help='Override the start state name')
@click.option(
    '--conflict-policy',
    type=click.Choice([p.value for p in ConflictPolicy]),
    default=None,
    help='How to treat rules that map one (state, event) pair to different states',
)
@click.pass_context
def cli(ctx, log_level: str, start_state: str | None, conflict_policy: str | None):
    """Chatbot FSM - data-driven conversational state machines"""
    logging.basicConfig(level=getattr(logging, log_level.upper()))
    ctx.ensure_object(dict)
    ctx.obj["options"] = BuildOptions.from_env(
        start_state=start_state, conflict_policy=conflict_policy
    )


@cli.command()
@click.argument('file', type=click.Path(exists=True))
@click.pass_context
def validate(ctx, file: str):
    """Validate a machine document"""
    errors = DocumentValidator(ctx.obj["options"]).validate_file(file)
    if errors:
        console.print(f"[red]✗ {file} is invalid[/red]")
        for error in errors:
            console.print(f"  • {error}")
        sys.exit(1)
    console.print(f"[green]✓ {file} is valid[/green]")


@cli.command()
@click.argument('file', type=click.Path(exists=True))
@click.pass_context
def show(ctx, file: str):
    """Show states, events and transitions of a machine document"""
    definition = _load(ctx, file)

    states_table = Table(title="States")
    states_table.add_column("Name", style="cyan")
    states_table.add_column("Message")
    states_table.add_column("Flags", style="magenta")
    terminal = set(definition.terminal_states())
    for state in definition.states.values():
        flags = []
        if state.name == definition.start_state:
            flags.append("start")
        if state.name in terminal:
            flags.append("terminal")
        states_table.add_row(state.name, _render(state.message), ", ".join(flags))
    console.print(states_table)

    events_table = Table(title="Events")
    events_table.add_column("Order", justify="right")
    events_table.add_column("Name", style="cyan")
    events_table.add_column("Message")
    for event in sort_by_order(definition.events.values()):
        events_table.add_row(str(event.order_id), event.name, _render(event.message))
    console.print(events_table)

    transitions_table = Table(title="Transitions")
    transitions_table.add_column("From", style="cyan")
    transitions_table.add_column("Event", style="yellow")
    transitions_table.add_column("To", style="green")
    for transition in definition.transitions.values():
        transitions_table.add_row(transition.source, transition.event, transition.dest)
    console.print(transitions_table)


@cli.command()
@click.argument('file', type=click.Path(exists=True))
@click.argument('events', nargs=-1)
@click.pass_context
def walk(ctx, file: str, events: tuple[str, ...]):
    """Fire EVENTS in sequence from the start state"""
    machine = new_instance(_load(ctx, file))
    console.print(f"[bold]{machine.current_state}[/bold]")
    for event_name in events:
        try:
            state = machine.fire(event_name)
        except IllegalTransitionError as e:
            console.print(f"[red]✗ {e}[/red]")
            sys.exit(1)
        console.print(f"  --{event_name}--> [bold]{state.name}[/bold]")


@cli.command()
@click.argument('file', type=click.Path(exists=True))
@click.pass_context
def chat(ctx, file: str):
    """Chat with a machine interactively"""
    machine = new_instance(_load(ctx, file), observers=[])

    while True:
        console.print(_render(machine.current().message))
        available = machine.available_transitions(by_order=True)
        if not available:
            console.print("[dim]Conversation finished.[/dim]")
            return
        for number, event in enumerate(available, start=1):
            console.print(f"  [cyan]{number}[/cyan]. {event.message or event.name}")

        choice = click.prompt("Choose", default="", show_default=False).strip()
        if choice.lower() in QUIT_COMMANDS:
            return
        if choice.isdigit() and 1 <= int(choice) <= len(available):
            event_name = available[int(choice) - 1].name
        else:
            event_name = choice

        try:
            machine.fire(event_name)
        except IllegalTransitionError:
            console.print(f"[yellow]'{choice}' is not available right now.[/yellow]")


@cli.command()
@click.option('--output', '-o', type=click.Path(), help='Write the schema to a file')
def schema(output: str | None):
    """Print the JSON schema of machine documents"""
    schema_data = generate_json_schema()
    if output:
        with open(output, 'w') as f:
            json.dump(schema_data, f, indent=2)
        console.print(f"[green]✓ Schema written to {output}[/green]")
    else:
        click.echo(json.dumps(schema_data, indent=2))


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == '__main__':
    main()
