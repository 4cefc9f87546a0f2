#!/usr/bin/env python3
"""
Offboarding Control CLI - Command Line Interface for the Offboarding Engine.

Provides commands for starting offboarding processes, saving and completing
steps, navigating, cancelling, and viewing processes and their audit trail.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..exceptions import OffboardingError, StepValidationError
from ..models import ProcessStatus
from ..workflows import STEPS, OffboardingEngine, completed_steps, create_process_summary, get_step

# Setup logging
logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Rich console for pretty output
console = Console()


class OffboardingController:
    """Main controller for Offboarding Engine operations."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the controller."""
        self.config_path = Path(config_path) if config_path else None

        # Load configuration
        self.config = self._load_config()

        self.engine = OffboardingEngine(self.config)

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or use defaults."""
        config: Dict[str, Any] = {
            "state_file": "offboarding_state.json",
            "audit_dir": "audit",
            "attachments_dir": "attachments",
        }

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    config.update(json.load(f))
                console.print(f"[blue]Loaded configuration from {self.config_path}[/blue]")
            except (OSError, ValueError) as e:
                console.print(f"[red]Error loading config: {e}[/red]")

        return config


@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable info logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Offboarding Engine Control CLI - employee separation workflows"""
    if verbose:
        logging.getLogger().setLevel(logging.INFO)
    ctx.ensure_object(dict)
    if 'controller' not in ctx.obj:
        ctx.obj['controller'] = OffboardingController(config)


@cli.command()
@click.argument('employee_id')
@click.option('--actor', help='User starting the process')
@click.option('--department', help='Department used to pick default checklists')
@click.pass_context
def start(ctx, employee_id, actor, department):
    """Start offboarding an employee."""
    engine = ctx.obj['controller'].engine

    try:
        process = engine.start_process(employee_id, actor=actor, department=department)
    except (OffboardingError, ValueError) as e:
        console.print(f"[red]Cannot start offboarding: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ Started offboarding process {process.id} for {employee_id}[/green]")
    display_process(process)


@cli.command()
@click.argument('process_id')
@click.pass_context
def show(ctx, process_id):
    """Show an offboarding process."""
    engine = ctx.obj['controller'].engine

    try:
        process = engine.get_process(process_id)
    except OffboardingError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    display_process(process)


@cli.command(name='submit-step')
@click.argument('process_id')
@click.argument('step_index', type=int)
@click.argument('payload_file', type=click.Path(exists=True))
@click.option('--complete/--save', default=False, help='Complete the step (validated) or just save it')
@click.option('--actor', help='User making the submission')
@click.option('--attach', type=click.Path(exists=True), help='File to attach (notice and documents steps)')
@click.pass_context
def submit_step(ctx, process_id, step_index, payload_file, complete, actor, attach):
    """Save or complete a step with field values from a JSON file."""
    engine = ctx.obj['controller'].engine

    try:
        with open(payload_file, 'r', encoding='utf-8') as f:
            payload = json.load(f)

        attachment = None
        if attach:
            attach_path = Path(attach)
            attachment = (attach_path.name, attach_path.read_bytes())

        process = engine.submit_step(
            process_id, step_index, payload, complete=complete, actor=actor, attachment=attachment
        )

    except StepValidationError as e:
        console.print(f"[red]✗ Step {e.step_index} ({e.step_key}) cannot be completed:[/red]")
        for error in e.errors:
            console.print(f"  - {error}")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid payload for step {step_index}:[/red]")
        for error in e.errors():
            location = '.'.join(str(part) for part in error['loc'])
            console.print(f"  - {location}: {error['msg']}")
        sys.exit(1)
    except (OffboardingError, OSError, ValueError) as e:
        console.print(f"[red]Error submitting step: {e}[/red]")
        sys.exit(1)

    step = get_step(step_index)
    verb = "Completed" if complete else "Saved"
    console.print(f"[green]✓ {verb} step {step.index} ({step.label})[/green]")
    display_process(process)


@cli.command()
@click.argument('process_id')
@click.argument('step', type=int)
@click.option('--actor', help='User navigating')
@click.pass_context
def navigate(ctx, process_id, step, actor):
    """Open any step of a process."""
    engine = ctx.obj['controller'].engine

    try:
        process = engine.navigate_to(process_id, step, actor=actor)
    except (OffboardingError, ValueError) as e:
        console.print(f"[red]Cannot navigate: {e}[/red]")
        sys.exit(1)

    console.print(f"[blue]Process {process.id} is now on step {process.current_step}[/blue]")


@cli.command()
@click.argument('process_id')
@click.option('--actor', help='User cancelling the process')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def cancel(ctx, process_id, actor, yes):
    """Cancel an offboarding process."""
    engine = ctx.obj['controller'].engine

    if not yes and not click.confirm(f"Cancel offboarding process {process_id}?"):
        console.print("[yellow]Aborted[/yellow]")
        return

    try:
        process = engine.cancel_process(process_id, actor=actor)
    except OffboardingError as e:
        console.print(f"[red]Cannot cancel: {e}[/red]")
        sys.exit(1)

    console.print(f"[yellow]Cancelled offboarding process {process.id}[/yellow]")


@cli.command(name='list')
@click.option('--employee-id', help='Filter by employee')
@click.option('--status', type=click.Choice([s.value for s in ProcessStatus]), help='Filter by status')
@click.pass_context
def list_processes(ctx, employee_id, status):
    """List offboarding processes."""
    engine = ctx.obj['controller'].engine

    processes = engine.state_manager.list_processes(
        employee_id=employee_id, status=ProcessStatus(status) if status else None
    )

    if not processes:
        console.print("[yellow]No offboarding processes found[/yellow]")
        return

    table = Table(title=f"Offboarding Processes ({len(processes)})")
    table.add_column("Process ID", style="cyan")
    table.add_column("Employee ID", style="green")
    table.add_column("Status", style="yellow")
    table.add_column("Current Step", style="magenta")
    table.add_column("Completed", style="blue")
    table.add_column("Started", style="white")

    for process in processes:
        table.add_row(
            process.id,
            process.employee_id,
            process.status.value,
            f"{process.current_step} ({get_step(process.current_step).label})",
            f"{len(completed_steps(process))}/{len(STEPS)}",
            process.started_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@cli.command()
def steps():
    """Show the offboarding step sequence."""
    table = Table(title="Offboarding Steps")
    table.add_column("#", style="cyan")
    table.add_column("Key", style="green")
    table.add_column("Label", style="magenta")

    for step in STEPS:
        table.add_row(str(step.index), step.key, step.label)

    console.print(table)


@cli.command(name='audit-trail')
@click.argument('process_id')
@click.option('--limit', default=50, help='Maximum number of records to show')
@click.pass_context
def audit_trail(ctx, process_id, limit):
    """Show the audit trail of a process."""
    engine = ctx.obj['controller'].engine

    records = engine.audit_logger.get_events(process_id=process_id, limit=limit)
    if not records:
        console.print(f"[yellow]No audit records found for {process_id}[/yellow]")
        return

    table = Table(title=f"Audit Trail for {process_id}")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Event", style="green")
    table.add_column("Step", style="yellow")
    table.add_column("Action", style="magenta")
    table.add_column("Actor", style="blue")
    table.add_column("Success", style="red")

    for record in records:
        table.add_row(
            record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            record.event_type,
            str(record.step_index or "-"),
            record.action,
            record.actor or "-",
            "✓" if record.success else "✗",
        )

    console.print(table)


@cli.command()
@click.option('--port', default=8000, help='Port to run the API server on')
@click.option('--host', default='127.0.0.1', help='Host to bind the API server to')
@click.pass_context
def serve(ctx, port, host):
    """Start the Offboarding Engine API server."""
    from ..api.server import start_server

    console.print(f"[green]Starting Offboarding Engine API server on {host}:{port}[/green]")
    console.print("[blue]Press Ctrl+C to stop[/blue]")

    try:
        start_server(host=host, port=port, reload=False, config=ctx.obj['controller'].config)
    except KeyboardInterrupt:
        console.print("[yellow]Server stopped[/yellow]")


def display_process(process):
    """Display an offboarding process and its steps."""
    summary = create_process_summary(process)
    done = set(summary["completed_steps"])

    console.print(Panel.fit(
        f"[bold blue]Offboarding {process.id}[/bold blue]\n"
        f"Employee: {process.employee_id}\n"
        f"Status: {summary['status']}\n"
        f"Progress: {summary['overall_progress']}%"
    ))

    table = Table()
    table.add_column("#", style="cyan")
    table.add_column("Step", style="green")
    table.add_column("Completed", style="magenta")
    table.add_column("", style="yellow")

    for step in STEPS:
        marker = "◀ current" if step.index == process.current_step else ""
        table.add_row(str(step.index), step.label, "✓" if step.index in done else "", marker)

    console.print(table)
    console.print(f"Handover progress: {summary['handover_progress']}%")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
