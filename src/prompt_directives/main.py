"""
Prompt Directives - CLI Entry Point.

Usage:
    prompt-directives parse FILE                      Show directives in a prompt file
    prompt-directives validate PRESET PROMPT_ID       Check what enabling a prompt would break
    prompt-directives enable PRESET PROMPT_ID         Run the full enable flow on a preset
    prompt-directives disable PRESET PROMPT_ID        Disable a prompt in a preset
    prompt-directives triggers PRESET --count N       Show message-count transitions
    prompt-directives health                          Check configuration
    prompt-directives --help                          Show help
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from prompt_directives.core.issues import Issue
from prompt_directives.engine import DirectiveEngine
from prompt_directives.host.base import PromptNotFoundError, ResolutionPrompt
from prompt_directives.host.preset import PresetFormatError, PresetPromptStore

app = typer.Typer(
    name="prompt-directives",
    help="Prompt Directives - Inspect and toggle prompts declared with {{// @directive }} blocks.",
    add_completion=False,
)
console = Console()


@app.callback()
def main() -> None:
    """Configure logging from settings before any command runs."""
    from prompt_directives.config import get_settings

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# =============================================================================
# Helpers
# =============================================================================


class ConsoleResolutionPrompt(ResolutionPrompt):
    """Asks on the terminal; --yes answers for the user."""

    def __init__(self, assume_yes: bool = False):
        self.assume_yes = assume_yes

    def confirm(self, prompt_id: str, issues: list[Issue]) -> bool:
        _print_issues(issues)
        if self.assume_yes:
            return True
        return typer.confirm(f"Enable {prompt_id} anyway?", default=False)


def _open_preset(preset: Path, character: int | None, autosave: bool) -> PresetPromptStore:
    try:
        return PresetPromptStore(preset, character_id=character, autosave=autosave)
    except PresetFormatError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _engine(store: PresetPromptStore) -> DirectiveEngine:
    return DirectiveEngine.from_settings(store)


def _require_prompt(store: PresetPromptStore, prompt_id: str) -> None:
    try:
        store.get(prompt_id)
    except PromptNotFoundError:
        console.print(f"[red]❌ Unknown prompt: {prompt_id}[/red]")
        raise typer.Exit(1)


def _print_issues(issues: list[Issue]) -> None:
    table = Table(title="Issues", show_lines=False)
    table.add_column("Severity")
    table.add_column("Type")
    table.add_column("Message")
    for issue in issues:
        color = "red" if issue.is_error else "yellow"
        table.add_row(f"[{color}]{issue.severity.value}[/{color}]", issue.type.value, escape(issue.message))
    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def parse(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Prompt text file"),
) -> None:
    """Show the directives declared in a prompt file."""
    from prompt_directives.core.parser import parse as parse_directives

    directives = parse_directives(file.read_text(encoding="utf-8"))
    declared = directives.declared()
    if not declared:
        console.print("[dim]No directives found.[/dim]")
        return

    table = Table(title=file.name)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for name, value in declared.items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        elif name == "message_range":
            value = str(directives.message_range)
        table.add_row(name, escape(str(value)))
    console.print(table)


@app.command()
def validate(
    preset: Path = typer.Argument(..., help="Preset file (JSON or YAML)"),
    prompt_id: str = typer.Argument(..., help="Identifier of the prompt to enable"),
    character: Optional[int] = typer.Option(None, "--character", "-c", help="prompt_order entry to use (default: last)"),
) -> None:
    """Check what enabling a prompt would conflict with. Exits 1 on errors."""
    store = _open_preset(preset, character, autosave=False)
    _require_prompt(store, prompt_id)
    with _engine(store) as engine:
        issues = engine.validate(prompt_id)
        resolvable = bool(issues) and engine.can_auto_resolve(issues, prompt_id)

    if not issues:
        console.print(f"✅ {prompt_id} can be enabled")
        return

    _print_issues(issues)
    if resolvable:
        console.print("ℹ️  All errors can be auto-resolved")
    if any(issue.is_error for issue in issues):
        raise typer.Exit(1)


@app.command()
def enable(
    preset: Path = typer.Argument(..., help="Preset file (JSON or YAML)"),
    prompt_id: str = typer.Argument(..., help="Identifier of the prompt to enable"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Enable despite unresolved issues"),
    character: Optional[int] = typer.Option(None, "--character", "-c", help="prompt_order entry to use (default: last)"),
) -> None:
    """Enable a prompt, auto-resolving or asking about issues."""
    store = _open_preset(preset, character, autosave=True)
    _require_prompt(store, prompt_id)
    with _engine(store) as engine:
        outcome = engine.request_enable(prompt_id, ConsoleResolutionPrompt(assume_yes=yes))

    plan = outcome.auto_resolution
    if plan is not None:
        for disabled in plan.to_disable:
            console.print(f"  ⏹  disabled {disabled}")
        for enabled in plan.to_enable:
            console.print(f"  ▶  enabled {enabled}")
    if outcome.enabled:
        console.print(f"✅ Enabled {prompt_id}")
    else:
        console.print(f"[yellow]⚠️  {prompt_id} was not enabled[/yellow]")
        raise typer.Exit(1)


@app.command()
def disable(
    preset: Path = typer.Argument(..., help="Preset file (JSON or YAML)"),
    prompt_id: str = typer.Argument(..., help="Identifier of the prompt to disable"),
    character: Optional[int] = typer.Option(None, "--character", "-c", help="prompt_order entry to use (default: last)"),
) -> None:
    """Disable a prompt."""
    store = _open_preset(preset, character, autosave=True)
    _require_prompt(store, prompt_id)
    with _engine(store) as engine:
        engine.request_disable(prompt_id)
    console.print(f"✅ Disabled {prompt_id}")


@app.command()
def triggers(
    preset: Path = typer.Argument(..., help="Preset file (JSON or YAML)"),
    count: int = typer.Option(..., "--count", "-n", min=0, help="Current message count"),
    apply: bool = typer.Option(False, "--apply", help="Write the transitions to the preset"),
    character: Optional[int] = typer.Option(None, "--character", "-c", help="prompt_order entry to use (default: last)"),
) -> None:
    """Show (and optionally apply) message-count transitions."""
    store = _open_preset(preset, character, autosave=apply)
    with _engine(store) as engine:
        if apply:
            result = engine.trigger_driver().process(count)
        else:
            result = engine.evaluate_triggers(count)

    if result is None or not result.triggered:
        console.print(f"[dim]No triggers at message {count}.[/dim]")
        return

    table = Table(title=f"Triggers at message {count}")
    table.add_column("Prompt", style="bold")
    table.add_column("Action")
    table.add_column("Reason")
    for event in result.triggered:
        color = "green" if event.action == "enable" else "red"
        table.add_row(escape(event.name), f"[{color}]{event.action}[/{color}]", event.reason)
    console.print(table)
    if apply:
        console.print(f"✅ Applied to {preset.name}")


@app.command()
def health() -> None:
    """Check configuration."""
    from prompt_directives.config import get_settings
    from prompt_directives.core.cache import DirectiveCache

    console.print("\n[bold]Prompt Directives Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.env}")
        console.print(f"   Log level: {settings.log_level}")

        stats = DirectiveCache.from_settings(settings).stats()
        console.print(f"✅ Cache: max {stats.max_size} entries, TTL {settings.cache_ttl_seconds:g}s")

        if settings.audit_log_enabled:
            console.print(f"✅ Audit log enabled: {settings.audit_log_dir}")
        else:
            console.print("ℹ️  Audit log disabled")

        console.print(Panel.fit("[green]All checks passed![/green]", border_style="green"))

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Check PROMPT_DIRECTIVES_* environment variables and .env.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from prompt_directives import __version__

    console.print(f"Prompt Directives version {__version__}")


if __name__ == "__main__":
    app()
