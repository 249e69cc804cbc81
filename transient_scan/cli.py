"""Typer-based CLI for the transient storage collision scanner."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__, config_manager
from .analyzer import ProjectAnalyzer, project_file_views
from .cli_groups import policy_grp
from .discovery import find_build_config, find_source_files, load_sources
from .models import AnalysisVerdict, BuildConfigFile, CollisionRecord, FileVerdict
from .verdict import VersionPolicy

console = Console()

app = typer.Typer(
    help="🔍 Transient storage collision scanner for Solidity projects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(policy_grp, name="policy")

STATUS_COLORS: Dict[str, str] = {
    "VULNERABLE": "red",
    "WARNING": "yellow",
    "SAFE": "green",
    "ERROR": "magenta",
}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"transient-scan v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log analysis progress to stderr."),
):
    """Detect transient/persistent clearing collisions affecting via-ir builds."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _display_path(path: str) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:
        return path


def _status_text(status: str) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[bold {color}]{status}[/bold {color}]"


def _group_by_contract(collisions: List[CollisionRecord]) -> Dict[tuple, List[CollisionRecord]]:
    grouped: Dict[tuple, List[CollisionRecord]] = {}
    for col in collisions:
        grouped.setdefault((col.contract, col.source_file), []).append(col)
    return grouped


def _render_verdict(verdict: AnalysisVerdict) -> None:
    color = STATUS_COLORS.get(verdict.status, "white")
    console.print(Panel(
        f"Reason: {escape(verdict.reason)}",
        title=f"[bold]{verdict.status}[/bold]",
        border_style=color,
    ))

    for (contract, source_file), issues in _group_by_contract(verdict.collisions).items():
        table = Table(
            title=f"Contract: {escape(contract)} (in {escape(_display_path(source_file))})",
            show_lines=True,
        )
        table.add_column("#", justify="right")
        table.add_column("Scope")
        table.add_column("Type", style="cyan")
        table.add_column("Cleared Transient")
        table.add_column("Cleared Persistent")
        for idx, col in enumerate(issues, 1):
            table.add_row(
                str(idx),
                col.scope_label,
                escape(col.type),
                escape("\n".join(col.transient_display_texts)),
                escape("\n".join(col.persistent_display_texts)),
            )
        console.print(table)


def _render_summary(verdict: AnalysisVerdict) -> None:
    via_ir = {True: "enabled", False: "disabled", None: "unknown"}[verdict.via_ir_enabled]
    console.print(f"- Project Status : {_status_text(verdict.status)}")
    console.print(f"- Compiler Version : {escape(verdict.active_version)} (framework: {verdict.framework}, via-ir: {via_ir})")
    console.print(f"- Total Conflicts Detected : {len(verdict.collisions)}")


def _render_file_views(views: List[FileVerdict]) -> None:
    table = Table(title="Per-file results")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Collisions", justify="right")
    for view in views:
        table.add_row(escape(_display_path(view.path)), _status_text(view.status), str(len(view.collisions)))
    console.print(table)


def _load_build_config(target: Path, config_path: Optional[Path]) -> BuildConfigFile:
    if config_path is None:
        return find_build_config(target)
    try:
        return BuildConfigFile(name=config_path.name, content=config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(f"Cannot read config '{config_path}': {exc}")


@app.command("scan")
def scan(
    target: Path = typer.Argument(Path("."), exists=True, help="Solidity file or project directory."),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, dir_okay=False,
        help="Explicit foundry.toml / hardhat.config.* to use instead of searching.",
    ),
    per_file: bool = typer.Option(False, "--per-file", help="Also show a per-file breakdown."),
    as_json: bool = typer.Option(False, "--json", help="Print the verdict as JSON."),
):
    """Scan a project for the transient storage clearing collision.

    Example:
      tscan scan ./my-foundry-project
      tscan scan contracts/Vault.sol --config hardhat.config.ts --json
    """
    target = target.resolve()
    build_config = _load_build_config(target, config_path)
    sources = load_sources(find_source_files(target, config_manager.load_ignored_dirs()))

    if not sources:
        console.print("[red][-] No .sol files found in the specified path.[/red]")
        raise typer.Exit(code=0)

    verdict = ProjectAnalyzer(config_manager.load_version_policy()).analyze(
        sources, build_config.content
    )
    views = project_file_views(sources, verdict) if per_file else []

    if as_json:
        payload = verdict.to_dict()
        if per_file:
            payload["files"] = [v.to_dict() for v in views]
        typer.echo(json.dumps(payload, indent=2))
    else:
        console.print("[bold cyan]🔍 Transient Storage Collision Scanner[/bold cyan]")
        if build_config.found:
            console.print(f"[+] Configuration file detected: [yellow]{build_config.name}[/yellow]")
        else:
            console.print("[!] Warning: Hardhat or Foundry configuration file not found.")
        console.print(f"[+] Analyzed {len(sources)} .sol files under {escape(str(target))}")
        _render_verdict(verdict)
        if per_file:
            _render_file_views(views)
        _render_summary(verdict)

    if verdict.status == "VULNERABLE":
        raise typer.Exit(code=1)
    if verdict.status == "ERROR":
        raise typer.Exit(code=2)


# ------------------------------------------------------------------
# Policy commands
# ------------------------------------------------------------------

@policy_grp.command("show")
def show_policy():
    """Show the active vulnerable-version policy."""
    policy = config_manager.load_version_policy()
    table = Table(title="Version policy")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("vulnerable_versions", ", ".join(policy.vulnerable_versions) or "-")
    table.add_row("caret range", f"^0.8.{policy.caret_min_patch} .. ^0.8.{policy.caret_max_patch}")
    table.add_row("caret only without override", str(policy.caret_requires_no_override))
    console.print(table)


@policy_grp.command("set")
def set_policy(
    versions: Optional[List[str]] = typer.Option(
        None, "--vulnerable-version", "-V", help="Exact affected version (repeatable)."
    ),
    caret_min: Optional[int] = typer.Option(None, "--caret-min", min=0, help="Lowest affected ^0.8.x patch."),
    caret_max: Optional[int] = typer.Option(None, "--caret-max", min=0, help="Highest affected ^0.8.x patch."),
    caret_requires_no_override: Optional[bool] = typer.Option(
        None,
        "--caret-needs-no-override/--caret-always",
        help="Whether caret ranges count only when no build config pins a version.",
    ),
):
    """Persist changes to the version policy; unspecified settings are kept."""
    current = config_manager.load_version_policy().to_dict()
    if versions:
        current["vulnerable_versions"] = versions
    if caret_min is not None:
        current["caret_min_patch"] = caret_min
    if caret_max is not None:
        current["caret_max_patch"] = caret_max
    if caret_requires_no_override is not None:
        current["caret_requires_no_override"] = caret_requires_no_override
    if current["caret_min_patch"] > current["caret_max_patch"]:
        raise typer.BadParameter("--caret-min must not exceed --caret-max.")

    if not config_manager.save_version_policy(VersionPolicy.from_dict(current)):
        console.print("[red]Failed to save policy.[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Policy saved.[/green]")


@policy_grp.command("reset")
def reset_policy():
    """Restore the built-in version policy."""
    if not config_manager.clear_version_policy():
        console.print("[red]Failed to reset policy.[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Policy reset to defaults.[/green]")
