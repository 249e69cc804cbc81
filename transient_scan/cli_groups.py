"""Command groups for the transient-scan CLI.

  tscan policy  Vulnerable compiler-version policy
"""

from __future__ import annotations

import typer

# ── Policy group ─────────────────────────────────────────────
policy_grp = typer.Typer(
    help="⚖️  Policy: which compiler versions count as affected.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
