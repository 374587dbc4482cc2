"""Flask CLI wiring.

``flask seed ...`` is the only command group; it is attached by the app
factory through :func:`init_app`.
"""

from __future__ import annotations

from flask import Flask

from .seed import seed_cli

COMMAND_GROUPS = (seed_cli,)


def init_app(app: Flask) -> None:
    """Attach every TaskTracker command group to ``app.cli``."""
    for group in COMMAND_GROUPS:
        app.cli.add_command(group)
