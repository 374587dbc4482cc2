"""Application factory wiring Flask extensions, auth settings and CLI."""

from __future__ import annotations

from flask import Flask

from tasktracker.core.config import BaseConfig, get_config
from tasktracker.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Raises :class:`~tasktracker.services._shared.errors.ConfigurationError`
    when token settings are invalid; nothing is served in that case.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from tasktracker.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from tasktracker import cli as app_cli

    app_cli.init_app(app)

    return app
