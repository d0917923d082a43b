from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container_from_settings
from .reconciliation.controller import register as register_reconciliation


def load_settings():
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def configure_logging(settings, *, stream=None) -> None:
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(message)s",
        stream=stream,
    )


def create_app(container: Optional[Container] = None) -> Flask:
    settings = load_settings()
    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    configure_logging(settings)

    container = container or build_container_from_settings(settings)
    register_reconciliation(app, container)
    return app
