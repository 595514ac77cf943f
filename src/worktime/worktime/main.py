from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .attendance.controller import register as register_attendance
from .capture.controller import register as register_capture
from .idle.controller import register as register_idle
from .settings.controller import register as register_settings
from .sync.controller import register as register_sync

log = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["EMPLOYEE_ID"] = getattr(settings, "EMPLOYEE_ID", None)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    agent_config = getattr(settings, "AGENT_CONFIG")
    log.info("Starting worktime agent (settings=%s, server=%s)", settings_module, agent_config.get("api_base_url"))

    container = build_container(agent_config=agent_config)
    app.extensions["worktime"] = container

    register_attendance(app, container)
    register_idle(app, container)
    register_settings(app, container)
    register_sync(app, container)
    register_capture(app, container)

    return app
