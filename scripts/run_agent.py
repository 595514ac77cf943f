"""Run the local agent API plus the host loop (network probe, idle sampling, sync)."""

from __future__ import annotations

import logging
import os
import sys
import threading
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.worktime.worktime.main import create_app

log = logging.getLogger("worktime.agent")


def host_loop(container, stop: threading.Event, interval: float) -> None:
    while not stop.wait(interval):
        try:
            container.network_service.check_network_status()
            container.idle_service.poll()
            container.sync_service.tick()
        except Exception:
            log.exception("Host loop iteration failed")


def main() -> None:
    app = create_app()
    container = app.extensions["worktime"]

    stop = threading.Event()
    interval = float(os.getenv("AGENT_POLL_SECONDS", "5"))
    worker = threading.Thread(target=host_loop, args=(container, stop, interval), daemon=True)
    worker.start()
    try:
        app.run(host="127.0.0.1", port=int(os.getenv("AGENT_PORT", "5005")), use_reloader=False)
    finally:
        stop.set()


if __name__ == "__main__":
    main()
