"""Example: drive the tracking services directly (no Flask).

Controllers are thin; the work happens in the services wired by the container.
"""

import importlib

from config import get_settings_module

from src.worktime.worktime.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(agent_config=settings.AGENT_CONFIG)
    employee_id = settings.EMPLOYEE_ID or "emp-001"

    print(container.attendance_service.get_current_status(employee_id))
    print(container.idle_service.get_state())
    print(container.sync_service.get_sync_stats())


if __name__ == "__main__":
    main()
