from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    sync = container.sync_service
    network = container.network_service

    @app.route("/api/tracker/sync", methods=["GET"], endpoint="tracker_sync_state")
    @json_endpoint
    def sync_state():
        return ok(
            {
                "progress": sync.get_current_progress(),
                "stats": sync.get_sync_stats(),
                "queue": sync.get_queue(),
                "network": network.get_network_state(),
            }
        )

    @app.route("/api/tracker/sync/force", methods=["POST"], endpoint="tracker_sync_force")
    @json_endpoint
    def sync_force():
        return ok(sync.force_sync_now())

    @app.route("/api/tracker/sync/retry", methods=["POST"], endpoint="tracker_sync_retry")
    @json_endpoint
    def sync_retry():
        return ok(sync.retry_failed_items())

    @app.route("/api/tracker/sync/items/<item_id>/abandon", methods=["POST"], endpoint="tracker_sync_abandon")
    @json_endpoint
    def sync_abandon(item_id: str):
        sync.abandon_item(item_id)
        return ok({"itemId": item_id})

    @app.route("/api/tracker/sync/auto", methods=["POST"], endpoint="tracker_sync_auto")
    @json_endpoint
    def sync_auto():
        body = request.get_json(silent=True) or {}
        sync.set_auto_sync_enabled(bool(body.get("enabled", True)))
        return ok({"enabled": bool(body.get("enabled", True))})

    @app.route("/api/tracker/network/check", methods=["POST"], endpoint="tracker_network_check")
    @json_endpoint
    def network_check():
        network.check_network_status()
        return ok(network.get_network_state())
