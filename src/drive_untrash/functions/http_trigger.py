"""HTTP trigger blueprint — health check and on-demand restore endpoints."""

import json
import logging

import azure.functions as func

from drive_untrash import __version__
from drive_untrash.config import load_config
from drive_untrash.orchestration.restorer import trash_restorer_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


def _error_response(status_code: int, message: str) -> func.HttpResponse:
    body = json.dumps({"status": "error", "message": message})
    return func.HttpResponse(body, status_code=status_code, mimetype="application/json")


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint. Returns service status and version."""
    logger.info("[health_check] health check requested")

    try:
        body = json.dumps({"status": "ok", "version": __version__})
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        return _error_response(500, "Internal server error")


@bp.route(route="restore", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def restore_trigger(req: func.HttpRequest) -> func.HttpResponse:
    """Restore endpoint — runs a restore on demand and returns the run report.

    Expects a JSON body ``{"folders": ["<id>", ...]}`` with at least one
    folder id. The run is synchronous and bounded by the host's
    ``functionTimeout``, so whole-drive walks are left to the CLI. Requires
    a function key and a cached token, since no browser flow can run here.
    """
    logger.info("[restore_trigger] restore requested")

    try:
        payload = req.get_json()
    except ValueError:
        return _error_response(400, "Request body must be JSON")
    folders = payload.get("folders") if isinstance(payload, dict) else None
    if not isinstance(folders, list) or not all(isinstance(f, str) and f.strip() for f in folders):
        return _error_response(400, "'folders' must be a list of non-blank folder ids")
    if not folders:
        return _error_response(400, "At least one folder id is required")

    try:
        config = load_config()
        restorer = trash_restorer_from_config(config, interactive=False)
        report = restorer.run(folders)

        logger.info(
            "[restore_trigger] restore complete; folders_processed:%d;items_restored:%d",
            report.folders_processed,
            report.items_restored,
        )
        body = json.dumps({"status": "ok", **report.to_dict()})
        return func.HttpResponse(body, status_code=200, mimetype="application/json")

    except Exception:
        logger.error("[restore_trigger] restore failed", exc_info=True)
        return _error_response(500, "Internal server error")
