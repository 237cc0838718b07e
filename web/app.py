"""Flask REST API serving the fleet collections from a JSON file."""

import os
from pathlib import Path
from typing import Optional, Union

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from fleet.config import load_settings
from fleet.db import FileDatabase
from fleet.errors import FleetError
from fleet.log import get_logger, setup_logging

logger = get_logger(__name__)


def json_error(message: str, status: int):
    return jsonify({"error": message}), status


def create_app(data_file: Optional[Union[str, Path]] = None) -> Flask:
    """Build the API app backed by ``data_file`` (settings default otherwise)."""
    app = Flask(__name__)
    if data_file is None:
        data_file = load_settings().data_file
    app.config["DB"] = FileDatabase(data_file)
    app.config["DB"].ensure()

    def db() -> FileDatabase:
        return app.config["DB"]

    @app.before_request
    def preflight():
        if request.method == "OPTIONS":
            return "", 204
        return None

    @app.after_request
    def set_cors(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.errorhandler(FleetError)
    def handle_fleet_error(e: FleetError):
        if e.status_code == 400:
            return json_error(e.message, 400)
        return json_error("Not found", e.status_code or 404)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if e.code == 404:
            return json_error("Not found", 404)
        if e.code == 405:
            return json_error("Bad request", 400)
        return json_error(e.description or "Bad request", e.code or 400)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error serving %s %s", request.method, request.path)
        return json_error("Server error", 500)

    def json_body():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return None
        return payload

    @app.route("/api/<collection>", methods=["GET"])
    def list_records(collection: str):
        return jsonify(db().list(collection))

    @app.route("/api/<collection>/<record_id>", methods=["GET"])
    def get_record(collection: str, record_id: str):
        return jsonify(db().get(collection, record_id))

    @app.route("/api/<collection>", methods=["POST"])
    def create_record(collection: str):
        payload = json_body()
        if payload is None:
            return json_error("Invalid JSON", 400)
        rec = db().create(collection, payload)
        logger.info("Created %s/%s", collection, rec["id"])
        return jsonify(rec), 201

    @app.route("/api/<collection>/<record_id>", methods=["PUT"])
    def update_record(collection: str, record_id: str):
        payload = json_body()
        if payload is None:
            return json_error("Invalid JSON", 400)
        return jsonify(db().update(collection, record_id, payload))

    @app.route("/api/<collection>/<record_id>", methods=["DELETE"])
    def delete_record(collection: str, record_id: str):
        db().delete(collection, record_id)
        logger.info("Deleted %s/%s", collection, record_id)
        return "", 204

    return app


if __name__ == "__main__":
    settings = load_settings()
    setup_logging(settings.log_level)
    port = int(os.environ.get("API_PORT", "3000"))
    create_app(settings.data_file).run(debug=False, host="0.0.0.0", port=port)
