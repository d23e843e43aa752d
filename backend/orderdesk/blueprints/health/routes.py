"""
Health check routes for monitoring probes.

These endpoints are unauthenticated and bypass the store middleware.
"""

import time

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from orderdesk.extensions import db

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
def health():
    """Liveness: the process answers."""
    return jsonify({
        "status": "healthy",
        "timestamp": time.time(),
    }), 200


@health_bp.route("/db", methods=["GET"])
def health_db():
    """
    Readiness: the database answers a trivial query.

    Returns 503 with the elapsed time when it does not.
    """
    started = time.time()

    try:
        db.session.execute(text("SELECT 1")).close()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning("Database health check failed", exc_info=True)
        return jsonify({
            "status": "unhealthy",
            "database": "disconnected",
            "response_time_ms": round((time.time() - started) * 1000, 2),
        }), 503

    return jsonify({
        "status": "healthy",
        "database": "connected",
        "response_time_ms": round((time.time() - started) * 1000, 2),
    }), 200
