from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_date_param
from ..common.validators import parse_bool_param
from ..container import Container
from ..core.exceptions import InvalidSequenceError, NotFoundError, ValidationError
from .schemas import ApprovalRequest, CreateTimeEntryRequest, parse_payload

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.time_entry_service

    def _error(message: str, status: int, *, details=None):
        body = {"error": message}
        if details is not None:
            body["details"] = details
        return jsonify(body), status

    def _validation_error(e: ValidationError):
        return _error("Validation failed", 400, details=e.issues)

    @app.route("/api/time-entries", methods=["GET"], endpoint="list_time_entries")
    def list_time_entries():
        try:
            entries = service.list_entries(
                employee_id=request.args.get("employeeId"),
                on_date=parse_date_param(request.args.get("date"), "date"),
                approved=parse_bool_param(request.args.get("approved"), "approved"),
            )
            return jsonify([e.to_dict() for e in entries]), 200
        except ValidationError as e:
            return _validation_error(e)
        except Exception:
            logger.exception("GET /api/time-entries failed")
            return _error("Failed to fetch time entries", 500)

    @app.route("/api/time-entries", methods=["POST"], endpoint="create_time_entry")
    def create_time_entry():
        try:
            payload = parse_payload(CreateTimeEntryRequest, request.get_json(silent=True))
            entry = service.create_entry(
                payload.employee_id,
                payload.type,
                timestamp=payload.timestamp,
                notes=payload.notes,
            )
            return jsonify(entry.to_dict()), 201
        except ValidationError as e:
            return _validation_error(e)
        except NotFoundError as e:
            return _error(str(e), 404)
        except InvalidSequenceError as e:
            return _error(str(e), 400)
        except Exception:
            logger.exception("POST /api/time-entries failed")
            return _error("Failed to create time entry", 500)

    @app.route("/api/time-entries/<int:entry_id>", methods=["GET"], endpoint="get_time_entry")
    def get_time_entry(entry_id: int):
        try:
            return jsonify(service.get_entry(entry_id).to_dict()), 200
        except NotFoundError as e:
            return _error(str(e), 404)
        except Exception:
            logger.exception("GET /api/time-entries/%s failed", entry_id)
            return _error("Failed to fetch time entry", 500)

    @app.route("/api/time-entries/<int:entry_id>/approval", methods=["PUT"], endpoint="approve_time_entry")
    def approve_time_entry(entry_id: int):
        try:
            payload = parse_payload(ApprovalRequest, request.get_json(silent=True))
            entry = service.set_approval(entry_id, approved=payload.approved, approved_by=payload.approved_by)
            return jsonify(entry.to_dict()), 200
        except ValidationError as e:
            return _validation_error(e)
        except NotFoundError as e:
            return _error(str(e), 404)
        except Exception:
            logger.exception("PUT /api/time-entries/%s/approval failed", entry_id)
            return _error("Failed to update time entry", 500)

    @app.route("/api/time-entries/status", methods=["GET"], endpoint="time_entry_status")
    def time_entry_status():
        """Current work state of an employee and which entry types may come next."""
        try:
            status = service.current_status(request.args.get("employeeId", ""))
            return jsonify(status.to_dict()), 200
        except ValidationError as e:
            return _validation_error(e)
        except NotFoundError as e:
            return _error(str(e), 404)
        except Exception:
            logger.exception("GET /api/time-entries/status failed")
            return _error("Failed to fetch time entry status", 500)

    @app.route("/api/time-entries/today", methods=["GET"], endpoint="time_entry_daily_summary")
    def time_entry_daily_summary():
        try:
            summary = service.daily_summary(
                request.args.get("employeeId", ""),
                on_date=parse_date_param(request.args.get("date"), "date"),
            )
            return jsonify(summary.to_dict()), 200
        except ValidationError as e:
            return _validation_error(e)
        except NotFoundError as e:
            return _error(str(e), 404)
        except Exception:
            logger.exception("GET /api/time-entries/today failed")
            return _error("Failed to fetch daily summary", 500)
