"""
Dashboard routes.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.dashboard.services import DashboardService
from orderdesk.blueprints.dashboard.schemas import SummaryQuerySchema, SummaryResponseSchema
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import require_permission, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")


@dashboard_bp.route("/summary", methods=["GET"])
@require_permission(Modules.DASHBOARD, Actions.READ)
def summary():
    """
    Store summary.

    Query parameters:
        date_from: First delivery date (YYYY-MM-DD, optional)
        date_to: Last delivery date (YYYY-MM-DD, optional)
    """
    try:
        params = {k: v for k, v in request.args.items() if k in ("date_from", "date_to") and v}
        data = SummaryQuerySchema().load(params)
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    result = DashboardService.summary(current_context(), data["date_from"], data["date_to"])
    return jsonify(SummaryResponseSchema().dump(result)), 200
