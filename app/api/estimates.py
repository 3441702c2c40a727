"""
Cost Estimate Routes Blueprint

- POST /api/estimate/renovation   - renovation estimate in INR
- POST /api/estimate/construction - new construction estimate in INR
"""

import logging
from flask import Blueprint, request, jsonify, current_app

from services.estimation_service import EstimationService
from validators import validate_payload, RenovationEstimate, ConstructionEstimate

logger = logging.getLogger(__name__)

# Create blueprint
estimates_bp = Blueprint('estimates_bp', __name__)


def get_estimation_service():
    return EstimationService(current_app.ai_service)


@estimates_bp.route('/api/estimate/renovation', methods=['POST'])
def estimate_renovation():
    payload = validate_payload(RenovationEstimate, request.get_json(silent=True))
    return jsonify(get_estimation_service().estimate_renovation(payload.to_api()))


@estimates_bp.route('/api/estimate/construction', methods=['POST'])
def estimate_construction():
    payload = validate_payload(ConstructionEstimate, request.get_json(silent=True))
    return jsonify(get_estimation_service().estimate_construction(payload.to_api()))
