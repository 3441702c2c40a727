"""
Quote Routes Blueprint

Quotes belong to a project; only the project owner can see or change them.
- GET   /api/quotes          - quotes across the caller's projects
- GET   /api/quotes/<id>     - single quote
- POST  /api/quotes/request  - fan out one pending quote per contractor
- PATCH /api/quotes/<id>     - update status/amount/timeline
"""

import logging
from flask import Blueprint, request, jsonify, current_app
from werkzeug.exceptions import NotFound

from auth import login_required, get_current_user, load_authorized_project, load_authorized_quote
from services.storage import StorageError
from validators import validate_payload, QuoteRequest, QuoteUpdate

logger = logging.getLogger(__name__)

# Create blueprint
quotes_bp = Blueprint('quotes_bp', __name__)


def get_storage():
    return current_app.storage


@quotes_bp.route('/api/quotes', methods=['GET'])
@login_required
def list_quotes():
    storage = get_storage()
    user = get_current_user()
    quotes = []
    for project in storage.get_projects_by_user_id(user['id']):
        quotes.extend(storage.get_quotes_by_project_id(project['id']))
    return jsonify(quotes)


@quotes_bp.route('/api/quotes/<quote_id>', methods=['GET'])
@login_required
def get_quote(quote_id):
    return jsonify(load_authorized_quote(quote_id, 'read'))


@quotes_bp.route('/api/quotes/request', methods=['POST'])
@login_required
def request_quotes():
    """Create one pending quote per requested contractor"""
    storage = get_storage()
    payload = validate_payload(QuoteRequest, request.get_json(silent=True))
    project = load_authorized_project(payload.project_id, 'request_quotes')

    missing = [cid for cid in payload.contractor_ids if storage.get_contractor(cid) is None]
    if missing:
        raise NotFound(f"Contractor not found: {', '.join(missing)}")

    description = payload.message or f"Quote request for {project['name']}"
    created = []
    try:
        for contractor_id in payload.contractor_ids:
            created.append(storage.create_quote({
                'projectId': project['id'],
                'contractorId': contractor_id,
                'status': 'pending',
                'description': description,
            }))
    except StorageError:
        logger.error(
            f"Quote request for project {project['id']} failed after {len(created)} quotes, rolling back"
        )
        for quote in created:
            try:
                storage.delete_quote(quote['id'])
            except StorageError as cleanup_error:
                logger.error(f"Failed to remove quote {quote['id']} during rollback: {cleanup_error}")
        raise

    logger.info(f"Requested {len(created)} quotes for project {project['id']}")
    return jsonify(created), 201


@quotes_bp.route('/api/quotes/<quote_id>', methods=['PATCH'])
@login_required
def update_quote(quote_id):
    load_authorized_quote(quote_id, 'update')
    payload = validate_payload(QuoteUpdate, request.get_json(silent=True))

    quote = get_storage().update_quote(quote_id, payload.to_api(partial=True))
    if quote is None:
        raise NotFound("Quote not found")
    return jsonify(quote)
