"""
Flask routes for Image Dup Checker.

Contains the JSON endpoints a presentation layer polls for progress and
results, plus the reveal item action.
"""

from __future__ import annotations

import logging
from datetime import datetime

from flask import Blueprint, jsonify, request

from ..errors import CredentialError, RevealActionFailed
from ..reveal import remember_directory, reveal_image
from ..scanner import get_extractor
from ..state import scan_state
from ..user_config import get_user_config
from ..utils import validators
from .orchestrator import start_scan

# Create blueprint for routes
api = Blueprint('api', __name__)

# Module logger
_logger = logging.getLogger(__name__)


@api.route('/api/scan', methods=['POST'])
def api_scan():
    """Start a new scan in the background, superseding any running scan."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body required'}), 400

    config = get_user_config()
    directory = str(data.get('directory', '')).strip()
    threshold = data.get('threshold', config.default_threshold)
    extractor_name = data.get('extractor', config.default_extractor)

    is_valid, error = validators.validate_scan_params(
        directory=directory,
        threshold=threshold,
        extractor=extractor_name,
    )
    if not is_valid:
        return jsonify({'error': error}), 400

    options = config.extractor_options() if extractor_name == config.default_extractor else {}

    try:
        remember_directory(directory)
    except CredentialError as e:
        _logger.warning(f"Could not store folder credential: {e}")

    orchestrator = start_scan(
        scan_state,
        directory,
        threshold=float(threshold),
        extractor=get_extractor(extractor_name, **options),
        thumbnail_size=config.thumbnail_size,
    )

    return jsonify({'status': 'started', 'generation': orchestrator.generation})


@api.route('/api/cancel', methods=['POST'])
def api_cancel():
    """Cancel the current scan."""
    if scan_state.cancel():
        return jsonify({'status': 'cancelled'})
    return jsonify({'status': 'no_scan_running'})


@api.route('/api/ping')
def api_ping():
    """Simple endpoint for connection monitoring."""
    return jsonify({'status': 'ok', 'time': datetime.now().isoformat()})


@api.route('/api/status')
def api_status():
    """Return current scan status and progress."""
    return jsonify(scan_state.to_status_dict())


@api.route('/api/pairs')
def api_pairs():
    """Return the ranked similar pairs of the last completed scan."""
    return jsonify(scan_state.to_results_dict())


@api.route('/api/reveal', methods=['POST'])
def api_reveal():
    """Show one image of a pair in the system file browser."""
    data = request.get_json(silent=True) or {}
    image_id = str(data.get('imageId', '')).strip()
    if not image_id:
        return jsonify({'error': 'No image specified'}), 400

    record = scan_state.find_image(image_id)
    if record is None:
        return jsonify({'error': 'Image not found in current results'}), 404

    try:
        path = reveal_image(record)
    except RevealActionFailed as e:
        _logger.warning(f"Reveal failed for {record.source_path}: {e}")
        return jsonify({'error': str(e)}), 409

    return jsonify({'status': 'revealed', 'path': path})


__all__ = ['api']
