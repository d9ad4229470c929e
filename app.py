"""
PoolGuy CV Service - Flask Application
Computer Vision service for test strip type detection
"""

from flask import Flask, request, jsonify, g
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import cv2
import numpy as np
import logging
import time
import uuid
from dotenv import load_dotenv
import os
from typing import Dict, Optional, Tuple

# Load environment variables before config modules read them
load_dotenv()

from config.strip_type_config import get_strip_type_config  # noqa: E402
from services.interfaces import DetectStripTypeData, ErrorResponse  # noqa: E402
from services.strip_type import StripTypeDetectionService  # noqa: E402
from services.utils.debug import DebugContext  # noqa: E402
from utils.image_loader import image_name_from_path  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create Flask app
app = Flask(__name__)
CORS(app)  # Enable CORS for Laravel integration

# Determine if we're in production mode
is_production = os.getenv('FLASK_DEBUG', 'False').lower() != 'true'

# Request ID middleware for tracing
@app.before_request
def generate_request_id():
    """Generate or use existing request ID for tracing."""
    g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
    logger.debug(f'[Request {g.request_id}] {request.method} {request.path}')

@app.after_request
def add_request_id_header(response):
    """Add request ID to response headers."""
    if hasattr(g, 'request_id'):
        response.headers['X-Request-ID'] = g.request_id
    return response


def sanitize_error_message(error: Exception) -> str:
    """
    Sanitize error messages for production.

    In production, returns generic messages to prevent information disclosure.
    In development, returns full error details for debugging.

    Args:
        error: Exception object

    Returns:
        Sanitized error message string
    """
    if is_production:
        return "An internal error occurred. Please try again later."
    else:
        return str(error)

# Rate limiting configuration
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=["200 per hour", "20 per minute"],
    storage_uri="memory://",  # In-memory storage (use Redis in production for multi-instance)
    headers_enabled=True
)

# Initialize services
strip_type_config = get_strip_type_config()
strip_type_service = StripTypeDetectionService(strip_type_config)


@app.errorhandler(429)
def rate_limit_exceeded(error):
    """Return rate limit errors in the service's JSON error format."""
    body: ErrorResponse = {
        'success': False,
        'error': f'Rate limit exceeded: {error.description}',
        'error_code': 'RATE_LIMITED'
    }
    return jsonify(body), 429


@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'poolguy-cv-service',
        'opencv_version': cv2.__version__,
        'numpy_version': np.__version__
    })


def validate_detect_strip_type_request(data: Dict) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate detect strip type request.

    Args:
        data: Request JSON data

    Returns:
        Tuple of (is_valid, error_message, error_code)
    """
    if not isinstance(data, dict):
        return False, 'Request must be JSON object', 'INVALID_PARAMETER'

    if 'image_path' not in data:
        return False, 'image_path is required', 'MISSING_PARAMETER'

    if not isinstance(data['image_path'], str) or not data['image_path'].strip():
        return False, 'image_path must be a non-empty string', 'INVALID_PARAMETER'

    if 'debug' in data and not isinstance(data['debug'], bool):
        return False, 'debug must be a boolean', 'INVALID_PARAMETER'

    return True, None, None


@app.route('/detect-strip-type', methods=['POST'])
@limiter.limit("15 per minute")  # Lightweight sampling, no model inference
def detect_strip_type():
    """
    Classify a test strip as a three-pad or six-pad product.

    Pipeline: Image → Axis Samples → Segmenters → Candidate Evaluation → Classification

    Request (JSON):
    - image_path: Path to test strip image (S3 URL or local path)
    - debug: Include the detection trace in the response (default: false)

    Returns:
    - padCount: Number of pads found (0-6)
    - inferredType: "three-pad", "six-pad" or "unknown"
    - confidence: 0.0-1.0 (0 when detection failed)
    - processing_time_ms: Processing time
    """
    start_time = time.time()

    try:
        data = request.get_json(silent=True)

        if not data:
            return jsonify({
                'success': False,
                'error': 'No JSON data provided',
                'error_code': 'MISSING_PARAMETER'
            }), 400

        # Validate request
        is_valid, error_msg, error_code = validate_detect_strip_type_request(data)
        if not is_valid:
            return jsonify({
                'success': False,
                'error': error_msg,
                'error_code': error_code
            }), 400

        image_path = data['image_path']
        debug_requested = data.get('debug', False)

        request_id = getattr(g, 'request_id', 'unknown')
        image_name = image_name_from_path(image_path)
        logger.info(f'[Request {request_id}] Detecting strip type: {image_name}')

        debug = None
        if debug_requested:
            debug = DebugContext(enabled=True, image_name=image_name)

        # Detection failures are not request errors: they come back as the degenerate result
        detection = strip_type_service.detect_strip_type(image_path, debug=debug)

        response_data: DetectStripTypeData = detection.to_dict()
        response_data['source'] = detection.source.value if detection.source else None
        response_data['processing_time_ms'] = int((time.time() - start_time) * 1000)
        if debug:
            response_data['debug'] = debug.get_summary()

        logger.info(
            f'[Request {request_id}] Strip type: {detection.inferred_type.value} '
            f'({detection.pad_count} pads, confidence {detection.confidence:.2f})'
        )

        return jsonify({
            'success': True,
            'data': response_data
        })

    except Exception as e:
        request_id = getattr(g, 'request_id', 'unknown')
        logger.error(f'[Request {request_id}] Error in detect_strip_type: {str(e)}', exc_info=True)
        return jsonify({
            'success': False,
            'error': sanitize_error_message(e),
            'error_code': 'INTERNAL_ERROR'
        }), 500


if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'

    logger.info(f'Starting PoolGuy CV Service on port {port}')
    app.run(host='0.0.0.0', port=port, debug=debug)
