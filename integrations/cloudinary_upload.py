"""
Cloudinary upload proxy for the HR Records Gateway.
Serves the public upload settings and forwards medical-receipt uploads.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from flask import Blueprint, current_app, jsonify, request

from config import CloudinarySettings
from utils.error_handlers import MethodNotAllowedError, ValidationError

# Setup logging
logger = logging.getLogger(__name__)

# Create blueprint
cloudinary_bp = Blueprint('cloudinary', __name__)

ANY_METHOD = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE']


def normalize_upload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reduce a Cloudinary upload response to the fields the front end uses.

    Args:
        data: Cloudinary upload API response

    Returns:
        Normalized upload summary
    """
    return {
        'url': data.get('secure_url'),
        'publicId': data.get('public_id'),
        'format': data.get('format'),
        'resourceType': data.get('resource_type'),
        'bytes': data.get('bytes'),
        'width': data.get('width'),
        'height': data.get('height'),
        'created': data.get('created_at')
    }


class CloudinaryUploader:
    """Forwards multipart uploads to Cloudinary using the unsigned upload preset."""

    def __init__(self, settings: CloudinarySettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def upload(self, fields: List[Tuple[str, str]], files: List[Tuple[str, Tuple]]) -> Tuple[Dict[str, Any], int]:
        """
        Upload files to Cloudinary.

        Args:
            fields: Form fields as (name, value) pairs
            files: Files as (field name, (filename, stream, mimetype)) pairs

        Returns:
            Tuple of (response body, status code)
        """
        if not any(name == 'upload_preset' for name, _ in fields):
            fields = fields + [('upload_preset', self.settings.upload_preset)]

        try:
            response = self.session.post(
                self.settings.upload_url,
                data=fields,
                files=files,
                timeout=self.settings.timeout
            )
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Cloudinary upload error: {str(e)}")
            return {'error': 'Upload failed', 'message': str(e)}, 500

        if not response.ok:
            logger.warning(f"Cloudinary upload failed with status {response.status_code}")
            return {'error': 'Upload failed', 'details': data}, response.status_code

        logger.info(f"Uploaded {data.get('bytes')} bytes to Cloudinary as {data.get('public_id')}")
        return normalize_upload(data), 200


@cloudinary_bp.route('/api/cloudinary/config', methods=ANY_METHOD)
def cloudinary_config():
    """
    Return the non-secret upload configuration.

    Returns:
        200: cloudName, uploadPreset, folder, apiUrl
        405: Method other than GET
    """
    if request.method != 'GET':
        raise MethodNotAllowedError(request.method, ['GET'])

    settings = current_app.extensions['cloudinary_uploader'].settings
    return jsonify(settings.to_public_dict()), 200


@cloudinary_bp.route('/api/cloudinary/upload', methods=ANY_METHOD)
def cloudinary_upload():
    """
    Proxy a multipart upload to Cloudinary.

    Expected form data:
        file: The file to upload
        upload_preset: optional, defaults to the configured preset
        any other Cloudinary upload parameter (folder, tags, ...)

    Returns:
        200: Normalized upload summary
        4xx/5xx: ``{"error": "Upload failed", "details": ...}`` with Cloudinary's status
        500: ``{"error": "Upload failed", "message": ...}`` when Cloudinary is unreachable or unreadable
        405: Method other than POST
    """
    if request.method != 'POST':
        raise MethodNotAllowedError(request.method, ['POST'])

    fields = list(request.form.items(multi=True))
    files = [
        (name, (storage.filename, storage.stream, storage.mimetype))
        for name, storage in request.files.items(multi=True)
    ]

    if not files and not any(name == 'file' for name, _ in fields):
        raise ValidationError('A file is required for upload')

    body, status_code = current_app.extensions['cloudinary_uploader'].upload(fields, files)
    return jsonify(body), status_code
