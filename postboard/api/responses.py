# postboard/api/responses.py
"""모든 API 응답이 공유하는 {success, data, error, pagination} 형식."""
from typing import Any, Optional

from flask import jsonify


def success_response(data: Any = None, status: int = 200, pagination: Optional[dict] = None,
                     message: Optional[str] = None):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    if message:
        body["message"] = message
    return jsonify(body), status


def error_response(message: str, status: int, error_code: Optional[str] = None, details: Any = None):
    body = {"success": False, "error": message}
    if error_code:
        body["error_code"] = error_code
    if details is not None:
        body["details"] = details
    return jsonify(body), status
