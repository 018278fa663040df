"""HTTP transport shim: method dispatch, status codes and CORS headers.

``lambda_handler`` adapts API Gateway / Vercel-style proxy events; the rest of
the module is transport-agnostic so it can be tested without a server.
"""

import asyncio
import json
import logging
from typing import Any, Mapping

from pydantic import ValidationError

from .papers.errors import InvalidRequestError
from .papers.models import SearchRequest
from .service import PaperAggregatorService

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}
ALLOWED_METHODS = ("GET", "POST")


def create_response(status_code: int, body: dict[str, Any] | None) -> dict[str, Any]:
    """Build a proxy-integration response with CORS headers."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json", **CORS_HEADERS},
        "body": "" if body is None else json.dumps(body),
    }


def error_response(status_code: int, message: str) -> dict[str, Any]:
    return create_response(status_code, {"success": False, "error": message})


def parse_event_body(body: Any) -> dict[str, Any]:
    """Decode a request body that may be a JSON string, a dict or empty."""
    if isinstance(body, dict):
        return body
    if isinstance(body, (str, bytes)):
        text = body.decode() if isinstance(body, bytes) else body
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidRequestError(f"Request body is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        return data
    return {}


async def handle_request(
    service: PaperAggregatorService,
    method: str,
    params: Mapping[str, Any] | None = None,
    body: Any = None,
) -> dict[str, Any]:
    """
    Serve one request and return a proxy-integration response.

    Query-string parameters and body fields are merged, body fields winning.
    Never raises: every failure becomes an error envelope.
    """
    method = (method or "GET").upper()
    if method == "OPTIONS":
        return create_response(200, None)
    if method not in ALLOWED_METHODS:
        return error_response(405, f"Method {method} not allowed")

    try:
        merged = {**(params or {}), **parse_event_body(body)}
        request = SearchRequest.from_params(merged)
        payload = await service.handle(request)
    except (InvalidRequestError, ValidationError) as e:
        logger.warning(f"Rejected request: {e}")
        return error_response(400, str(e))
    except Exception as e:
        logger.exception(f"Request failed: {e}")
        return error_response(500, str(e))

    return create_response(200, payload)


async def _serve_event(event: Mapping[str, Any]) -> dict[str, Any]:
    # Imported here so the transport helpers load without configuration
    from .config import create_service, load_config

    method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "GET")
    params = event.get("queryStringParameters") or {}

    if method.upper() == "OPTIONS":
        return create_response(200, None)

    async with create_service(load_config()) as service:
        return await handle_request(service, method, params, event.get("body"))


def lambda_handler(event, context):
    """Serverless entry point for proxy-integration events."""
    try:
        return asyncio.run(_serve_event(event or {}))
    except Exception as e:
        logger.exception(f"Failed to serve event: {e}")
        return error_response(500, str(e))
