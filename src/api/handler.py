"""
Serverless entry point: adapts a function-invocation event to the route
handlers and wraps the result in a {statusCode, headers, body} envelope.

Accepts REST-style events (httpMethod, path, queryStringParameters) as sent
by Netlify Functions and API Gateway v1, as well as HTTP API v2 events
(rawPath, requestContext.http.method).
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from src.api.handlers import ProxyRequest, dispatch
from src.config import ConfigError, DEFAULT_FUNCTION_BASE_PATH, Settings, init_settings

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Cache-Control": "no-store",
}

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Settings for this process, loaded and validated on first use."""
    global _settings
    if _settings is None:
        _settings = init_settings()
    return _settings


def _strip_base_path(path: str, base_path: str) -> str:
    if base_path and path.startswith(base_path):
        path = path[len(base_path):]
    return path or "/"


def parse_event(event: Mapping[str, Any], base_path: str = "") -> ProxyRequest:
    """Reduce an invocation event to a ProxyRequest."""
    http = (event.get("requestContext") or {}).get("http") or {}
    method = event.get("httpMethod") or http.get("method") or "GET"
    path = event.get("path") or event.get("rawPath") or "/"
    query = event.get("queryStringParameters") or {}

    return ProxyRequest(
        method=method.upper(),
        path=_strip_base_path(path, base_path),
        query={k: v for k, v in query.items() if v is not None},
    )


def handler(event: Mapping[str, Any], context: Any = None,
            settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Handle one invocation.

    OPTIONS short-circuits with 200 and an empty body; every other request
    is dispatched and serialized as JSON. CORS and no-store headers are
    attached to all responses, including the 500 returned when the process
    configuration cannot be loaded.
    """
    headers = dict(CORS_HEADERS)

    config_error = None
    if settings is None:
        try:
            settings = get_settings()
        except ConfigError as e:
            logger.error("Invalid configuration: %s", e)
            config_error = e

    base_path = settings.function_base_path if settings else DEFAULT_FUNCTION_BASE_PATH
    request = parse_event(event, base_path)
    if request.method == "OPTIONS":
        return {"statusCode": 200, "headers": headers, "body": ""}

    headers["Content-Type"] = "application/json"
    if config_error is not None:
        return {
            "statusCode": 500,
            "headers": headers,
            "body": json.dumps({"error": str(config_error)}),
        }

    status, body = dispatch(request, settings)
    return {
        "statusCode": status,
        "headers": headers,
        "body": json.dumps(body),
    }
