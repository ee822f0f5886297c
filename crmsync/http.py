# crmsync/http.py
"""
Piezas HTTP comunes a todos los endpoints de sync:
  - cabeceras CORS y respuesta al pre-flight
  - verificación opcional de la credencial de servicio
  - fail_safe: frontera única que convierte errores en JSON
"""
from __future__ import annotations

import hmac
from functools import wraps
from typing import Any, Optional

from flask import current_app, jsonify, make_response, request

from crmsync.config import Settings
from crmsync.exceptions import AuthError, SyncError, ValidationError

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

INTERNAL_ERROR = "Internal server error"


def get_settings() -> Settings:
    return current_app.extensions["crmsync"]


def add_cors_headers(response):
    for k, v in CORS_HEADERS.items():
        response.headers.setdefault(k, v)
    return response


def preflight_response():
    return make_response("ok", 200)


def json_body() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be valid JSON")
    return data


def _presented_key() -> Optional[str]:
    auth = (request.headers.get("Authorization") or "").strip()
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return (request.headers.get("apikey") or "").strip() or None


def check_service_key(settings: Settings) -> None:
    """Sin SERVICE_ROLE_KEY configurada no se exige nada."""
    expected = settings.service_role_key
    if not expected:
        return
    presented = _presented_key()
    if not presented or not hmac.compare_digest(presented.encode(), expected.encode()):
        raise AuthError("Missing or invalid service key")


def error_response(message: str, status: int, success_flag: bool = False):
    body = {"error": message}
    if success_flag:
        body = {"success": False, "error": message}
    return jsonify(body), status


def fail_safe(always_sanitize: bool = False, success_flag: bool = False, public: bool = False):
    """
    Decorador para endpoints de sync.

    - OPTIONS -> "ok" (las cabeceras CORS las pone el after_request)
    - comprueba la credencial de servicio (salvo public=True: login de admin)
    - SyncError -> su status con el mensaje público (o el detalle crudo si
      EXPOSE_ERROR_DETAILS está activo y el endpoint lo permite)
    - cualquier otra excepción -> 500
    El detalle completo queda siempre en el log del servidor.
    """

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if request.method == "OPTIONS":
                return preflight_response()

            settings = get_settings()
            expose = settings.expose_error_details and not always_sanitize
            try:
                if not public:
                    check_service_key(settings)
                return f(*args, **kwargs)
            except SyncError as e:
                log = current_app.logger.error if e.status_code >= 500 else current_app.logger.warning
                log("%s failed (%s): %s", request.path, type(e).__name__, e.detail)
                message = e.detail if expose else e.public_message
                return error_response(message, e.status_code, success_flag)
            except Exception as e:
                current_app.logger.exception("Unexpected error in %s", request.path)
                message = str(e) if expose else INTERNAL_ERROR
                return error_response(message, 500, success_flag)

        return wrapper

    return decorator


def register_error_handlers(app) -> None:
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not Found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method Not Allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": INTERNAL_ERROR}), 500
