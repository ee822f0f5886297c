# crmsync/services/sync_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class SyncClientError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ActivitySyncClient:
    """
    Cliente sencillo para los endpoints de sync.
    Lo usan los scripts de instrumentación (batch) para empujar actividad.
    No reintenta: si una llamada falla, el que llama decide.
    """

    def __init__(
        self,
        base_url: str,
        service_key: Optional[str] = None,
        timeout: float = 30.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if service_key:
            headers["Authorization"] = f"Bearer {service_key}"
            headers["apikey"] = service_key
        self._http = http or httpx.Client(timeout=timeout)
        self._headers = headers

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ActivitySyncClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ───────────────────────────────
    # LOW LEVEL
    # ───────────────────────────────
    def _post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self._http.post(url, json=payload or {}, headers=self._headers)
        except httpx.HTTPError as e:
            raise SyncClientError(f"POST {path} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {"error": resp.text}

        if not isinstance(body, dict):
            body = {"data": body}

        if resp.status_code >= 400:
            raise SyncClientError(
                f"POST {path} -> {resp.status_code}: {body.get('error') or resp.text}",
                status_code=resp.status_code,
            )
        return body

    # ───────────────────────────────
    # ENDPOINTS
    # ───────────────────────────────
    def sync_user_activity(self, email: str, activity: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/sync-user-activity", {"email": email, "activityData": activity})

    def sync_activity_logs(self, email: str, logs: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._post("/sync-activity-logs", {"email": email, "activityLogs": logs})

    def check_trial_status(self) -> Dict[str, Any]:
        return self._post("/check-trial-status")


def push_export(client: ActivitySyncClient, users: List[Dict[str, Any]]) -> Dict[str, int]:
    """
    Empuja un export de usuarios:
      [{"email": ..., "activity": {...}, "activity_logs": [...]}, ...]
    Un usuario que falla se cuenta como skipped y se sigue con el resto.
    """
    synced = 0
    skipped = 0

    for user in users:
        email = (user.get("email") or "").strip()
        activity = user.get("activity")
        logs = user.get("activity_logs") or []
        if not email or (not activity and not logs):
            skipped += 1
            continue

        try:
            if activity:
                client.sync_user_activity(email, activity)
            if logs:
                client.sync_activity_logs(email, logs)
        except SyncClientError as e:
            logger.warning("Skipping %s: %s", email, e)
            skipped += 1
            continue

        synced += 1

    logger.info("push_export done: synced=%d skipped=%d total=%d", synced, skipped, len(users))
    return {"synced": synced, "skipped": skipped, "total": len(users)}
