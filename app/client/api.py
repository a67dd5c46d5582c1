"""
HTTP client for the OKR Tracker API that remembers who is logged in.

Token, session user and selected period live in a SafeStorage so a client
process can pick its session back up after a restart.
"""
import json
import logging
from typing import Any, Dict, Optional

import requests

from app.client.storage import FileStore, SafeStorage
from app.core.config import settings

logger = logging.getLogger(__name__)

TOKEN_KEY = "okr_auth_token"
SESSION_USER_KEY = "okr_session_user"
SELECTED_PERIOD_KEY = "okr_selected_period"


class OKRClientError(Exception):
    """Non-2xx answer from the API, carrying the decoded error envelope."""

    def __init__(self, status_code: int, message: str, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body


class OKRClient:
    def __init__(self, base_url: str = "http://localhost:8000", storage: Optional[SafeStorage] = None,
                 session=None, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = settings.api_prefix
        if storage is None:
            store = FileStore(settings.client_storage_path)
            storage = SafeStorage(lambda: store)
        self.storage = storage
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    # --- Session state -----------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(TOKEN_KEY)

    @property
    def current_user(self) -> Optional[Dict[str, Any]]:
        return self._load_json(SESSION_USER_KEY)

    @property
    def selected_period(self) -> Optional[Dict[str, Any]]:
        return self._load_json(SELECTED_PERIOD_KEY)

    def select_period(self, quarter: str, year: int) -> Dict[str, Any]:
        period = {"quarter": quarter, "year": year}
        self.storage.set(SELECTED_PERIOD_KEY, json.dumps(period))
        return period

    def is_authenticated(self) -> bool:
        return self.token is not None

    def _load_json(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.storage.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding corrupt session data for key: {key}")
            self.storage.remove(key)
            return None

    def _store_session(self, token: str, user: Dict[str, Any]):
        self.storage.set(TOKEN_KEY, token)
        self.storage.set(SESSION_USER_KEY, json.dumps(user))

    def clear_session(self):
        self.storage.remove(SESSION_USER_KEY)
        self.storage.remove(TOKEN_KEY)

    # --- Transport ---------------------------------------------------------

    def _build_url(self, endpoint: str) -> str:
        if endpoint.startswith("http"):
            return endpoint
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.base_url}{self.api_prefix}{endpoint}"

    def request(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None,
                params: Optional[Dict[str, Any]] = None) -> Any:
        headers = {"Accept": "application/json"}
        token = self.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = self._build_url(endpoint)
        response = self.session.request(
            method, url, json=data, params=params, headers=headers, timeout=self.timeout
        )

        try:
            body = response.json() if response.text else None
        except ValueError:
            body = response.text

        if response.status_code == 401:
            # Expired or revoked token: drop the whole session
            self.clear_session()
        if response.status_code >= 400:
            raise OKRClientError(response.status_code, self._error_message(body, response), body)
        return body

    @staticmethod
    def _error_message(body: Any, response) -> str:
        if isinstance(body, dict):
            errors = body.get("errors")
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                return errors[0].get("msg") or "Request failed"
            if body.get("detail"):
                return str(body["detail"])
        return getattr(response, "reason", None) or getattr(response, "reason_phrase", None) or "Request failed"

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", endpoint, data=data)

    def put(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.request("PUT", endpoint, data=data)

    def patch(self, endpoint: str, data: Dict[str, Any]) -> Any:
        return self.request("PATCH", endpoint, data=data)

    def delete(self, endpoint: str) -> Any:
        return self.request("DELETE", endpoint)

    # --- Auth --------------------------------------------------------------

    def login(self, email: str, password: str) -> Dict[str, Any]:
        result = self.post("/auth/login", {"email": email, "password": password})
        self._store_session(result["access_token"], result["user"])
        return result["user"]

    def register(self, name: str, email: str, password: str, **extra) -> Dict[str, Any]:
        payload = {"name": name, "email": email, "password": password, **extra}
        result = self.post("/auth/register", payload)
        self._store_session(result["access_token"], result["user"])
        return result["user"]

    def logout(self):
        self.clear_session()

    def refresh_user(self) -> Optional[Dict[str, Any]]:
        """Re-reads the session user from the server; a 401 ends the session."""
        if not self.token:
            return None
        user = self.get("/auth/me")
        self.storage.set(SESSION_USER_KEY, json.dumps(user))
        return user

    # --- Resources ---------------------------------------------------------

    def _period_params(self, quarter: Optional[str], year: Optional[int]) -> Dict[str, Any]:
        period = self.selected_period or {}
        params = {
            "quarter": quarter or period.get("quarter"),
            "year": year or period.get("year"),
        }
        return {k: v for k, v in params.items() if v is not None}

    def list_okrs(self, quarter: Optional[str] = None, year: Optional[int] = None, **filters) -> Any:
        params = self._period_params(quarter, year)
        params.update({k: v for k, v in filters.items() if v is not None})
        return self.get("/okrs/", params=params)

    def create_okr(self, data: Dict[str, Any]) -> Any:
        return self.post("/okrs/", data)

    def list_my_okrs(self, quarter: Optional[str] = None, year: Optional[int] = None) -> Any:
        return self.get("/my-okrs/", params=self._period_params(quarter, year))

    def create_my_okr(self, data: Dict[str, Any]) -> Any:
        return self.post("/my-okrs/", data)

    def list_tasks(self, **filters) -> Any:
        return self.get("/tasks/", params={k: v for k, v in filters.items() if v is not None})

    def update_task_status(self, task_id: int, status: str) -> Any:
        return self.patch(f"/tasks/{task_id}/status", {"status": status})

    def list_kpis(self, **filters) -> Any:
        return self.get("/kpis/", params={k: v for k, v in filters.items() if v is not None})

    def update_kpi_progress(self, kpi_id: int, current_value: float) -> Any:
        return self.patch(f"/kpis/{kpi_id}/progress", {"current_value": current_value})

    def report_summary(self, quarter: Optional[str] = None, year: Optional[int] = None) -> Any:
        return self.get("/reports/summary", params=self._period_params(quarter, year))
