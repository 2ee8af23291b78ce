# timelog/client/api.py
#
# requests-based client for the /api endpoints. Every call returns the
# envelope's `data` (plus `meta` where the endpoint has one) and raises
# ApiError for non-2xx answers or transport failures.

import os
import logging
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or os.getenv("TIMELOG_API_BASE_URL", "")).rstrip("/")
        self.token = token or os.getenv("TIMELOG_APP_TOKEN") or None
        self.session = session or requests.Session()

    def set_token(self, token: Optional[str]):
        self.token = token or None

    def request(self, method: str, path: str, params: Dict = None, json: Any = None,
                token: Optional[str] = None) -> Dict:
        if not self.base_url:
            raise ApiError("API_BASE_URL is not configured")

        headers = {"Content-Type": "application/json"}
        bearer = token or self.token
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"

        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url} params={params}")
        try:
            resp = self.session.request(method, url, headers=headers, params=params, json=json)
        except requests.RequestException as e:
            raise ApiError(str(e))

        try:
            body = resp.json() if resp.content else {}
        except ValueError:
            body = {}

        if not resp.ok:
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(message or f"Request failed: {resp.status_code}", resp.status_code)

        return body

    # entries
    def fetch_entries(self, date_str: str) -> List[Dict]:
        return self.request("GET", "/api/entries", params={"date": date_str}).get("data") or []

    def fetch_previous(self, date_str: str, start_time: str) -> Optional[Dict]:
        params = {"date": date_str, "startTime": start_time}
        return self.request("GET", "/api/entries/previous", params=params).get("data")

    def create_entry(self, payload: Dict) -> Optional[Dict]:
        return self.request("POST", "/api/entries", json=payload).get("data")

    def update_entry(self, entry_id: str, payload: Dict) -> Optional[Dict]:
        return self.request("PUT", f"/api/entries/{entry_id}", json=payload).get("data")

    def delete_entry(self, entry_id: str) -> None:
        self.request("DELETE", f"/api/entries/{entry_id}")

    # analysis
    def analyze_day(self, date_str: str) -> Dict:
        return self.request("POST", "/api/analyze", json={"date": date_str}).get("data") or {}

    def fetch_documents(self, **query) -> Dict:
        # date / from / to / q / page / pageSize
        params = {k: v for k, v in query.items() if v}
        body = self.request("GET", "/api/analysis-documents", params=params)
        return {"data": body.get("data") or [], "meta": body.get("meta")}

    def save_document(self, date_str: str, content: str) -> Dict:
        payload = {"date": date_str, "content": content}
        return self.request("POST", "/api/analysis-documents", json=payload).get("data")

    def delete_document(self, doc_id: str) -> None:
        self.request("DELETE", f"/api/analysis-documents/{doc_id}")

    def analyze_range(self, range_key: str) -> Dict:
        payload = {"range": range_key}
        return self.request("POST", "/api/analysis-documents/summary", json=payload).get("data") or {}

    # config / auth
    def fetch_config(self) -> Dict:
        return self.request("GET", "/api/config").get("data") or {}

    def save_config(self, **fields) -> None:
        self.request("POST", "/api/config", json=fields)

    def verify_token(self, token: str) -> bool:
        try:
            self.request("POST", "/api/auth/verify", json={"token": token}, token=token)
        except ApiError as e:
            if e.status_code == 401:
                return False
            raise
        self.set_token(token)
        return True
