"""
Async Python client for the SOHO School Transport API.

Parses the response envelope, raises ApiError on failures, keeps the
access/refresh tokens from login and retries once after refreshing when a
request comes back 401.

Usage:
    async with SohoClient("http://localhost:5000/api") as client:
        await client.login("driver@school.ac.ke", "secret123")
        requests = await client.list_fuel_maintenance_requests()
"""

from typing import Any, Dict, List, Optional

import httpx

from soho_transport.core.logging_config import logger


class ApiError(Exception):
    """Non-2xx response. ``errors`` holds field errors from validation failures."""

    def __init__(self, message: str, status: int, errors: Optional[List[Dict[str, str]]] = None,
                 code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.errors = errors or []
        self.code = code

    def __repr__(self):
        return f"ApiError(status={self.status}, message={self.message!r})"


def _parse_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    if not response.content:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _raise_for_envelope(response: httpx.Response) -> Dict[str, Any]:
    body = _parse_body(response)

    if response.is_error:
        errors = body.get("errors") if body and isinstance(body.get("errors"), list) else []
        message = (
            (errors[0].get("message") if errors else None)
            or (body.get("message") if body else None)
            or f"Request failed with status {response.status_code}."
        )
        raise ApiError(message, response.status_code, errors, code=body.get("code") if body else None)

    if body is None:
        raise ApiError("Invalid response from server.", response.status_code)
    return body


class SohoClient:
    """Typed wrapper around the REST endpoints"""

    def __init__(
        self,
        base_url: str = "http://localhost:5000/api",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None

    async def __aenter__(self) -> "SohoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    # ==================== Transport ====================

    def _headers(self) -> Dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    def _store_session(self, data: Dict[str, Any]) -> None:
        self.access_token = data.get("accessToken") or data.get("token")
        self.refresh_token = data.get("refreshToken") or self.refresh_token

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None,
                       retry_on_401: bool = True) -> Dict[str, Any]:
        response = await self._http.request(method, path, json=json, headers=self._headers())

        if response.status_code == 401 and retry_on_401 and self.refresh_token:
            logger.debug(f"[Client] {method} {path} returned 401, refreshing session")
            try:
                await self.refresh()
            except ApiError:
                self.access_token = None
                self.refresh_token = None
                raise ApiError("Session expired. Please log in again.", 401)
            response = await self._http.request(method, path, json=json, headers=self._headers())

        return _raise_for_envelope(response)

    # ==================== Auth ====================

    async def register(self, email: str, first_name: str, last_name: str, phone_number: str,
                       role: str, password: str, number_plate: Optional[str] = None) -> Dict[str, Any]:
        body = await self._request("POST", "/auth/register", json={
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "phoneNumber": phone_number,
            "numberPlate": number_plate,
            "role": role,
            "password": password,
        }, retry_on_401=False)
        return body["data"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        body = await self._request("POST", "/auth/login", json={"email": email, "password": password},
                                   retry_on_401=False)
        self._store_session(body["data"])
        return body["data"]

    async def refresh(self) -> Dict[str, Any]:
        payload = {"refreshToken": self.refresh_token} if self.refresh_token else None
        body = await self._request("POST", "/auth/refresh", json=payload, retry_on_401=False)
        self._store_session(body["data"])
        return body["data"]

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout", retry_on_401=False)
        self.access_token = None
        self.refresh_token = None

    async def me(self) -> Dict[str, Any]:
        return (await self._request("GET", "/auth/me"))["data"]

    async def get_number_plates(self) -> List[str]:
        body = await self._request("GET", "/auth/number-plates", retry_on_401=False)
        return body["data"]["numberPlates"]

    # ==================== Students ====================

    async def get_students_dashboard(self) -> Dict[str, Any]:
        return (await self._request("GET", "/students"))["data"]

    async def admit_student(self, **fields: Any) -> Dict[str, Any]:
        """Fields use the API's camelCase names, e.g. admissionNumber="ADM-001" """
        return (await self._request("POST", "/students/admissions", json=fields))["data"]["student"]

    async def update_parent_contact(self, student_id: int, parent_contact: str) -> Dict[str, Any]:
        body = await self._request("PATCH", f"/students/{student_id}/parent-contact",
                                   json={"parentContact": parent_contact})
        return body["data"]["student"]

    async def withdraw_student(self, student_id: int, withdrawal_date: Optional[str] = None,
                               withdrawal_reason: Optional[str] = None) -> Dict[str, Any]:
        body = await self._request("PATCH", f"/students/{student_id}/withdrawal", json={
            "withdrawalDate": withdrawal_date,
            "withdrawalReason": withdrawal_reason,
        })
        return body["data"]["student"]

    async def update_master_data(self, student_id: int, **fields: Any) -> Dict[str, Any]:
        body = await self._request("PATCH", f"/students/{student_id}/master-data", json=fields)
        return body["data"]["student"]

    # ==================== Fuel & Maintenance ====================

    async def list_fuel_maintenance_requests(self) -> List[Dict[str, Any]]:
        return (await self._request("GET", "/fuel-maintenance/requests"))["data"]["requests"]

    async def create_fuel_maintenance_request(self, **fields: Any) -> Dict[str, Any]:
        body = await self._request("POST", "/fuel-maintenance/requests", json=fields)
        return body["data"]["request"]
