"""
Listings API client - async httpx wrapper that carries a ClientSession
"""
from pathlib import Path
from typing import Optional, List, Dict, Any
import logging

import httpx

from app.client.session import ClientSession

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """A request that came back with success: false"""
    def __init__(self, message: str, status_code: int, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(message)


class ListingsApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        session_path: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.session_path = Path(session_path) if session_path else None
        self.session = ClientSession.load(self.session_path) if self.session_path else ClientSession()
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ListingsApiClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _persist_session(self) -> None:
        if self.session_path:
            self.session.save(self.session_path)

    async def _request(self, method: str, path: str, auth: bool = False, **kwargs) -> Dict[str, Any]:
        headers = self.session.auth_headers if auth else {}
        response = await self._http.request(method, path, headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {"success": response.is_success, "message": response.text or "Invalid JSON response"}

        if response.is_error or not body.get("success", False):
            raise ApiClientError(
                body.get("message") or f"Request failed with status {response.status_code}",
                response.status_code,
                body.get("errors"),
            )
        return body

    # Auth

    async def signup(self, **fields) -> Dict:
        body = await self._request("POST", "/api/auth/signup", json=fields)
        return body["data"]["user"]

    async def login(self, email: str, password: str) -> Dict:
        body = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        data = body["data"]
        self.session.token = data["token"]
        self.session.role = data["user"]["role"]
        self.session.user_id = data["user"]["id"]
        self._persist_session()
        return data["user"]

    def logout(self) -> None:
        self.session.clear()
        self._persist_session()

    async def verify_session(self) -> Optional[Dict]:
        """Check the restored token; drop the session if the server rejects it"""
        if not self.session.is_authenticated:
            return None
        try:
            body = await self._request("GET", "/api/auth/verify", auth=True)
        except ApiClientError as e:
            logger.info(f"Stored session rejected: {e.message}")
            self.logout()
            return None
        return body["data"]["user"]

    async def forgot_password(self, email: str) -> str:
        body = await self._request("POST", "/api/auth/forgot-password", json={"email": email})
        return body["message"]

    async def verify_otp(self, email: str, otp: str) -> str:
        body = await self._request("POST", "/api/auth/verify-otp", json={"email": email, "otp": otp})
        return body["data"]["resetToken"]

    async def reset_password(self, email: str, reset_token: str, new_password: str) -> str:
        body = await self._request(
            "POST",
            "/api/auth/reset-password",
            json={"email": email, "resetToken": reset_token, "newPassword": new_password},
        )
        return body["message"]

    # Listings

    async def create_listing(self, listing: Dict) -> Dict:
        body = await self._request("POST", "/api/listings", auth=True, json=listing)
        return body["data"]

    async def get_listings(self) -> List[Dict]:
        body = await self._request("GET", "/api/listings")
        return body["data"]

    async def get_listing(self, listing_id: str) -> Dict:
        body = await self._request("GET", f"/api/listings/{listing_id}")
        return body["data"]

    async def update_listing(self, listing_id: str, fields: Dict) -> Dict:
        body = await self._request("PUT", f"/api/listings/{listing_id}", auth=True, json=fields)
        return body["data"]

    async def delete_listing(self, listing_id: str) -> None:
        await self._request("DELETE", f"/api/listings/{listing_id}", auth=True)
