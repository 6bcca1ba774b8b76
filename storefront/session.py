# storefront/session.py
from typing import Optional, Dict

import httpx

class Session:
    """
    Explicit connection context for the backend services: base address,
    optional bearer credential and request timeout. Every service client
    is built from one of these instead of reading process-wide state.
    """

    def __init__(self, base_url: str = "http://localhost:8080", token: Optional[str] = None,
                 timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def open(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/api",
            headers=self.headers(),
            timeout=self.timeout,
            transport=self.transport,
        )
