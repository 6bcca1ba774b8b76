"""
config.py: Environment-driven settings for the storefront client.

Variables:
    STORE_API_URL        backend base address (default http://localhost:8080)
    STORE_API_TOKEN      optional bearer credential
    STORE_HTTP_TIMEOUT   per-request timeout in seconds
    STORE_POLL_INTERVAL  seconds between payment polls
    STORE_POLL_ATTEMPTS  payment poll budget
    STORE_POLL_POLICY    first_response | until_terminal
    STORE_TERMINAL_STATUSES  comma separated, used by until_terminal
    STORE_LOG_LEVEL      logging level name
    STORE_LOG_FILE       optional log file path
"""

import os
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from .payments import DEFAULT_INTERVAL, DEFAULT_MAX_ATTEMPTS, DEFAULT_TERMINAL_STATUSES, PollPolicy
from .session import Session


class StoreSettings(BaseModel):
    api_url: str = "http://localhost:8080"
    api_token: Optional[str] = None
    http_timeout: float = Field(10.0, gt=0)
    poll_interval: float = Field(DEFAULT_INTERVAL, ge=0)
    poll_attempts: int = Field(DEFAULT_MAX_ATTEMPTS, gt=0)
    poll_policy: PollPolicy = PollPolicy.FIRST_RESPONSE
    terminal_statuses: Tuple[str, ...] = DEFAULT_TERMINAL_STATUSES
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreSettings":
        env = os.environ if environ is None else environ
        values = {}
        mapping = {
            "STORE_API_URL": "api_url",
            "STORE_API_TOKEN": "api_token",
            "STORE_HTTP_TIMEOUT": "http_timeout",
            "STORE_POLL_INTERVAL": "poll_interval",
            "STORE_POLL_ATTEMPTS": "poll_attempts",
            "STORE_POLL_POLICY": "poll_policy",
            "STORE_LOG_LEVEL": "log_level",
            "STORE_LOG_FILE": "log_file",
        }
        for var, field in mapping.items():
            if env.get(var):
                values[field] = env[var]
        if env.get("STORE_TERMINAL_STATUSES"):
            values["terminal_statuses"] = tuple(
                s.strip().upper() for s in env["STORE_TERMINAL_STATUSES"].split(",") if s.strip()
            )
        return cls(**values)

    def session(self, transport=None) -> Session:
        return Session(base_url=self.api_url, token=self.api_token,
                       timeout=self.http_timeout, transport=transport)
