"""Google Sheets sink adapter.

Appends rows through the Sheets v4 REST API (``spreadsheets.values.append``)
using ``httpx`` for async transport and ``google-auth`` service-account
credentials for OAuth2 bearer tokens.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx
from fastapi.concurrency import run_in_threadpool
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from ideas_api.adapters.sink.base import AbstractSubmissionSink
from ideas_api.core.errors import SinkAppError

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _updated_range(response: httpx.Response) -> str | None:
    """Pull ``updates.updatedRange`` out of an append response, if present."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("updates", {}).get("updatedRange")


class GoogleSheetsSink(AbstractSubmissionSink):
    """Sink appending one spreadsheet row per submission.

    Credentials are built on first use, so a misconfigured deployment still
    starts and reports the problem as a failed append.
    """

    def __init__(
        self,
        *,
        service_account_email: str | None,
        private_key: str | None,
        sheet_id: str | None,
        sheet_range: str = "Sheet1!A:D",
        value_input_option: str = "USER_ENTERED",
        token_uri: str = "https://oauth2.googleapis.com/token",
        api_base_url: str = "https://sheets.googleapis.com/v4",
        timeout_seconds: float = 10.0,
        credentials: Any | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the sink.

        Args:
            service_account_email: Service account client email.
            private_key: PEM private key of the service account.
            sheet_id: Spreadsheet id rows are appended to.
            sheet_range: A1 range locating the table (e.g. ``Sheet1!A:D``).
            value_input_option: ``RAW`` or ``USER_ENTERED``.
            token_uri: OAuth2 token endpoint.
            api_base_url: Sheets REST API base URL.
            timeout_seconds: HTTP timeout for append calls.
            credentials: Pre-built google-auth credentials (skips building
                them from email/key).
            http_client: Pre-built async client (its lifecycle stays with
                the caller).
        """
        self.service_account_email = service_account_email
        self.private_key = private_key
        self.sheet_id = sheet_id
        self.sheet_range = sheet_range
        self.value_input_option = value_input_option
        self.token_uri = token_uri
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

        self._credentials = credentials
        self._credentials_lock = asyncio.Lock()
        self._client = http_client
        self._owns_client = http_client is None

    def _require_config(self) -> str:
        missing = [] if self.sheet_id else ["GOOGLE_SHEET_ID"]
        if self._credentials is None:
            if not self.service_account_email:
                missing.append("GOOGLE_SERVICE_ACCOUNT_EMAIL")
            if not self.private_key:
                missing.append("GOOGLE_PRIVATE_KEY")
        if missing:
            raise SinkAppError(
                code="sink_not_configured",
                message="Google Sheets sink is not configured",
                details={"context": {"missing": missing}},
            )
        return self.sheet_id  # type: ignore[return-value]

    def _build_credentials(self) -> Any:
        info = {
            "type": "service_account",
            "client_email": self.service_account_email,
            "private_key": self.private_key,
            "token_uri": self.token_uri,
        }
        try:
            return service_account.Credentials.from_service_account_info(
                info, scopes=SHEETS_SCOPES
            )
        except (ValueError, GoogleAuthError) as exc:
            raise SinkAppError(
                code="sink_invalid_credentials",
                message="Google service account credentials are invalid",
                details={"error_type": type(exc).__name__},
            ) from exc

    async def _get_access_token(self) -> str:
        """Return a valid bearer token, refreshing it when expired."""
        async with self._credentials_lock:
            if self._credentials is None:
                self._credentials = self._build_credentials()

            if not self._credentials.valid:
                try:
                    # google-auth refresh is blocking I/O
                    await run_in_threadpool(self._credentials.refresh, GoogleAuthRequest())
                except GoogleAuthError as exc:
                    raise SinkAppError(
                        code="sink_auth_failed",
                        message="Could not obtain a Google access token",
                        details={"error_type": type(exc).__name__, "error_msg": str(exc)},
                    ) from exc
                logger.debug("sheets.token_refreshed")

            return self._credentials.token

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds)
        return self._client

    def _append_url(self, sheet_id: str) -> str:
        return (
            f"{self.api_base_url}/spreadsheets/{quote(sheet_id, safe='')}"
            f"/values/{quote(self.sheet_range, safe='')}:append"
        )

    async def append_row(self, row: Sequence[str]) -> None:
        """Append ``row`` below the last row of the configured range.

        Raises:
            SinkAppError: On missing configuration, auth failure, transport
                failure or a non-2xx response.
        """
        sheet_id = self._require_config()
        token = await self._get_access_token()

        try:
            response = await self._get_client().post(
                self._append_url(sheet_id),
                params={"valueInputOption": self.value_input_option},
                headers={"Authorization": f"Bearer {token}"},
                json={"majorDimension": "ROWS", "values": [list(row)]},
            )
        except httpx.HTTPError as exc:
            raise SinkAppError(
                code="sink_transport_error",
                message="Could not reach Google Sheets",
                details={"error_type": type(exc).__name__, "error_msg": str(exc)},
            ) from exc

        if response.is_error:
            raise SinkAppError(
                code="sink_http_error",
                message="Google Sheets rejected the append",
                details={
                    "http_status": response.status_code,
                    "error_msg": response.text[:500],
                },
            )

        logger.info(
            "sheets.row_appended",
            extra={
                "http_status": response.status_code,
                "updated_range": _updated_range(response),
            },
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this sink created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
