"""
HTTP remote provider for nuvcoin.

Talks to the finance REST endpoint:

    GET    {base_url}          -> [record, ...]
    POST   {base_url}          -> record (authority-assigned copy)
    DELETE {base_url}/{id}     -> (ignored body)

Every record crossing this boundary goes through `normalize_record`.
Idempotent calls (`list`, `remove`) are retried on transient connection
errors with tenacity; `create` is never retried here because a retried POST
could create the record twice.
"""

from __future__ import annotations

from typing import Any, List, Optional
from urllib.parse import quote

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from nuvcoin.config import get_settings
from nuvcoin.domain.models import TransactionRecord
from nuvcoin.domain.normalization import normalize_record, normalize_records
from nuvcoin.infrastructure.abstract import AbstractRemoteProvider, RemoteError
from nuvcoin.utils.logging import get_logger

log = get_logger(__name__)

_TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)

_retry_transient = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    reraise=True,
)


class HttpRemoteProvider(AbstractRemoteProvider):
    """
    `RemoteProvider` backed by a JSON REST API.

    Parameters
    ----------
    base_url : str | None
        Collection URL; defaults to ``settings.api_base_url``.
    timeout : float | None
        Per-request timeout in seconds; defaults to ``settings.http_timeout``.
    session : requests.Session | None
        Injected session (tests pass a stub); a private one is created otherwise.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def _check(self, response: requests.Response, operation: str) -> None:
        if not response.ok:
            raise RemoteError(
                operation, status=response.status_code, detail=response.reason or ""
            )

    def _json(self, response: requests.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(
                operation, status=response.status_code, detail="invalid JSON"
            ) from exc

    @_retry_transient
    def list(self) -> List[TransactionRecord]:
        response = self._session.get(self.base_url, timeout=self.timeout)
        self._check(response, "list")
        payload = self._json(response, "list")
        if not isinstance(payload, list):
            raise RemoteError("list", status=response.status_code, detail="expected a JSON array")
        records = normalize_records(payload)
        log.debug("Remote list fetched", extra={"records": len(records)})
        return records

    def create(self, record: TransactionRecord) -> TransactionRecord:
        response = self._session.post(self.base_url, json=record.to_wire(), timeout=self.timeout)
        self._check(response, "create")
        payload = self._json(response, "create")
        if not isinstance(payload, dict):
            raise RemoteError(
                "create", status=response.status_code, detail="expected a JSON object"
            )
        return normalize_record(payload)

    @_retry_transient
    def remove(self, record_id: str) -> None:
        url = f"{self.base_url}/{quote(record_id, safe='')}"
        response = self._session.delete(url, timeout=self.timeout)
        if response.status_code == 404:
            # already gone
            return
        self._check(response, "remove")

    def close(self) -> None:
        self._session.close()


__all__ = ["HttpRemoteProvider"]
