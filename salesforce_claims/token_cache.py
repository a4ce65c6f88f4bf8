from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

import httpx

from salesforce_claims.assertion_builder import SigningIdentity, build_assertion
from salesforce_claims.claims_errors import (
    ClaimsConfigurationError,
    ClaimsProviderError,
    ExternalServiceError,
)
from salesforce_claims.token_exchanger import TokenExchanger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Holding:
    token: str


def _same_failure(failure: ClaimsProviderError) -> ClaimsProviderError:
    if isinstance(failure, ExternalServiceError):
        return ExternalServiceError(failure.reason)
    return type(failure)(*failure.args)


class SalesforceTokenCache:
    """
    Holds at most one Salesforce access token for the component instance.

    Salesforce is the only authority on token expiry, so nothing expires
    locally: the held token is replaced only when a caller asks for a forced
    refresh after the data API rejected it. A single lock guards the whole
    acquisition sequence, so at most one token exchange is in flight.
    """

    def __init__(
        self,
        identity: SigningIdentity,
        exchanger: TokenExchanger,
        *,
        http_client: httpx.Client | None = None,
    ):
        self._identity = identity
        self._exchanger = exchanger
        self._http_client = http_client

        self._lock = threading.Lock()
        self._state: _Holding | None = None
        self._failed_acquisitions = 0
        self._last_failure: ClaimsProviderError | None = None
        self._closed = False

    @property
    def has_token(self) -> bool:
        return self._state is not None

    def get_token(self) -> str:
        # Snapshot taken before queueing on the lock; a change means an
        # acquisition failed while this caller was waiting for it.
        failures_seen = self._failed_acquisitions
        with self._lock:
            self._ensure_open()
            state = self._state
            if state is not None:
                return state.token
            if self._failed_acquisitions != failures_seen and self._last_failure is not None:
                failure = self._last_failure
                raise _same_failure(failure) from failure
            return self._acquire()

    def force_refresh(self) -> str:
        with self._lock:
            self._ensure_open()
            return self._acquire()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._state = None
            self._last_failure = None
        if self._http_client is not None:
            self._http_client.close()

    def __enter__(self) -> "SalesforceTokenCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClaimsConfigurationError("Salesforce token cache has been closed.")

    def _acquire(self) -> str:
        try:
            assertion = build_assertion(self._identity)
            token = self._exchanger.exchange(assertion)
        except ClaimsProviderError as e:
            self._failed_acquisitions += 1
            self._last_failure = e
            logger.warning("Salesforce token acquisition failed: %s", e)
            raise

        self._state = _Holding(token)
        self._last_failure = None
        logger.debug("Acquired new Salesforce access token")
        return token
