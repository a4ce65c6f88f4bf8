from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from salesforce_claims.claims_errors import AssertionSigningError, ExternalServiceError
from salesforce_claims.config import SalesforceClaimsConfig
from salesforce_claims.log_redaction import redact_body
from salesforce_claims.query_spec import QuerySpecification
from salesforce_claims.token_cache import SalesforceTokenCache

logger = logging.getLogger(__name__)


class SalesforceClaimsProvider:
    """Looks up extra user claims in Salesforce with a cached bearer token."""

    def __init__(
        self,
        config: SalesforceClaimsConfig,
        token_cache: SalesforceTokenCache,
        http_client: httpx.Client,
    ):
        self._config = config
        self._token_cache = token_cache
        self._client = http_client

    def fetch_claims(self, subject_attributes: Mapping[str, Any]) -> dict[str, Any]:
        query = QuerySpecification.parse(self._config.query).render(subject_attributes)
        url = f"{self._config.data_path}?{query}"

        try:
            response = self._call_data_endpoint(url, self._token_cache.get_token())
            if response.status_code == 401:
                logger.warning(
                    "Salesforce REST API rejected the cached token (HTTP 401); requesting a new one"
                )
                response = self._call_data_endpoint(url, self._token_cache.force_refresh())
        except AssertionSigningError as e:
            raise ExternalServiceError("Could not sign Salesforce token request") from e

        if response.status_code != 200:
            logger.warning(
                "Got error response from Salesforce REST API: status=%s", response.status_code
            )
            logger.debug("Salesforce REST API error body: %s", redact_body(response.text))
            raise ExternalServiceError(
                "Salesforce REST API request was not successful"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError("Salesforce REST API returned invalid JSON") from e
        if not isinstance(payload, dict):
            raise ExternalServiceError("Salesforce REST API returned a non-object JSON body")
        return payload

    def _call_data_endpoint(self, url: str, token: str) -> httpx.Response:
        try:
            return self._client.get(
                url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self._config.request_timeout_seconds,
            )
        except httpx.HTTPError as e:
            logger.warning("Salesforce REST API request failed: %s", e)
            raise ExternalServiceError("Salesforce REST API request failed") from e
