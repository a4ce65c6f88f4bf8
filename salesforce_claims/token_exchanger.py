import logging

import httpx

from salesforce_claims.claims_errors import ExternalServiceError
from salesforce_claims.log_redaction import redact_body

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
TOKEN_REQUEST_TIMEOUT_SECONDS = 10.0


class TokenExchanger:
    """Exchanges a signed assertion for a Salesforce bearer access token."""

    def __init__(self, http_client: httpx.Client, token_endpoint: str):
        self._client = http_client
        self._token_endpoint = token_endpoint

    def exchange(self, assertion: str) -> str:
        form = {
            "assertion": assertion,
            "grant_type": JWT_BEARER_GRANT_TYPE,
        }
        try:
            response = self._client.post(
                self._token_endpoint,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=TOKEN_REQUEST_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.warning("Salesforce token request failed: %s", e)
            raise ExternalServiceError("Salesforce token request failed") from e

        if response.status_code != 200:
            logger.info(
                "Got error response from token endpoint: status=%s", response.status_code
            )
            logger.debug("Token endpoint error body: %s", redact_body(response.text))
            raise ExternalServiceError(
                "Salesforce token endpoint rejected the request"
            )

        try:
            token_payload = response.json()
        except ValueError as e:
            raise ExternalServiceError("Salesforce token endpoint returned invalid JSON") from e

        raw_token = token_payload.get("access_token") if isinstance(token_payload, dict) else None
        token = "" if raw_token is None else str(raw_token).strip()
        if not token:
            raise ExternalServiceError("No 'access_token' in Salesforce response")

        return token
