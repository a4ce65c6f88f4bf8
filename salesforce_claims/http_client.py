import httpx

from salesforce_claims.config import SalesforceClaimsConfig


def create_http_client(config: SalesforceClaimsConfig) -> httpx.Client:
    return httpx.Client(
        base_url=config.base_url,
        timeout=config.request_timeout_seconds,
        verify=config.verify_tls,
    )
