from __future__ import annotations

from functools import lru_cache

import httpx

from salesforce_claims.claims_provider import SalesforceClaimsProvider
from salesforce_claims.config import SalesforceClaimsConfig
from salesforce_claims.http_client import create_http_client
from salesforce_claims.token_cache import SalesforceTokenCache
from salesforce_claims.token_exchanger import TokenExchanger

PLUGIN_IMPLEMENTATION_TYPE = "salesforce-claims-provider"


class SalesforceClaimsPlugin:
    """Wires the token cache and claims provider for a host authorization server.

    The token cache is the plugin's managed object: it lives as long as the
    plugin and is shared by every claims provider the plugin hands out.
    """

    implementation_type = PLUGIN_IMPLEMENTATION_TYPE
    configuration_type = SalesforceClaimsConfig

    def __init__(
        self,
        config: SalesforceClaimsConfig,
        *,
        http_client: httpx.Client | None = None,
    ):
        config.validate_required()
        self._config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client or create_http_client(config)
        self._token_cache = self.create_managed_object()

    @property
    def token_cache(self) -> SalesforceTokenCache:
        return self._token_cache

    def create_managed_object(self) -> SalesforceTokenCache:
        return SalesforceTokenCache(
            self._config.signing_identity(),
            TokenExchanger(self._http_client, self._config.token_endpoint),
            http_client=self._http_client if self._owns_http_client else None,
        )

    def create_claims_provider(self) -> SalesforceClaimsProvider:
        return SalesforceClaimsProvider(self._config, self._token_cache, self._http_client)

    def close(self) -> None:
        self._token_cache.close()
        if get_claims_plugin.cache_info().currsize and get_claims_plugin() is self:
            get_claims_plugin.cache_clear()

    def __enter__(self) -> "SalesforceClaimsPlugin":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@lru_cache(maxsize=1)
def get_claims_plugin() -> SalesforceClaimsPlugin:
    return SalesforceClaimsPlugin(SalesforceClaimsConfig.from_env())
