from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from salesforce_claims.assertion_builder import SigningIdentity
from salesforce_claims.claims_errors import ClaimsConfigurationError

DEFAULT_LOGIN_URL = "https://login.salesforce.com"
DEFAULT_DATA_PATH = "/services/data/v48.0/query/"
DEFAULT_TOKEN_ENDPOINT = "/services/oauth2/token"
DEFAULT_QUERY = "q=SELECT+department,title+from+Contact+WHERE+email=:email"


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _read_private_key(path: str) -> str:
    key_path = Path(path)
    try:
        key_content = key_path.read_text()
    except OSError as e:
        raise ClaimsConfigurationError(
            f"Failed to read Salesforce signing key '{path}': {e}"
        ) from e
    if not key_content.strip():
        raise ClaimsConfigurationError(f"Salesforce signing key file is empty: {path}")
    return key_content


class SalesforceClaimsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    consumer_key: str = Field(default="", description="The Salesforce App Consumer Key")
    principal: str = Field(
        default="",
        description="The Salesforce user allowed to query the REST API",
    )
    host: str | None = Field(
        default=None,
        description="The Salesforce host, e.g. yourInstance.my.salesforce.com",
    )
    data_path: str = Field(
        default=DEFAULT_DATA_PATH,
        description="The Salesforce path to retrieve user data",
    )
    token_endpoint: str = Field(
        default=DEFAULT_TOKEN_ENDPOINT,
        description="The Salesforce token endpoint",
    )
    query: str = Field(
        default=DEFAULT_QUERY,
        description=(
            "The Salesforce REST API query. The subject attribute to interpolate is "
            "named after the colon, e.g. ...WHERE+email=:email"
        ),
    )
    audience: str = Field(
        default=DEFAULT_LOGIN_URL,
        description="Audience of the signed assertion; https://test.salesforce.com for sandboxes",
    )
    private_key: str = Field(
        default="",
        repr=False,
        description="PEM encoded asymmetric key that signs the token request assertion",
    )
    signing_algorithm: str = Field(default="RS256")
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    verify_tls: bool = Field(default=True)

    @field_validator("consumer_key", "principal", "data_path", "token_endpoint", "query", "audience")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("host")
    @classmethod
    def normalize_host(cls, value: str | None) -> str | None:
        host = (value or "").strip().rstrip("/")
        return host or None

    @field_validator("signing_algorithm")
    @classmethod
    def normalize_algorithm(cls, value: str) -> str:
        return value.strip().upper() or "RS256"

    @classmethod
    def from_env(cls) -> "SalesforceClaimsConfig":
        private_key = os.getenv("SALESFORCE_PRIVATE_KEY", "")
        key_path = os.getenv("SALESFORCE_PRIVATE_KEY_PATH", "").strip()
        if not private_key.strip() and key_path:
            private_key = _read_private_key(key_path)

        try:
            return cls(
                consumer_key=os.getenv("SALESFORCE_CONSUMER_KEY", ""),
                principal=os.getenv("SALESFORCE_PRINCIPAL", ""),
                host=os.getenv("SALESFORCE_HOST"),
                data_path=os.getenv("SALESFORCE_DATA_PATH", DEFAULT_DATA_PATH),
                token_endpoint=os.getenv("SALESFORCE_TOKEN_ENDPOINT", DEFAULT_TOKEN_ENDPOINT),
                query=os.getenv("SALESFORCE_QUERY", DEFAULT_QUERY),
                audience=os.getenv("SALESFORCE_AUDIENCE", DEFAULT_LOGIN_URL),
                private_key=private_key,
                signing_algorithm=os.getenv("SALESFORCE_SIGNING_ALGORITHM", "RS256"),
                request_timeout_seconds=os.getenv("SALESFORCE_HTTP_TIMEOUT", "10").strip(),
                verify_tls=_as_bool(os.getenv("SALESFORCE_VERIFY_TLS"), True),
            )
        except ValidationError as e:
            raise ClaimsConfigurationError(
                f"Invalid Salesforce claims provider configuration: {e}"
            ) from e

    @property
    def base_url(self) -> str:
        if not self.host:
            return DEFAULT_LOGIN_URL
        if self.host.startswith("http://") or self.host.startswith("https://"):
            return self.host
        return f"https://{self.host}"

    def validate_required(self) -> None:
        missing: list[str] = []
        if not self.consumer_key:
            missing.append("SALESFORCE_CONSUMER_KEY")
        if not self.principal:
            missing.append("SALESFORCE_PRINCIPAL")
        if not self.private_key.strip():
            missing.append("SALESFORCE_PRIVATE_KEY/SALESFORCE_PRIVATE_KEY_PATH")
        if not self.token_endpoint:
            missing.append("SALESFORCE_TOKEN_ENDPOINT")
        if not self.data_path:
            missing.append("SALESFORCE_DATA_PATH")
        if missing:
            raise ClaimsConfigurationError(
                f"Missing Salesforce claims provider configuration: {', '.join(missing)}"
            )

    def signing_identity(self) -> SigningIdentity:
        return SigningIdentity(
            private_key=self.private_key,
            issuer=self.consumer_key,
            subject=self.principal,
            audience=self.audience,
            algorithm=self.signing_algorithm,
        )
