import httpx
import pytest

from salesforce_claims.claims_errors import ExternalServiceError
from salesforce_claims.token_exchanger import TokenExchanger


def _exchanger(handler) -> TokenExchanger:
    client = httpx.Client(
        base_url="https://login.salesforce.com",
        transport=httpx.MockTransport(handler),
    )
    return TokenExchanger(client, "/services/oauth2/token")


def test_exchange_posts_form_encoded_jwt_bearer_grant():
    captured = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["url"] = str(request.url)
        captured["content_type"] = request.headers["Content-Type"]
        captured["body"] = request.content.decode()
        captured["timeout"] = request.extensions["timeout"]
        return httpx.Response(200, json={"access_token": "token-abc", "token_type": "Bearer"})

    token = _exchanger(_handler).exchange("header.payload+/=.sig")

    assert token == "token-abc"
    assert captured["method"] == "POST"
    assert captured["url"] == "https://login.salesforce.com/services/oauth2/token"
    assert captured["content_type"] == "application/x-www-form-urlencoded"
    assert captured["body"] == (
        "assertion=header.payload%2B%2F%3D.sig"
        "&grant_type=urn%3Aietf%3Aparams%3Aoauth%3Agrant-type%3Ajwt-bearer"
    )
    assert captured["timeout"]["read"] == 10.0


def test_exchange_coerces_token_to_string():
    exchanger = _exchanger(lambda request: httpx.Response(200, json={"access_token": 12345}))
    assert exchanger.exchange("a.b.c") == "12345"


def test_exchange_fails_on_non_200():
    exchanger = _exchanger(
        lambda request: httpx.Response(400, json={"error": "invalid_grant"})
    )
    with pytest.raises(ExternalServiceError) as exc_info:
        exchanger.exchange("a.b.c")
    assert "invalid_grant" not in str(exc_info.value)


def test_exchange_fails_when_access_token_missing():
    exchanger = _exchanger(lambda request: httpx.Response(200, json={"token_type": "Bearer"}))
    with pytest.raises(ExternalServiceError, match="No 'access_token' in Salesforce response"):
        exchanger.exchange("a.b.c")


def test_exchange_fails_on_invalid_json():
    exchanger = _exchanger(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(ExternalServiceError):
        exchanger.exchange("a.b.c")


def test_exchange_wraps_transport_timeout():
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ExternalServiceError) as exc_info:
        _exchanger(_handler).exchange("a.b.c")
    assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)


@pytest.mark.parametrize("access_token", [None, "", "   "])
def test_exchange_rejects_null_or_blank_token(access_token):
    exchanger = _exchanger(
        lambda request: httpx.Response(200, json={"access_token": access_token})
    )
    with pytest.raises(ExternalServiceError, match="No 'access_token' in Salesforce response"):
        exchanger.exchange("a.b.c")
