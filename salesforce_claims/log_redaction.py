import re

MAX_LOGGED_BODY_CHARS = 512

_TOKEN_FIELD_RE = re.compile(
    r'("(?:access_token|refresh_token|id_token|assertion)"\s*:\s*")[^"]*(")'
)
_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=!-]+")


def redact_body(body: str | None) -> str:
    """Prepare a response body for debug logging."""
    if not body:
        return ""
    text = _TOKEN_FIELD_RE.sub(r"\1<redacted>\2", body)
    text = _BEARER_RE.sub(r"\1<redacted>", text)
    if len(text) > MAX_LOGGED_BODY_CHARS:
        text = text[:MAX_LOGGED_BODY_CHARS] + "...(truncated)"
    return text
