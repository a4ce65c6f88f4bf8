from salesforce_claims.log_redaction import MAX_LOGGED_BODY_CHARS, redact_body


def test_redact_body_hides_token_values():
    body = '{"access_token": "00Dxx!secret", "instance_url": "https://acme"}'
    redacted = redact_body(body)
    assert "00Dxx!secret" not in redacted
    assert '"access_token": "<redacted>"' in redacted
    assert "https://acme" in redacted


def test_redact_body_hides_bearer_credentials_and_truncates():
    redacted = redact_body("Bearer abc.def.ghi " + "x" * 1000)
    assert "abc.def.ghi" not in redacted
    assert redacted.endswith("...(truncated)")
    assert len(redacted) <= MAX_LOGGED_BODY_CHARS + len("...(truncated)")
