import time

import pytest

from semiwallet.errors import InvalidSignatureError
from semiwallet.webhooks.security import verify_stripe_signature

SECRET = "whsec_test_secret"
BODY = b'{"type":"checkout.session.completed","data":{"object":{"client_reference_id":"1"}}}'


def test_valid_signature_is_accepted(signature_header):
    verify_stripe_signature(BODY, signature_header(BODY, SECRET), SECRET)


def test_altered_body_is_rejected(signature_header):
    header = signature_header(BODY, SECRET)
    tampered = BODY.replace(b'"1"', b'"2"')

    with pytest.raises(InvalidSignatureError):
        verify_stripe_signature(tampered, header, SECRET)


def test_single_flipped_byte_is_rejected(signature_header):
    header = signature_header(BODY, SECRET)
    tampered = bytes([BODY[0] ^ 0x01]) + BODY[1:]

    with pytest.raises(InvalidSignatureError):
        verify_stripe_signature(tampered, header, SECRET)


def test_wrong_secret_is_rejected(signature_header):
    header = signature_header(BODY, "whsec_other")

    with pytest.raises(InvalidSignatureError):
        verify_stripe_signature(BODY, header, SECRET)


def test_stale_timestamp_is_rejected(signature_header):
    header = signature_header(BODY, SECRET, timestamp=int(time.time()) - 310)

    with pytest.raises(InvalidSignatureError):
        verify_stripe_signature(BODY, header, SECRET)


def test_custom_tolerance(signature_header):
    header = signature_header(BODY, SECRET, timestamp=int(time.time()) - 400)

    verify_stripe_signature(BODY, header, SECRET, tolerance=600)


@pytest.mark.parametrize("header", [
    None,
    "",
    "v1=abcdef",
    "t=123",
    "t=notanumber,v1=abcdef",
    "garbage",
])
def test_malformed_headers_are_rejected(header):
    with pytest.raises(InvalidSignatureError):
        verify_stripe_signature(BODY, header, SECRET)


def test_any_matching_v1_signature_is_accepted(signature_header):
    good = signature_header(BODY, SECRET)
    timestamp, signature = good.split(",")
    header = f"{timestamp},v1={'0' * 64},{signature}"

    verify_stripe_signature(BODY, header, SECRET)


def test_non_utf8_body_is_rejected(signature_header):
    body = b"\xff\xfe"

    with pytest.raises(InvalidSignatureError):
        verify_stripe_signature(body, signature_header(body, SECRET), SECRET)


def test_missing_secret_is_rejected(signature_header):
    with pytest.raises(InvalidSignatureError):
        verify_stripe_signature(BODY, signature_header(BODY, SECRET), "")
