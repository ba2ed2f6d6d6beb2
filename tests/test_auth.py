import os
from datetime import datetime, timezone

import pytest
import requests
from eth_account import Account
from eth_account.messages import encode_defunct

import gpunet
from conftest import ADDRESS, PRIVATE_KEY, make_response


@pytest.fixture
def signer():
    return gpunet.WalletSigner()


@pytest.fixture
def auth(ctx, signer):
    return gpunet.AuthProtocol(ctx, signer)


class TestSigner:
    def test_address_is_deterministic(self, signer):
        assert signer.address_of(PRIVATE_KEY) == ADDRESS
        assert signer.address_of(PRIVATE_KEY) == signer.address_of(PRIVATE_KEY)

    def test_key_without_prefix_gives_same_address(self, signer):
        assert signer.address_of(PRIVATE_KEY[2:]) == ADDRESS

    def test_signature_recovers_to_wallet(self, signer):
        signature = signer.sign(PRIVATE_KEY, "hello quest")
        assert signature.startswith("0x")
        recovered = Account.recover_message(encode_defunct(text="hello quest"), signature=signature)
        assert recovered == ADDRESS

    def test_mask_key_hides_the_middle(self):
        assert gpunet.mask_key(PRIVATE_KEY) == "0x4c08...2318"


class TestNonceExtraction:
    @pytest.mark.parametrize("nonce_data", [
        "n0nce-abc",
        {"nonce": "n0nce-abc"},
        {"data": {"nonce": "n0nce-abc"}},
    ])
    def test_message_embeds_nonce_from_any_shape(self, auth, nonce_data):
        signed = auth.sign_in(PRIVATE_KEY, nonce_data)
        assert "\nNonce: n0nce-abc\n" in signed.message
        assert signed.address == ADDRESS

    @pytest.mark.parametrize("nonce_data", [None, {}, {"nonce": ""}, {"data": "oops"}, 42])
    def test_missing_nonce_falls_back_to_sentinel(self, nonce_data):
        assert gpunet.extract_nonce(nonce_data) == gpunet.UNKNOWN_NONCE


def test_sign_in_message_template():
    issued_at = datetime(2026, 10, 18, 9, 30, 5, 123456, tzinfo=timezone.utc)
    message = gpunet.build_sign_in_message(ADDRESS, "abc", issued_at)
    assert message == (
        "token.gpu.net wants you to sign in with your Ethereum account:\n"
        f"{ADDRESS}\n"
        "\n"
        "Sign in with Ethereum to the app.\n"
        "\n"
        "URI: https://token.gpu.net\n"
        "Version: 1\n"
        "Chain ID: 4048\n"
        "Nonce: abc\n"
        "Issued At: 2026-10-18T09:30:05.123Z"
    )


class TestAuthenticate:
    def test_success_sends_signed_message_and_saves_cookies(self, session, auth, cookie_file):
        session.routes[("GET", "/auth/eth/nonce")] = make_response(body={"nonce": "abc"})
        session.routes[("POST", "/auth/eth/verify")] = make_response(body={"ok": True})
        session.cookies.set("sid", "s1", domain="quest-api.gpu.net", path="/")

        outcome = auth.authenticate(PRIVATE_KEY)

        assert outcome.state is gpunet.AuthState.AUTHENTICATED
        assert outcome.address == ADDRESS
        nonce_call, verify_call = session.calls
        assert nonce_call[2]["params"] == {"address": ADDRESS}
        body = verify_call[2]["json"]
        assert "Nonce: abc" in body["message"]
        recovered = Account.recover_message(encode_defunct(text=body["message"]), signature=body["signature"])
        assert recovered == ADDRESS
        assert os.path.exists(cookie_file)

    def test_bare_text_nonce_is_accepted(self, session, auth):
        session.routes[("GET", "/auth/eth/nonce")] = make_response(body="plain-nonce")
        session.routes[("POST", "/auth/eth/verify")] = make_response(body={"ok": True})

        auth.authenticate(PRIVATE_KEY)

        assert "Nonce: plain-nonce" in session.calls[1][2]["json"]["message"]

    def test_server_error_with_body_is_a_rejection(self, session, auth):
        session.routes[("GET", "/auth/eth/nonce")] = make_response(body={"nonce": "abc"})
        session.routes[("POST", "/auth/eth/verify")] = make_response(500, {"message": "Invalid signature"})

        outcome = auth.authenticate(PRIVATE_KEY)

        assert outcome.state is gpunet.AuthState.REJECTED
        assert outcome.payload == {"error": {"message": "Invalid signature"}, "status": 500}

    def test_other_verify_errors_propagate(self, session, auth):
        session.routes[("GET", "/auth/eth/nonce")] = make_response(body={"nonce": "abc"})
        session.routes[("POST", "/auth/eth/verify")] = make_response(403, {"message": "forbidden"})

        with pytest.raises(requests.exceptions.HTTPError):
            auth.authenticate(PRIVATE_KEY)

    def test_nonce_transport_failure_propagates(self, session, auth):
        session.routes[("GET", "/auth/eth/nonce")] = requests.exceptions.ConnectTimeout("timed out")

        with pytest.raises(requests.exceptions.ConnectTimeout):
            auth.authenticate(PRIVATE_KEY)
        assert len(session.calls) == 1

    def test_cookie_save_failure_does_not_abort(self, session, tmp_path, signer):
        ctx = gpunet.SessionContext(session=session, cookie_file=str(tmp_path / "no-dir" / "c.json"))
        session.routes[("GET", "/auth/eth/nonce")] = make_response(body={"nonce": "abc"})
        session.routes[("POST", "/auth/eth/verify")] = make_response(body={"ok": True})

        outcome = gpunet.AuthProtocol(ctx, signer).authenticate(PRIVATE_KEY)

        assert outcome.authenticated
