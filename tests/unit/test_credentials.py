from __future__ import annotations

from bulk_upload.services.credentials import CredentialHasher, default_password


def test_default_password_appends_suffix():
    assert default_password("ST001") == "ST001@123"
    assert default_password("ENG01") == "ENG01@123"


def test_hash_verifies_and_never_equals_plaintext():
    hasher = CredentialHasher(rounds=4)
    hashed = hasher.hash("ST001@123")

    assert hashed != "ST001@123"
    assert hashed.startswith("$2")
    assert hasher.verify("ST001@123", hashed)
    assert not hasher.verify("ST002@123", hashed)


def test_rounds_are_encoded_in_the_hash():
    hasher = CredentialHasher(rounds=4)
    assert hasher.hash("x").split("$")[2] == "04"
    assert hasher.hash("x", rounds=5).split("$")[2] == "05"


def test_default_cost_is_ten():
    assert CredentialHasher().rounds == 10
