from __future__ import annotations

import bcrypt

from ..models.config_models import DEFAULT_BCRYPT_ROUNDS

"""Credential synthesis and hashing (bcrypt).

A row without a password gets the deterministic default `<EXTERNAL_ID>@123`
(roll number for students, upper-cased code for colleges). Either way the
plaintext is hashed once and only the hash is persisted.
"""

__all__ = [
    "DEFAULT_PASSWORD_SUFFIX",
    "CredentialHasher",
    "default_password",
]

DEFAULT_PASSWORD_SUFFIX = "@123"


def default_password(external_id: str) -> str:
    return f"{external_id}{DEFAULT_PASSWORD_SUFFIX}"


class CredentialHasher:
    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str, rounds: int | None = None) -> str:
        salt = bcrypt.gensalt(rounds=rounds or self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
