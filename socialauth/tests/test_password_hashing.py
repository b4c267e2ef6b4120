from __future__ import annotations

from socialauth.application.services.password_hashing import WerkzeugPasswordHasher


def test_hash_verifies_and_rejects_wrong_password() -> None:
    hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")

    hashed = hasher.hash("Sup3r$ecret")

    assert hashed.startswith("pbkdf2:sha256:1000$")
    assert hasher.verify("Sup3r$ecret", hashed)
    assert not hasher.verify("sup3r$ecret", hashed)


def test_hash_is_salted() -> None:
    hasher = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")

    assert hasher.hash("Sup3r$ecret") != hasher.hash("Sup3r$ecret")


def test_needs_rehash_when_method_changes() -> None:
    old = WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")
    current = WerkzeugPasswordHasher(method="pbkdf2:sha256:2000")
    hashed = old.hash("Sup3r$ecret")

    assert not old.needs_rehash(hashed)
    assert current.needs_rehash(hashed)
    assert current.verify("Sup3r$ecret", hashed)
