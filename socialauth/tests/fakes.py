from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError

from socialauth.domain.users.entities import AccountStatus, RefreshTokenRecord, User


class MutableClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)

    def epoch(self) -> float:
        return self.now.timestamp()


class PlainHasher:
    def hash(self, password: str) -> str:
        return f"plain${password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"plain${password}"

    def needs_rehash(self, hashed: str) -> bool:
        return not hashed.startswith("plain$")


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, User] = {}

    def find_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email.lower()), None)

    def find_by_username(self, username: str) -> User | None:
        return next((u for u in self.users.values() if u.username == username), None)

    def find_by_id(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    def add(self, user: User) -> User:
        stored = replace(user, id=user.id or str(uuid.uuid4()), email=user.email.lower())
        self.users[stored.id] = stored
        return stored

    def touch_last_active(self, user_id: str, at: datetime) -> None:
        self.users[user_id] = replace(self.users[user_id], last_active_at=at)

    def update_password(self, user_id: str, password_hash: str) -> None:
        self.users[user_id] = replace(self.users[user_id], password_hash=password_hash)

    def set_status(self, user_id: str, status: AccountStatus) -> None:
        self.users[user_id] = replace(self.users[user_id], status=status)


class InMemoryRefreshTokenRepository:
    def __init__(self) -> None:
        self.records: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: RefreshTokenRecord) -> None:
        self.records[record.id] = record

    def find(self, token_id: str) -> RefreshTokenRecord | None:
        return self.records.get(token_id)

    def revoke_if_valid(self, token_id: str, now: datetime) -> bool:
        with self._lock:
            record = self.records.get(token_id)
            if record is None or not record.is_valid(now):
                return False
            self.records[token_id] = replace(record, is_revoked=True)
            return True

    def revoke(self, token_id: str) -> bool:
        with self._lock:
            record = self.records.get(token_id)
            if record is None or record.is_revoked:
                return False
            self.records[token_id] = replace(record, is_revoked=True)
            return True

    def revoke_family(self, family_id: str) -> int:
        with self._lock:
            count = 0
            for token_id, record in list(self.records.items()):
                if record.family == family_id and not record.is_revoked:
                    self.records[token_id] = replace(record, is_revoked=True)
                    count += 1
            return count

    def revoke_all_for_user(self, user_id: str) -> int:
        with self._lock:
            count = 0
            for token_id, record in list(self.records.items()):
                if record.user_id == user_id and not record.is_revoked:
                    self.records[token_id] = replace(record, is_revoked=True)
                    count += 1
            return count

    def delete_expired(self, now: datetime) -> int:
        expired = [tid for tid, r in self.records.items() if r.expires_at <= now]
        for token_id in expired:
            del self.records[token_id]
        return len(expired)

    def active_for(self, user_id: str) -> list[RefreshTokenRecord]:
        return [r for r in self.records.values() if r.user_id == user_id and not r.is_revoked]


class BrokenRefreshTokenRepository(InMemoryRefreshTokenRepository):
    def revoke(self, token_id: str) -> bool:
        raise RuntimeError("database is locked")


class _FakePipeline:
    def __init__(self, client: "FakeRedis") -> None:
        self._client = client
        self._commands: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def __getattr__(self, name: str):
        def queue(*args: Any, **kwargs: Any) -> "_FakePipeline":
            self._commands.append((name, args, kwargs))
            return self

        return queue

    def execute(self) -> list[Any]:
        self._client.check()
        results = [getattr(self._client, n)(*a, **kw) for n, a, kw in self._commands]
        self._commands.clear()
        return results


class FakeRedis:
    """The handful of sorted-set commands the limiter uses."""

    def __init__(self) -> None:
        self.zsets: dict[str, dict[str, float]] = {}
        self.ttls: dict[str, int] = {}
        self.available = True

    def check(self) -> None:
        if not self.available:
            raise RedisConnectionError("Error 111 connecting to localhost:6379")

    def pipeline(self, transaction: bool = True) -> _FakePipeline:
        self.check()
        return _FakePipeline(self)

    def zremrangebyscore(self, key: str, low: float, high: float) -> int:
        members = self.zsets.get(key, {})
        doomed = [m for m, score in members.items() if low <= score <= high]
        for member in doomed:
            del members[member]
        return len(doomed)

    def zcard(self, key: str) -> int:
        return len(self.zsets.get(key, {}))

    def zrange(self, key: str, start: int, end: int, withscores: bool = False) -> list[Any]:
        ordered = sorted(self.zsets.get(key, {}).items(), key=lambda item: item[1])
        stop = None if end == -1 else end + 1
        window = ordered[start:stop]
        return window if withscores else [member for member, _ in window]

    def zadd(self, key: str, mapping: dict[str, float]) -> int:
        members = self.zsets.setdefault(key, {})
        added = sum(1 for member in mapping if member not in members)
        members.update(mapping)
        return added

    def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return key in self.zsets

    def ping(self) -> bool:
        self.check()
        return True
