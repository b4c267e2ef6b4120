# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from socialauth.domain.users.entities import AccountStatus
from socialauth.domain.users.entities import RefreshTokenRecord
from socialauth.domain.users.entities import User as DomainUser
from socialauth.domain.users.exceptions import EmailTakenError, UsernameTakenError
from socialauth.domain.users.repositories import RefreshTokenRepository, UserRepository
from socialauth.infrastructure.db.models import RefreshToken, User
from socialauth.infrastructure.db.session import session_scope
from socialauth.shared.errors.base import AppError
from socialauth.shared.utils.clock import ensure_utc


def _user_to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        email=row.email,
        username=row.username,
        display_name=row.display_name,
        password_hash=row.password_hash,
        role=row.role,
        status=AccountStatus(row.account_status),
        created_at=ensure_utc(row.created_at),
        last_active_at=ensure_utc(row.last_active_at) if row.last_active_at else None,
    )


def _token_to_domain(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        expires_at=ensure_utc(row.expires_at),
        created_at=ensure_utc(row.created_at),
        is_revoked=bool(row.is_revoked),
        family_id=row.family_id,
    )


class SqlAlchemyUserRepository(UserRepository):
    def find_by_email(self, email: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(select(User).where(User.email == email.lower())).first()
            return _user_to_domain(row) if row else None

    def find_by_username(self, username: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.scalars(select(User).where(User.username == username)).first()
            return _user_to_domain(row) if row else None

    def find_by_id(self, user_id: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            return _user_to_domain(row) if row else None

    def add(self, user: DomainUser) -> DomainUser:
        """Insert ``user``; a lost race on email or username raises the domain error."""
        try:
            with session_scope() as session:
                row = User(
                    email=user.email.lower(),
                    username=user.username,
                    display_name=user.display_name,
                    password_hash=user.password_hash,
                    role=user.role,
                    account_status=user.status.value,
                    created_at=user.created_at,
                )
                if user.id:
                    row.id = user.id
                session.add(row)
                session.flush()
                session.refresh(row)
                return _user_to_domain(row)
        except IntegrityError:
            conflict = self._conflict_for(user)
            if conflict is None:
                raise
            raise conflict from None

    def _conflict_for(self, user: DomainUser) -> AppError | None:
        with session_scope() as session:
            if session.scalar(select(User.id).where(User.email == user.email.lower())):
                return EmailTakenError()
            if session.scalar(select(User.id).where(User.username == user.username)):
                return UsernameTakenError()
        return None

    def touch_last_active(self, user_id: str, at: datetime) -> None:
        with session_scope() as session:
            session.execute(
                update(User).where(User.id == user_id).values(last_active_at=at)
            )

    def update_password(self, user_id: str, password_hash: str) -> None:
        with session_scope() as session:
            session.execute(
                update(User).where(User.id == user_id).values(password_hash=password_hash)
            )

    def set_status(self, user_id: str, status: AccountStatus) -> None:
        with session_scope() as session:
            session.execute(
                update(User).where(User.id == user_id).values(account_status=status.value)
            )


class SqlAlchemyRefreshTokenRepository(RefreshTokenRepository):
    def add(self, record: RefreshTokenRecord) -> None:
        with session_scope() as session:
            session.add(
                RefreshToken(
                    id=record.id,
                    user_id=record.user_id,
                    token_hash=record.token_hash,
                    family_id=record.family,
                    expires_at=record.expires_at,
                    is_revoked=record.is_revoked,
                    created_at=record.created_at,
                )
            )

    def find(self, token_id: str) -> RefreshTokenRecord | None:
        with session_scope() as session:
            row = session.get(RefreshToken, token_id)
            return _token_to_domain(row) if row else None

    def revoke_if_valid(self, token_id: str, now: datetime) -> bool:
        with session_scope() as session:
            result = session.execute(
                update(RefreshToken)
                .where(
                    RefreshToken.id == token_id,
                    RefreshToken.is_revoked.is_(False),
                    RefreshToken.expires_at > now,
                )
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def revoke(self, token_id: str) -> bool:
        with session_scope() as session:
            result = session.execute(
                update(RefreshToken)
                .where(RefreshToken.id == token_id, RefreshToken.is_revoked.is_(False))
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def revoke_family(self, family_id: str) -> int:
        with session_scope() as session:
            result = session.execute(
                update(RefreshToken)
                .where(RefreshToken.family_id == family_id, RefreshToken.is_revoked.is_(False))
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount or 0)

    def revoke_all_for_user(self, user_id: str) -> int:
        with session_scope() as session:
            result = session.execute(
                update(RefreshToken)
                .where(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount or 0)

    def delete_expired(self, now: datetime) -> int:
        with session_scope() as session:
            result = session.execute(
                delete(RefreshToken)
                .where(RefreshToken.expires_at <= now)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount or 0)
