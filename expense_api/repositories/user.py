"""User repository for persistence and credential lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select, update
from sqlalchemy.orm import undefer

from expense_api.models.user import User
from expense_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository focuses on safe lookup and credential-column access.
    It NEVER mints tokens or sets cookies; it only handles DB-level user management.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {"email": User.email}

    def _updatable_fields(self):
        """Publicly allowed updatable fields (credentials excluded)."""
        return {"name", "email"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str, *, with_secrets: bool = False) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :param with_secrets: Eagerly load the deferred hash columns.
        :type with_secrets: bool
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        if with_secrets:
            stmt = stmt.options(undefer(User.password_hash), undefer(User.refresh_token_hash))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists.

        :param email: Email address to normalise and search.
        :type email: str
        :returns: ``True`` if a row is found; otherwise ``False``.
        :rtype: bool
        """
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def get_with_secrets(self, user_id: int) -> User | None:
        """Fetch a user by id with both hash columns loaded.

        :param user_id: Identifier of the user.
        :type user_id: int
        :returns: User or ``None``.
        :rtype: User | None
        """
        stmt = (
            select(User)
            .where(User.id == user_id)
            .options(undefer(User.password_hash), undefer(User.refresh_token_hash))
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Credential ops ----------------------------

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate a user by email and password.

        :param email: Email address to authenticate.
        :type email: str
        :param password: Raw password to verify.
        :type password: str
        :returns: Authenticated user or ``None`` when credentials fail.
        :rtype: User | None
        """
        user = self.get_by_email(email, with_secrets=True)
        if not user or not user.verify_password(password):
            return None
        return user

    def compare_and_set_refresh_hash(
        self, user_id: int, *, expected: str, new_hash: str
    ) -> bool:
        """Swap the stored refresh hash only if it still equals ``expected``.

        Issued as a single ``UPDATE ... WHERE refresh_token_hash = :expected``
        so two concurrent callers cannot both succeed.

        :param user_id: Identifier of the user.
        :param expected: Hash observed when the presented token was verified.
        :param new_hash: Hash of the newly minted refresh token.
        :returns: ``True`` when exactly one row was updated.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token_hash == expected)
            .values(refresh_token_hash=new_hash)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1
