"""Account directory operations: registration, login, profile and password reset."""

from __future__ import annotations

import logging
import secrets
import time
from typing import Callable, Optional

from dal.account_dal import AccountDAL
from dal.session_dal import SessionDAL
from models.account_models import ROLES, User
from models.errors import (
    AccountNotFound,
    CodeExpired,
    DuplicateAccount,
    EmailTaken,
    InvalidCode,
    InvalidCredentials,
    ValidationError,
)
from services.latency import LatencyHook

LOGGER = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_reset_code() -> str:
    """Return a random 6-digit numeric code (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


class AccountDirectory:
    """Account operations over an `AccountDAL`.

    Every public operation awaits the latency hook first. Returned users are
    public copies without password or reset fields.
    """

    def __init__(
        self,
        accounts: AccountDAL,
        sessions: SessionDAL,
        latency: Optional[LatencyHook] = None,
        reset_code_ttl_minutes: int = 15,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.accounts = accounts
        self.sessions = sessions
        self.latency = latency or LatencyHook()
        self.reset_code_ttl_ms = reset_code_ttl_minutes * 60 * 1000
        self._clock = clock

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        license_number: Optional[str] = None,
        date_of_birth: Optional[str] = None,
    ) -> User:
        """Create an account and mark it as the current user.

        Raises:
            ValidationError: Empty name, email or password, or unknown role.
            DuplicateAccount: The email is taken (case-insensitive).
        """
        name, email = (name or "").strip(), (email or "").strip()
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required.")
        if role not in ROLES:
            raise ValidationError(f"Unknown role {role!r}.")

        await self.latency("register")
        users = await self.accounts.list_users()
        if any(u.email.lower() == email.lower() for u in users):
            raise DuplicateAccount("A user with this email already exists.")

        user = User(name=name, email=email.lower(), password=password, role=role)
        if role == "doctor" and license_number:
            user.license_number = license_number
        if role == "patient" and date_of_birth:
            user.date_of_birth = date_of_birth
        users.append(user)
        await self.accounts.save_users(users)

        public = user.public()
        await self.sessions.save(public)
        return public

    async def login(self, email: str, password: str) -> User:
        """Return the account matching `email` and `password` and start a session."""
        await self.latency("login")
        wanted = (email or "").strip().lower()
        for user in await self.accounts.list_users():
            if user.email.lower() == wanted and user.password == password:
                public = user.public()
                await self.sessions.save(public)
                return public
        raise InvalidCredentials("Invalid email or password.")

    async def logout(self) -> None:
        await self.sessions.clear()

    async def current_user(self) -> Optional[User]:
        return await self.sessions.get()

    async def request_password_reset(self, email: str, role: str) -> str:
        """Issue a 6-digit reset code valid for the configured TTL.

        The code is logged in place of being e-mailed and returned to the caller.

        Raises:
            AccountNotFound: No account with this email and role.
        """
        await self.latency("request_password_reset")
        wanted = (email or "").strip().lower()
        users = await self.accounts.list_users()
        user = next((u for u in users if u.email.lower() == wanted and u.role == role), None)
        if user is None:
            raise AccountNotFound(f"No {role} account found with this email address.")

        user.reset_code = generate_reset_code()
        user.reset_code_expiry = self._clock() + self.reset_code_ttl_ms
        await self.accounts.save_users(users)
        LOGGER.info("Reset code for %s: %s", user.email, user.reset_code)
        return user.reset_code

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        """Replace the password if `code` matches and has not expired.

        Raises:
            ValidationError: Empty new password.
            AccountNotFound: Unknown email.
            InvalidCode: No code issued or the code does not match.
            CodeExpired: The code is past its expiry.
        """
        if not new_password:
            raise ValidationError("A new password is required.")
        await self.latency("reset_password")
        wanted = (email or "").strip().lower()
        users = await self.accounts.list_users()
        user = next((u for u in users if u.email.lower() == wanted), None)
        if user is None:
            raise AccountNotFound("Invalid email address.")
        if not user.reset_code or user.reset_code != code:
            raise InvalidCode("Invalid reset code.")
        if not user.reset_code_expiry or user.reset_code_expiry < self._clock():
            raise CodeExpired("Reset code has expired. Please request a new one.")

        user.password = new_password
        user.reset_code = None
        user.reset_code_expiry = None
        await self.accounts.save_users(users)

    async def update_profile(self, original_email: str, name: str, email: str) -> User:
        """Change name and email of an account and refresh the session marker.

        Raises:
            ValidationError: Empty name or email.
            AccountNotFound: `original_email` is unknown.
            EmailTaken: `email` belongs to a different account.
        """
        name, email = (name or "").strip(), (email or "").strip()
        if not name or not email:
            raise ValidationError("Name and email are required.")
        await self.latency("update_profile")
        users = await self.accounts.list_users()
        original = (original_email or "").strip().lower()
        index = next((i for i, u in enumerate(users) if u.email.lower() == original), None)
        if index is None:
            raise AccountNotFound("Current user not found. Could not update profile.")

        if email.lower() != original and any(u.email.lower() == email.lower() for u in users):
            raise EmailTaken("This email address is already in use by another account.")

        user = users[index]
        user.name = name
        user.email = email
        await self.accounts.save_users(users)

        public = user.public()
        await self.sessions.save(public)
        return public
