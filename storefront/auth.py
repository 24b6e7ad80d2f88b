"""
Admin authentication: login with lockout, token verification and account
management.

Account states are derived from the stored record:

* ``disabled``: ``is_active`` is false. Rejected before anything else.
* ``locked``: ``locked_until`` lies in the future. Rejected without checking
  the password.
* ``active``: everything else. A lock whose window has passed is cleared and
  the failure counter restarts at zero.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from storefront.config import Settings
from storefront.db import (
    AccessLogRecord,
    AdminUserRecord,
    DuplicateRecordError,
    NewUser,
    StoreClient,
)
from storefront.errors import (
    AccountLocked,
    AuthenticationFailed,
    Conflict,
    Forbidden,
    NotFound,
    ValidationFailed,
)
from storefront.security import create_token, decode_token, hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt only reads the first 72 bytes and newer releases reject longer input.
MAX_PASSWORD_BYTES = 72
INVALID_CREDENTIALS = "Invalid credentials"
ACCOUNT_DISABLED = "Account disabled. Contact an administrator."


@dataclass
class LoginResult:
    token: str
    expires_in: int
    user: AdminUserRecord


@dataclass
class ClientInfo:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def _minutes(seconds: float) -> int:
    return max(1, math.ceil(seconds / 60))


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    return hash_password("mjtech-unknown-account", rounds)


class AuthService:
    def __init__(self, store: StoreClient, settings: Settings):
        self.store = store
        self.settings = settings

    def _entry(
        self,
        action: str,
        success: bool,
        client: ClientInfo,
        *,
        user: Optional[AdminUserRecord] = None,
        username: Optional[str] = None,
        details: Optional[str] = None,
    ) -> AccessLogRecord:
        return AccessLogRecord(
            action=action,
            success=success,
            user_id=user.id if user else None,
            username=user.username if user else username,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
            details=details,
        )

    def login(
        self,
        login: str,
        password: str,
        *,
        remember: bool = False,
        client: Optional[ClientInfo] = None,
    ) -> LoginResult:
        client = client or ClientInfo()
        login = (login or "").strip()
        if not login or not password:
            raise ValidationFailed("Username and password are required")

        user = self.store.find_user_by_login(login)
        if not user:
            # Same bcrypt cost as a real account so timing does not reveal usernames.
            verify_password(password, _dummy_hash(self.settings.bcrypt_rounds))
            self.store.log_access(
                self._entry(
                    "login_failed", False, client, username=login, details="unknown account"
                )
            )
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        if not user.is_active:
            self.store.log_access(self._entry("login_disabled", False, client, user=user))
            raise Forbidden(ACCOUNT_DISABLED)

        now = time.time()
        if user.locked_until and now < user.locked_until:
            self._reject_locked(user, user.locked_until, now, client)

        if not verify_password(password, user.password_hash):
            self._register_failure(user, now, client)

        self.store.update_user(
            user.id,
            {"failed_attempts": 0, "locked_until": None, "last_login": now},
            audit=self._entry("login_success", True, client, user=user),
        )
        user = self.store.get_user(user.id)
        expires_in = (
            timedelta(days=self.settings.remember_expiration_days)
            if remember
            else timedelta(hours=self.settings.token_expiration_hours)
        )
        token = create_token(
            user,
            secret=self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
            expires_in=expires_in,
        )
        logger.info("Admin %s logged in", user.username)
        return LoginResult(
            token=token, expires_in=int(expires_in.total_seconds()), user=user
        )

    def _reject_locked(
        self, user: AdminUserRecord, locked_until: float, now: float, client: ClientInfo
    ):
        self.store.log_access(
            self._entry(
                "login_locked", False, client, user=user, details="attempt during lockout"
            )
        )
        raise AccountLocked(
            "Account temporarily locked. "
            f"Try again in {_minutes(locked_until - now)} minute(s)."
        )

    def _register_failure(self, user: AdminUserRecord, now: float, client: ClientInfo):
        max_attempts = self.settings.max_login_attempts
        lockout = self.settings.lockout_seconds

        def audit(updated: AdminUserRecord) -> AccessLogRecord:
            if updated.locked_until:
                details = f"locked after {updated.failed_attempts} failed attempts"
            else:
                details = f"failed attempt {updated.failed_attempts}"
            return self._entry("login_failed", False, client, user=user, details=details)

        updated = self.store.record_login_failure(
            user.id,
            max_attempts=max_attempts,
            lockout_seconds=lockout,
            now=now,
            audit=audit,
        )
        if updated is None:
            # A concurrent attempt locked the account first.
            current = self.store.get_user(user.id)
            if current and current.locked_until and current.locked_until > now:
                self._reject_locked(user, current.locked_until, now, client)
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        if updated.locked_until:
            logger.warning(
                "Account %s locked for %ss after %d failed attempts",
                user.username,
                lockout,
                updated.failed_attempts,
            )
            raise AccountLocked(
                "Too many failed attempts. "
                f"Account locked for {_minutes(lockout)} minute(s)."
            )

        remaining = max_attempts - updated.failed_attempts
        raise AuthenticationFailed(
            f"{INVALID_CREDENTIALS}. {remaining} attempt(s) remaining."
        )

    def authenticate(self, token: str) -> AdminUserRecord:
        """
        Resolve a bearer token to a live account. A deactivated or deleted
        account invalidates its outstanding tokens immediately.
        """
        claims = decode_token(
            token,
            secret=self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
        )
        user = self.store.get_user(claims["id"])
        if not user:
            raise AuthenticationFailed("User not found")
        if not user.is_active:
            raise Forbidden(ACCOUNT_DISABLED)
        return user

    def logout(self, user: AdminUserRecord, client: Optional[ClientInfo] = None) -> None:
        self.store.log_access(
            self._entry("logout", True, client or ClientInfo(), user=user)
        )

    def _check_new_password(self, password: str) -> None:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must have at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationFailed(
                f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes"
            )

    def change_password(
        self,
        user: AdminUserRecord,
        current_password: str,
        new_password: str,
        client: Optional[ClientInfo] = None,
    ) -> None:
        if not verify_password(current_password, user.password_hash):
            raise ValidationFailed("Current password is incorrect")
        self._check_new_password(new_password)
        if new_password == current_password:
            raise ValidationFailed("New password must differ from the current one")
        self.store.update_user(
            user.id,
            {"password_hash": hash_password(new_password, self.settings.bcrypt_rounds)},
            audit=self._entry("password_changed", True, client or ClientInfo(), user=user),
        )

    def create_user(
        self,
        *,
        username: str,
        email: str,
        password: str,
        full_name: str,
        role: str,
        created_by: AdminUserRecord,
        client: Optional[ClientInfo] = None,
    ) -> AdminUserRecord:
        self._check_new_password(password)
        new_user = NewUser(
            username=username.strip(),
            email=email.strip().lower(),
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
            full_name=full_name.strip(),
            role=role,
        )
        try:
            return self.store.create_user(
                new_user,
                audit=self._entry(
                    "user_created",
                    True,
                    client or ClientInfo(),
                    user=created_by,
                    details=f"created {new_user.username} ({role})",
                ),
            )
        except DuplicateRecordError as exc:
            raise Conflict(str(exc)) from exc

    def update_user(
        self,
        user_id: int,
        changes: dict,
        *,
        updated_by: AdminUserRecord,
        client: Optional[ClientInfo] = None,
    ) -> AdminUserRecord:
        if not changes:
            raise ValidationFailed("No fields to update")
        if user_id == updated_by.id and (
            changes.get("is_active") is False
            or changes.get("role", updated_by.role) != updated_by.role
        ):
            raise ValidationFailed("You cannot deactivate or demote your own account")
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
        if changes.get("is_active") is True:
            # Re-enabling an account also lifts any lockout.
            changes.update(failed_attempts=0, locked_until=None)
        try:
            updated = self.store.update_user(
                user_id,
                changes,
                audit=self._entry(
                    "user_updated",
                    True,
                    client or ClientInfo(),
                    user=updated_by,
                    details=f"user {user_id}: {', '.join(sorted(changes))}",
                ),
            )
        except DuplicateRecordError as exc:
            raise Conflict(str(exc)) from exc
        if not updated:
            raise NotFound("User not found")
        return updated
