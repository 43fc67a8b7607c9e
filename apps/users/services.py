import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework_simplejwt.token_blacklist.models import (
    BlacklistedToken,
    OutstandingToken,
)
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    def __init__(self, message: str, code: str = "authentication_failed"):
        self.message = message
        self.code = code
        super().__init__(message)


class AccountLocked(AuthenticationError):
    def __init__(self, locked_until):
        self.locked_until = locked_until
        super().__init__(
            "Account is temporarily locked due to too many failed login attempts.",
            "account_locked",
        )


class AuthService:
    """Registration, login bookkeeping and token management for all clients."""

    @staticmethod
    def issue_tokens(user: User) -> dict:
        """Return a fresh access/refresh pair carrying the user's role claims."""
        refresh = RefreshToken.for_user(user)
        AuthService.add_claims(refresh, user)
        return {"refresh": str(refresh), "access": str(refresh.access_token)}

    @staticmethod
    def add_claims(token, user: User):
        token["email"] = user.email
        token["role"] = user.role
        token["permissions"] = user.permission_codes
        return token

    @staticmethod
    @transaction.atomic
    def register_user(validated_data: dict) -> User:
        data = dict(validated_data)
        data.pop("password2", None)
        password = data.pop("password")
        email = data.pop("email")
        user = User.objects.create_user(email=email, password=password, **data)
        logger.info(f"Registered user {user.id} ({user.email}) with role {user.role}")
        return user

    @staticmethod
    def ensure_not_locked(user: User) -> None:
        if user.is_locked:
            logger.warning(f"Login attempt on locked account {user.id}")
            raise AccountLocked(user.locked_until)

    @staticmethod
    @transaction.atomic
    def register_failed_login(user: User) -> User:
        """
        Count a failed login. An expired lock restarts the count at 1; reaching
        LOGIN_MAX_ATTEMPTS locks the account for LOGIN_LOCKOUT_MINUTES.
        """
        user = User.objects.select_for_update().get(pk=user.pk)
        now = timezone.now()

        if user.locked_until and user.locked_until <= now:
            user.failed_login_attempts = 1
            user.locked_until = None
        else:
            user.failed_login_attempts += 1
            if user.failed_login_attempts >= settings.LOGIN_MAX_ATTEMPTS and not user.is_locked:
                user.locked_until = now + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
                logger.warning(
                    f"Locked account {user.id} until {user.locked_until.isoformat()} "
                    f"after {user.failed_login_attempts} failed attempts"
                )

        user.save(update_fields=["failed_login_attempts", "locked_until", "updated_at"])
        return user

    @staticmethod
    def register_successful_login(user: User) -> User:
        now = timezone.now()
        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login = now
        user.last_active_at = now
        user.save(
            update_fields=[
                "failed_login_attempts",
                "locked_until",
                "last_login",
                "last_active_at",
                "updated_at",
            ]
        )
        return user

    @staticmethod
    def blacklist_refresh_token(raw_token: str) -> None:
        """Raises rest_framework_simplejwt TokenError for invalid tokens."""
        RefreshToken(raw_token).blacklist()

    @staticmethod
    def revoke_all_tokens(user: User) -> int:
        revoked = 0
        for token in OutstandingToken.objects.filter(user=user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            revoked += int(created)
        if revoked:
            logger.info(f"Revoked {revoked} refresh tokens for user {user.id}")
        return revoked

    @staticmethod
    @transaction.atomic
    def change_password(user: User, new_password: str) -> User:
        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])
        AuthService.revoke_all_tokens(user)
        logger.info(f"Password changed for user {user.id}")
        return user

    @staticmethod
    @transaction.atomic
    def deactivate_account(user: User) -> User:
        user.is_active = False
        user.save(update_fields=["is_active", "updated_at"])
        AuthService.revoke_all_tokens(user)
        logger.info(f"Deactivated account {user.id}")
        return user

    @staticmethod
    def user_stats() -> dict:
        totals = User.objects.aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(is_active=True)),
        )
        by_role = {
            row["role"]: {"total": row["total"], "active": row["active"]}
            for row in User.objects.values("role").annotate(
                total=Count("id"), active=Count("id", filter=Q(is_active=True))
            ).order_by("role")
        }
        for role in User.Role.values:
            by_role.setdefault(role, {"total": 0, "active": 0})
        return {
            "total_users": totals["total"],
            "active_users": totals["active"],
            "by_role": by_role,
        }
