"""
账户服务 (Account Service)

注册、邮箱验证、登录和密码重置流程。

状态机 (State machine):
    unverified → verified     出示有效的验证令牌后单向转换，令牌随即清空
                              (one-way, on presenting a valid verification token, which is then cleared)
    reset_token               出示有效且未过期的重置令牌后更新密码并清空令牌；再次使用同一令牌失败
                              (a valid unexpired reset token changes the password and is cleared;
                              reusing it fails)
    login                     凭证匹配且 verified 为真才签发会话令牌
                              (a session token is only issued for matching credentials AND verified)

邮件发送通过副作用分发器进行，投递失败不会阻塞触发它的操作。
Mails go through the side-effect dispatcher so a delivery failure never blocks the operation.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError,
)
from app.core.security import create_access_token, generate_one_time_token, hash_password, verify_password
from app.core.store import DocumentStore
from app.core.timeutil import as_utc, utcnow
from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.services.effects import SideEffects
from app.services.notification import (
    RESET_SUBJECT,
    VERIFICATION_SUBJECT,
    reset_email_html,
    verification_email_html,
)

logger = logging.getLogger(__name__)

VERIFICATION_SENT = "Verification email sent."
VERIFICATION_MAYBE_SENT = "If the email exists, a verification email has been sent."
ALREADY_VERIFIED = "Email is already verified."
EMAIL_VERIFIED = "Email verified successfully."
RESET_SENT = "Password reset email sent."
RESET_MAYBE_SENT = "If the email exists, a password reset email has been sent."
PASSWORD_RESET = "Password has been reset successfully."


@dataclass
class LoginResult:
    access_token: str
    user: User


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _check_password(password: str) -> None:
    if not password:
        raise ValidationError("Password must not be empty")


def _verification_expiry():
    return utcnow() + timedelta(hours=settings.verification_token_expire_hours)


async def register(store: DocumentStore, effects: SideEffects, name: str, email: str, password: str) -> User:
    """
    注册新用户 (Register a new user)

    第一个注册的用户自动成为管理员，之后的用户为普通用户。新用户处于未验证状态，
    不签发会话令牌；验证邮件通过副作用分发器发送。

    The first account becomes admin, later ones are plain users. New users are
    unverified and get no session token; the verification mail is dispatched.

    Raises:
        ConflictError: 邮箱已被注册 (email already registered)
    """
    email = _normalize_email(email)
    if not name or not name.strip():
        raise ValidationError("Name must not be empty")
    _check_password(password)
    if await store.find_one(User, email=email) is not None:
        raise ConflictError("Email already registered")

    role = ROLE_ADMIN if await store.count(User) == 0 else ROLE_USER
    token = generate_one_time_token()
    try:
        user = await store.create(
            User,
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=role,
            verified=False,
            verification_token=token,
            verification_token_expires_at=_verification_expiry(),
        )
        await store.commit()
    except IntegrityError:
        # 并发注册同一邮箱时由唯一索引兜底 (concurrent sign-up hit the unique index)
        await store.rollback()
        raise ConflictError("Email already registered")
    logger.info("Registered user %s (%s) as %s", user.id, email, role)

    effects.mail(email, VERIFICATION_SUBJECT, verification_email_html(token))
    effects.audit(user.id, "register", f"User registered with email: {email}")
    return user


async def send_verification_email(store: DocumentStore, effects: SideEffects, email: str) -> str:
    """
    (重新)发送验证邮件 (Send or resend the verification mail)

    未知邮箱返回通用提示，避免泄露账户是否存在；已验证的账户不再发送。
    Unknown emails get a generic answer; verified accounts get no mail.
    """
    user = await store.find_one(User, email=_normalize_email(email))
    if user is None:
        return VERIFICATION_MAYBE_SENT
    if user.verified:
        return ALREADY_VERIFIED

    expires_at = as_utc(user.verification_token_expires_at)
    token = user.verification_token
    if not token or expires_at is None or expires_at <= utcnow():
        token = generate_one_time_token()
    await store.update_by_id(
        User, user.id, verification_token=token, verification_token_expires_at=_verification_expiry()
    )
    await store.commit()

    effects.mail(user.email, VERIFICATION_SUBJECT, verification_email_html(token))
    return VERIFICATION_SENT


async def verify_email(store: DocumentStore, effects: SideEffects, token: str) -> str:
    """
    使用验证令牌完成邮箱验证 (Verify the email with its one-time token)

    Raises:
        InvalidTokenError: 令牌未知或已过期 (unknown or expired token)
    """
    user = await store.find_one(User, verification_token=token) if token else None
    if user is None:
        raise InvalidTokenError("Invalid or expired token")
    expires_at = as_utc(user.verification_token_expires_at)
    if expires_at is not None and expires_at <= utcnow():
        raise InvalidTokenError("Invalid or expired token")

    await store.update_by_id(
        User, user.id, verified=True, verification_token=None, verification_token_expires_at=None
    )
    await store.commit()
    effects.audit(user.id, "verifyEmail", f"User {user.id} verified email {user.email}")
    return EMAIL_VERIFIED


async def login(store: DocumentStore, email: str, password: str) -> LoginResult:
    """
    登录 (Log in)

    Raises:
        InvalidCredentialsError: 邮箱不存在或密码错误 (unknown email or wrong password)
        EmailNotVerifiedError: 凭证正确但邮箱未验证 (correct credentials, email not verified)
    """
    user = await store.find_one(User, email=_normalize_email(email))
    if user is None or not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError("Invalid credentials")
    if not user.verified:
        raise EmailNotVerifiedError("Email not verified")
    return LoginResult(access_token=create_access_token(str(user.id), user.role), user=user)


async def request_password_reset(store: DocumentStore, effects: SideEffects, email: str) -> str:
    """签发新的重置令牌（1 小时有效）并发送邮件 (Issue a fresh 1-hour reset token and mail it)"""
    user = await store.find_one(User, email=_normalize_email(email))
    if user is None:
        return RESET_MAYBE_SENT

    token = generate_one_time_token()
    await store.update_by_id(
        User,
        user.id,
        reset_token=token,
        reset_token_expires_at=utcnow() + timedelta(minutes=settings.reset_token_expire_minutes),
    )
    await store.commit()

    effects.mail(user.email, RESET_SUBJECT, reset_email_html(token))
    return RESET_SENT


async def reset_password(store: DocumentStore, effects: SideEffects, token: str, new_password: str) -> str:
    """
    使用重置令牌设置新密码 (Set a new password with the reset token)

    令牌未知或过期时失败且密码不变；成功后令牌清空，同一令牌再次使用会失败。
    Unknown or expired tokens fail and leave the password unchanged; on success the
    token is cleared so a second use fails.

    Raises:
        InvalidTokenError: 令牌未知或已过期 (unknown or expired token)
    """
    user = await store.find_one(User, reset_token=token) if token else None
    expires_at = as_utc(user.reset_token_expires_at) if user is not None else None
    if user is None or expires_at is None or expires_at <= utcnow():
        raise InvalidTokenError("Invalid or expired token")
    _check_password(new_password)

    await store.update_by_id(
        User,
        user.id,
        hashed_password=hash_password(new_password),
        reset_token=None,
        reset_token_expires_at=None,
    )
    await store.commit()
    effects.audit(user.id, "resetPassword", f"User {user.id} reset their password")
    return PASSWORD_RESET
