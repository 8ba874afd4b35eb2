from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from email_validator import EmailNotValidError, validate_email
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError

from ...auth.passwords import hash_password, verify_password
from ...auth.tokens import sign_token
from ...config import settings
from ...database.connection import get_async_session
from ...dbmodels import Feedbacks, Portfolios, Ratings, Users, user_follows, user_portfolios
from ...logging import get_logger
from ..access_control import require_auth_context
from ..errors import AuthenticationError, ValidationError
from .user import ALL_RELATIONS, fetch_user, to_user_type

if TYPE_CHECKING:
    from ..types.auth import Auth
    from ..types.user import User

logger = get_logger(__name__)

DUPLICATE_ACCOUNT_MESSAGE = "Username or email is already in use"

# Author name left on the content of removed accounts; no account can take it
DELETED_AUTHOR = "[deleted]"


def normalize_email(email: str) -> str:
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email address: {e}") from e


def normalize_username(username: str) -> str:
    username = username.strip()
    if not username:
        raise ValidationError("username can not be empty")
    if username == DELETED_AUTHOR:
        raise ValidationError(f"username {DELETED_AUTHOR} is reserved")
    return username


def check_password(password: str) -> None:
    if len(password) < settings.password_min_length:
        raise ValidationError(
            f"password must be at least {settings.password_min_length} characters long"
        )


def _make_auth(user: Users) -> Auth:
    from ..types.auth import Auth

    return Auth(token=sign_token(user), user=to_user_type(user, ALL_RELATIONS))


async def add_user(info: strawberry.Info, username: str, email: str, password: str) -> Auth:
    """
    Register a new account and log it in.

    Raises ValidationError for malformed input or a username/e-mail that is
    already taken.
    """
    username = normalize_username(username)
    email = normalize_email(email)
    check_password(password)

    password_hash = await asyncio.to_thread(hash_password, password)

    async with get_async_session() as session:
        stmt = select(Users.id).where(or_(Users.username == username, Users.email == email))
        if (await session.execute(stmt)).first() is not None:
            raise ValidationError(DUPLICATE_ACCOUNT_MESSAGE)

        new_user = Users(username=username, email=email, password_hash=password_hash)
        session.add(new_user)
        try:
            await session.flush()
            user_id = new_user.id
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            raise ValidationError(DUPLICATE_ACCOUNT_MESSAGE) from e

        user = await fetch_user(session, user_id)

        logger.info("User created", user_id=str(user_id), username=username)

        return _make_auth(user)


async def login(info: strawberry.Info, email: str, password: str) -> Auth:
    """
    Exchange e-mail and password for a token.

    Unknown e-mails and wrong passwords cost the same hashing work.
    """
    try:
        email = normalize_email(email)
    except ValidationError:
        email = email.strip()

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.email == email))
        user = result.scalar_one_or_none()

        password_ok = await asyncio.to_thread(
            verify_password, password, user.password_hash if user else None
        )

        if not user:
            logger.info("Login failed: unknown email")
            raise AuthenticationError("No user found with this email address")

        if not password_ok:
            logger.info("Login failed: incorrect password", user_id=str(user.id))
            raise AuthenticationError("Incorrect credentials")

        user = await fetch_user(session, user.id)

        logger.info("User logged in", user_id=str(user.id))

        return _make_auth(user)


async def remove_user(info: strawberry.Info, user_id: UUID | None = None) -> User | None:
    """
    Delete the caller's own account.

    Any user id supplied by the client is ignored. Portfolios, ratings and
    feedbacks authored by the user are kept under DELETED_AUTHOR so a later
    account with the same username does not inherit them. Follow edges and
    portfolio links are dropped with the user.
    """
    auth_context = await require_auth_context(info)

    if user_id is not None and user_id != auth_context.user_id:
        logger.warning(
            "removeUser called with a foreign user id; removing the caller instead",
            requested_user_id=str(user_id),
            user_id=str(auth_context.user_id),
        )

    async with get_async_session() as session:
        user = await fetch_user(session, auth_context.user_id)
        if not user:
            return None

        removed = to_user_type(user, ALL_RELATIONS)

        await session.execute(
            delete(user_follows).where(
                or_(
                    user_follows.c.follower_id == auth_context.user_id,
                    user_follows.c.following_id == auth_context.user_id,
                )
            )
        )
        await session.execute(
            delete(user_portfolios).where(user_portfolios.c.user_id == auth_context.user_id)
        )
        await _rename_author(session, user.username, DELETED_AUTHOR)
        await session.delete(user)

        logger.info("User removed", user_id=str(auth_context.user_id))

        return removed


async def update_user(
    info: strawberry.Info,
    username: str | None = None,
    email: str | None = None,
    password: str | None = None,
) -> User | None:
    """
    Update the caller's own account.

    Only username, email and password can change. A new username is also
    written into every author field that carries the old one.
    """
    auth_context = await require_auth_context(info)

    if username is not None:
        username = normalize_username(username)
    if email is not None:
        email = normalize_email(email)
    password_hash = None
    if password is not None:
        check_password(password)
        password_hash = await asyncio.to_thread(hash_password, password)

    async with get_async_session() as session:
        user = await fetch_user(session, auth_context.user_id, expand=())
        if not user:
            return None

        old_username = user.username
        clashes = []
        if username is not None and username != user.username:
            clashes.append(Users.username == username)
        if email is not None and email != user.email:
            clashes.append(Users.email == email)
        if clashes:
            stmt = select(Users.id).where(or_(*clashes), Users.id != user.id)
            if (await session.execute(stmt)).first() is not None:
                raise ValidationError(DUPLICATE_ACCOUNT_MESSAGE)

        updated_fields = []
        if username is not None and username != old_username:
            user.username = username
            updated_fields.append("username")
            await _rename_author(session, old_username, username)
        if email is not None and email != user.email:
            user.email = email
            updated_fields.append("email")
        if password_hash is not None:
            user.password_hash = password_hash
            updated_fields.append("password")

        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            raise ValidationError(DUPLICATE_ACCOUNT_MESSAGE) from e

        if "username" in updated_fields:
            auth_context.username = username

        user = await fetch_user(session, auth_context.user_id)

        logger.info(
            "User updated",
            user_id=str(auth_context.user_id),
            updated_fields=updated_fields,
        )

        return to_user_type(user, ALL_RELATIONS)


async def _rename_author(session, old_username: str, new_username: str) -> None:
    """Rewrite denormalized author names after a rename or an account removal."""
    await session.execute(
        update(Portfolios)
        .where(Portfolios.portfolio_author == old_username)
        .values(portfolio_author=new_username)
    )
    await session.execute(
        update(Ratings)
        .where(Ratings.rating_author == old_username)
        .values(rating_author=new_username)
    )
    await session.execute(
        update(Feedbacks)
        .where(Feedbacks.feedback_author == old_username)
        .values(feedback_author=new_username)
    )
