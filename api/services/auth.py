"""Authentication service functions: signup, login and token resolution."""

from typing import Any, Optional
import logging

from sqlalchemy import select

from api.services.persons import create_person, person_to_dict
from core.errors import field_required, unauthorized, validation_failed
from core.security import INHOUSE_REALM, hash_password, verify_password
from database.engine import Database
from database.models.persons import Person

logger = logging.getLogger(__name__)

# Same message for an unknown login and a wrong password
LOGIN_FAILED_MESSAGE = "unable to login"


def user_context(person: Person) -> dict[str, Any]:
    """Payload returned after signup, login and from /me."""
    return {
        "authenticated": True,
        "token": person.access_token,
        "subject": person_to_dict(person),
    }


async def signup(
    db: Database,
    login: Optional[str],
    password: Optional[str],
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    ethereum_address: Optional[str] = None,
) -> dict[str, Any]:
    """
    Register a self-service account in the in-house realm.

    Returns:
        User context with the new access token
    """
    if not password:
        raise validation_failed("Password required")

    async with db.transaction() as session:
        person = await create_person(
            session,
            login=login,
            password=password,
            display_name=display_name,
            email=email,
            ethereum_address=ethereum_address,
        )
        return user_context(person)


async def login(db: Database, login: Optional[str], password: Optional[str]) -> dict[str, Any]:
    """
    Check credentials and return the user context.

    A missing person and a wrong password produce the same error.
    """
    login = (login or "").strip().lower()
    if not login:
        raise validation_failed("login is required")

    async with db.transaction(read_only=True) as session:
        result = await session.execute(
            select(Person).where(Person.realm == INHOUSE_REALM, Person.login == login)
        )
        person = result.scalar_one_or_none()

        if person is None or not verify_password(password or "", person.password_hash):
            logger.info("Login failed", extra={"login": login})
            raise validation_failed(LOGIN_FAILED_MESSAGE)

        return user_context(person)


async def resolve_token(db: Database, token: Optional[str]) -> Person:
    """
    Find the person owning a bearer token.

    Raises:
        ServiceError: unauthorized for a missing or unknown token
    """
    if not token:
        raise unauthorized()

    async with db.transaction(read_only=True) as session:
        result = await session.execute(select(Person).where(Person.access_token == token))
        person = result.scalar_one_or_none()
        if person is None:
            raise unauthorized()
        return person


async def update_password(
    db: Database,
    person_id: str,
    old_password: Optional[str],
    new_password: Optional[str],
) -> None:
    """Change the password after checking the current one."""
    if not new_password:
        raise field_required("new_password")

    async with db.transaction() as session:
        person = await session.get(Person, person_id)
        if person is None:
            raise unauthorized()
        # no hint about which part was wrong
        if not verify_password(old_password or "", person.password_hash):
            raise unauthorized()
        person.password_hash = hash_password(new_password)
        logger.info(f"Password changed for person {person_id}")
