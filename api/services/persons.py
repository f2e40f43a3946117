"""Person service functions."""

from typing import Any, Optional
import logging
import time

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from api.schemas.persons import PersonPatch
from core.errors import duplication, insufficient_rights, not_found, validation_failed
from core.security import INHOUSE_REALM, hash_password, new_id
from core.utils.formatting import format_datetime
from core.utils.validators import validate_address, validate_email
from database.engine import Database
from database.models.persons import Person

logger = logging.getLogger(__name__)


def person_to_dict(person: Person) -> dict[str, Any]:
    """Public representation of a person. Never includes secrets."""
    return {
        "id": person.id,
        "realm": person.realm,
        "login": person.login,
        "display_name": person.display_name,
        "email": person.email,
        "ethereum_address": person.ethereum_address,
        "resources": person.resources,
        "is_admin": person.is_admin,
        "created_at": format_datetime(person.created_at),
    }


def _default_display_name() -> str:
    return f"Person{int(time.time())}"


async def create_person(
    session,
    login: Optional[str],
    password: str,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    ethereum_address: Optional[str] = None,
    is_admin: bool = False,
    realm: str = INHOUSE_REALM,
) -> Person:
    """
    Insert a person inside an open transaction.

    Args:
        session: Session of the caller's transaction
        login: Login, the generated id is used when empty
        password: Plain text password, hashed before storing
        display_name: Defaults to "Person<unix seconds>"
        email: Lowercased before storing
        ethereum_address: Wallet address, lowercased before storing
        is_admin: Grant administrative rights
        realm: Authentication realm

    Returns:
        The flushed Person

    Raises:
        ServiceError: duplication when the login is taken
    """
    person_id = new_id()
    login = (login or "").strip().lower() or person_id
    person = Person(
        id=person_id,
        realm=realm,
        login=login,
        password_hash=hash_password(password),
        display_name=(display_name or "").strip() or _default_display_name(),
        email=validate_email("email", email),
        ethereum_address=validate_address("ethereum_address", ethereum_address, required=False),
        is_admin=is_admin,
        access_token=person_id if realm == INHOUSE_REALM else None,
    )
    session.add(person)
    try:
        await session.flush()
    except IntegrityError:
        raise duplication("person already exists", tech_info=f"login={login}")

    logger.info(f"Created person {person.id}")
    return person


async def add_person(
    db: Database,
    login: Optional[str],
    password: str,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    ethereum_address: Optional[str] = None,
    is_admin: bool = False,
) -> dict[str, Any]:
    """Administrative person creation."""
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
            is_admin=is_admin,
        )
        return person_to_dict(person)


async def get_person(db: Database, person_id: str) -> dict[str, Any]:
    async with db.transaction(read_only=True) as session:
        person = await session.get(Person, person_id)
        if person is None:
            raise not_found()
        return person_to_dict(person)


async def list_persons(db: Database) -> list[dict[str, Any]]:
    async with db.transaction(read_only=True) as session:
        result = await session.execute(select(Person).order_by(Person.created_at))
        return [person_to_dict(p) for p in result.scalars().all()]


async def patch_person(
    db: Database,
    actor_id: str,
    person_id: str,
    patch: PersonPatch,
) -> dict[str, Any]:
    """
    Apply a partial update to a person's own profile.

    Only fields present in the patch are touched. Empty display names and
    emails are ignored; an empty address clears the wallet.
    """
    if actor_id != person_id:
        raise insufficient_rights()

    async with db.transaction() as session:
        person = await session.get(Person, person_id)
        if person is None:
            raise not_found()

        if patch.ethereum_address.present:
            person.ethereum_address = validate_address(
                "ethereum_address", patch.ethereum_address.value, required=False
            )

        if patch.display_name.present:
            display_name = (patch.display_name.value or "").strip()
            if display_name:
                person.display_name = display_name

        if patch.email.present:
            email = validate_email("email", patch.email.value)
            if email:
                person.email = email

        await session.flush()
        return person_to_dict(person)


async def set_resources(
    db: Database,
    actor_id: str,
    person_id: str,
    resources: dict[str, Any],
) -> dict[str, Any]:
    """Replace the person's free-form resources document."""
    if actor_id != person_id:
        raise insufficient_rights()

    async with db.transaction() as session:
        person = await session.get(Person, person_id)
        if person is None:
            raise not_found()
        person.resources = resources
        await session.flush()
        return person_to_dict(person)
