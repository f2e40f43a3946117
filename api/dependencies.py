"""FastAPI dependencies for dependency injection.

Everything a route needs is taken from `request.app.state`, which
`create_app` fills in. Nothing here holds state of its own.
"""

from typing import Annotated, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from api.services import auth as auth_service
from core.config import Settings
from core.errors import insufficient_rights
from core.integrations.blockchain import BalanceOracle
from core.integrations.notifications import Notifier
from database.engine import Database
from database.models.persons import Person


# Missing credentials are reported by the service as "Authorization required"
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_balance_oracle(request: Request) -> BalanceOracle:
    return request.app.state.balance_oracle


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


async def require_authenticated_person(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_db),
) -> Person:
    """Resolve the bearer token to a person or fail with 401."""
    token = credentials.credentials if credentials else None
    person = await auth_service.resolve_token(db, token)
    request.state.person_id = person.id
    return person


async def require_admin_person(
    current_person: Person = Depends(require_authenticated_person),
) -> Person:
    """Require the person to be an admin."""
    if not current_person.is_admin:
        raise insufficient_rights()
    return current_person


DatabaseDep = Annotated[Database, Depends(get_db)]
CurrentPerson = Annotated[Person, Depends(require_authenticated_person)]
AdminPerson = Annotated[Person, Depends(require_admin_person)]
BalanceOracleDep = Annotated[BalanceOracle, Depends(get_balance_oracle)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]
