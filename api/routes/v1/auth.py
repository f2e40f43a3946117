"""
Authentication endpoints.

Signup and login hand out the bearer token used by every protected route.
"""

from fastapi import APIRouter, Response, status

from api.dependencies import CurrentPerson, DatabaseDep
from api.schemas.persons import LoginRequest, PasswordUpdateRequest, SignupRequest
from api.services import auth as auth_service

router = APIRouter()


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create a self-service account. The login defaults to the generated person id.",
)
async def signup(request: SignupRequest, response: Response, db: DatabaseDep):
    context = await auth_service.signup(
        db,
        login=request.login,
        password=request.password,
        display_name=request.display_name,
        email=request.email,
        ethereum_address=request.ethereum_address,
    )
    response.headers["Location"] = f"/persons/{context['subject']['id']}"
    return context


@router.post("/login", summary="Log In")
async def login(request: LoginRequest, db: DatabaseDep):
    """Exchange credentials for the user context with its token."""
    return await auth_service.login(db, request.login, request.password)


@router.get("/me", summary="Current User")
async def me(current_person: CurrentPerson):
    return auth_service.user_context(current_person)


@router.put(
    "/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change Password",
)
async def update_password(
    request: PasswordUpdateRequest,
    current_person: CurrentPerson,
    db: DatabaseDep,
):
    await auth_service.update_password(
        db, current_person.id, request.old_password, request.new_password
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
