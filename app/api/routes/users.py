"""Account registration and login endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import schemas
from app.api.dependencies import get_auth_service, get_user_service
from app.db.session import get_db
from app.models.user import UserView
from app.services.auth import AuthService
from app.services.exceptions import EmailAlreadyInUseError, InvalidCredentialsError
from app.services.users import UserService

router = APIRouter(tags=["users"])


async def create_user(
    payload: schemas.UserCreateRequest,
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service),
) -> UserView:
    try:
        return await user_service.register_user(
            db=db,
            email=payload.email,
            password=payload.password,
            name=payload.name,
        )
    except EmailAlreadyInUseError as e:
        raise HTTPException(status_code=409, detail=str(e))


async def login(
    payload: schemas.LoginRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> schemas.TokenResponse:
    try:
        token = await auth_service.login(db, payload.email, payload.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return schemas.TokenResponse(**token)


# (method, path, handler, route options)
ROUTES = [
    ("POST", "/user", create_user, {
        "response_model": UserView,
        "status_code": status.HTTP_201_CREATED,
        "summary": "Register an account",
        "responses": {
            400: {"model": schemas.ValidationErrorResponse, "description": "Invalid request"},
            409: {"model": schemas.ErrorResponse, "description": "E-mail already registered"},
        },
    }),
    ("POST", "/auth/login", login, {
        "response_model": schemas.TokenResponse,
        "summary": "Exchange credentials for an access token",
        "responses": {
            401: {"model": schemas.ErrorResponse, "description": "Invalid credentials"},
        },
    }),
]

for method, path, handler, options in ROUTES:
    router.add_api_route(path, handler, methods=[method], **options)
