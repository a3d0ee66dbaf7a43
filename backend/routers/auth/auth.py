from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from routers.users.schemas import UserCreate, UserCreateStatus, UserAuthStatus
from routers.users.repository import UserRepository, get_user_repository
from .schemas import UserLogin, TokenResponse, AuthErrorResponse
from .helpers import auth_helpers
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

security = HTTPBearer()

CREATE_ERROR_MESSAGES = {
    UserCreateStatus.NULL_INPUT: "No user information was given",
    UserCreateStatus.MISSING_NAME: "First name and surname are required",
    UserCreateStatus.MISSING_EMAIL: "Email is required",
    UserCreateStatus.EMAIL_TAKEN: "This Email is already registered",
    UserCreateStatus.MISSING_PASSWORD: "Password is required",
    UserCreateStatus.PASSWORD_TOO_SHORT: "Password must be at least 8 characters",
    UserCreateStatus.MISSING_COUNTRY: "Country is required",
    UserCreateStatus.INVALID_ROLE: "Users must have an assigned role",
    UserCreateStatus.UNKNOWN_FAILURE: "Error occurred while creating user",
}

AUTH_ERROR_MESSAGES = {
    UserAuthStatus.MISSING_EMAIL: "Email is required",
    UserAuthStatus.MISSING_PASSWORD: "Password is required",
    UserAuthStatus.NO_USER: "No user with that email exists",
    UserAuthStatus.WRONG_PASSWORD: "Wrong password",
}


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security)
):
    """Get current user from JWT token"""
    current_user = auth_helpers.verify_token(credentials.credentials)

    if not current_user["role"]:
        logger.warning(f"No role in JWT for user {current_user['user_id']}")

    request.state.current_user = current_user
    return current_user


def get_current_user_id(current_user: dict) -> int:
    """User id from the token claims, 400 if it is not a number"""
    try:
        return int(current_user["user_id"])
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid user id in token"
        )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    repository: UserRepository = Depends(get_user_repository)
):
    create_status, token = await repository.create(user_data)

    if create_status == UserCreateStatus.SUCCESS:
        return token

    if create_status == UserCreateStatus.EMAIL_TAKEN:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=CREATE_ERROR_MESSAGES[create_status]
        )

    if create_status == UserCreateStatus.UNKNOWN_FAILURE:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=CREATE_ERROR_MESSAGES[create_status]
        )

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=CREATE_ERROR_MESSAGES[create_status]
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={400: {"model": AuthErrorResponse}}
)
async def login(
    user_data: UserLogin,
    repository: UserRepository = Depends(get_user_repository)
):
    auth_status, user_dto, token = await repository.authenticate(user_data.email, user_data.password)

    if auth_status != UserAuthStatus.SUCCESS:
        logger.warning(f"Login failed for {user_data.email}: {auth_status.value}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=AuthErrorResponse(
                status=auth_status,
                message=AUTH_ERROR_MESSAGES[auth_status]
            ).model_dump(mode="json")
        )

    return TokenResponse(token=token, user_dto=user_dto)
