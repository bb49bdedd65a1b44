"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from identity.api.schemas import RegisterUserRequest, TokenRequest, TokenResponse, UserIdResponse, UserResponse
from identity.auth import Identity, authenticate, create_access_token, get_current_identity
from identity.user.registration import RegisterUser
from identity.user.user import User

user_router = APIRouter(prefix="/users", tags=["users"])
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@user_router.post("", status_code=201, response_model=UserIdResponse)
async def register_user(body: RegisterUserRequest) -> UserIdResponse:
    command = RegisterUser(
        name=body.name,
        email=body.email,
        password=body.password,
    )
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@user_router.get("/me", response_model=UserResponse)
async def who_am_i(caller: Identity = Depends(get_current_identity)) -> UserResponse:
    user = current_domain.repository_for(User).get(caller.user_id)
    return UserResponse(user_id=str(user.id), name=user.name, email=user.email, role=user.role)


@auth_router.post("/token", response_model=TokenResponse)
async def issue_token(body: TokenRequest) -> TokenResponse:
    user = authenticate(body.email, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token, expires_at = create_access_token(str(user.id), user.role)
    return TokenResponse(access_token=token, expires_at=expires_at.isoformat())
