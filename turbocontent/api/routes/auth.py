from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from turbocontent.api.deps import get_repository
from turbocontent.api.security import create_access_token, hash_password, verify_password
from turbocontent.core.domain.exceptions import EmailAlreadyRegisteredError
from turbocontent.core.domain.schemas import LoginRequest, SignupRequest, TokenResponse, UserOut
from turbocontent.infra.db.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

_INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, repo: Repository = Depends(get_repository)):
    if await repo.get_user_by_email(body.email) is not None:
        raise EmailAlreadyRegisteredError(body.email)

    user = await repo.create_user(
        email=body.email,
        hashed_password=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
    )
    await repo.commit()
    logger.info("New account %s", user.id)
    return TokenResponse(token=create_access_token(user.id), user=UserOut.model_validate(user))


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, repo: Repository = Depends(get_repository)):
    user = await repo.get_user_by_email(body.email)
    if user is None or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, _INVALID_CREDENTIALS)

    await repo.touch_last_login(user)
    await repo.commit()
    return TokenResponse(token=create_access_token(user.id), user=UserOut.model_validate(user))
