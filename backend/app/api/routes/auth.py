"""
Account endpoints: register and sign in.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.user import UserCreate, UserResponse, SignIn, SignInResponse
from app.services.auth_service import register_user, sign_in

router = APIRouter(tags=["Authentication"])


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user account."""
    user = await register_user(db, user_data)
    return user


@router.post("/auth/sign-in", response_model=SignInResponse)
async def sign_in_endpoint(login_data: SignIn, db: AsyncSession = Depends(get_db)):
    """Check credentials and open a session; the token goes in `Authorization: Bearer`."""
    user, token = await sign_in(db, login_data)
    return SignInResponse(user=UserResponse.model_validate(user), token=token)
