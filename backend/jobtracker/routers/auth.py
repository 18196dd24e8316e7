from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jobtracker.config import settings
from jobtracker.database import get_db
from jobtracker.dependencies import require_owner, require_token
from jobtracker.schemas.auth import (
    LoginRequest,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from jobtracker.services.session_service import OwnerContext, normalize_email, session_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
    email = normalize_email(req.email)
    if not email or "@" not in email:
        raise HTTPException(status_code=400, detail="A valid email is required")
    if email == settings.guest_email:
        raise HTTPException(status_code=400, detail="This email is reserved for guest sessions")
    if len(req.password) < settings.min_password_length:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.min_password_length} characters",
        )
    if session_service.find_user(db, email):
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    user = session_service.register(db, email, req.password)
    if user is None:
        raise HTTPException(status_code=409, detail="An account with this email already exists")
    return RegisterResponse(id=user.id, email=user.email)


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest, db: Session = Depends(get_db)):
    result = session_service.login(db, req.email, req.password)
    if result is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return TokenResponse(**result)


@router.post("/guest", response_model=TokenResponse)
async def guest_login():
    return TokenResponse(**session_service.start_guest())


@router.post("/logout")
async def logout(token: str = Depends(require_token), _owner: OwnerContext = Depends(require_owner)):
    session_service.logout(token)
    return {"message": "Logged out"}


@router.get("/me", response_model=MeResponse)
async def me(owner: OwnerContext = Depends(require_owner)):
    return MeResponse(email=owner.email, is_guest=owner.is_guest)
