# backend/routes/auth.py
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..auth import (
    SESSION_COOKIE,
    check_password,
    get_current_user,
    hash_password,
    set_session_and_return_user,
    user_payload,
)
from ..db import get_db
from ..models import User
from ..schemas import LoginIn, SignupIn, UserMeOut

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/auth/signup", response_model=UserMeOut)
def signup(body: SignupIn, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    full_name = f"{body.first_name.strip()} {(body.last_name or '').strip()}".strip()

    if db.query(User).filter(User.email == email).first():
        raise HTTPException(409, "Email already registered")

    now = datetime.utcnow()
    user = User(
        email=email,
        name=full_name,
        password_hash=hash_password(body.password),
        created_at=now,
        last_login=now,
    )
    db.add(user); db.commit(); db.refresh(user)
    return set_session_and_return_user(user)


@router.post("/login", response_model=UserMeOut)
def login(body: LoginIn, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not user.password_hash:
        raise HTTPException(401, "Invalid credentials")
    if not check_password(body.password, user.password_hash):
        raise HTTPException(401, "Invalid credentials")

    user.last_login = datetime.utcnow(); db.commit()
    return set_session_and_return_user(user)


@router.post("/auth/logout")
def logout():
    resp = JSONResponse({"ok": True})
    resp.delete_cookie(SESSION_COOKIE, path="/")
    return resp


@router.get("/me", response_model=UserMeOut)
def me(current: User = Depends(get_current_user)):
    return user_payload(current)
