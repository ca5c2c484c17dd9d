# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from schemas.auth import AdminIdentity, AdminLogin, LoginResponse
from utils.audit import write_log
from utils.tokenJWT import create_access_token, get_current_admin, verify_admin_credentials

router = APIRouter(prefix="/api/admin/auth", tags=["Auth"])


# Authenticate the admin and hand out the session cookie
@router.post("/login", response_model=LoginResponse)
def login(payload: AdminLogin, response: Response, request: Request, db: Session = Depends(get_db)):
    ip = request.client.host if request.client else None

    # Validate credentials and log failure on error
    if not verify_admin_credentials(payload.username, payload.password):
        write_log(db, actor=payload.username, action="LOGIN", resource="auth",
                  status="FAIL", ip=ip, meta={"username": payload.username})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": payload.username, "role": "admin"})
    response.set_cookie(
        key=settings.ADMIN_COOKIE_NAME,
        value=access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
        path="/",
    )

    write_log(db, actor=payload.username, action="LOGIN", resource="auth", status="SUCCESS", ip=ip)
    return {"success": True, "access_token": access_token, "token_type": "bearer"}


@router.post("/logout", response_model=LoginResponse)
def logout(response: Response):
    response.delete_cookie(settings.ADMIN_COOKIE_NAME, path="/")
    return {"success": True}


# Retrieve current authenticated admin
@router.get("/me", response_model=AdminIdentity)
def me(current_admin: AdminIdentity = Depends(get_current_admin)):
    return current_admin
