# FILE: cepoka/deps.py
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError

from .offline.service_worker import Registration
from .settings import SECRET_KEY, ALGORITHM

ADMIN_SUBJECT = "admin"

# tokenUrl은 문서용이지만 경로는 실제 있는 엔드포인트로
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/admin/login")


def require_admin(token: str = Depends(oauth2_scheme)) -> str:
    cred_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise cred_exc
    if payload.get("sub") != ADMIN_SUBJECT:
        raise cred_exc
    return ADMIN_SUBJECT


def get_registration(request: Request) -> Registration:
    return request.app.state.registration
