import secrets
from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from config import API_USERNAME, API_PASSWORD
import logging

logger = logging.getLogger(__name__)

security = HTTPBasic()

def verify_basic_auth(credentials: HTTPBasicCredentials = Depends(security)) -> dict:
    """Verify basic authentication credentials for the API"""
    username_ok = secrets.compare_digest(credentials.username.encode(), API_USERNAME.encode())
    password_ok = secrets.compare_digest(credentials.password.encode(), API_PASSWORD.encode())
    if username_ok and password_ok:
        return {"type": "basic", "username": credentials.username}

    logger.warning(f"Rejected basic auth for {credentials.username}")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid basic auth credentials",
        headers={"WWW-Authenticate": "Basic"},
    )
