# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas import user as schemas
from utils.audit import write_log, client_ip
from utils.hashing import verify_password
from utils.tokenJWT import create_access_token, get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    db_user = db.query(User).filter(func.lower(User.email) == email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": db_user.email})

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {"access_token": access_token, "token_type": "bearer", "user": db_user}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
