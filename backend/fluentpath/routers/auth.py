from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from ..settings import settings
from sqlalchemy import select
from sqlalchemy.orm import Session
from ..db import get_db
from ..errors import AppError, Forbidden, NotAuthenticated, ServerFault, ValidationFailure
from ..models import Account, AuthSession, Student, Teacher, ROLE_TEACHER, ROLE_USER, ROLES
from ..schemas import AccountOut, MessageResponse

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"
	user: AccountOut


class RegisterRequest(BaseModel):
	firstName: str
	lastName: str
	email: str
	password: str
	role: str = ROLE_USER


class LoginRequest(BaseModel):
	email: str
	password: str
	role: str = ROLE_USER


def hash_password(password: str) -> str:
	return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def normalize_email(email: str) -> str:
	return (email or "").strip().lower()


def authenticate_account(db: Session, email: str, password: str, role: str) -> Optional[Account]:
	row = db.execute(
		select(Account).where(Account.email == normalize_email(email), Account.role == role)
	).scalar_one_or_none()
	if row and verify_password(password, row.password_hash):
		return row
	return None


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = settings.access_token_expire_minutes
		delta = timedelta(minutes=minutes) if minutes > 0 else timedelta(days=30)
	return datetime.now(timezone.utc) + delta


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	to_encode.update({"exp": _resolve_expiry(expires_delta)})
	return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def account_out(account: Account) -> AccountOut:
	return AccountOut(
		id=account.id,
		first_name=account.first_name,
		last_name=account.last_name,
		email=account.email,
		role=account.role,
		user_level=getattr(account, "user_level", None),
		evaluate=getattr(account, "evaluate", None),
	)


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
	first_name = (req.firstName or "").strip()
	last_name = (req.lastName or "").strip()
	email = normalize_email(req.email)
	password = req.password or ""
	if not first_name or not last_name or not email or not password:
		raise ValidationFailure("All fields are required.")
	if req.role not in ROLES:
		raise ValidationFailure("role must be 'user' or 'teacher'")
	existing = db.execute(
		select(Account.id).where(Account.email == email, Account.role == req.role)
	).first()
	if existing:
		raise ValidationFailure("Email already exists.")
	model = Teacher if req.role == ROLE_TEACHER else Student
	try:
		row = model(first_name=first_name, last_name=last_name, email=email, password_hash=hash_password(password))
		db.add(row)
		db.commit()
	except Exception:
		db.rollback()
		logger.exception("Error registering %s %s", req.role, email)
		raise ServerFault("Error registering user.")
	logger.info("Registered %s %s", req.role, row.id)
	return {"message": "User registered successfully!", "id": row.id}


@router.post("/login", response_model=Token)
async def login(req: LoginRequest, db: Session = Depends(get_db)):
	account = authenticate_account(db, req.email, req.password, req.role)
	if not account:
		raise NotAuthenticated("Incorrect email or password")
	# Create a new session id (jti) and persist server-side
	session_id = uuid.uuid4().hex
	try:
		db.add(AuthSession(session_id=session_id, account_id=account.id, role=account.role))
		db.commit()
	except Exception:
		db.rollback()
		logger.exception("Login failed for %s", account.id)
		raise ServerFault("Login failed")
	access_token = create_access_token({"sub": account.id, "role": account.role, "jti": session_id})
	return Token(access_token=access_token, user=account_out(account))


def _decode_token(token: Optional[str]) -> tuple[str, str]:
	if not token:
		raise NotAuthenticated()
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
	except JWTError:
		raise NotAuthenticated("Could not validate credentials")
	account_id: str | None = payload.get("sub")
	jti: str | None = payload.get("jti")
	if account_id is None or jti is None:
		raise NotAuthenticated("Could not validate credentials")
	return account_id, jti


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Account:
	account_id, jti = _decode_token(token)
	# A token is only valid while its session row exists (logout deletes it)
	try:
		row = db.get(AuthSession, jti)
		if not row or row.account_id != account_id:
			raise NotAuthenticated("Session expired")
		account = db.get(Account, account_id)
		if account is None:
			raise NotAuthenticated()
		row.last_activity_at = datetime.utcnow()
		db.commit()
	except AppError:
		raise
	except Exception:
		# On DB errors, fail closed
		db.rollback()
		logger.exception("Session lookup failed")
		raise NotAuthenticated("Could not validate credentials")
	return account


def get_current_student(account: Account = Depends(get_current_user)) -> Student:
	if account.role != ROLE_USER:
		raise Forbidden("Only students can access this resource")
	return account


@router.get("/me", response_model=AccountOut)
async def me(account: Account = Depends(get_current_user)):
	return account_out(account)


@router.post("/logout", response_model=MessageResponse)
async def logout(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)):
	account_id, jti = _decode_token(token)
	row = db.get(AuthSession, jti)
	if not row or row.account_id != account_id:
		raise NotAuthenticated("Session expired")
	db.delete(row)
	db.commit()
	return MessageResponse(message="Logged out successfully")
