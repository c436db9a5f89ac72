from __future__ import annotations
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./fluentpath.db"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Best-effort lightweight migrations for development (SQLite-friendly)
def ensure_schema(bind=None) -> None:
	bind = bind or engine
	try:
		inspector = inspect(bind)
		tables = set(inspector.get_table_names())
	except Exception:
		return
	if "accounts" in tables:
		cols = {c["name"] for c in inspector.get_columns("accounts")}
		with bind.begin() as conn:
			if "user_level" not in cols:
				conn.exec_driver_sql("ALTER TABLE accounts ADD COLUMN user_level VARCHAR(16)")
				conn.exec_driver_sql("UPDATE accounts SET user_level = 'beginner' WHERE role = 'user'")
			if "evaluate" not in cols:
				conn.exec_driver_sql("ALTER TABLE accounts ADD COLUMN evaluate BOOLEAN")
				conn.exec_driver_sql("UPDATE accounts SET evaluate = 0 WHERE role = 'user'")
	if "auth_sessions" in tables:
		cols = {c["name"] for c in inspector.get_columns("auth_sessions")}
		with bind.begin() as conn:
			if "last_activity_at" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_sessions ADD COLUMN last_activity_at DATETIME")
