from __future__ import annotations
from datetime import datetime, timedelta
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import AuthSession
from .settings import settings


def purge_expired_sessions(db: Session, now: datetime | None = None) -> int:
	# A session idle for longer than the token lifetime can no longer be presented
	minutes = settings.access_token_expire_minutes if settings.access_token_expire_minutes > 0 else 30 * 24 * 60
	threshold = (now or datetime.utcnow()) - timedelta(minutes=minutes)
	res = db.execute(delete(AuthSession).where(AuthSession.last_activity_at < threshold))
	db.commit()
	return res.rowcount or 0
