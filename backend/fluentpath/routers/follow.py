from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import follow as follow_service
from ..db import get_db
from ..errors import AppError, ServerFault, ValidationFailure
from ..models import Account, ROLE_TEACHER, ROLE_USER
from ..schemas import (
	AccountSummary,
	FollowersResponse,
	FollowingResponse,
	FollowRequest,
	MessageResponse,
	PersonOut,
	PersonResponse,
)
from .auth import get_current_user


router = APIRouter(prefix="/api/follow", tags=["follow"])
logger = logging.getLogger(__name__)


def _summary(account: Account) -> AccountSummary:
	return AccountSummary(id=account.id, first_name=account.first_name, last_name=account.last_name, email=account.email)


def _target_id(actor: Account, req: FollowRequest, action: str = "follow") -> str:
	# Students address teachers and teachers address students
	if actor.role == ROLE_USER and req.teacher_id:
		return req.teacher_id
	if actor.role == ROLE_TEACHER and req.student_id:
		return req.student_id
	raise ValidationFailure(f"Invalid {action} request")


def _describe(actor: Account, verb: str) -> str:
	if actor.role == ROLE_USER:
		return f"Student {verb} teacher"
	return f"Teacher {verb} student"


@router.post("/follow", response_model=MessageResponse)
async def follow(req: FollowRequest, actor: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	target_id = _target_id(actor, req)
	try:
		follow_service.follow(db, actor, target_id)
	except AppError:
		raise
	except Exception:
		db.rollback()
		logger.exception("Follow error")
		raise ServerFault()
	return MessageResponse(message=_describe(actor, "followed"))


@router.post("/unfollow", response_model=MessageResponse)
async def unfollow(req: FollowRequest, actor: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	target_id = _target_id(actor, req, "unfollow")
	try:
		follow_service.unfollow(db, actor, target_id)
	except AppError:
		raise
	except Exception:
		db.rollback()
		logger.exception("Unfollow error")
		raise ServerFault()
	return MessageResponse(message=_describe(actor, "unfollowed"))


@router.get("/search", response_model=PersonResponse)
async def search(
	email: Optional[str] = None,
	type: Optional[str] = None,
	actor: Account = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	try:
		person = follow_service.search_by_email(db, email, type)
		followers = follow_service.list_followers(db, person)
		following = follow_service.following_ids(db, person)
	except AppError:
		raise
	except Exception:
		logger.exception("Search error")
		raise ServerFault("Search failed")
	return PersonResponse(person=PersonOut(
		id=person.id,
		first_name=person.first_name,
		last_name=person.last_name,
		email=person.email,
		role=person.role,
		followers=[_summary(a) for a in followers],
		following=following,
	))


@router.get("/followers", response_model=FollowersResponse)
async def followers(actor: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		rows = follow_service.list_followers(db, actor)
	except Exception:
		logger.exception("Get followers error")
		raise ServerFault("Error fetching followers")
	return FollowersResponse(followers=[_summary(a) for a in rows])


@router.get("/following", response_model=FollowingResponse)
async def following(actor: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		rows = follow_service.list_following(db, actor)
	except Exception:
		logger.exception("Get following error")
		raise ServerFault("Error fetching following")
	return FollowingResponse(following=[_summary(a) for a in rows])
