"""Follow relationships between students and teachers.

An edge is a single ``FollowEdge`` row: it is at the same time the follower's
``Following`` entry and the followee's ``Followers`` entry, so both sides are
always written (and removed) together in one transaction.
"""
from __future__ import annotations
import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import NotFound, ValidationFailure
from .models import Account, FollowEdge, ROLES


logger = logging.getLogger(__name__)


def _get_counterpart(db: Session, actor: Account, target_id: str) -> Account:
	target = db.execute(
		select(Account).where(Account.id == target_id, Account.role == actor.counterpart_role)
	).scalar_one_or_none()
	if target is None:
		raise NotFound("Teacher or Student not found")
	return target


def is_following(db: Session, follower_id: str, followee_id: str) -> bool:
	row = db.execute(
		select(FollowEdge.id).where(FollowEdge.follower_id == follower_id, FollowEdge.followee_id == followee_id)
	).first()
	return row is not None


def follow(db: Session, actor: Account, target_id: str) -> bool:
	"""Create the edge actor -> target. Returns False when it already existed."""
	target = _get_counterpart(db, actor, target_id)
	if is_following(db, actor.id, target.id):
		return False
	db.add(FollowEdge(follower_id=actor.id, followee_id=target.id))
	try:
		db.commit()
	except IntegrityError:
		# Same edge inserted by a concurrent request
		db.rollback()
		return False
	logger.info("%s %s followed %s", actor.role, actor.id, target.id)
	return True


def unfollow(db: Session, actor: Account, target_id: str) -> bool:
	"""Remove the edge actor -> target. Returns False when there was none."""
	target = _get_counterpart(db, actor, target_id)
	result = db.execute(
		delete(FollowEdge).where(FollowEdge.follower_id == actor.id, FollowEdge.followee_id == target.id)
	)
	db.commit()
	return bool(result.rowcount)


def follower_ids(db: Session, account: Account) -> List[str]:
	return list(db.execute(
		select(FollowEdge.follower_id).where(FollowEdge.followee_id == account.id).order_by(FollowEdge.id)
	).scalars())


def following_ids(db: Session, account: Account) -> List[str]:
	return list(db.execute(
		select(FollowEdge.followee_id).where(FollowEdge.follower_id == account.id).order_by(FollowEdge.id)
	).scalars())


def list_followers(db: Session, account: Account) -> List[Account]:
	stmt = (
		select(Account)
		.join(FollowEdge, FollowEdge.follower_id == Account.id)
		.where(FollowEdge.followee_id == account.id, Account.role == account.counterpart_role)
		.order_by(FollowEdge.id)
	)
	return list(db.execute(stmt).scalars())


def list_following(db: Session, account: Account) -> List[Account]:
	stmt = (
		select(Account)
		.join(FollowEdge, FollowEdge.followee_id == Account.id)
		.where(FollowEdge.follower_id == account.id, Account.role == account.counterpart_role)
		.order_by(FollowEdge.id)
	)
	return list(db.execute(stmt).scalars())


def search_by_email(db: Session, email: str, role: str) -> Account:
	email = (email or "").strip().lower()
	if not email or not role:
		raise ValidationFailure("Email and type are required")
	if role not in ROLES:
		raise ValidationFailure("type must be 'user' or 'teacher'")
	person = db.execute(
		select(Account).where(Account.email == email, Account.role == role)
	).scalar_one_or_none()
	if person is None:
		raise NotFound(f"{role} not found")
	return person
