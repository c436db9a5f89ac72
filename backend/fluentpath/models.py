from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import Boolean, Column, String, DateTime, Integer, Float, ForeignKey, UniqueConstraint
from .db import Base


ROLE_USER = "user"
ROLE_TEACHER = "teacher"
ROLES = (ROLE_USER, ROLE_TEACHER)

LEVEL_BEGINNER = "beginner"
LEVEL_INTERMEDIATE = "intermediate"
LEVEL_ADVANCED = "advanced"
LEVELS = (LEVEL_BEGINNER, LEVEL_INTERMEDIATE, LEVEL_ADVANCED)


def new_id() -> str:
	return uuid.uuid4().hex


def opposite_role(role: str) -> str:
	return ROLE_TEACHER if role == ROLE_USER else ROLE_USER


class Account(Base):
	__tablename__ = "accounts"
	__table_args__ = (UniqueConstraint("email", "role", name="uq_accounts_email_role"),)
	id = Column(String(32), primary_key=True, default=new_id)
	# "user" (student) or "teacher"; followers/following always reference the other role
	role = Column(String(16), nullable=False, index=True)
	email = Column(String(256), nullable=False, index=True)
	password_hash = Column(String(256), nullable=False)
	first_name = Column(String(128), nullable=False)
	last_name = Column(String(128), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	__mapper_args__ = {"polymorphic_on": role}

	@property
	def counterpart_role(self) -> str:
		return opposite_role(self.role)

	@property
	def is_teacher(self) -> bool:
		return self.role == ROLE_TEACHER


class Student(Account):
	# Single-table inheritance: columns live on "accounts" and stay NULL for teachers
	user_level = Column(String(16), nullable=True)
	evaluate = Column(Boolean, nullable=True)

	__mapper_args__ = {"polymorphic_identity": ROLE_USER}

	def __init__(self, **kwargs):
		kwargs.setdefault("user_level", LEVEL_BEGINNER)
		kwargs.setdefault("evaluate", False)
		super().__init__(**kwargs)


class Teacher(Account):
	__mapper_args__ = {"polymorphic_identity": ROLE_TEACHER}


class FollowEdge(Base):
	__tablename__ = "follow_edges"
	__table_args__ = (UniqueConstraint("follower_id", "followee_id", name="uq_follow_edge"),)
	# One row is both follower.Following and followee.Followers
	id = Column(Integer, primary_key=True, autoincrement=True)
	follower_id = Column(String(32), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
	followee_id = Column(String(32), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Progress(Base):
	__tablename__ = "progress"
	user_id = Column(String(32), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True)
	# writing.wordPractice
	word_practice_total_items = Column(Integer, default=0, nullable=False)
	word_practice_correct_items = Column(Integer, default=0, nullable=False)
	word_practice_games_played = Column(Integer, default=0, nullable=False)
	word_practice_high_score = Column(Float, default=0, nullable=False)
	# writing.sentencePractice
	sentence_practice_total_items = Column(Integer, default=0, nullable=False)
	sentence_practice_correct_items = Column(Integer, default=0, nullable=False)
	sentence_practice_games_played = Column(Integer, default=0, nullable=False)
	sentence_practice_high_score = Column(Float, default=0, nullable=False)
	# reading.wordReading
	word_reading_total_items = Column(Integer, default=0, nullable=False)
	word_reading_correct_pronunciations = Column(Integer, default=0, nullable=False)
	word_reading_games_played = Column(Integer, default=0, nullable=False)
	# reading.sentenceReading
	sentence_reading_total_items = Column(Integer, default=0, nullable=False)
	sentence_reading_correct_pronunciations = Column(Integer, default=0, nullable=False)
	sentence_reading_games_played = Column(Integer, default=0, nullable=False)
	last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)


class UnknownWord(Base):
	__tablename__ = "unknown_words"
	__table_args__ = (UniqueConstraint("user_id", "word", name="uq_unknown_word"),)
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(32), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
	word = Column(String(256), nullable=False)
	definition = Column(String(1024), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	session_id = Column(String(64), primary_key=True)
	account_id = Column(String(32), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
	role = Column(String(16), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)
