from __future__ import annotations
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import progress as progress_service
from ..db import get_db
from ..errors import AppError, Forbidden, NotFound, ServerFault
from ..follow import is_following
from ..leveling import get_student
from ..models import Account
from ..schemas import (
	MessageResponse,
	ProgressResponse,
	SentencePracticeRequest,
	SentenceReadingRequest,
	WordPracticeRequest,
	WordReadingRequest,
)
from ..settings import settings
from .auth import get_current_user


router = APIRouter(prefix="/api/progress", tags=["progress"])
logger = logging.getLogger(__name__)

_UPDATED = MessageResponse(message="Progress updated successfully")


@router.get("", response_model=ProgressResponse)
async def my_progress(account: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		progress = progress_service.get_progress(db, account.id)
	except Exception:
		db.rollback()
		logger.exception("Error fetching progress for %s", account.id)
		raise ServerFault()
	return ProgressResponse(user_level=getattr(account, "user_level", None), progress=progress)


@router.post("/writing/wordPractice", response_model=MessageResponse)
async def word_practice(req: WordPracticeRequest, account: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		progress_service.record_word_writing(
			db, account.id, total_words=req.total_words, correct_words=req.correct_words, score=req.score
		)
	except Exception:
		db.rollback()
		logger.exception("Error updating word practice progress for %s", account.id)
		raise ServerFault()
	return _UPDATED


@router.post("/writing/sentencePractice", response_model=MessageResponse)
async def sentence_practice(req: SentencePracticeRequest, account: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		progress_service.record_sentence_writing(
			db, account.id,
			total_sentences=req.total_sentences, correct_sentences=req.correct_sentences, score=req.score,
		)
	except Exception:
		db.rollback()
		logger.exception("Error updating sentence practice progress for %s", account.id)
		raise ServerFault()
	return _UPDATED


@router.post("/reading/wordReading", response_model=MessageResponse)
async def word_reading(req: WordReadingRequest, account: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		progress_service.record_word_reading(
			db, account.id, total_words=req.total_words, correct_pronunciations=req.correct_pronunciations
		)
	except Exception:
		db.rollback()
		logger.exception("Error updating word reading progress for %s", account.id)
		raise ServerFault()
	return _UPDATED


@router.post("/reading/sentenceReading", response_model=MessageResponse)
async def sentence_reading(req: SentenceReadingRequest, account: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		progress_service.record_sentence_reading(
			db, account.id, total_sentences=req.total_sentences, correct_pronunciations=req.correct_pronunciations
		)
	except Exception:
		db.rollback()
		logger.exception("Error updating sentence reading progress for %s", account.id)
		raise ServerFault()
	return _UPDATED


@router.get("/{student_id}", response_model=ProgressResponse)
async def student_progress(student_id: str, account: Account = Depends(get_current_user), db: Session = Depends(get_db)):
	if not account.is_teacher:
		raise Forbidden("Only teachers can view student progress")
	try:
		student = get_student(db, student_id)
		if student is None:
			raise NotFound("Student not found")
		if settings.teacher_progress_requires_follow and not (
			is_following(db, student.id, account.id) or is_following(db, account.id, student.id)
		):
			raise Forbidden("You are not linked to this student")
		progress = progress_service.get_progress(db, student.id)
	except AppError:
		raise
	except Exception:
		db.rollback()
		logger.exception("Error fetching student progress for %s", student_id)
		raise ServerFault()
	return ProgressResponse(user_level=student.user_level, progress=progress)
