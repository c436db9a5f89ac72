from __future__ import annotations
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import ServerFault
from ..models import Student, UnknownWord
from ..schemas import UnknownWordItem, UnknownWordsRequest, UnknownWordsResponse
from .auth import get_current_student


router = APIRouter(tags=["vocabulary"])
logger = logging.getLogger(__name__)


def _dedupe(items: List[UnknownWordItem]) -> List[UnknownWordItem]:
	# Last definition wins for repeated words within one request
	by_word = {}
	for item in items:
		word = item.word.strip()
		if word:
			by_word[word] = UnknownWordItem(word=word, definition=item.definition)
	return list(by_word.values())


def list_unknown_words(db: Session, user_id: str) -> List[UnknownWordItem]:
	rows = db.execute(
		select(UnknownWord).where(UnknownWord.user_id == user_id).order_by(UnknownWord.id)
	).scalars()
	return [UnknownWordItem.model_validate(r) for r in rows]


@router.get("/unknown-words", response_model=UnknownWordsResponse)
async def get_unknown_words(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
	return UnknownWordsResponse(unknown_words=list_unknown_words(db, student.id))


@router.post("/unknown-words", response_model=UnknownWordsResponse)
async def add_unknown_words(req: UnknownWordsRequest, student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
	try:
		known = set(db.execute(select(UnknownWord.word).where(UnknownWord.user_id == student.id)).scalars())
		for item in _dedupe(req.unknown_words):
			if item.word not in known:
				db.add(UnknownWord(user_id=student.id, word=item.word, definition=item.definition))
		db.commit()
	except Exception:
		db.rollback()
		logger.exception("Error saving unknown words for %s", student.id)
		raise ServerFault()
	return UnknownWordsResponse(message="Unknown words saved", unknown_words=list_unknown_words(db, student.id))


@router.post("/update-unknown-words", response_model=UnknownWordsResponse)
async def replace_unknown_words(req: UnknownWordsRequest, student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
	try:
		db.execute(delete(UnknownWord).where(UnknownWord.user_id == student.id))
		for item in _dedupe(req.unknown_words):
			db.add(UnknownWord(user_id=student.id, word=item.word, definition=item.definition))
		db.commit()
	except Exception:
		db.rollback()
		logger.exception("Error replacing unknown words for %s", student.id)
		raise ServerFault()
	return UnknownWordsResponse(message="Unknown words updated", unknown_words=list_unknown_words(db, student.id))
