"""Progress aggregation for the four practice categories."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .leveling import check_and_update_user_level
from .models import Progress
from .schemas import ProgressOut, ReadingProgress, ReadingStats, WritingProgress, WritingStats


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Category:
	name: str
	prefix: str
	correct_field: str
	scored: bool

	def column(self, field: str):
		return getattr(Progress, f"{self.prefix}_{field}")


WORD_PRACTICE = Category("writing.wordPractice", "word_practice", "correct_items", scored=True)
SENTENCE_PRACTICE = Category("writing.sentencePractice", "sentence_practice", "correct_items", scored=True)
WORD_READING = Category("reading.wordReading", "word_reading", "correct_pronunciations", scored=False)
SENTENCE_READING = Category("reading.sentenceReading", "sentence_reading", "correct_pronunciations", scored=False)


def _clamp(value) -> int:
	if value is None:
		return 0
	return max(0, int(value))


def get_or_create_progress(db: Session, user_id: str) -> Progress:
	row = db.get(Progress, user_id)
	if row is not None:
		return row
	row = Progress(user_id=user_id)
	db.add(row)
	try:
		db.commit()
	except IntegrityError:
		# Created concurrently by another request
		db.rollback()
		row = db.get(Progress, user_id)
	return row


def record_game(
	db: Session,
	user_id: str,
	category: Category,
	*,
	total: Optional[int],
	correct: Optional[int],
	score: Optional[float] = None,
) -> None:
	"""Fold one finished game into the user's running totals.

	Counters are incremented in a single UPDATE statement so concurrent
	submissions from several devices never lose increments.
	"""
	get_or_create_progress(db, user_id)
	games_col = category.column("games_played")
	total_col = category.column("total_items")
	correct_col = category.column(category.correct_field)
	values = {
		games_col: games_col + 1,
		total_col: total_col + _clamp(total),
		correct_col: correct_col + _clamp(correct),
		Progress.last_updated: datetime.utcnow(),
	}
	if category.scored and score is not None:
		high_col = category.column("high_score")
		values[high_col] = case((high_col < score, score), else_=high_col)
	db.execute(
		update(Progress)
		.where(Progress.user_id == user_id)
		.values(values)
		.execution_options(synchronize_session=False)
	)
	db.commit()
	try:
		check_and_update_user_level(db, user_id)
	except Exception:
		db.rollback()
		logger.exception("Error updating user level for %s", user_id)


def record_word_writing(db: Session, user_id: str, *, total_words=None, correct_words=None, score=None) -> None:
	record_game(db, user_id, WORD_PRACTICE, total=total_words, correct=correct_words, score=score)


def record_sentence_writing(db: Session, user_id: str, *, total_sentences=None, correct_sentences=None, score=None) -> None:
	record_game(db, user_id, SENTENCE_PRACTICE, total=total_sentences, correct=correct_sentences, score=score)


def record_word_reading(db: Session, user_id: str, *, total_words=None, correct_pronunciations=None) -> None:
	record_game(db, user_id, WORD_READING, total=total_words, correct=correct_pronunciations)


def record_sentence_reading(db: Session, user_id: str, *, total_sentences=None, correct_pronunciations=None) -> None:
	record_game(db, user_id, SENTENCE_READING, total=total_sentences, correct=correct_pronunciations)


def to_progress_out(row: Progress) -> ProgressOut:
	return ProgressOut(
		user_id=row.user_id,
		writing=WritingProgress(
			word_practice=WritingStats(
				total_items=row.word_practice_total_items,
				correct_items=row.word_practice_correct_items,
				games_played=row.word_practice_games_played,
				high_score=row.word_practice_high_score,
			),
			sentence_practice=WritingStats(
				total_items=row.sentence_practice_total_items,
				correct_items=row.sentence_practice_correct_items,
				games_played=row.sentence_practice_games_played,
				high_score=row.sentence_practice_high_score,
			),
		),
		reading=ReadingProgress(
			word_reading=ReadingStats(
				total_items=row.word_reading_total_items,
				correct_pronunciations=row.word_reading_correct_pronunciations,
				games_played=row.word_reading_games_played,
			),
			sentence_reading=ReadingStats(
				total_items=row.sentence_reading_total_items,
				correct_pronunciations=row.sentence_reading_correct_pronunciations,
				games_played=row.sentence_reading_games_played,
			),
		),
		last_updated=row.last_updated,
	)


def get_progress(db: Session, user_id: str) -> ProgressOut:
	return to_progress_out(get_or_create_progress(db, user_id))
