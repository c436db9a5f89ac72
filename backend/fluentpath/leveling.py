"""Level state machine.

Two independent mechanisms write ``Student.user_level``:

* ``check_and_update_user_level`` promotes a student one tier at a time from
  accumulated progress (beginner -> intermediate -> advanced). It never demotes.
* ``apply_placement`` sets the level directly from a one-shot placement score
  and marks the student as evaluated.

Promotions are written with a conditional UPDATE guarded on the level the
decision was computed from, so a placement that lands in between is never
overwritten with a stale promotion.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .models import Progress, Student, LEVEL_BEGINNER, LEVEL_INTERMEDIATE, LEVEL_ADVANCED


logger = logging.getLogger(__name__)


# (from_level, to_level, min_games, min_accuracy_percent)
PROMOTION_RULES = (
	(LEVEL_BEGINNER, LEVEL_INTERMEDIATE, 10, 70.0),
	(LEVEL_INTERMEDIATE, LEVEL_ADVANCED, 25, 80.0),
)

PLACEMENT_ADVANCED_MIN = 7.0
PLACEMENT_INTERMEDIATE_MIN = 4.0


@dataclass(frozen=True)
class LevelStats:
	writing_accuracy: float
	reading_accuracy: float
	total_games: int


def _accuracy(correct: int, total: int) -> float:
	if total <= 0:
		return 0.0
	return correct / total * 100


def summarize(progress: Progress) -> LevelStats:
	writing_total = progress.word_practice_total_items + progress.sentence_practice_total_items
	writing_correct = progress.word_practice_correct_items + progress.sentence_practice_correct_items
	reading_total = progress.word_reading_total_items + progress.sentence_reading_total_items
	reading_correct = (
		progress.word_reading_correct_pronunciations + progress.sentence_reading_correct_pronunciations
	)
	total_games = (
		progress.word_practice_games_played
		+ progress.sentence_practice_games_played
		+ progress.word_reading_games_played
		+ progress.sentence_reading_games_played
	)
	return LevelStats(
		writing_accuracy=_accuracy(writing_correct, writing_total),
		reading_accuracy=_accuracy(reading_correct, reading_total),
		total_games=total_games,
	)


def next_level(current: Optional[str], stats: LevelStats) -> Optional[str]:
	"""Return the level to promote to, or None when no rule fires."""
	for from_level, to_level, min_games, min_accuracy in PROMOTION_RULES:
		if current != from_level:
			continue
		if (
			stats.total_games >= min_games
			and stats.writing_accuracy >= min_accuracy
			and stats.reading_accuracy >= min_accuracy
		):
			return to_level
		return None
	return None


def level_for_score(score: float) -> str:
	if score >= PLACEMENT_ADVANCED_MIN:
		return LEVEL_ADVANCED
	if score >= PLACEMENT_INTERMEDIATE_MIN:
		return LEVEL_INTERMEDIATE
	return LEVEL_BEGINNER


def get_student(db: Session, user_id: str) -> Optional[Student]:
	return db.execute(select(Student).where(Student.id == user_id)).scalar_one_or_none()


def check_and_update_user_level(db: Session, user_id: str) -> Optional[str]:
	"""Promote the student if the accumulated progress allows it.

	Returns the resulting level, or None when the student or their progress
	record does not exist (silent no-op).
	"""
	student = get_student(db, user_id)
	progress = db.get(Progress, user_id)
	if student is None or progress is None:
		return None
	current = student.user_level
	target = next_level(current, summarize(progress))
	if target is None:
		return current
	result = db.execute(
		update(Student)
		.where(Student.id == user_id, Student.user_level == current)
		.values(user_level=target)
		.execution_options(synchronize_session=False)
	)
	db.commit()
	if result.rowcount:
		logger.info("Promoted user %s from %s to %s", user_id, current, target)
		return target
	# Level changed underneath us (placement or a concurrent promotion)
	db.refresh(student)
	return student.user_level


def apply_placement(db: Session, student: Student, score: float) -> str:
	level = level_for_score(score)
	db.execute(
		update(Student)
		.where(Student.id == student.id)
		.values(user_level=level, evaluate=True)
		.execution_options(synchronize_session=False)
	)
	db.commit()
	logger.info("Placement for user %s: score=%.2f level=%s", student.id, score, level)
	return level


def skip_placement(db: Session, student: Student) -> str:
	db.execute(
		update(Student)
		.where(Student.id == student.id)
		.values(evaluate=True)
		.execution_options(synchronize_session=False)
	)
	db.commit()
	db.refresh(student)
	return student.user_level or LEVEL_BEGINNER
