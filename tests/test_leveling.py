"""Tests for the level state machine and placement scoring."""

import pytest

from fluentpath import leveling
from fluentpath.leveling import LevelStats, level_for_score, next_level, summarize
from fluentpath.models import LEVEL_ADVANCED, LEVEL_BEGINNER, LEVEL_INTERMEDIATE, Student

from conftest import make_progress


class TestSummarize:
    def test_empty_progress_has_zero_accuracy(self):
        stats = summarize(make_progress())
        assert stats == LevelStats(writing_accuracy=0.0, reading_accuracy=0.0, total_games=0)

    def test_sums_both_categories_per_skill(self):
        progress = make_progress(
            word_practice_total_items=10,
            word_practice_correct_items=9,
            word_practice_games_played=2,
            sentence_practice_total_items=10,
            sentence_practice_correct_items=5,
            sentence_practice_games_played=1,
            word_reading_total_items=4,
            word_reading_correct_pronunciations=4,
            word_reading_games_played=3,
            sentence_reading_total_items=4,
            sentence_reading_correct_pronunciations=2,
            sentence_reading_games_played=4,
        )
        stats = summarize(progress)
        assert stats.writing_accuracy == pytest.approx(70.0)
        assert stats.reading_accuracy == pytest.approx(75.0)
        assert stats.total_games == 10


class TestNextLevel:
    def test_beginner_promoted_at_thresholds(self):
        stats = LevelStats(writing_accuracy=70.0, reading_accuracy=70.0, total_games=10)
        assert next_level(LEVEL_BEGINNER, stats) == LEVEL_INTERMEDIATE

    def test_beginner_needs_ten_games(self):
        stats = LevelStats(writing_accuracy=100.0, reading_accuracy=100.0, total_games=9)
        assert next_level(LEVEL_BEGINNER, stats) is None

    def test_beginner_needs_reading_accuracy(self):
        stats = LevelStats(writing_accuracy=80.0, reading_accuracy=0.0, total_games=10)
        assert next_level(LEVEL_BEGINNER, stats) is None

    def test_beginner_skips_straight_to_intermediate_only(self):
        stats = LevelStats(writing_accuracy=100.0, reading_accuracy=100.0, total_games=40)
        assert next_level(LEVEL_BEGINNER, stats) == LEVEL_INTERMEDIATE

    def test_intermediate_promoted_to_advanced(self):
        stats = LevelStats(writing_accuracy=80.0, reading_accuracy=80.0, total_games=25)
        assert next_level(LEVEL_INTERMEDIATE, stats) == LEVEL_ADVANCED

    def test_intermediate_below_accuracy(self):
        stats = LevelStats(writing_accuracy=79.9, reading_accuracy=95.0, total_games=30)
        assert next_level(LEVEL_INTERMEDIATE, stats) is None

    def test_advanced_is_terminal(self):
        stats = LevelStats(writing_accuracy=0.0, reading_accuracy=0.0, total_games=100)
        assert next_level(LEVEL_ADVANCED, stats) is None


@pytest.mark.parametrize(
    "score, expected",
    [
        (0, LEVEL_BEGINNER),
        (3.9, LEVEL_BEGINNER),
        (4, LEVEL_INTERMEDIATE),
        (6.99, LEVEL_INTERMEDIATE),
        (7, LEVEL_ADVANCED),
        (10, LEVEL_ADVANCED),
    ],
)
def test_level_for_score(score, expected):
    assert level_for_score(score) == expected


class TestCheckAndUpdate:
    def test_missing_account_is_noop(self, db):
        assert leveling.check_and_update_user_level(db, "does-not-exist") is None

    def test_missing_progress_is_noop(self, db, make_student):
        student = make_student()
        assert leveling.check_and_update_user_level(db, student.id) is None
        db.refresh(student)
        assert student.user_level == LEVEL_BEGINNER

    def test_promotes_and_persists(self, db, make_student):
        student = make_student()
        db.add(make_progress(
            student.id,
            word_practice_total_items=10,
            word_practice_correct_items=10,
            word_practice_games_played=5,
            word_reading_total_items=10,
            word_reading_correct_pronunciations=10,
            word_reading_games_played=5,
        ))
        db.commit()
        assert leveling.check_and_update_user_level(db, student.id) == LEVEL_INTERMEDIATE
        db.refresh(student)
        assert student.user_level == LEVEL_INTERMEDIATE

    def test_never_demotes(self, db, make_student):
        student = make_student()
        student.user_level = LEVEL_ADVANCED
        db.add(make_progress(student.id, word_practice_total_items=10, word_practice_games_played=30))
        db.commit()
        assert leveling.check_and_update_user_level(db, student.id) == LEVEL_ADVANCED
        db.refresh(student)
        assert student.user_level == LEVEL_ADVANCED


class TestPlacement:
    def test_placement_sets_level_and_evaluate(self, db, make_student):
        student = make_student()
        assert leveling.apply_placement(db, student, 8) == LEVEL_ADVANCED
        db.refresh(student)
        assert student.user_level == LEVEL_ADVANCED
        assert student.evaluate is True

    def test_placement_overrides_earned_level(self, db, make_student):
        student = make_student()
        student.user_level = LEVEL_INTERMEDIATE
        db.commit()
        leveling.apply_placement(db, student, 1.5)
        db.refresh(student)
        assert student.user_level == LEVEL_BEGINNER

    def test_skip_keeps_level(self, db, make_student):
        student = make_student()
        assert leveling.skip_placement(db, student) == LEVEL_BEGINNER
        db.refresh(student)
        assert student.evaluate is True

    def test_student_defaults(self, make_student):
        student = make_student()
        assert isinstance(student, Student)
        assert student.user_level == LEVEL_BEGINNER
        assert student.evaluate is False
