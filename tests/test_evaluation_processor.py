"""
Tests for applying evaluations to stored items
"""

import os
import tempfile
from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from review_scheduler.config import Settings
from review_scheduler.core.scheduler.evaluation_processor import EvaluationProcessor
from review_scheduler.database import init_db
from review_scheduler.errors import (
    ConcurrentUpdateConflict,
    InvalidEvaluationError,
    NotFoundError,
)
from review_scheduler.utils import SECONDS_PER_DAY

NOW = int(datetime(2024, 3, 10, 15, 0, tzinfo=timezone.utc).timestamp())


class TestEvaluationProcessor:
    """Test EvaluationProcessor against a real SQLite store"""

    @pytest.fixture
    def temp_db(self):
        """Create temporary database for testing"""
        temp_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
        temp_file.close()

        db_manager = init_db(temp_file.name, Settings())

        yield db_manager

        for suffix in ("", "-wal", "-shm"):
            if os.path.exists(temp_file.name + suffix):
                os.unlink(temp_file.name + suffix)

    @pytest.fixture
    def processor(self, temp_db):
        return EvaluationProcessor(temp_db.item_repo, settings=Settings())

    @pytest.fixture
    def item(self, temp_db):
        return temp_db.item_repo.create("card-1", "user-1", "course-1")

    def test_first_review_schedules_one_day(self, processor, item):
        """Test a remembered new item comes back after one day"""
        updated = processor.process_evaluation(item.id, 4, "user-1", now=NOW)

        assert updated.times_repeated == 1
        assert updated.actual_times_repeated == 1
        assert updated.previous_days_change == 1
        assert updated.last_repetition == NOW
        assert updated.next_repetition == NOW + SECONDS_PER_DAY
        assert updated.extra_repeat_today is False
        assert updated.version == 1

    def test_second_review_schedules_six_days(self, processor, item):
        """Test the second remembered review comes back after six days"""
        processor.process_evaluation(item.id, 4, "user-1", now=NOW)
        later = NOW + SECONDS_PER_DAY
        updated = processor.process_evaluation(item.id, 4, "user-1", now=later)

        assert updated.times_repeated == 2
        assert updated.previous_days_change == 6
        assert updated.next_repetition == later + 6 * SECONDS_PER_DAY

    def test_third_review_multiplies_by_easiness(self, processor, temp_db, item):
        """Test later intervals grow by the easiness factor"""
        temp_db.item_repo.put(
            replace(item, times_repeated=2, previous_days_change=6, easiness_factor=2.5)
        )

        updated = processor.process_evaluation(item.id, 5, "user-1", now=NOW)

        assert updated.easiness_factor == pytest.approx(2.6)
        assert updated.previous_days_change == 16  # round(6 * 2.6)

    def test_wrong_evaluation(self, processor, temp_db, item):
        """Test a forgotten item is repeated tomorrow and its streak restarts"""
        temp_db.item_repo.put(
            replace(item, times_repeated=3, previous_days_change=15, easiness_factor=2.5)
        )

        updated = processor.process_evaluation(item.id, 2.5, "user-1", now=NOW)

        assert updated.actual_times_repeated == 1
        assert updated.times_repeated == 0
        assert updated.previous_days_change == 0
        assert updated.next_repetition == NOW + SECONDS_PER_DAY
        assert updated.extra_repeat_today is True
        assert updated.easiness_factor < 2.5

    def test_forgotten_new_item_restarts_sequence(self, processor, item):
        """Test a lapse on a new item is followed by 1 and then 6 days"""
        processor.process_evaluation(item.id, 2, "user-1", now=NOW)

        first = processor.process_evaluation(
            item.id, 4, "user-1", now=NOW + SECONDS_PER_DAY
        )
        assert first.times_repeated == 1
        assert first.previous_days_change == 1

        second = processor.process_evaluation(
            item.id, 4, "user-1", now=NOW + 2 * SECONDS_PER_DAY
        )
        assert second.times_repeated == 2
        assert second.previous_days_change == 6
        assert second.actual_times_repeated == 3

    def test_lapse_of_mature_item(self, processor, temp_db, item):
        """Test forgetting a long-interval item drops it back to one day"""
        temp_db.item_repo.put(
            replace(
                item,
                actual_times_repeated=5,
                times_repeated=5,
                previous_days_change=30,
                easiness_factor=2.5,
            )
        )

        lapsed = processor.process_evaluation(item.id, 0, "user-1", now=NOW)
        assert lapsed.next_repetition == NOW + SECONDS_PER_DAY

        relearned = processor.process_evaluation(
            item.id, 4, "user-1", now=NOW + SECONDS_PER_DAY
        )
        assert relearned.previous_days_change == 1
        assert relearned.actual_times_repeated == 7

    def test_same_day_repeat_keeps_schedule(self, processor, item):
        """Test re-drilling a weak item today does not advance its schedule"""
        first = processor.process_evaluation(item.id, 3, "user-1", now=NOW)
        assert first.extra_repeat_today is True

        still_weak = processor.process_evaluation(item.id, 3, "user-1", now=NOW + 600)
        assert still_weak.extra_repeat_today is True
        assert still_weak.next_repetition == first.next_repetition

        cleared = processor.process_evaluation(item.id, 4, "user-1", now=NOW + 1200)

        assert cleared.extra_repeat_today is False
        assert cleared.actual_times_repeated == 3
        assert cleared.times_repeated == first.times_repeated
        assert cleared.previous_days_change == first.previous_days_change
        assert cleared.next_repetition == first.next_repetition
        assert cleared.easiness_factor == first.easiness_factor
        assert cleared.last_repetition == NOW + 1200

    def test_flag_from_earlier_day_is_a_full_review(self, processor, item):
        """Test a stale same-day flag does not turn tomorrow's review into a drill"""
        processor.process_evaluation(item.id, 3, "user-1", now=NOW)

        updated = processor.process_evaluation(
            item.id, 4, "user-1", now=NOW + SECONDS_PER_DAY
        )

        assert updated.times_repeated == 2
        assert updated.previous_days_change == 6

    def test_threshold_evaluation_is_remembered(self, processor, item):
        """Test an evaluation of exactly 3 still grows the interval"""
        updated = processor.process_evaluation(item.id, 3, "user-1", now=NOW)

        assert updated.previous_days_change == 1
        assert updated.extra_repeat_today is True
        assert updated.easiness_factor == pytest.approx(2.36)

    def test_easiness_floor_holds(self, processor, item):
        """Test repeated blackouts never push easiness below 1.3"""
        updated = item
        for day in range(6):
            updated = processor.process_evaluation(
                item.id, 0, "user-1", now=NOW + day * SECONDS_PER_DAY
            )
            assert updated.easiness_factor >= 1.3
            assert updated.next_repetition >= updated.last_repetition

        assert updated.easiness_factor == 1.3

    def test_result_is_persisted(self, processor, temp_db, item):
        updated = processor.process_evaluation(item.id, 5, "user-1", now=NOW)
        assert temp_db.item_repo.get(item.id, "user-1") == updated

    def test_unknown_item(self, processor):
        """Test evaluating a missing item raises NotFoundError"""
        with pytest.raises(NotFoundError):
            processor.process_evaluation("missing", 4, "user-1", now=NOW)

    def test_item_of_another_user(self, processor, item):
        with pytest.raises(NotFoundError):
            processor.process_evaluation(item.id, 4, "user-2", now=NOW)

    @pytest.mark.parametrize("evaluation", [-1, 6, float("nan"), "good"])
    def test_invalid_evaluation_leaves_item_untouched(
        self, processor, temp_db, item, evaluation
    ):
        """Test validation happens before any write"""
        with pytest.raises(InvalidEvaluationError):
            processor.process_evaluation(item.id, evaluation, "user-1", now=NOW)

        assert temp_db.item_repo.get(item.id, "user-1") == item

    def test_conflict_is_retried_with_fresh_read(self, processor, temp_db, item):
        """Test a concurrent write is picked up on the retry"""
        repo = temp_db.item_repo
        real_put = repo.put
        calls = []

        def racing_put(candidate, timeout=None):
            calls.append(candidate)
            if len(calls) == 1:
                # Another reviewer finishes first
                real_put(replace(item, times_repeated=1, previous_days_change=1))
            return real_put(candidate, timeout=timeout)

        with patch.object(repo, "put", side_effect=racing_put):
            updated = processor.process_evaluation(item.id, 4, "user-1", now=NOW)

        assert len(calls) == 2
        assert calls[0].version == 0
        assert calls[1].version == 1
        assert updated.times_repeated == 2
        assert updated.previous_days_change == 6
        assert updated.version == 2

    def test_conflict_surfaces_after_one_retry(self, processor, temp_db, item):
        """Test a second conflict is raised to the caller"""
        with patch.object(
            temp_db.item_repo,
            "put",
            side_effect=ConcurrentUpdateConflict(item.id, 0),
        ) as mock_put:
            with pytest.raises(ConcurrentUpdateConflict):
                processor.process_evaluation(item.id, 4, "user-1", now=NOW)

        assert mock_put.call_count == 2
        assert temp_db.item_repo.get(item.id, "user-1") == item

    def test_process_does_not_write(self, processor, temp_db, item):
        """Test the pure computation leaves the store alone"""
        computed = processor.process(item, 4, NOW)

        assert computed.times_repeated == 1
        assert computed.version == item.version
        assert temp_db.item_repo.get(item.id, "user-1") == item
