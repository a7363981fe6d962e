import asyncio

import pytest

from core.config import settings
from core.exceptions import TrainingInProgressError, ValidationError
from models.domain.training import TrainingOutcome, TrainingProfile, TrainingStatus
from services.training_tracker import TrainingProfileTracker


def test_successful_training_marks_profile_ready(tracker, recognition):
    profile = asyncio.run(tracker.request_training(1))

    assert profile.status == TrainingStatus.READY
    assert profile.num_samples == 5
    assert profile.embedding_centroid == [0.1, 0.2]
    assert profile.threshold == 0.75
    assert profile.last_trained_at is not None
    assert profile.error_message is None
    assert recognition.train_calls == [1]


def test_training_timeout_keeps_last_good_bookkeeping(tracker, recognition, unavailable):
    async def scenario():
        good = await tracker.request_training(1)
        recognition.train_error = unavailable
        failed = await tracker.request_training(1)
        return good, failed

    good, failed = asyncio.run(scenario())

    assert failed.status == TrainingStatus.ERROR
    assert "timed out" in failed.error_message
    assert failed.num_samples == good.num_samples == 5
    assert failed.threshold == good.threshold
    assert failed.last_trained_at == good.last_trained_at


def test_backend_reported_failure_sets_error(tracker, recognition):
    recognition.train_outcome = TrainingOutcome(success=False, error="Not enough samples")

    profile = asyncio.run(tracker.request_training(1))

    assert profile.status == TrainingStatus.ERROR
    assert profile.error_message == "Not enough samples"
    assert profile.num_samples == 0


def test_second_request_while_training_is_rejected(tracker, recognition):
    async def scenario():
        recognition.train_started = asyncio.Event()
        recognition.train_gate = asyncio.Event()
        first = asyncio.create_task(tracker.request_training(1))
        await recognition.train_started.wait()

        with pytest.raises(TrainingInProgressError):
            await tracker.request_training(1)

        recognition.train_gate.set()
        return await first

    profile = asyncio.run(scenario())

    assert profile.status == TrainingStatus.READY
    assert recognition.train_calls == [1]


def test_concurrent_requests_start_exactly_one_training(tracker, recognition):
    async def scenario():
        recognition.train_gate = asyncio.Event()
        tasks = [asyncio.create_task(tracker.request_training(1)) for _ in range(3)]
        await asyncio.sleep(0.01)
        recognition.train_gate.set()
        return await asyncio.gather(*tasks, return_exceptions=True)

    results = asyncio.run(scenario())

    rejected = [r for r in results if isinstance(r, TrainingInProgressError)]
    completed = [r for r in results if isinstance(r, TrainingProfile)]
    assert len(rejected) == 2
    assert len(completed) == 1
    assert recognition.train_calls == [1]


def test_cancelled_training_resolves_to_error(tracker, recognition, training_repo):
    async def scenario():
        recognition.train_started = asyncio.Event()
        recognition.train_gate = asyncio.Event()
        task = asyncio.create_task(tracker.request_training(1))
        await recognition.train_started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    profile = training_repo.profiles[1]
    assert profile.status == TrainingStatus.ERROR
    assert profile.error_message == "cancelled"


def test_retraining_after_error_is_allowed(tracker, recognition, unavailable):
    async def scenario():
        recognition.train_error = unavailable
        await tracker.request_training(1)
        recognition.train_error = None
        return await tracker.request_training(1)

    profile = asyncio.run(scenario())
    assert profile.status == TrainingStatus.READY
    assert profile.error_message is None


def test_ensure_profile_is_idempotent(tracker, training_repo):
    async def scenario():
        first = await tracker.ensure_profile(3)
        second = await tracker.ensure_profile(3)
        return first, second

    first, second = asyncio.run(scenario())
    assert first == second
    assert len(training_repo.profiles) == 1


def test_threshold_override(tracker):
    profile = asyncio.run(tracker.set_threshold(2, 0.85))

    assert profile.threshold == 0.85
    assert profile.status == TrainingStatus.UNTRAINED


@pytest.mark.parametrize("threshold", [0, -0.1, 1.01])
def test_threshold_out_of_range_is_rejected(tracker, threshold):
    with pytest.raises(ValidationError):
        asyncio.run(tracker.set_threshold(2, threshold))


def test_threshold_override_survives_training_without_backend_threshold(tracker, recognition):
    recognition.train_outcome = TrainingOutcome(success=True, sample_count=3)

    async def scenario():
        await tracker.set_threshold(2, 0.9)
        return await tracker.request_training(2)

    assert asyncio.run(scenario()).threshold == 0.9


def test_retraining_eligibility():
    eligible = TrainingProfileTracker.retraining_eligible
    ready = TrainingProfile(student_id=1, status=TrainingStatus.READY, num_samples=3)
    training = TrainingProfile(student_id=1, status=TrainingStatus.TRAINING, num_samples=3)

    assert eligible(None, 1)
    assert not eligible(None, 0)
    assert eligible(ready, 4)
    assert not eligible(ready, 3)
    assert not eligible(training, 10)


def test_profile_default_threshold_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "default_similarity_threshold", 0.8)

    assert TrainingProfile(student_id=1).threshold == 0.8
