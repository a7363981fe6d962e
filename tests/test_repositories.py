import asyncio

import pytest

from core.config import settings
from core.exceptions import DatabaseError
from infrastructure.supabase import SupabaseClient
from models.domain.training import TrainingStatus
from repositories.signatures_repo import SignaturesRepository
from repositories.students_repo import StudentsRepository
from repositories.training_repo import TrainingRepository


class _Response:
    def __init__(self, data=None, count=None) -> None:
        self.data = data if data is not None else []
        self.count = count


class _Query:
    """PostgREST builder stand-in that records every chained call."""

    def __init__(self, table: str, response) -> None:
        self.table = table
        self.calls = []
        self._response = response

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return record

    def execute(self):
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


class _Supabase:
    to_row = SupabaseClient.to_row

    def __init__(self, *responses) -> None:
        self._responses = list(responses)
        self.queries = []

    def table(self, name):
        query = _Query(name, self._responses.pop(0))
        self.queries.append(query)
        return query


def _profile_row(**overrides):
    row = {
        "student_id": 3,
        "status": "training",
        "num_samples": 0,
        "threshold": 0.7,
        "embedding_centroid": None,
        "last_trained_at": None,
        "error_message": None,
        "updated_at": "2026-05-01T08:00:00+00:00",
    }
    row.update(overrides)
    return row


def _signature_row(id: int, created_at: str):
    return {
        "id": id,
        "student_id": 7,
        "storage_path": f"signatures/7/{id}.png",
        "file_name": f"{id}.png",
        "file_size": 120,
        "file_type": "image/png",
        "created_at": created_at,
    }


# ============================================================
# Training profiles
# ============================================================

def test_transition_updates_only_rows_still_in_expected_status():
    client = _Supabase(_Response([_profile_row()]))

    profile = asyncio.run(
        TrainingRepository(client).transition(3, TrainingStatus.UNTRAINED, {"status": TrainingStatus.TRAINING})
    )

    assert profile.status == TrainingStatus.TRAINING
    query = client.queries[0]
    assert query.table == "signature_training_profiles"
    (update, update_args, _), *filters = query.calls
    assert update == "update"
    assert update_args[0]["status"] == "training"
    assert isinstance(update_args[0]["updated_at"], str)
    assert filters == [
        ("eq", ("student_id", 3), {}),
        ("eq", ("status", "untrained"), {}),
    ]


def test_transition_lost_race_returns_none():
    client = _Supabase(_Response([]))

    profile = asyncio.run(
        TrainingRepository(client).transition(3, TrainingStatus.READY, {"status": TrainingStatus.TRAINING})
    )

    assert profile is None


def test_create_if_absent_ignores_duplicate_then_reads_back():
    client = _Supabase(_Response([]), _Response([_profile_row(status="ready", threshold=0.82)]))

    profile = asyncio.run(TrainingRepository(client).create_if_absent(3, 0.7))

    upsert_name, upsert_args, upsert_kwargs = client.queries[0].calls[0]
    assert upsert_name == "upsert"
    assert upsert_args[0]["status"] == "untrained"
    assert upsert_args[0]["threshold"] == 0.7
    assert upsert_kwargs == {"on_conflict": "student_id", "ignore_duplicates": True}
    # an existing profile wins over the default row
    assert profile.status == TrainingStatus.READY
    assert profile.threshold == 0.82


def test_unknown_status_and_missing_threshold_are_normalised():
    client = _Supabase(_Response([_profile_row(status="queued", threshold=None)]))

    profile = asyncio.run(TrainingRepository(client).get(3))

    assert profile.status == TrainingStatus.ERROR
    assert profile.threshold == settings.default_similarity_threshold


def test_driver_failure_becomes_database_error():
    client = _Supabase(RuntimeError("connection reset by peer"))

    with pytest.raises(DatabaseError) as exc:
        asyncio.run(TrainingRepository(client).set_threshold(3, 0.8))
    assert exc.value.details == {"operation": "signature_training_profiles.update"}


# ============================================================
# Primary signature
# ============================================================

def test_compare_and_set_primary_from_unset_uses_is_null():
    client = _Supabase(_Response([{"id": 7, "primary_signature_id": 12}]))

    updated = asyncio.run(StudentsRepository(client).compare_and_set_primary(7, None, 12))

    assert updated is True
    assert client.queries[0].table == "students"
    assert client.queries[0].calls == [
        ("update", ({"primary_signature_id": 12},), {}),
        ("eq", ("id", 7), {}),
        ("is_", ("primary_signature_id", "null"), {}),
    ]


def test_compare_and_set_primary_lost_race_is_false():
    client = _Supabase(_Response([]))

    updated = asyncio.run(StudentsRepository(client).compare_and_set_primary(7, 11, 12))

    assert updated is False
    assert ("eq", ("primary_signature_id", 11), {}) in client.queries[0].calls


def test_primary_of_unknown_student_is_none():
    client = _Supabase(_Response([]))

    assert asyncio.run(StudentsRepository(client).get_primary_signature_id(404)) is None


# ============================================================
# Signatures
# ============================================================

def test_list_by_student_orders_newest_first_with_id_tie_break():
    rows = [
        _signature_row(9, "2026-05-02T10:00:00+00:00"),
        _signature_row(8, "2026-05-01T10:00:00+00:00"),
        _signature_row(5, "2026-05-01T10:00:00+00:00"),
    ]
    client = _Supabase(_Response(rows))

    samples = asyncio.run(SignaturesRepository(client).list_by_student(7))

    assert [s.id for s in samples] == [9, 8, 5]
    assert client.queries[0].calls == [
        ("select", ("*",), {}),
        ("eq", ("student_id", 7), {}),
        ("order", ("created_at",), {"desc": True}),
        ("order", ("id",), {"desc": True}),
    ]


def test_count_by_student_uses_exact_count():
    client = _Supabase(_Response([], count=4))

    assert asyncio.run(SignaturesRepository(client).count_by_student(7)) == 4
    assert client.queries[0].calls[0] == ("select", ("id",), {"count": "exact"})
