"""JournalStore against a mocked Firestore client: query shape and batch usage."""

from unittest.mock import MagicMock

import pytest
from google.cloud import firestore

from nocturne.store import JournalStore


def _doc(doc_id, **data):
    doc = MagicMock()
    doc.id = doc_id
    doc.to_dict.return_value = data
    return doc


def _filters(where_mock):
    return [
        (c.kwargs["filter"].field_path, c.kwargs["filter"].op_string, c.kwargs["filter"].value)
        for c in where_mock.call_args_list
    ]


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def subcollection(client):
    """The mock returned for users/{uid}/<subcollection>."""
    return client.collection.return_value.document.return_value.collection.return_value


def test_recent_journals_query(client, subcollection):
    limited = subcollection.where.return_value.order_by.return_value.limit.return_value
    limited.stream.return_value = [_doc("j1", type="journal", text="a")]

    result = JournalStore(client).recent_journals("u1", limit=7)

    client.collection.assert_called_with("users")
    client.collection.return_value.document.assert_called_with("u1")
    assert _filters(subcollection.where) == [("type", "==", "journal")]
    subcollection.where.return_value.order_by.assert_called_once_with(
        "timestamp", direction=firestore.Query.DESCENDING
    )
    subcollection.where.return_value.order_by.return_value.limit.assert_called_once_with(7)
    assert result == [{"id": "j1", "type": "journal", "text": "a"}]


def test_journals_before_query(client, subcollection):
    second_where = subcollection.where.return_value.where
    second_where.return_value.order_by.return_value.limit.return_value.stream.return_value = []

    assert JournalStore(client).journals_before("u1", "2026-10-19") == []

    assert _filters(subcollection.where) == [("type", "==", "journal")]
    assert _filters(second_where) == [("dateString", "<", "2026-10-19")]
    second_where.return_value.order_by.assert_called_once_with(
        "dateString", direction=firestore.Query.DESCENDING
    )
    second_where.return_value.order_by.return_value.limit.assert_called_once_with(3)


def test_dream_for_date_returns_first_or_none(client, subcollection):
    limited = subcollection.where.return_value.where.return_value.limit.return_value
    limited.stream.return_value = [_doc("d1", text="glass city")]
    store = JournalStore(client)

    assert store.dream_for_date("u1", "2026-10-19") == {"id": "d1", "text": "glass city"}
    subcollection.where.return_value.where.return_value.limit.assert_called_with(1)

    limited.stream.return_value = []
    assert store.dream_for_date("u1", "2026-10-19") is None


def test_notes_for_date_sorted_by_timestamp(client, subcollection):
    subcollection.where.return_value.where.return_value.stream.return_value = [
        _doc("n2", text="later", timestamp="2026-10-19T10:00"),
        _doc("n1", text="earlier", timestamp="2026-10-19T08:00"),
    ]

    notes = JournalStore(client).notes_for_date("u1", "2026-10-19")

    assert [n["id"] for n in notes] == ["n1", "n2"]


def test_update_entry_ai_result(client, subcollection):
    JournalStore(client).update_entry_ai_result("u1", "e1", {"mood": "calm"}, "calm")

    subcollection.document.assert_called_with("e1")
    subcollection.document.return_value.update.assert_called_once_with({
        "aiResult": {"mood": "calm"},
        "mood": "calm",
        "aiProcessedAt": firestore.SERVER_TIMESTAMP,
    })


def test_create_goals_uses_single_batch(client, subcollection):
    refs = [MagicMock(id=f"g{i}") for i in range(3)]
    subcollection.document.side_effect = refs
    batch = client.batch.return_value
    goals = [{"text": f"goal {i}", "source": "ai"} for i in range(3)]

    goal_ids = JournalStore(client).create_goals("u1", goals)

    assert goal_ids == ["g0", "g1", "g2"]
    client.batch.assert_called_once()
    assert batch.set.call_count == 3
    batch.commit.assert_called_once()
    ref, data = batch.set.call_args_list[0].args
    assert ref is refs[0]
    assert data["text"] == "goal 0"
    assert data["userId"] == "u1"
    assert data["createdAt"] is firestore.SERVER_TIMESTAMP
    for r in refs:
        r.set.assert_not_called()


def test_create_goals_commit_failure_propagates(client, subcollection):
    client.batch.return_value.commit.side_effect = RuntimeError("aborted")

    with pytest.raises(RuntimeError):
        JournalStore(client).create_goals("u1", [{"text": "a"}])


def test_create_goals_with_nothing_skips_batch(client):
    assert JournalStore(client).create_goals("u1", []) == []
    client.batch.assert_not_called()


def test_delete_ai_goals_batches_deletes(client, subcollection):
    docs = [_doc("g1"), _doc("g2")]
    subcollection.where.return_value.where.return_value.stream.return_value = docs
    batch = client.batch.return_value

    deleted = JournalStore(client).delete_ai_goals("u1", "2026-10-19")

    assert deleted == 2
    assert _filters(subcollection.where) == [("source", "==", "ai")]
    assert _filters(subcollection.where.return_value.where) == [("dateString", "==", "2026-10-19")]
    assert [c.args[0] for c in batch.delete.call_args_list] == [d.reference for d in docs]
    batch.commit.assert_called_once()


def test_delete_ai_goals_with_none_found(client, subcollection):
    subcollection.where.return_value.where.return_value.stream.return_value = []

    assert JournalStore(client).delete_ai_goals("u1", "2026-10-19") == 0
    client.batch.assert_not_called()
