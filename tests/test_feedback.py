"""
Unit tests for the feedback inbox
"""

import pytest

from qrmenu.core.errors import NotFoundError, ValidationError
from qrmenu.services.feedback_store import FeedbackStore, feedback_cache_key


def feedback_data(**overrides):
    data = {
        "author": "Ayşe",
        "rating": 4,
        "categories": {"food": 5, "service": 4, "ambiance": 3},
        "comment": "Kahve çok güzeldi",
        "would_recommend": True,
    }
    data.update(overrides)
    return data


@pytest.fixture
def inbox(cache) -> FeedbackStore:
    store = FeedbackStore("mikail-cafe", cache)
    store.load()
    return store


def test_add_feedback(inbox, cache):
    """Test new feedback gets an id, a timestamp and lands unread"""
    feedback = inbox.add(feedback_data())

    assert feedback.id.startswith("fb-")
    assert feedback.is_read is False
    assert feedback.created_at is not None
    assert cache.read("feedbacks_mikail-cafe")["feedbacks"][0]["author"] == "Ayşe"


def test_newest_first(inbox):
    first = inbox.add(feedback_data(author="Ali"))
    second = inbox.add(feedback_data(author="Veli"))

    assert [f.id for f in inbox.feedbacks] == [second.id, first.id]


def test_persisted_across_loads(inbox, cache):
    inbox.add(feedback_data())

    reloaded = FeedbackStore("mikail-cafe", cache)

    assert len(reloaded.load()) == 1
    assert reloaded.feedbacks[0].categories.ambiance == 3


@pytest.mark.parametrize("overrides, field", [
    ({"author": "  "}, "author"),
    ({"rating": 0}, "rating"),
    ({"rating": 6}, "rating"),
    ({"categories": {"food": 9, "service": 4, "ambiance": 3}}, "categories.food"),
])
def test_invalid_feedback(inbox, overrides, field):
    with pytest.raises(ValidationError) as exc_info:
        inbox.add(feedback_data(**overrides))

    assert exc_info.value.field == field
    assert inbox.feedbacks == []


def test_mark_as_read(inbox):
    feedback = inbox.add(feedback_data())
    inbox.add(feedback_data())

    inbox.mark_as_read(feedback.id)

    assert inbox.unread_count == 1
    assert inbox.get(feedback.id).is_read is True


def test_delete(inbox):
    feedback = inbox.add(feedback_data())

    inbox.delete(feedback.id)

    assert inbox.feedbacks == []
    with pytest.raises(NotFoundError):
        inbox.delete(feedback.id)


def test_delete_all(inbox, cache):
    inbox.add(feedback_data())
    inbox.add(feedback_data())

    assert inbox.delete_all() == 2
    assert inbox.unread_count == 0
    assert cache.read(feedback_cache_key("mikail-cafe")) == {"feedbacks": []}


def test_average_rating(inbox):
    assert inbox.average_rating() is None

    inbox.add(feedback_data(rating=5))
    inbox.add(feedback_data(rating=4))
    inbox.add(feedback_data(rating=4))

    assert inbox.average_rating() == 4.3


def test_rename_moves_collection(inbox, cache):
    inbox.add(feedback_data())

    inbox.rename("mikail-kahve")

    assert cache.read("feedbacks_mikail-cafe") is None
    assert len(cache.read("feedbacks_mikail-kahve")["feedbacks"]) == 1


def test_memory_only_without_cache():
    inbox = FeedbackStore("mikail-cafe", cache=None)
    inbox.load()

    inbox.add(feedback_data())

    assert inbox.unread_count == 1


def test_corrupt_cache_entry(cache):
    cache.write("feedbacks_mikail-cafe", {"feedbacks": [{"author": "x"}]})

    assert FeedbackStore("mikail-cafe", cache).load() == []
