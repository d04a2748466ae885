import pytest

import models
from repositories import chapter_repository
from services import chapter_sequencer
from utils.exceptions import ValidationError


@pytest.fixture
def story(make_user, make_story):
    return make_story(make_user())


def _create(db, story, order=None, title=None, **kwargs):
    return chapter_sequencer.create_chapter(
        db, story, title=title or f"Chapter {order}", content="<p>Once upon a time</p>",
        order=order, **kwargs
    )


def _count(db, story):
    db.refresh(story)
    return story.chapters_count


def test_next_order_value_starts_at_one(db, story):
    assert chapter_sequencer.next_order_value(db, story) == 1


def test_default_order_is_max_plus_one_not_first_gap(db, story):
    _create(db, story, order=1)
    _create(db, story, order=3)

    assert chapter_sequencer.next_order_value(db, story) == 4
    chapter = _create(db, story, title="Untitled")
    assert chapter.order == 4


def test_create_increments_chapter_count(db, story):
    _create(db, story, order=1)
    _create(db, story, order=2)
    assert _count(db, story) == 2


def test_colliding_order_is_rejected_without_touching_count(db, story):
    _create(db, story, order=1)

    with pytest.raises(ValidationError) as exc:
        _create(db, story, order=1, title="Duplicate")

    assert exc.value.errors == {"order": ["has already been taken"]}
    assert _count(db, story) == 1
    assert len(chapter_repository.get_chapters(db, story.id)) == 1


def test_database_constraint_catches_a_lost_race(db, story, monkeypatch):
    _create(db, story, order=1)
    # Both requests computed the same order and passed the in-process check
    monkeypatch.setattr(chapter_repository, "order_taken", lambda *args, **kwargs: False)

    with pytest.raises(ValidationError) as exc:
        _create(db, story, order=1, title="Racer")

    assert "order" in exc.value.errors
    assert _count(db, story) == 1
    assert [c.title for c in chapter_repository.get_chapters(db, story.id)] == ["Chapter 1"]


def test_database_constraint_catches_a_lost_race_on_update(db, story, monkeypatch):
    _create(db, story, order=1)
    second = _create(db, story, order=2)
    monkeypatch.setattr(chapter_repository, "order_taken", lambda *args, **kwargs: False)

    with pytest.raises(ValidationError) as exc:
        chapter_sequencer.update_chapter(db, second, order=1)

    assert exc.value.errors == {"order": ["has already been taken"]}
    db.refresh(second)
    assert second.order == 2
    assert _count(db, story) == 2


@pytest.mark.parametrize("kwargs, field", [
    ({"title": "", "order": 1}, "title"),
    ({"title": "x" * 201, "order": 1}, "title"),
    ({"title": "Fine", "order": 0}, "order"),
    ({"title": "Fine", "order": -3}, "order"),
    ({"title": "Fine", "order": 2.5}, "order"),
    ({"title": "Fine", "order": 1, "status": "archived"}, "status"),
])
def test_invalid_chapter_is_not_written(db, story, kwargs, field):
    with pytest.raises(ValidationError) as exc:
        chapter_sequencer.create_chapter(db, story, content="", **kwargs)

    assert field in exc.value.errors
    assert _count(db, story) == 0
    assert chapter_repository.get_chapters(db, story.id) == []


def test_title_of_two_hundred_characters_is_accepted(db, story):
    chapter = _create(db, story, order=1, title="x" * 200)
    assert len(chapter.title) == 200


def test_title_length_is_measured_after_trimming(db, story):
    chapter = _create(db, story, order=1, title="  " + "x" * 200 + " ")
    assert chapter.title == "x" * 200

    chapter_sequencer.update_chapter(db, chapter, title="y" * 200 + "  ")
    assert chapter.title == "y" * 200


def test_listing_is_always_ascending(db, story):
    for order in (10, 3, 5):
        _create(db, story, order=order)

    assert [c.order for c in chapter_sequencer.list_chapters(db, story)] == [3, 5, 10]
    db.refresh(story)
    assert [c.order for c in story.chapters] == [3, 5, 10]


def test_navigation_across_gaps(db, story):
    third = _create(db, story, order=3)
    fifth = _create(db, story, order=5)
    tenth = _create(db, story, order=10)

    assert chapter_sequencer.next_chapter(db, third).id == fifth.id
    assert chapter_sequencer.next_chapter(db, fifth).id == tenth.id
    assert chapter_sequencer.previous_chapter(db, tenth).id == fifth.id
    assert chapter_sequencer.previous_chapter(db, third) is None
    assert chapter_sequencer.next_chapter(db, tenth) is None

    back = chapter_sequencer.previous_chapter(db, fifth)
    assert chapter_sequencer.next_chapter(db, back).id == fifth.id


def test_navigation_stays_within_the_story(db, story, make_story, make_user):
    other = make_story(make_user("other@example.com"), title="Elsewhere")
    mine = _create(db, story, order=1)
    _create(db, other, order=2)

    assert chapter_sequencer.next_chapter(db, mine) is None


def test_navigation_can_skip_drafts(db, story):
    first = _create(db, story, order=1, status="published")
    _create(db, story, order=2)
    third = _create(db, story, order=3, status="published")

    assert chapter_sequencer.next_chapter(db, first, include_drafts=False).id == third.id
    assert chapter_sequencer.previous_chapter(db, third, include_drafts=False).id == first.id
    assert [c.order for c in chapter_sequencer.list_chapters(db, story, include_drafts=False)] == [1, 3]


def test_publish_then_unpublish_only_changes_status(db, story):
    chapter = _create(db, story, order=7, title="Turning Point")
    before = (chapter.title, chapter.content, chapter.order)

    chapter_sequencer.publish(db, chapter)
    assert chapter.status == "published"
    chapter_sequencer.unpublish(db, chapter)

    assert chapter.status == "draft"
    assert (chapter.title, chapter.content, chapter.order) == before


def test_publish_is_idempotent(db, story):
    chapter = _create(db, story, order=1)
    chapter_sequencer.publish(db, chapter)
    chapter_sequencer.publish(db, chapter)
    assert chapter.is_published


def test_update_rejects_order_of_another_chapter(db, story):
    _create(db, story, order=1)
    second = _create(db, story, order=2)

    with pytest.raises(ValidationError):
        chapter_sequencer.update_chapter(db, second, order=1)

    db.refresh(second)
    assert second.order == 2


def test_update_keeps_own_order_and_status(db, story):
    chapter = _create(db, story, order=4, status="published")

    chapter_sequencer.update_chapter(db, chapter, title="Renamed", content="<p>New</p>", order=4)

    assert chapter.title == "Renamed"
    assert chapter.plain_text == "New"
    assert chapter.status == "published"


def test_destroy_decrements_count(db, story):
    first = _create(db, story, order=1)
    _create(db, story, order=2)

    chapter_sequencer.destroy_chapter(db, first)

    assert _count(db, story) == 1
    assert [c.order for c in chapter_sequencer.list_chapters(db, story)] == [2]


def test_plain_text_projection(db, story):
    chapter = chapter_sequencer.create_chapter(
        db, story, title="Rich", content="<h1>Dawn</h1><p>The <b>sun</b>   rose.</p>", order=1
    )
    assert chapter.plain_text == "Dawn The sun rose."
    assert chapter.word_count == 4
    assert db.query(models.Chapter).count() == 1
