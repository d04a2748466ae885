import pytest

from config import settings
from services import authorization
from utils.exceptions import Forbidden, NotFound, Unauthenticated


def test_owner_is_admitted():
    assert authorization.authorize_owner(5, 5) is None


def test_anonymous_is_unauthenticated():
    with pytest.raises(Unauthenticated) as exc:
        authorization.authorize_owner(None, 5)
    assert exc.value.location == "/session/new"


def test_other_account_is_forbidden():
    with pytest.raises(Forbidden):
        authorization.authorize_owner(6, 5, location="/stories/1")


def test_missing_owner_is_forbidden():
    with pytest.raises(Forbidden):
        authorization.authorize_owner(6, None)


def test_drafts_are_public_by_default(make_user, make_story):
    story = make_story(make_user(), status="draft")
    authorization.ensure_story_visible(None, story)
    assert authorization.can_view_drafts(None, story)


def test_owner_only_drafts_hidden_from_others(monkeypatch, make_user, make_story):
    monkeypatch.setattr(settings, "draft_visibility", "owner-only")
    owner = make_user()
    story = make_story(owner, status="draft")

    with pytest.raises(NotFound):
        authorization.ensure_story_visible(None, story)
    with pytest.raises(NotFound):
        authorization.ensure_story_visible(owner.id + 1, story)
    authorization.ensure_story_visible(owner.id, story)


def test_owner_only_still_shows_published_stories(monkeypatch, make_user, make_story):
    monkeypatch.setattr(settings, "draft_visibility", "owner-only")
    story = make_story(make_user(), status="published")

    authorization.ensure_story_visible(None, story)
    assert not authorization.can_view_drafts(None, story)
