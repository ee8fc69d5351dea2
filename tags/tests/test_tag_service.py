import logging

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, transaction
from prometheus_client import REGISTRY

from tags.models import CommunityTag
from tags.services import tag_service
from tags.services.tag_service import (
    CommunityTagTracker,
    SkipReason,
    decrement_multiple_tags,
    decrement_tag_usage,
    get_promoted_tags_for_category,
    get_tag_usage_stats,
    track_multiple_tags,
    track_tag_usage,
)

pytestmark = pytest.mark.django_db


# =========================================================
# track_tag_usage
# =========================================================

def test_first_use_creates_tracked_tag(movie_category):
    community_tag = track_tag_usage("mind-blowing twist", movie_category)

    assert community_tag.usage_count == 1
    assert community_tag.is_promoted is False
    assert community_tag.tag == "mind-blowing twist"
    assert CommunityTag.objects.filter(category=movie_category).count() == 1


def test_repeated_use_increments_case_insensitively(movie_category):
    track_tag_usage("Visually Stunning", movie_category)
    community_tag = track_tag_usage("  visually stunning ", movie_category)

    assert community_tag.usage_count == 2
    # first spelling is the one shown to clients
    assert community_tag.tag == "Visually Stunning"
    assert CommunityTag.objects.count() == 1


def test_same_text_is_distinct_per_category(movie_category, fashion_category):
    track_tag_usage("Timeless", movie_category)
    track_tag_usage("Timeless", fashion_category)

    assert CommunityTag.objects.filter(normalized_tag="timeless").count() == 2


def test_threshold_crossing_promotes_in_same_call(movie_category):
    for _ in range(19):
        community_tag = track_tag_usage("Visually Stunning", movie_category)

    assert community_tag.usage_count == 19
    assert community_tag.is_promoted is False

    community_tag = track_tag_usage("Visually Stunning", movie_category)

    assert community_tag.usage_count == 20
    assert community_tag.is_promoted is True
    community_tag.refresh_from_db()
    assert community_tag.is_promoted is True


def test_increment_above_threshold_stays_promoted(movie_category):
    CommunityTag.objects.create(tag="Cult classic", category=movie_category, usage_count=25, is_promoted=True)

    community_tag = track_tag_usage("Cult classic", movie_category)

    assert community_tag.usage_count == 26
    assert community_tag.is_promoted is True


def test_hardcoded_tag_is_never_tracked(movie_category):
    for _ in range(5):
        assert track_tag_usage("Action-Packed", movie_category) is None

    assert not CommunityTag.objects.exists()


def test_hardcoded_check_follows_category(restaurant_category):
    # movie vocabulary is ordinary community text for restaurants
    community_tag = track_tag_usage("Action-packed", restaurant_category)

    assert community_tag is not None
    assert track_tag_usage("Hidden gem", restaurant_category) is None


def test_blank_tag_is_ignored(movie_category):
    assert track_tag_usage("   ", movie_category) is None
    assert not CommunityTag.objects.exists()


def test_database_error_propagates_from_single_call(movie_category, monkeypatch):
    def broken(*args, **kwargs):
        raise DatabaseError("connection lost")

    monkeypatch.setattr(CommunityTag.objects, "select_for_update", broken)

    with pytest.raises(DatabaseError):
        track_tag_usage("Visually Stunning", movie_category)


# =========================================================
# decrement_tag_usage
# =========================================================

def test_demotion_boundary(movie_category):
    CommunityTag.objects.create(tag="Cult classic", category=movie_category, usage_count=20, is_promoted=True)

    community_tag = decrement_tag_usage("cult classic", movie_category)

    assert community_tag.usage_count == 19
    assert community_tag.is_promoted is False


def test_decrement_to_zero_deletes(movie_category):
    for _ in range(3):
        track_tag_usage("Slow burn", movie_category)

    assert decrement_tag_usage("Slow burn", movie_category).usage_count == 2
    assert decrement_tag_usage("Slow burn", movie_category).usage_count == 1
    assert decrement_tag_usage("Slow burn", movie_category) is None

    assert not CommunityTag.objects.exists()
    assert decrement_tag_usage("Slow burn", movie_category) is None
    assert get_promoted_tags_for_category(movie_category) == []


def test_promoted_tag_dropping_to_zero_is_deleted(movie_category):
    tracker = CommunityTagTracker(threshold=1)
    tracked = tracker.track_tag_usage("Niche", movie_category)
    assert tracked.is_promoted is True

    assert tracker.decrement_tag_usage("Niche", movie_category) is None
    assert not CommunityTag.objects.exists()


def test_decrement_unknown_or_hardcoded_is_noop(movie_category):
    assert decrement_tag_usage("never used", movie_category) is None
    assert decrement_tag_usage("Action-Packed", movie_category) is None


# =========================================================
# batches
# =========================================================

def test_batch_partial_failure(movie_category, monkeypatch):
    original = CommunityTagTracker._track

    def flaky(self, tag, category):
        if tag == "failing-tag":
            raise DatabaseError("deadlock detected")
        return original(self, tag, category)

    monkeypatch.setattr(CommunityTagTracker, "_track", flaky)

    result = track_multiple_tags(["failing-tag", "working-tag"], movie_category)

    assert len(result) == 1
    assert [t.tag for t in result] == ["working-tag"]
    assert [(s.tag, s.reason) for s in result.failed] == [("failing-tag", SkipReason.FAILED)]
    assert CommunityTag.objects.filter(normalized_tag="working-tag").exists()


def test_batch_reports_skip_reasons(movie_category):
    track_tag_usage("Once", movie_category)

    result = track_multiple_tags(["Action-packed", "New one"], movie_category)
    assert [t.tag for t in result.tracked] == ["New one"]
    assert [(s.tag, s.reason) for s in result.skipped] == [("Action-packed", SkipReason.HARDCODED)]

    result = decrement_multiple_tags(["Once", "missing", "New one"], movie_category)
    assert len(result) == 0
    assert [s.reason for s in result.skipped] == [
        SkipReason.DELETED,
        SkipReason.NOT_TRACKED,
        SkipReason.DELETED,
    ]


def test_decrement_batch_partial_failure(movie_category, monkeypatch):
    for tag in ["keep", "broken"]:
        track_tag_usage(tag, movie_category)
        track_tag_usage(tag, movie_category)

    original = CommunityTagTracker._decrement

    def flaky(self, tag, category):
        if tag == "broken":
            raise DatabaseError("lock timeout")
        return original(self, tag, category)

    monkeypatch.setattr(CommunityTagTracker, "_decrement", flaky)

    result = decrement_multiple_tags(["broken", "keep"], movie_category)

    assert [t.usage_count for t in result] == [1]
    assert len(result.failed) == 1
    assert CommunityTag.objects.get(normalized_tag="broken").usage_count == 2


def test_twenty_batches_promote_tag(movie_category):
    for _ in range(20):
        track_multiple_tags(["Visually Stunning"], movie_category)

    assert get_promoted_tags_for_category(movie_category) == ["Visually Stunning"]


def test_track_then_decrement_same_number_of_times_removes_record(movie_category):
    for _ in range(7):
        track_multiple_tags(["Heist"], movie_category)
    for _ in range(7):
        decrement_multiple_tags(["Heist"], movie_category)

    assert not CommunityTag.objects.exists()


def test_batch_with_invalid_input_raises(movie_category):
    with pytest.raises(TypeError):
        track_multiple_tags(None, movie_category)


# =========================================================
# threshold / read path
# =========================================================

def test_threshold_is_configurable(movie_category):
    tracker = CommunityTagTracker(threshold=3)

    assert tracker.track_tag_usage("Quirky", movie_category).is_promoted is False
    assert tracker.track_tag_usage("Quirky", movie_category).is_promoted is False
    assert tracker.track_tag_usage("Quirky", movie_category).is_promoted is True
    assert tracker.decrement_tag_usage("Quirky", movie_category).is_promoted is False


def test_default_threshold_follows_settings(movie_category, settings):
    settings.TAG_PROMOTION_THRESHOLD = 2

    track_tag_usage("Cozy", movie_category)
    assert track_tag_usage("Cozy", movie_category).is_promoted is True


def test_promoted_tags_ordered_by_usage(movie_category, fashion_category):
    CommunityTag.objects.create(tag="Second", category=movie_category, usage_count=21, is_promoted=True)
    CommunityTag.objects.create(tag="First", category=movie_category, usage_count=40, is_promoted=True)
    CommunityTag.objects.create(tag="Not yet", category=movie_category, usage_count=19)
    CommunityTag.objects.create(tag="Elsewhere", category=fashion_category, usage_count=50, is_promoted=True)

    assert get_promoted_tags_for_category(movie_category) == ["First", "Second"]


def test_promoted_tags_read_failure_returns_empty(movie_category, monkeypatch):
    def broken(category):
        raise DatabaseError("relation does not exist")

    monkeypatch.setattr(CommunityTag.objects, "promoted", broken)

    assert get_promoted_tags_for_category(movie_category) == []


def test_usage_stats(movie_category):
    CommunityTag.objects.create(tag="Low", category=movie_category, usage_count=1)
    CommunityTag.objects.create(tag="High", category=movie_category, usage_count=22, is_promoted=True)
    CommunityTag.objects.create(tag="Mid", category=movie_category, usage_count=10)

    stats = get_tag_usage_stats(movie_category, limit=2)

    assert [(s["tag"], s["usage_count"], s["is_promoted"]) for s in stats] == [
        ("High", 22, True),
        ("Mid", 10, False),
    ]
    assert "created_at" in stats[0]


def test_reconcile_after_threshold_change(movie_category, settings):
    CommunityTag.objects.create(tag="Was promoted", category=movie_category, usage_count=20, is_promoted=True)
    CommunityTag.objects.create(tag="Should promote", category=movie_category, usage_count=12)
    CommunityTag.objects.create(tag="Unchanged", category=movie_category, usage_count=3)

    settings.TAG_PROMOTION_THRESHOLD = 10
    assert tag_service.reconcile_promotions(movie_category) == 1
    assert set(get_promoted_tags_for_category(movie_category)) == {"Was promoted", "Should promote"}

    settings.TAG_PROMOTION_THRESHOLD = 25
    assert tag_service.reconcile_promotions() == 2
    assert get_promoted_tags_for_category(movie_category) == []


def test_batch_survives_non_database_error(movie_category, monkeypatch):
    original = CommunityTagTracker._track

    def flaky(self, tag, category):
        if tag == "failing-tag":
            raise RuntimeError("store blew up")
        return original(self, tag, category)

    monkeypatch.setattr(CommunityTagTracker, "_track", flaky)

    result = track_multiple_tags(["first-tag", "failing-tag", "last-tag"], movie_category)

    assert [t.tag for t in result] == ["first-tag", "last-tag"]
    assert [(s.tag, s.reason, s.error) for s in result.failed] == [
        ("failing-tag", SkipReason.FAILED, "store blew up"),
    ]
    assert set(CommunityTag.objects.values_list("normalized_tag", flat=True)) == {"first-tag", "last-tag"}


# =========================================================
# transition reporting
# =========================================================

def _sample(name, category_name):
    return REGISTRY.get_sample_value(name, {"category": category_name}) or 0


def test_promotion_reported_after_commit(movie_category, django_capture_on_commit_callbacks, caplog):
    tracker = CommunityTagTracker(threshold=1)
    before = _sample("clique_tag_promotions_total", "MOVIE")

    with caplog.at_level(logging.INFO, logger="tags.services.tag_service"):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            tracker.track_tag_usage("Niche", movie_category)
            assert _sample("clique_tag_promotions_total", "MOVIE") == before

    assert len(callbacks) == 1
    assert _sample("clique_tag_promotions_total", "MOVIE") == before + 1
    assert "Tag promoted: 'Niche' (MOVIE) usage=1" in caplog.text


def test_rolled_back_transitions_are_not_reported(movie_category, django_capture_on_commit_callbacks):
    tracker = CommunityTagTracker(threshold=1)
    promotions = _sample("clique_tag_promotions_total", "MOVIE")
    deletions = _sample("clique_tag_deletions_total", "MOVIE")

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                tracker.track_tag_usage("Niche", movie_category)
                tracker.decrement_tag_usage("Niche", movie_category)
                raise RuntimeError("request failed")

    assert callbacks == []
    assert _sample("clique_tag_promotions_total", "MOVIE") == promotions
    assert _sample("clique_tag_deletions_total", "MOVIE") == deletions
    assert not CommunityTag.objects.exists()


# =========================================================
# threshold validation
# =========================================================

@pytest.mark.parametrize("threshold", [0, -5])
def test_threshold_below_one_is_rejected(threshold):
    with pytest.raises(ValueError):
        CommunityTagTracker(threshold=threshold)


def test_threshold_setting_below_one_is_rejected(movie_category, settings):
    settings.TAG_PROMOTION_THRESHOLD = 0

    with pytest.raises(ImproperlyConfigured):
        track_tag_usage("Cozy", movie_category)

    assert not CommunityTag.objects.exists()
