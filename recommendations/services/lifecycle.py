import logging
from django.conf import settings
from django.db import transaction

from tags.services.registry import normalize
from tags.services.tag_service import decrement_multiple_tags, track_multiple_tags

logger = logging.getLogger(__name__)


# =========================================================
# TAG HELPERS
# =========================================================

def clean_tags(tags) -> list[str]:
    """
    Trim, drop blanks and keep the first spelling of tags that only
    differ by case, so one recommendation never counts a tag twice.
    """
    cleaned = []
    seen = set()
    for tag in tags:
        text = tag.strip()
        key = normalize(text)
        if not text or key in seen:
            continue
        seen.add(key)
        cleaned.append(text)
    return cleaned


def diff_tags(old_tags, new_tags) -> tuple[list[str], list[str]]:
    """
    Exact-string difference between two tag lists: (added, removed).
    Normalization is left to the tracker.
    """
    old_set = set(old_tags)
    new_set = set(new_tags)
    added = [t for t in new_tags if t not in old_set]
    removed = [t for t in old_tags if t not in new_set]
    return added, removed


# =========================================================
# LIFECYCLE HOOKS
# =========================================================

def on_recommendation_created(recommendation):
    """
    Best-effort: a tracking failure never fails the creation.
    """
    if not recommendation.tags:
        return None

    category = recommendation.entity.category
    try:
        with transaction.atomic():
            result = track_multiple_tags(recommendation.tags, category)
    except Exception:
        logger.exception(
            f"Tag tracking failed for new recommendation={recommendation.id}"
        )
        return None

    logger.info(
        f"Tags tracked: recommendation={recommendation.id} "
        f"category={category.name} tracked={len(result)} skipped={len(result.skipped)}"
    )
    return result


def on_recommendation_updated(recommendation, old_tags, new_tags):
    """
    Track added tags and decrement removed ones.

    Errors escaping the batch helpers propagate: the caller must fail
    the whole update.
    """
    added, removed = diff_tags(old_tags, new_tags)
    category = recommendation.entity.category

    if added:
        track_multiple_tags(added, category)
    if removed:
        decrement_multiple_tags(removed, category)

    if added or removed:
        logger.info(
            f"Tags updated: recommendation={recommendation.id} "
            f"category={category.name} added={added} removed={removed}"
        )
    return added, removed


def on_recommendation_deleted(recommendation):
    """
    Gives back the usage of the deleted recommendation's tags
    (TAG_DECREMENT_ON_DELETE). Never blocks the deletion.
    """
    if not settings.TAG_DECREMENT_ON_DELETE or not recommendation.tags:
        return None

    category = recommendation.entity.category
    try:
        with transaction.atomic():
            return decrement_multiple_tags(recommendation.tags, category)
    except Exception:
        logger.exception(
            f"Tag decrement failed for deleted recommendation={recommendation.id}"
        )
        return None
