# tags/services/tag_service.py
import logging
from dataclasses import dataclass, field
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, transaction

from tags import metrics
from tags.models import CommunityTag
from tags.services.registry import HARDCODED_TAGS, is_hardcoded_tag, normalize

logger = logging.getLogger(__name__)


# =========================================================
# RESULT TYPES
# =========================================================

class SkipReason:
    HARDCODED = "hardcoded"
    NOT_TRACKED = "not_tracked"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass(frozen=True)
class SkippedTag:
    tag: str
    reason: str
    error: str | None = None


@dataclass
class TagBatchResult:
    """
    Outcome of a batch update.

    Iterating (and len()) covers the CommunityTag records that are still
    tracked after the update; everything else lands in `skipped` with
    the reason it produced no record.
    """
    tracked: list = field(default_factory=list)
    skipped: list = field(default_factory=list)

    def __iter__(self):
        return iter(self.tracked)

    def __len__(self):
        return len(self.tracked)

    @property
    def failed(self) -> list:
        return [s for s in self.skipped if s.reason == SkipReason.FAILED]


# =========================================================
# TRACKER
# =========================================================

class CommunityTagTracker:
    """
    Usage counters for community tags, one per (normalized tag, category).

    TRACKED  -> usage_count in [1, threshold - 1], is_promoted = False
    PROMOTED -> usage_count >= threshold,          is_promoted = True
    A counter reaching zero is deleted.
    """

    def __init__(self, threshold: int | None = None, registry: dict | None = None):
        if threshold is not None and threshold < 1:
            raise ValueError(f"threshold must be at least 1, got {threshold}")
        self._threshold = threshold
        self.registry = HARDCODED_TAGS if registry is None else registry

    @property
    def threshold(self) -> int:
        if self._threshold is not None:
            return self._threshold
        threshold = settings.TAG_PROMOTION_THRESHOLD
        if threshold < 1:
            raise ImproperlyConfigured(
                f"TAG_PROMOTION_THRESHOLD must be at least 1, got {threshold}"
            )
        return threshold

    def is_hardcoded(self, tag: str, category) -> bool:
        return is_hardcoded_tag(category.name, tag, registry=self.registry)

    # ------------------------------------------------------------------
    # single tag
    # ------------------------------------------------------------------

    def track_tag_usage(self, tag: str, category) -> CommunityTag | None:
        """
        Count one more use of `tag` in `category`.

        Returns the updated record, or None for hardcoded tags.
        Database errors propagate.
        """
        community_tag, _ = self._track(tag, category)
        return community_tag

    def decrement_tag_usage(self, tag: str, category) -> CommunityTag | None:
        """
        Count one use less. Returns None when the tag is hardcoded,
        not tracked, or was deleted because its count reached zero.
        Database errors propagate.
        """
        community_tag, _ = self._decrement(tag, category)
        return community_tag

    def _track(self, tag: str, category):
        text = tag.strip()
        if not text:
            return None, SkipReason.NOT_TRACKED
        if self.is_hardcoded(text, category):
            return None, SkipReason.HARDCODED

        with transaction.atomic():
            # Row lock: concurrent requests on the same tag queue up here,
            # so the promotion decision below sees the committed count.
            community_tag, created = (
                CommunityTag.objects
                .select_for_update()
                .get_or_create(
                    normalized_tag=normalize(text),
                    category=category,
                    defaults={
                        "tag": text,
                        "usage_count": 1,
                        "is_promoted": False,
                    },
                )
            )

            if not created:
                community_tag.usage_count += 1

            transition = self._recompute_promotion(community_tag)

            if not created or transition:
                community_tag.save(update_fields=["usage_count", "is_promoted", "updated_at"])

            self._report_transition(community_tag, category, transition)

        return community_tag, None

    def _decrement(self, tag: str, category):
        text = tag.strip()
        if not text:
            return None, SkipReason.NOT_TRACKED
        if self.is_hardcoded(text, category):
            return None, SkipReason.HARDCODED

        with transaction.atomic():
            community_tag = (
                CommunityTag.objects
                .select_for_update()
                .filter(normalized_tag=normalize(text), category=category)
                .first()
            )

            if community_tag is None:
                return None, SkipReason.NOT_TRACKED

            community_tag.usage_count -= 1

            if community_tag.usage_count <= 0:
                community_tag.delete()
                transaction.on_commit(lambda: self._report_deletion(text, category))
                return None, SkipReason.DELETED

            transition = self._recompute_promotion(community_tag)
            community_tag.save(update_fields=["usage_count", "is_promoted", "updated_at"])

            self._report_transition(community_tag, category, transition)

        return community_tag, None

    def _recompute_promotion(self, community_tag) -> str | None:
        should_promote = community_tag.usage_count >= self.threshold
        if should_promote == community_tag.is_promoted:
            return None
        community_tag.is_promoted = should_promote
        return "promoted" if should_promote else "demoted"

    def _report_transition(self, community_tag, category, transition):
        """Metrics and log for a state change, once the change is committed."""
        if transition is None:
            return
        tag, usage_count = community_tag.tag, community_tag.usage_count
        transaction.on_commit(
            lambda: self._emit_transition(tag, usage_count, category, transition)
        )

    def _report_deletion(self, text, category):
        metrics.tag_deletions_total.labels(category=category.name).inc()
        logger.info(f"Community tag removed: '{text}' ({category.name}) reached zero usage")

    def _emit_transition(self, tag, usage_count, category, transition):
        category_name = category.name
        if transition == "promoted":
            metrics.tag_promotions_total.labels(category=category_name).inc()
            logger.info(
                f"Tag promoted: '{tag}' ({category_name}) "
                f"usage={usage_count}"
            )
        else:
            metrics.tag_demotions_total.labels(category=category_name).inc()
            logger.info(
                f"Tag demoted: '{tag}' ({category_name}) "
                f"usage={usage_count}"
            )

    # ------------------------------------------------------------------
    # batches
    # ------------------------------------------------------------------

    def track_multiple_tags(self, tags, category) -> TagBatchResult:
        return self._run_batch(self._track, tags, category, action="track")

    def decrement_multiple_tags(self, tags, category) -> TagBatchResult:
        return self._run_batch(self._decrement, tags, category, action="decrement")

    def _run_batch(self, operation, tags, category, action: str) -> TagBatchResult:
        """
        Every tag is its own unit of work: an error on one tag is logged
        and recorded, the remaining tags are still processed.
        """
        category_name = category.name
        result = TagBatchResult()

        # One tag at a time: Django database connections are per thread.
        for tag in list(tags):
            try:
                community_tag, reason = operation(tag, category)
            except Exception as e:
                logger.exception(f"Failed to {action} tag '{tag}' ({category_name})")
                metrics.tag_tracking_failures_total.labels(
                    category=category_name, action=action
                ).inc()
                result.skipped.append(SkippedTag(tag, SkipReason.FAILED, str(e)))
                continue

            if community_tag is None:
                result.skipped.append(SkippedTag(tag, reason))
            else:
                result.tracked.append(community_tag)

        if result.failed:
            logger.warning(
                f"Tag batch {action} ({category_name}): "
                f"{len(result.tracked)} tracked, {len(result.failed)} failed"
            )
        return result

    # ------------------------------------------------------------------
    # read path
    # ------------------------------------------------------------------

    def get_promoted_tags_for_category(self, category) -> list[str]:
        """Promoted tag texts, most used first. Empty list if the lookup fails."""
        try:
            return list(
                CommunityTag.objects.promoted(category).values_list("tag", flat=True)
            )
        except DatabaseError:
            logger.exception(f"Error fetching promoted tags for category={category.pk}")
            return []

    def get_tag_usage_stats(self, category, limit: int = 10) -> list[dict]:
        try:
            return list(
                CommunityTag.objects.top_usage(category, limit=limit).values(
                    "tag", "usage_count", "is_promoted", "created_at"
                )
            )
        except DatabaseError:
            logger.exception(f"Error fetching tag usage stats for category={category.pk}")
            return []

    # ------------------------------------------------------------------
    # maintenance
    # ------------------------------------------------------------------

    @transaction.atomic
    def reconcile_promotions(self, category=None) -> int:
        """
        Re-apply the promotion rule to every stored counter, e.g. after
        TAG_PROMOTION_THRESHOLD changed. Returns the number of rows touched.
        """
        qs = CommunityTag.objects.all()
        if category is not None:
            qs = qs.filter(category=category)

        deleted, _ = qs.filter(usage_count__lte=0).delete()
        promoted = qs.filter(
            usage_count__gte=self.threshold, is_promoted=False
        ).update(is_promoted=True)
        demoted = qs.filter(
            usage_count__lt=self.threshold, is_promoted=True
        ).update(is_promoted=False)

        logger.info(
            f"Community tags reconciled (threshold={self.threshold}): "
            f"promoted={promoted} demoted={demoted} deleted={deleted}"
        )
        return promoted + demoted + deleted


# =========================================================
# MODULE-LEVEL API
# =========================================================

default_tracker = CommunityTagTracker()


def track_tag_usage(tag: str, category) -> CommunityTag | None:
    return default_tracker.track_tag_usage(tag, category)


def decrement_tag_usage(tag: str, category) -> CommunityTag | None:
    return default_tracker.decrement_tag_usage(tag, category)


def track_multiple_tags(tags, category) -> TagBatchResult:
    return default_tracker.track_multiple_tags(tags, category)


def decrement_multiple_tags(tags, category) -> TagBatchResult:
    return default_tracker.decrement_multiple_tags(tags, category)


def get_promoted_tags_for_category(category) -> list[str]:
    return default_tracker.get_promoted_tags_for_category(category)


def get_tag_usage_stats(category, limit: int = 10) -> list[dict]:
    return default_tracker.get_tag_usage_stats(category, limit=limit)


def reconcile_promotions(category=None) -> int:
    return default_tracker.reconcile_promotions(category)
