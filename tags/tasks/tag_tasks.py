import logging
from celery import shared_task

from recommendations.models import Category
from tags.services.tag_service import reconcile_promotions
from utils.locks import ResourceLock, ResourceLockedException

logger = logging.getLogger(__name__)


@shared_task
def reconcile_community_tags(category_id: int | None = None) -> int:
    """
    Periodic repair of is_promoted against the current threshold.
    Scheduled by celery beat (see CELERY_BEAT_SCHEDULE).
    """
    category = None
    if category_id is not None:
        try:
            category = Category.objects.get(id=category_id)
        except Category.DoesNotExist:
            logger.warning(f"Reconcile skipped: category={category_id} does not exist")
            return 0

    try:
        with ResourceLock("community-tags-reconcile", category_id or "all", timeout=600):
            return reconcile_promotions(category)
    except ResourceLockedException:
        logger.info(f"Reconcile already running for category={category_id or 'all'}")
        return 0
