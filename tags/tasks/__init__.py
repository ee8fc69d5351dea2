from .tag_tasks import reconcile_community_tags

__all__ = ["reconcile_community_tags"]
