from tags.services import tag_service
from tags.services.registry import get_hardcoded_tags, normalize


def merge_tags(hardcoded, promoted) -> list[str]:
    """
    Hardcoded tags first (their casing wins), then promoted tags whose
    normalized form is not already present. Order is otherwise kept.
    """
    merged = {}
    for tag in hardcoded:
        merged.setdefault(normalize(tag), tag)
    for tag in promoted:
        merged.setdefault(normalize(tag), tag)
    return list(merged.values())


def get_tags_for_category(category, promoted=None) -> list[str]:
    """
    Tag vocabulary offered to clients for `category`.

    promoted=True  -> promoted community tags only
    promoted=False -> hardcoded tags only
    promoted=None  -> both, merged
    """
    if promoted is True:
        return tag_service.get_promoted_tags_for_category(category)

    hardcoded = get_hardcoded_tags(category.name)
    if promoted is False:
        return hardcoded

    return merge_tags(hardcoded, tag_service.get_promoted_tags_for_category(category))
