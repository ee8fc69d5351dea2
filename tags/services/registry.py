# tags/services/registry.py

# =========================================================
# HARDCODED TAG REGISTRY
#
# Curated suggestions that are always offered for a category.
# They are never counted: community tracking skips any tag
# that matches one of these after normalization.
#
# Categories without an entry (FASHION, HOUSEHOLD, OTHER) only
# get promoted community tags.
# =========================================================

MOVIE_TAG_SUGGESTIONS = (
    "Great cinematography",
    "Compelling story",
    "Excellent acting",
    "Outstanding soundtrack",
    "Emotional",
    "Mind-bending",
    "Entertaining",
    "Thought-provoking",
    "Stunning visuals",
    "Great direction",
    "Perfect casting",
    "Great adaptation",
    "Great pacing",
    "Excellent dialogue",
    "Original score",
    "Cinematic art",
    "Action-packed",
    "Suspenseful",
    "Comedy gold",
    "Inspiring",
)

RESTAURANT_TAG_SUGGESTIONS = (
    "Great ambiance",
    "Excellent service",
    "Authentic cuisine",
    "Good for dates",
    "Family friendly",
    "Best brunch",
    "Fast delivery",
    "Cozy atmosphere",
    "Outdoor seating",
    "Great cocktails",
    "Affordable prices",
    "Generous portions",
    "Fresh ingredients",
    "Vegan options",
    "Late night spot",
    "Perfect for groups",
    "Quick service",
    "Beautiful presentation",
    "Live music",
    "Hidden gem",
)

# Category name -> curated list
HARDCODED_TAGS = {
    "MOVIE": MOVIE_TAG_SUGGESTIONS,
    "RESTAURANT": RESTAURANT_TAG_SUGGESTIONS,
}


def normalize(tag: str) -> str:
    """Identity key for a tag: trimmed and lowercased."""
    return tag.strip().lower()


def get_hardcoded_tags(category_name: str, registry=None) -> list[str]:
    registry = HARDCODED_TAGS if registry is None else registry
    return list(registry.get(category_name, ()))


def is_hardcoded_tag(category_name: str, tag: str, registry=None) -> bool:
    """
    True if the tag matches a curated tag of the category,
    ignoring case and surrounding whitespace.
    """
    normalized = normalize(tag)
    return any(
        normalize(t) == normalized
        for t in get_hardcoded_tags(category_name, registry=registry)
    )
