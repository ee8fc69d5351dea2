from prometheus_client import Counter

# Exposed through django_prometheus' /metrics endpoint (default registry)

tag_promotions_total = Counter(
    "clique_tag_promotions_total", "Community tags promoted", ["category"]
)

tag_demotions_total = Counter(
    "clique_tag_demotions_total", "Community tags demoted", ["category"]
)

tag_deletions_total = Counter(
    "clique_tag_deletions_total", "Community tags deleted at zero usage", ["category"]
)

tag_tracking_failures_total = Counter(
    "clique_tag_tracking_failures_total", "Per-tag tracking failures inside a batch", ["category", "action"]
)
