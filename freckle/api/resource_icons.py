"""Pattern-based icon names for resources and stats."""
import re

DEFAULT_ICON = "layout-list"

# Ordered; the first matching pattern wins
RESOURCE_ICON_PATTERNS = tuple(
    (re.compile(pattern, re.IGNORECASE), icon)
    for pattern, icon in (
        (r"user|account|member|people|profile", "users"),
        (r"content|post|article|story|page|document|blog", "file-text"),
        (r"analytic|stat|metric|report|insight", "bar-chart-3"),
        (r"config|setting|preference", "wrench"),
        (r"operation|task|job|queue|cron", "play"),
        (r"feedback|review|comment|rating", "message-square"),
        (r"draft|template", "scroll-text"),
        (r"credit|payment|billing|invoice|subscription", "credit-card"),
        (r"character|avatar|persona", "person-standing"),
        (r"usage|log|audit|event", "clipboard-list"),
        (r"trend|growth|chart", "trending-up"),
        (r"history|timeline|version", "history"),
        (r"webhook|hook|integration", "zap"),
        (r"notification|alert", "bell"),
        (r"media|image|photo|file|asset|upload", "image"),
        (r"tag|label|category", "tag"),
        (r"role|permission|access|auth", "shield"),
        (r"order|purchase|cart|shop", "shopping-cart"),
        (r"email|message|inbox|mail", "mail"),
    )
)


def get_resource_icon(name: str) -> str:
    """Get the icon name for a resource or stat name."""
    for pattern, icon in RESOURCE_ICON_PATTERNS:
        if pattern.search(name):
            return icon
    return DEFAULT_ICON
