"""
Repository Catalog Configuration
Static option lists offered when creating and browsing prompt repositories.
Served to the frontend through GET /catalog and used for request validation.
"""

# Licenses a repository can be published under (value -> display label)
LICENSES = {
    "mit": "MIT License",
    "apache-2.0": "Apache License 2.0",
    "gpl-3.0": "GNU General Public License v3.0",
    "bsd-3-clause": "BSD 3-Clause License",
    "unlicense": "The Unlicense",
}

DEFAULT_LICENSE = "mit"

# Repository categories (display labels; stored as slugs)
CATEGORIES = [
    "Copywriting",
    "Development",
    "Marketing",
    "Content Creation",
    "Data Analysis",
    "Automation",
    "Customer Support",
    "Sales",
    "Education",
    "Research",
    "Creative Writing",
]

DEFAULT_CATEGORY = "general"

# Sort keys accepted by repository search
SORT_OPTIONS = {
    "relevance": "Best Match",
    "stars": "Most Stars",
    "forks": "Most Forks",
    "updated": "Recently Updated",
    "created": "Newest",
}

MAX_TAGS = 8


def slugify_category(label: str) -> str:
    """'Content Creation' -> 'content-creation'"""
    return "-".join(label.strip().lower().split())


def license_label(value: str) -> str:
    """Map a license slug to its display label; unknown values pass through, empty falls back to MIT."""
    if not value:
        return LICENSES[DEFAULT_LICENSE]
    return LICENSES.get(value.strip().lower(), value)


def get_catalog():
    """
    Returns the option lists in the shape the frontend renders:
    {
        "licenses": [{"value": "mit", "label": "MIT License"}, ...],
        "categories": [{"value": "copywriting", "label": "Copywriting"}, ...],
        "sort_options": [{"value": "relevance", "label": "Best Match"}, ...],
        "max_tags": 8
    }
    """
    return {
        "licenses": [{"value": k, "label": v} for k, v in LICENSES.items()],
        "categories": [{"value": slugify_category(c), "label": c} for c in CATEGORIES],
        "sort_options": [{"value": k, "label": v} for k, v in SORT_OPTIONS.items()],
        "max_tags": MAX_TAGS,
    }
