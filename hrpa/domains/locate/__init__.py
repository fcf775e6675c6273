from hrpa.domains.locate.service import (
    DEFAULT_RESOLVER,
    ElementResolver,
    Match,
    SearchConditions,
    best_match,
    find_by_conditions,
    find_by_property,
    find_by_text,
    find_by_type,
    format_path,
    get_center,
    get_coordinates,
    levenshtein,
    text_score,
)

__all__ = [
    "DEFAULT_RESOLVER",
    "ElementResolver",
    "Match",
    "SearchConditions",
    "best_match",
    "find_by_conditions",
    "find_by_property",
    "find_by_text",
    "find_by_type",
    "format_path",
    "get_center",
    "get_coordinates",
    "levenshtein",
    "text_score",
]
