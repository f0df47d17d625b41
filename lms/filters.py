from django.db.models import Q

ALL = "all"


def _active(value) -> bool:
    return value is not None and value != "" and value != ALL


def _contains(value, needle: str) -> bool:
    return needle in (value or "").lower()


def matches_search(rating: dict, search: str) -> bool:
    needle = search.lower()
    if rating.get("type") == "course":
        return _contains(rating.get("course"), needle) or _contains(rating.get("courseCode"), needle)
    lecturer = rating.get("lecturer") or {}
    if not isinstance(lecturer, dict):
        return False
    return _contains(lecturer.get("firstName"), needle) or _contains(lecturer.get("lastName"), needle)


def filter_ratings(ratings, search=None, type=None, semester=None):
    """Filter serialized ratings the way the admin ratings browser does.

    Each predicate is independent and is skipped when its value is empty,
    ``None`` or ``"all"``, so applying them in any order gives the same list.
    Always pass the full list, never a previously filtered one.
    """
    filtered = list(ratings)
    if _active(search):
        filtered = [r for r in filtered if matches_search(r, search)]
    if _active(type):
        filtered = [r for r in filtered if r.get("type") == type]
    if _active(semester):
        filtered = [r for r in filtered if r.get("semester") == semester]
    return filtered


def filter_rating_queryset(qs, search=None, type=None, semester=None):
    """Database-side counterpart of ``filter_ratings``."""
    if _active(search):
        qs = qs.filter(
            (Q(type="course") & (Q(course__icontains=search) | Q(course_code__icontains=search)))
            | (Q(type="lecturer") & (Q(lecturer__first_name__icontains=search) | Q(lecturer__last_name__icontains=search)))
        )
    if _active(type):
        qs = qs.filter(type=type)
    if _active(semester):
        qs = qs.filter(semester=semester)
    return qs
