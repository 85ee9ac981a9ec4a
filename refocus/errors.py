"""Exception types raised at Refocus collaborator seams."""


class RefocusError(Exception):
    """Base class for all Refocus errors."""


class ClassifierError(RefocusError):
    """An alignment classifier could not produce a verdict."""


class ActivitySourceError(RefocusError):
    """The activity source failed (missing permission, unreadable replay, ...)."""


__all__ = [
    "RefocusError",
    "ClassifierError",
    "ActivitySourceError",
]
