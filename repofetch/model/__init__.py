from .request import FetchRequest, GitHostKind

__all__ = ["FetchRequest", "GitHostKind"]
