"""Review data models."""

from dataclasses import dataclass, field
from datetime import datetime

MAX_REVIEW_TITLE_LENGTH = 100
MAX_REVIEW_BODY_LENGTH = 2000


@dataclass(frozen=True)
class PointList:
    """Ordered list of free-text review points.

    Every operation returns a new list; the instance itself never changes.
    A fresh list starts with one blank entry so a form always has a row to edit.
    """
    items: tuple[str, ...] = ("",)

    def add(self, text: str = "") -> "PointList":
        """Append an entry at the end."""
        return PointList(self.items + (text,))

    def set(self, index: int, text: str) -> "PointList":
        """Replace the entry at ``index``."""
        if not 0 <= index < len(self.items):
            raise IndexError(f"point index out of range: {index}")
        return PointList(self.items[:index] + (text,) + self.items[index + 1:])

    def remove(self, index: int) -> "PointList":
        """Remove the entry at ``index``, keeping at least one entry."""
        if len(self.items) <= 1:
            return self
        if not 0 <= index < len(self.items):
            raise IndexError(f"point index out of range: {index}")
        return PointList(self.items[:index] + self.items[index + 1:])

    def cleaned(self) -> list[str]:
        """Entries that are non-empty after trimming, in order."""
        return [item.strip() for item in self.items if item.strip()]

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Review:
    """A review written for one game of the library."""
    id: str
    game_id: str
    title: str
    body: str
    rating: int  # 1-5
    reviewed_at: datetime
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    hours_played: float = 0.0
    recommended: bool = True
    game_title: str | None = None  # Present when the server populates the game reference


@dataclass(frozen=True)
class ReviewDraft:
    """Editable review fields submitted to the API on create/update."""
    game_id: str
    title: str
    body: str
    rating: int
    pros: PointList = field(default_factory=PointList)
    cons: PointList = field(default_factory=PointList)
    hours_played: float = 0.0
    recommended: bool = True
