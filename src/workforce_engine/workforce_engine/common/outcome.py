from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class BulkError:
    key: Any
    message: str

    def to_dict(self) -> dict:
        return {"key": self.key, "message": self.message}


@dataclass
class BulkOutcome(Generic[T]):
    """Result of a bulk operation where every item runs in its own transaction."""

    items: List[T] = field(default_factory=list)
    errors: List[BulkError] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    def fail(self, key: Any, message: str) -> None:
        self.errors.append(BulkError(key=key, message=message))

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "items": [i.to_dict() if hasattr(i, "to_dict") else i for i in self.items],
            "errors": [e.to_dict() for e in self.errors],
        }
