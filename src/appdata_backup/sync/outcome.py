"""Per-run outcome tracking."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class ItemStatus(str, Enum):
    """Result of transferring one item."""
    OK = "ok"
    SKIPPED = "skip"
    ERROR = "error"
    MISSING = "missing"


@dataclass
class ItemOutcome:
    """Outcome of a single item transfer."""
    category: str
    item: str
    status: ItemStatus
    source: Optional[Path] = None
    destination: Optional[Path] = None
    detail: str = ""


@dataclass
class RunOutcome:
    """Counters and item outcomes of one backup or restore run."""
    direction: str
    root: Optional[Path] = None
    simulated: bool = False
    copied: int = 0
    skipped: int = 0
    errored: int = 0
    missing: int = 0
    items: List[ItemOutcome] = field(default_factory=list)

    def record(self, outcome: ItemOutcome) -> ItemOutcome:
        """Add an item outcome and bump the matching counter."""
        self.items.append(outcome)
        if outcome.status == ItemStatus.OK:
            self.copied += 1
        elif outcome.status == ItemStatus.SKIPPED:
            self.skipped += 1
        elif outcome.status == ItemStatus.ERROR:
            self.errored += 1
        else:
            self.missing += 1
        return outcome

    def merge(self, other: "RunOutcome") -> "RunOutcome":
        """Fold another outcome's items into this one."""
        for outcome in other.items:
            self.record(outcome)
        return self

    @property
    def has_errors(self) -> bool:
        return self.errored > 0

    def for_category(self, key: str) -> List[ItemOutcome]:
        return [outcome for outcome in self.items if outcome.category == key]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['root'] = str(self.root) if self.root else None
        data['items'] = [
            {**asdict(o), 'status': o.status.value,
             'source': str(o.source) if o.source else None,
             'destination': str(o.destination) if o.destination else None}
            for o in self.items
        ]
        return data
