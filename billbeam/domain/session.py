"""In-memory state of one bill-splitting session."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from billbeam.domain.assignment import (
    SplitMode,
    apply_split_mode,
    prune_assignments,
    remove_person,
    toggle_assignment,
)
from billbeam.domain.bill import Bill, Person, color_for_index, new_id
from billbeam.domain.phase import Phase, check_transition


@dataclass
class SplitSession:
    """Owns the phase, the bill and the roster for one user on one device."""

    id: str = field(default_factory=new_id)
    phase: Phase = "capture"
    bill: Bill | None = None
    people: list[Person] = field(default_factory=list)
    # Counts every person ever added, so colors are not reused after removals
    people_added: int = 0
    saved_receipt_id: str | None = None

    def add_person(self, name: str) -> Person:
        if not name or not name.strip():
            raise ValueError("Person name must not be empty")
        person = Person(id=new_id(), name=name, color=color_for_index(self.people_added))
        self.people.append(person)
        self.people_added += 1
        return person

    def remove_person(self, person_id: str) -> None:
        remove_person(self.bill, self.people, person_id)

    def toggle_assignment(self, item_id: str, person_id: str) -> None:
        """Toggle a roster member on an item. Unknown ids are ignored."""
        if self.bill is None or not any(person.id == person_id for person in self.people):
            return
        toggle_assignment(self.bill, item_id, person_id)

    def accept_bill(self, bill: Bill) -> None:
        """Take a freshly captured bill and move on to assignment."""
        check_transition(self.phase, "assignment", has_bill=True, people_count=len(self.people))
        self.bill = bill
        self.saved_receipt_id = None
        prune_assignments(bill, self.people)
        self.phase = "assignment"

    def set_split_mode(self, mode: SplitMode) -> None:
        if self.bill is None:
            return
        apply_split_mode(self.bill, self.people, mode)

    def move_to(self, target: Phase) -> None:
        check_transition(self.phase, target, has_bill=self.bill is not None, people_count=len(self.people))
        self.phase = target

    def reset(self) -> None:
        self.phase = "capture"
        self.bill = None
        self.people = []
        self.people_added = 0
        self.saved_receipt_id = None

    def replace_roster(self, people: Sequence[Person]) -> None:
        """Swap in a saved roster (e.g. a group) and drop stale assignments."""
        self.people = [Person(id=p.id, name=p.name, color=p.color) for p in people]
        self.people_added = max(self.people_added, len(self.people))
        if self.bill is not None:
            prune_assignments(self.bill, self.people)

    def load(self, bill: Bill, people: Sequence[Person], receipt_id: str | None = None) -> None:
        """Replace bill and roster wholesale with a saved receipt."""
        self.bill = bill
        self.people = list(people)
        self.people_added = len(self.people)
        prune_assignments(bill, self.people)
        self.saved_receipt_id = receipt_id
        self.phase = "assignment"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "phase": self.phase,
            "receipt": self.bill.to_dict() if self.bill is not None else None,
            "people": [person.to_dict() for person in self.people],
            "savedReceiptId": self.saved_receipt_id,
        }
