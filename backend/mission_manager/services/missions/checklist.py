"""
Checklist Model

A checklist is an ordered list of categories, each with ordered steps.
Completion is tracked per mission as {category: {step: done}}.

Rules:
- The checklist is fixed when the mission is created.
- Absent entries in a completion map mean "not done".
- merge_state is monotonic: a step that is done stays done.
"""
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ...models.domain import ChecklistItem, ChecklistState
from .errors import ValidationError


def build_checklist(selection: Mapping[str, Sequence[str]]) -> List[ChecklistItem]:
    """
    Convert a {category: steps} selection into checklist items.

    Category and step order follow the selection's insertion order.
    Categories with no steps are dropped.
    """
    checklist = []
    for category, steps in selection.items():
        steps = tuple(steps or ())
        if steps:
            checklist.append(ChecklistItem(category=category, steps=steps))
    return checklist


def parse_checklist(raw: Iterable[Any]) -> List[ChecklistItem]:
    """
    Read a checklist as sent over the wire ([{"category", "steps"}, ...]).

    Accepts ChecklistItem instances as-is. Raises ValidationError on
    entries without a category or with a non-list steps field.
    """
    checklist = []
    for entry in raw or []:
        if isinstance(entry, ChecklistItem):
            checklist.append(entry)
            continue
        if not isinstance(entry, Mapping) or not entry.get("category"):
            raise ValidationError("Checklist entries need a category")
        steps = entry.get("steps") or []
        if not isinstance(steps, (list, tuple)):
            raise ValidationError(f"Steps of checklist category '{entry['category']}' must be a list")
        checklist.append(ChecklistItem(category=entry["category"], steps=tuple(steps)))
    return checklist


def initialize_state(checklist: Iterable[ChecklistItem]) -> ChecklistState:
    """Every step of every category starts as not done."""
    return {item.category: {step: False for step in item.steps} for item in checklist}


def normalize_state(checklist: Iterable[ChecklistItem], state: Mapping[str, Mapping[str, Any]]) -> ChecklistState:
    """
    Project a completion map onto the checklist.

    The result has exactly one entry per checklist (category, step) pair;
    pairs missing from `state` are False.
    """
    state = state or {}
    normalized: ChecklistState = {}
    for item in checklist:
        done = state.get(item.category) or {}
        normalized[item.category] = {step: bool(done.get(step, False)) for step in item.steps}
    return normalized


def validate_state(checklist: Iterable[ChecklistItem], state: Mapping[str, Mapping[str, Any]]) -> None:
    """Raise ValidationError if `state` names a category or step the checklist lacks."""
    known = {item.category: set(item.steps) for item in checklist}
    unknown = []
    for category, steps in (state or {}).items():
        if not isinstance(steps, Mapping):
            raise ValidationError(f"Checklist state for '{category}' must be a mapping of step to bool")
        for step in steps:
            if step not in known.get(category, ()):
                unknown.append(f"{category}/{step}")
    if unknown:
        raise ValidationError(f"Unknown checklist steps: {', '.join(unknown)}")


def merge_state(base: Mapping[str, Mapping[str, bool]], incoming: Mapping[str, Mapping[str, bool]]) -> ChecklistState:
    """
    Merge a new reporter's completion map into the cumulative one.

    For every step in `incoming` marked True the result is True; every
    other step keeps its value from `base`. A step that is True in `base`
    is never set back to False. Neither input is modified.
    """
    merged: Dict[str, Dict[str, bool]] = {
        category: dict(steps) for category, steps in (base or {}).items()
    }
    for category, steps in (incoming or {}).items():
        target = merged.setdefault(category, {})
        for step, done in steps.items():
            if done is True:
                target[step] = True
    return merged
