# src/todoist_recent/core/label_editor.py

from __future__ import annotations

from collections.abc import Sequence

from .models import RECENTLY_CREATED_LABEL, RECENTLY_UPDATED_LABEL, RecencyDecision


def apply_label(current: Sequence[str], name: str, present: bool) -> list[str]:
    """
    Return a new label list with `name` present or absent.

    Positional edit, not a set rebuild, so the visible diff stays minimal:
    - present and missing -> appended once at the end
    - absent and found    -> first occurrence removed
    - otherwise           -> an equal copy of `current`

    Unrelated labels keep their order. A name that already occurs (even more than
    once, in anomalous source data) is never appended again.
    """
    out = list(current)
    if present:
        if name not in out:
            out.append(name)
    elif name in out:
        del out[out.index(name)]
    return out


def apply_decision(
    current: Sequence[str],
    decision: RecencyDecision,
    *,
    created_name: str = RECENTLY_CREATED_LABEL,
    updated_name: str = RECENTLY_UPDATED_LABEL,
) -> list[str]:
    out = apply_label(current, created_name, decision.want_created)
    return apply_label(out, updated_name, decision.want_updated)


def labels_changed(old: Sequence[str], new: Sequence[str]) -> bool:
    """Order-insensitive comparison; False means the write would be a no-op."""
    return sorted(old) != sorted(new)
