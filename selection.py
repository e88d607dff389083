# selection.py
from __future__ import annotations

from typing import Optional, Tuple

from models import AudioSource, Pattern, Selection, SpecialMode, is_special
from patterns import matches


class SelectionSet:
    """
    Current audio selection of one dialog session.

    The value is either a SpecialMode or a non-empty tuple of patterns in the
    order they were picked. An emptied tuple collapses back to SpecialMode.NONE.
    """

    def __init__(self, value: Optional[Selection] = None) -> None:
        self._value: Optional[Selection] = None
        if value is not None:
            self.replace(value)

    @property
    def value(self) -> Optional[Selection]:
        return self._value

    def replace(self, value: Selection) -> None:
        if not is_special(value):
            value = tuple(value)
            if not value:
                value = SpecialMode.NONE
        self._value = value

    def reset(self) -> None:
        self._value = SpecialMode.NONE

    def resolved(self) -> Selection:
        return SpecialMode.NONE if self._value is None else self._value

    def is_selected(self, candidate: AudioSource) -> bool:
        cur = self._value
        if not cur:
            return False
        if is_special(cur) or is_special(candidate):
            return cur == candidate
        return any(matches(entry, candidate) for entry in cur)

    def toggle(self, candidate: AudioSource) -> Selection:
        cur = self._value

        if is_special(candidate):
            self._value = candidate
        elif cur is None or is_special(cur):
            self._value = (candidate,)
        elif self.is_selected(candidate):
            kept = tuple(entry for entry in cur if not matches(entry, candidate))
            self._value = kept if kept else SpecialMode.NONE
        else:
            self._value = cur + (candidate,)

        return self._value

    def patterns(self) -> Tuple[Pattern, ...]:
        cur = self._value
        return () if cur is None or is_special(cur) else cur
