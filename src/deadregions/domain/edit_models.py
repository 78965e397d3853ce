from __future__ import annotations

"""
Text Edit Domain Models.

Defines the replacement unit computed by the region remover and applied
in a single batch against the original document text.
"""

from dataclasses import dataclass
from typing import Tuple

# -----------------------------------------------------------------------------
# EDIT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TextEdit:
    """
    Replacement of the half-open span [start, end) by new_text.

    Attributes:
        start: Inclusive start offset in the original text.
        end: Exclusive end offset in the original text.
        new_text: Replacement text (empty for a deletion).
    """
    start: int
    end: int
    new_text: str = ""

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.end, self.start)


class EditApplicationError(ValueError):
    """Raised when a batch of edits cannot be applied to a text as a whole."""
