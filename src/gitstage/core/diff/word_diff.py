# -----------------------------------------------------------------------------
# /*
#  * Copyright (C) 2025 GitStage
#  *
#  * This program is free software; you can redistribute it and/or modify
#  * it under the terms of the GNU General Public License as published by
#  * the Free Software Foundation; Version 2.
#  *
#  * This program is distributed in the hope that it will be useful,
#  * but WITHOUT ANY WARRANTY; without even the implied warranty of
#  * MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
#  * GNU General Public License for more details.
#  *
#  * You should have received a copy of the GNU General Public License
#  * along with this program; if not, see <https://www.gnu.org/licenses/>.
#  */
# -----------------------------------------------------------------------------

from collections.abc import Sequence
from difflib import SequenceMatcher

from gitstage.constants import DEFAULT_WORD_DIFF_THRESHOLD
from gitstage.core.data.diff import (
    DiffLine,
    DiffLineKind,
    ModificationPair,
    WordDiffSegment,
)

DEFAULT_SIMILARITY_THRESHOLD = DEFAULT_WORD_DIFF_THRESHOLD

# unchanged islands shorter than this, sitting next to a change, get folded
# into the changed run
MIN_UNCHANGED_RUN = 3


def _char_opcodes(a: str, b: str):
    return SequenceMatcher(None, a, b, autojunk=False).get_opcodes()


def similarity(a: str, b: str) -> float:
    """Share of characters the two strings have in common, in [0, 1]."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0

    equal = 0
    total = 0
    for tag, i1, i2, j1, j2 in _char_opcodes(a, b):
        if tag == "equal":
            equal += i2 - i1
            total += i2 - i1
        else:
            total += (i2 - i1) + (j2 - j1)

    return equal / total if total else 1.0


def _merge_segments(segments: list[WordDiffSegment]) -> tuple[WordDiffSegment, ...]:
    merged: list[WordDiffSegment] = []

    for i, segment in enumerate(segments):
        changed = segment.changed
        if not changed and len(segment.text) < MIN_UNCHANGED_RUN:
            prev_changed = i > 0 and segments[i - 1].changed
            next_changed = i + 1 < len(segments) and segments[i + 1].changed
            if prev_changed or next_changed:
                changed = True

        if merged and merged[-1].changed == changed:
            merged[-1] = WordDiffSegment(merged[-1].text + segment.text, changed)
        else:
            merged.append(WordDiffSegment(segment.text, changed))

    return tuple(merged)


def compute_word_diff(
    old_text: str, new_text: str
) -> tuple[tuple[WordDiffSegment, ...], tuple[WordDiffSegment, ...]]:
    """
    Intra-line diff of a deleted line against the line that replaced it.

    Returns (old_segments, new_segments). Joining the text of either side
    gives back the corresponding input exactly.
    """
    old_segments: list[WordDiffSegment] = []
    new_segments: list[WordDiffSegment] = []

    for tag, i1, i2, j1, j2 in _char_opcodes(old_text, new_text):
        if tag == "equal":
            old_segments.append(WordDiffSegment(old_text[i1:i2], False))
            new_segments.append(WordDiffSegment(new_text[j1:j2], False))
            continue
        if i2 > i1:
            old_segments.append(WordDiffSegment(old_text[i1:i2], True))
        if j2 > j1:
            new_segments.append(WordDiffSegment(new_text[j1:j2], True))

    return _merge_segments(old_segments), _merge_segments(new_segments)


def find_modification_pairs(
    lines: Sequence[DiffLine],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> dict[int, ModificationPair]:
    """
    Map line index -> ModificationPair for every deletion immediately
    followed by a similar enough addition. Both indices of a pair map to
    the same object.
    """
    pairs: dict[int, ModificationPair] = {}

    for i in range(len(lines) - 1):
        deletion, addition = lines[i], lines[i + 1]
        if deletion.kind != DiffLineKind.DELETION:
            continue
        if addition.kind != DiffLineKind.ADDITION:
            continue

        old_text, new_text = deletion.content, addition.content
        if similarity(old_text, new_text) < threshold:
            continue

        old_segments, new_segments = compute_word_diff(old_text, new_text)
        pair = ModificationPair(
            deletion_index=i,
            addition_index=i + 1,
            old_segments=old_segments,
            new_segments=new_segments,
        )
        pairs[i] = pair
        pairs[i + 1] = pair

    return pairs


class WordDiffEngine:
    """Word-level highlighting with a configured pairing threshold."""

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.threshold = threshold

    def similarity(self, a: str, b: str) -> float:
        return similarity(a, b)

    def compute_word_diff(self, old_text: str, new_text: str):
        return compute_word_diff(old_text, new_text)

    def find_modification_pairs(
        self, lines: Sequence[DiffLine]
    ) -> dict[int, ModificationPair]:
        return find_modification_pairs(lines, self.threshold)
