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

from gitstage.core.data.diff import WordDiffSegment
from gitstage.core.diff.diff_parser import parse_diff
from gitstage.core.diff.word_diff import (
    WordDiffEngine,
    compute_word_diff,
    find_modification_pairs,
    similarity,
)


def test_similarity_bounds():
    assert similarity("abc", "abc") == 1.0
    assert similarity("", "") == 1.0
    assert similarity("abc", "") == 0.0
    assert similarity("abc", "xyz") == 0.0
    assert 0.0 < similarity("hello world", "hello there") < 1.0


def test_compute_word_diff_marks_changed_run():
    old, new = compute_word_diff("timeout = 10", "timeout = 20")

    # the trailing "0" is too short to stand alone next to the change
    assert old == (WordDiffSegment("timeout = ", False), WordDiffSegment("10", True))
    assert new == (WordDiffSegment("timeout = ", False), WordDiffSegment("20", True))


def test_segments_rebuild_both_inputs():
    pairs = [
        ("return a + b", "return a - b"),
        ("def load(path):", "def load(path, strict=False):"),
        ("", "something"),
        ("x", "y"),
    ]
    for old_text, new_text in pairs:
        old, new = compute_word_diff(old_text, new_text)
        assert "".join(s.text for s in old) == old_text
        assert "".join(s.text for s in new) == new_text


def test_adjacent_segments_are_merged():
    old, new = compute_word_diff("value = compute(a)", "value = compute(b)")
    for side in (old, new):
        for left, right in zip(side, side[1:]):
            assert left.changed != right.changed


def _lines(body: str):
    return parse_diff("@@ -1,2 +1,2 @@\n" + body).lines


def test_pairs_similar_deletion_and_addition():
    lines = _lines("-print('hello')\n+print('hello world')\n")
    pairs = find_modification_pairs(lines)

    assert set(pairs) == {1, 2}
    assert pairs[1] is pairs[2]
    assert pairs[1].deletion_index == 1
    assert pairs[1].addition_index == 2


def test_dissimilar_lines_are_not_paired():
    lines = _lines("-import os\n+zzzzzzzzzzzzzzzzz\n")
    assert find_modification_pairs(lines) == {}


def test_only_adjacent_deletion_addition_pairs():
    lines = _lines("-value = 1\n context\n+value = 2\n")
    assert find_modification_pairs(lines) == {}


def test_engine_threshold_is_configurable():
    lines = _lines("-hello world\n+hello there\n")

    assert WordDiffEngine(threshold=0.0).find_modification_pairs(lines)
    assert WordDiffEngine(threshold=0.99).find_modification_pairs(lines) == {}
