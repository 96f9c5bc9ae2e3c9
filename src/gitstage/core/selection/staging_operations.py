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

from collections.abc import Callable

from loguru import logger

from gitstage.core.data.selection import SelectionAnchor
from gitstage.core.diff.hunk_patcher import extract_hunk_patch
from gitstage.core.selection.file_categories import (
    file_at_index,
    get_category_for_index,
)
from gitstage.core.state.git_state_manager import GitStateManager


class StagingOperations:
    """
    File and hunk staging driven by the current selection.

    Before each mutation that can move files between categories the
    current selection is captured as a SelectionAnchor. The owner consumes
    it once the refreshed status arrives and turns it back into an index.
    """

    def __init__(
        self,
        get_manager: Callable[[], GitStateManager | None],
        get_selected_index: Callable[[], int],
        get_selected_hunk_index: Callable[[], int] = lambda: 0,
    ) -> None:
        self.get_manager = get_manager
        self.get_selected_index = get_selected_index
        self.get_selected_hunk_index = get_selected_hunk_index
        self._pending_anchor: SelectionAnchor | None = None
        self._pending_hunk_index: int | None = None

    # anchors are handed out exactly once

    def consume_pending_anchor(self) -> SelectionAnchor | None:
        anchor, self._pending_anchor = self._pending_anchor, None
        return anchor

    def consume_pending_hunk_index(self) -> int | None:
        index, self._pending_hunk_index = self._pending_hunk_index, None
        return index

    @property
    def has_pending_anchor(self) -> bool:
        return self._pending_anchor is not None

    def _files(self, manager: GitStateManager):
        status = manager.state.status
        return status.files if status is not None else ()

    def _capture_anchor(self, manager: GitStateManager) -> None:
        self._pending_anchor = get_category_for_index(
            self._files(manager), self.get_selected_index()
        )

    async def stage_selected(self) -> bool:
        manager = self.get_manager()
        if manager is None:
            return False
        entry = file_at_index(self._files(manager), self.get_selected_index())
        if entry is None or entry.staged:
            return False
        self._capture_anchor(manager)
        return await manager.stage(entry)

    async def unstage_selected(self) -> bool:
        manager = self.get_manager()
        if manager is None:
            return False
        entry = file_at_index(self._files(manager), self.get_selected_index())
        if entry is None or not entry.staged:
            return False
        self._capture_anchor(manager)
        return await manager.unstage(entry)

    async def toggle_selected(self) -> bool:
        return await self.toggle_file_by_index(self.get_selected_index())

    async def toggle_file_by_index(self, index: int) -> bool:
        manager = self.get_manager()
        if manager is None:
            return False
        entry = file_at_index(self._files(manager), index)
        if entry is None:
            return False
        # the anchor follows the highlighted row, not necessarily `index`
        self._capture_anchor(manager)
        if entry.staged:
            return await manager.unstage(entry)
        return await manager.stage(entry)

    async def stage_all(self) -> bool:
        manager = self.get_manager()
        if manager is None:
            return False
        self._capture_anchor(manager)
        return await manager.stage_all()

    async def unstage_all(self) -> bool:
        manager = self.get_manager()
        if manager is None:
            return False
        self._capture_anchor(manager)
        return await manager.unstage_all()

    async def toggle_current_hunk(self) -> bool:
        """
        Stage or unstage the highlighted hunk of the selected file.

        Untracked files have no index entry to patch against, so the whole
        file is staged instead.
        """
        manager = self.get_manager()
        if manager is None:
            return False
        state = manager.state
        selected = state.selected_file
        if selected is None:
            return False

        if selected.is_untracked:
            self._capture_anchor(manager)
            self._pending_hunk_index = self.get_selected_hunk_index()
            return await manager.stage(selected)

        if state.diff is None or not state.diff.raw:
            return False

        hunk_index = self.get_selected_hunk_index()
        patch = extract_hunk_patch(state.diff.raw, hunk_index)
        if patch is None:
            logger.debug(f"No hunk {hunk_index} in diff of {selected.path}")
            return False

        self._capture_anchor(manager)
        self._pending_hunk_index = hunk_index
        if selected.staged:
            return await manager.unstage_hunk(patch)
        return await manager.stage_hunk(patch)
