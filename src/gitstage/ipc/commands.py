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

"""
Wire format of the control socket.

One JSON object per line in each direction. Requests carry an `action`
and its arguments; responses always carry `success` and, on failure,
`error`.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from gitstage.core.exceptions import IPCError


class _Command(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PingCommand(_Command):
    action: Literal["ping"]


class GetStateCommand(_Command):
    action: Literal["getState"]


class RefreshCommand(_Command):
    action: Literal["refresh"]


class StageCommand(_Command):
    action: Literal["stage"]


class UnstageCommand(_Command):
    action: Literal["unstage"]


class StageAllCommand(_Command):
    action: Literal["stageAll"]


class UnstageAllCommand(_Command):
    action: Literal["unstageAll"]


class ToggleCommand(_Command):
    action: Literal["toggle"]
    index: int | None = Field(None, ge=0)


class ToggleHunkCommand(_Command):
    action: Literal["toggleHunk"]
    hunk_index: int | None = Field(None, ge=0, alias="hunkIndex")


class CommitCommand(_Command):
    action: Literal["commit"]
    message: str
    amend: bool = False


class SelectCommand(_Command):
    action: Literal["select"]
    index: int = Field(ge=0)


class NavigateUpCommand(_Command):
    action: Literal["navigateUp"]


class NavigateDownCommand(_Command):
    action: Literal["navigateDown"]


class QuitCommand(_Command):
    action: Literal["quit"]


Command = Annotated[
    PingCommand
    | GetStateCommand
    | RefreshCommand
    | StageCommand
    | UnstageCommand
    | StageAllCommand
    | UnstageAllCommand
    | ToggleCommand
    | ToggleHunkCommand
    | CommitCommand
    | SelectCommand
    | NavigateUpCommand
    | NavigateDownCommand
    | QuitCommand,
    Field(discriminator="action"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)

ACTIONS = tuple(
    model.model_fields["action"].annotation.__args__[0]
    for model in _Command.__subclasses__()
)


def parse_command(line: str | bytes) -> Command:
    """Validate one request line. Raises IPCError with a client-facing message."""
    try:
        return _command_adapter.validate_json(line)
    except PydanticValidationError as e:
        error = e.errors()[0]
        match error["type"]:
            case "json_invalid" | "json_type":
                raise IPCError("Invalid JSON", str(e)) from e
            case "union_tag_invalid":
                tag = error.get("ctx", {}).get("tag", "")
                raise IPCError(f"Unknown action: {tag}", str(e)) from e
            case "union_tag_not_found" | "model_attributes_type" | "model_type" | "dict_type":
                raise IPCError("Missing action", str(e)) from e
            case _:
                location = ".".join(str(part) for part in error["loc"][1:])
                raise IPCError(f"Invalid {location}: {error['msg']}", str(e)) from e


def success(**payload) -> dict:
    return {"success": True, **payload}


def failure(message: str) -> dict:
    return {"success": False, "error": message}
