"""
PTBlock - the editable, ordered command list behind the PTB builder.

A command's position is its index in the block and is recomputed whenever it is
needed. Removing or moving a command therefore never rewrites Result references;
the validator re-checks them against the new ordering instead.
"""

import logging
import re
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .exceptions import CommandUpdateError
from .models import (
    Argument, Command, CommandType, MoveCallCommand, TransferObjectsCommand,
    SplitCoinsCommand, MergeCoinsCommand, MakeMoveVecCommand, PublishCommand,
)
from .templates import PTBTemplate


logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r'^cmd-(\d+)$')


class PTBlock:
    """Ordered sequence of commands plus the counter used to mint command ids."""

    ID_PREFIX = "cmd-"

    def __init__(self, commands: Optional[Sequence[Command]] = None):
        self._commands: List[Command] = list(commands or [])
        self._next_id = self._initial_next_id(self._commands)

    @staticmethod
    def _initial_next_id(commands: Sequence[Command]) -> int:
        # Template ids may have gaps after removals; never reissue one.
        highest = len(commands)
        for command in commands:
            match = _ID_PATTERN.match(command.id)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest + 1

    def _mint_id(self) -> str:
        command_id = f"{self.ID_PREFIX}{self._next_id}"
        self._next_id += 1
        return command_id

    def _append(self, command: Command) -> Command:
        self._commands.append(command)
        logger.debug("Added %s command %s at position %d",
                     command.type_name, command.id, len(self._commands) - 1)
        return command

    # =========================================================================
    # ADDING COMMANDS
    # =========================================================================

    def add_move_call(self, target: str, arguments: Sequence[Argument] = (),
                      type_arguments: Sequence[str] = ()) -> MoveCallCommand:
        """Append a MoveCall command and return it."""
        command = MoveCallCommand(
            id=self._mint_id(),
            target=target,
            arguments=arguments,
            type_arguments=tuple(type_arguments or ()) or None,
        )
        return self._append(command)

    def add_transfer_objects(self, objects: Sequence[Argument],
                             recipient: Argument) -> TransferObjectsCommand:
        """Append a TransferObjects command and return it."""
        return self._append(TransferObjectsCommand(id=self._mint_id(), objects=objects,
                                                   recipient=recipient))

    def add_split_coins(self, coin: Argument, amounts: Sequence[Argument]) -> SplitCoinsCommand:
        """Append a SplitCoins command and return it."""
        return self._append(SplitCoinsCommand(id=self._mint_id(), coin=coin, amounts=amounts))

    def add_merge_coins(self, destination: Argument,
                        sources: Sequence[Argument]) -> MergeCoinsCommand:
        """Append a MergeCoins command and return it."""
        return self._append(MergeCoinsCommand(id=self._mint_id(), destination=destination,
                                              sources=sources))

    def add_make_move_vec(self, element_type: str,
                          objects: Sequence[Argument]) -> MakeMoveVecCommand:
        """Append a MakeMoveVec command and return it."""
        return self._append(MakeMoveVecCommand(id=self._mint_id(), element_type=element_type,
                                               objects=objects))

    def add_publish(self, modules: Sequence[str],
                    dependencies: Sequence[str] = ()) -> PublishCommand:
        """Append a Publish command and return it."""
        return self._append(PublishCommand(id=self._mint_id(), modules=modules,
                                           dependencies=dependencies))

    # =========================================================================
    # COMMAND MANAGEMENT
    # =========================================================================

    def remove(self, command_id: str) -> bool:
        """Remove a command. Later commands shift down one position."""
        index = self.get_command_index(command_id)
        if index < 0:
            return False
        del self._commands[index]
        logger.debug("Removed command %s from position %d", command_id, index)
        return True

    def move(self, from_index: int, to_index: int) -> bool:
        """Relocate a command. Out-of-bounds indexes leave the block untouched."""
        size = len(self._commands)
        if not (0 <= from_index < size and 0 <= to_index < size):
            return False
        command = self._commands.pop(from_index)
        self._commands.insert(to_index, command)
        logger.debug("Moved command %s from %d to %d", command.id, from_index, to_index)
        return True

    def update(self, command_id: str, **changes: Any) -> Optional[Command]:
        """Merge new field values into a command, keeping its position.

        Returns the updated command, or None when no command has that id.
        Raises CommandUpdateError if the change would alter the variant or id,
        names a field the variant does not have, or carries a badly typed value.
        """
        index = self.get_command_index(command_id)
        if index < 0:
            return None

        current = self._commands[index]
        changes = dict(changes)

        new_type = changes.pop('type', None)
        if new_type is not None:
            if isinstance(new_type, CommandType):
                new_type = new_type.value
            if new_type != current.type_name:
                raise CommandUpdateError(
                    f"Cannot change command {command_id} from {current.type_name} to {new_type}",
                    command_id,
                )

        if 'id' in changes and changes['id'] != command_id:
            raise CommandUpdateError(f"Cannot change the id of command {command_id}", command_id)

        unknown = sorted(set(changes) - set(current.field_names()))
        if unknown:
            raise CommandUpdateError(
                f"{current.type_name} has no field(s): {', '.join(unknown)}",
                command_id,
                {'fields': unknown},
            )

        try:
            updated = replace(current, **changes)
        except TypeError as e:
            raise CommandUpdateError(str(e), command_id)

        self._commands[index] = updated
        logger.debug("Updated command %s fields: %s", command_id, ', '.join(sorted(changes)))
        return updated

    def clear(self):
        """Remove every command and reset the id counter."""
        self._commands = []
        self._next_id = 1

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_commands(self) -> Tuple[Command, ...]:
        """Immutable snapshot of the current command sequence."""
        return tuple(self._commands)

    def get_command(self, command_id: str) -> Optional[Command]:
        for command in self._commands:
            if command.id == command_id:
                return command
        return None

    def get_command_index(self, command_id: str) -> int:
        """Current position of a command, or -1 if it is not in the block."""
        for index, command in enumerate(self._commands):
            if command.id == command_id:
                return index
        return -1

    def count(self) -> int:
        return len(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self):
        return iter(self.get_commands())

    def to_json(self) -> List[Dict[str, Any]]:
        """JSON-serializable command list for display."""
        return [command.to_dict() for command in self._commands]

    # =========================================================================
    # TEMPLATES
    # =========================================================================

    def to_template(self, name: str = "Untitled PTB",
                    description: str = "Generated PTB template",
                    project_id: Optional[str] = None,
                    template_id: Optional[str] = None) -> PTBTemplate:
        """Snapshot the block into a persistable template record."""
        return PTBTemplate.create(
            name=name,
            description=description,
            commands=self.get_commands(),
            project_id=project_id,
            template_id=template_id,
        )

    @classmethod
    def from_template(cls, template: PTBTemplate) -> 'PTBlock':
        """Restore a block from a template record."""
        return cls(template.commands)

    def __repr__(self) -> str:
        return f"PTBlock(commands={len(self._commands)}, next_id={self._next_id})"
