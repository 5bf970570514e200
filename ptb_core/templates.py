"""
PTB templates - named, timestamped snapshots of a block's command list.

Templates are the persistence boundary of the builder: the surrounding application
stores and loads them, the block only knows how to produce and consume them.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .exceptions import CommandFormatError, TemplateError
from .models import (
    Command, PTBArgs, SplitCoinsCommand, TransferObjectsCommand, MoveCallCommand,
    command_from_dict,
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class PTBTemplate:
    """Persistable snapshot of a PTB command list."""
    id: str
    name: str
    description: str = ""
    commands: Tuple[Command, ...] = field(default_factory=tuple)
    created_at: str = field(default_factory=_now_iso)
    project_id: Optional[str] = None

    def __post_init__(self):
        self.commands = tuple(self.commands)

    @classmethod
    def create(cls, name: str, description: str = "", commands: Sequence[Command] = (),
               project_id: Optional[str] = None,
               template_id: Optional[str] = None) -> 'PTBTemplate':
        """New template with a generated id and the current timestamp."""
        return cls(
            id=template_id or f"ptb-{int(time.time() * 1000)}",
            name=name,
            description=description,
            commands=tuple(commands),
            project_id=project_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'commands': [command.to_dict() for command in self.commands],
            'created_at': self.created_at,
        }
        if self.project_id is not None:
            data['project_id'] = self.project_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PTBTemplate':
        """Restore a template from its stored record."""
        if not isinstance(data, dict):
            raise TemplateError("Template record must be an object")
        missing = [key for key in ('id', 'name', 'commands') if key not in data]
        if missing:
            raise TemplateError(f"Template record is missing: {', '.join(missing)}",
                                {'missing': missing})
        if not isinstance(data['commands'], list):
            raise TemplateError("Template 'commands' must be a list")

        try:
            commands = [command_from_dict(item) for item in data['commands']]
        except CommandFormatError as e:
            raise TemplateError(f"Template {data['id']} has an invalid command: {e}", e.details)

        return cls(
            id=str(data['id']),
            name=str(data['name']),
            description=str(data.get('description', '')),
            commands=tuple(commands),
            created_at=data.get('created_at') or _now_iso(),
            project_id=data.get('project_id'),
        )


# =============================================================================
# PREDEFINED TEMPLATES
# =============================================================================

def simple_transfer_template(recipient: str = "0x...", amount: int = 1000000) -> PTBTemplate:
    """Split an amount off the gas coin and send it to a recipient."""
    return PTBTemplate(
        id='simple-transfer',
        name='Simple Transfer',
        description='Transfer IOTA coins to another address',
        commands=(
            SplitCoinsCommand(id='cmd-1', coin=PTBArgs.gas(), amounts=[PTBArgs.input(amount)]),
            TransferObjectsCommand(id='cmd-2', objects=[PTBArgs.result(0)],
                                   recipient=PTBArgs.input(recipient)),
        ),
    )


def module_call_template(target: str = "package::module::function") -> PTBTemplate:
    """Call a single function from a deployed Move module."""
    return PTBTemplate(
        id='module-call',
        name='Module Function Call',
        description='Call a function from a deployed Move module',
        commands=(
            MoveCallCommand(id='cmd-1', target=target, arguments=[PTBArgs.input('example_arg')]),
        ),
    )


PREDEFINED_TEMPLATES = {
    'simple_transfer': simple_transfer_template,
    'module_call': module_call_template,
}


def get_predefined_templates() -> List[PTBTemplate]:
    return [factory() for factory in PREDEFINED_TEMPLATES.values()]
