"""
Unit tests for the editable PTB block.
"""

import pytest
from hypothesis import given, strategies as st
from ptb_core.block import PTBlock
from ptb_core.exceptions import CommandUpdateError
from ptb_core.models import CommandType, PTBArgs, SplitCoinsCommand, MoveCallCommand
from ptb_core.templates import PTBTemplate
from ptb_core.validator import GraphValidator


ADDRESS = "0x" + "ab" * 32


@pytest.fixture
def block():
    """Split off the gas coin, then transfer the new coin."""
    ptb = PTBlock()
    ptb.add_split_coins(PTBArgs.gas(), [PTBArgs.input(1000000)])
    ptb.add_transfer_objects([PTBArgs.result(0)], PTBArgs.input(ADDRESS))
    return ptb


class TestAddingCommands:
    """Test cases for appending commands."""

    def test_ids_are_minted_in_order(self, block):
        """Commands get cmd-1, cmd-2, ... as they are appended."""
        assert [command.id for command in block.get_commands()] == ['cmd-1', 'cmd-2']

    def test_add_returns_the_command(self):
        """add_* returns the stored command."""
        ptb = PTBlock()
        command = ptb.add_move_call('0x2::coin::value', [PTBArgs.input(1)], ['0x2::iota::IOTA'])
        assert ptb.get_command(command.id) is command
        assert command.type_arguments == ('0x2::iota::IOTA',)

    def test_move_call_without_type_arguments(self):
        """Omitted type arguments are stored as None."""
        command = PTBlock().add_move_call('0x2::m::f')
        assert command.type_arguments is None
        assert command.arguments == ()

    def test_every_variant_can_be_added(self):
        """All six command variants have an add method."""
        ptb = PTBlock()
        ptb.add_move_call('0x2::m::f', [PTBArgs.input(1)])
        ptb.add_transfer_objects([PTBArgs.result(0)], PTBArgs.input(ADDRESS))
        ptb.add_split_coins(PTBArgs.gas(), [PTBArgs.input(5)])
        ptb.add_merge_coins(PTBArgs.gas(), [PTBArgs.result(2)])
        ptb.add_make_move_vec('u64', [PTBArgs.input(1)])
        ptb.add_publish(['AQID'], ['0x1', '0x2'])
        assert [command.command_type for command in ptb] == list(CommandType)
        assert ptb.count() == len(ptb) == 6


class TestCommandManagement:
    """Test cases for remove, move, update and clear."""

    def test_remove_shifts_later_commands(self, block):
        """Removing a command moves later commands down one position."""
        assert block.remove('cmd-1') is True
        assert block.get_command_index('cmd-2') == 0
        assert block.count() == 1

    def test_remove_unknown_id(self, block):
        """Removing an unknown id is a no-op."""
        assert block.remove('cmd-99') is False
        assert block.count() == 2

    def test_remove_does_not_rewrite_references(self, block):
        """References keep pointing at the old position number."""
        block.remove('cmd-1')
        assert block.get_command('cmd-2').objects == (PTBArgs.result(0),)

    def test_ids_are_not_reissued_after_remove(self, block):
        """The id counter only moves forward."""
        block.remove('cmd-2')
        assert block.add_merge_coins(PTBArgs.gas(), []).id == 'cmd-3'

    def test_move(self, block):
        """move() relocates a command."""
        assert block.move(1, 0) is True
        assert [command.id for command in block] == ['cmd-2', 'cmd-1']

    def test_move_out_of_bounds(self, block):
        """Out-of-bounds moves leave the block unchanged."""
        before = block.get_commands()
        assert block.move(0, 2) is False
        assert block.move(-1, 0) is False
        assert block.get_commands() == before

    def test_update_keeps_position(self, block):
        """update() replaces fields and keeps id and position."""
        updated = block.update('cmd-1', amounts=[PTBArgs.input(5), PTBArgs.input(6)])
        assert updated.id == 'cmd-1'
        assert updated.amounts == (PTBArgs.input(5), PTBArgs.input(6))
        assert block.get_command_index('cmd-1') == 0
        assert block.get_command('cmd-1') is updated

    def test_update_unknown_id(self, block):
        """Updating an unknown id returns None."""
        assert block.update('cmd-99', amounts=[]) is None

    def test_update_cannot_change_type(self, block):
        """The command variant is fixed."""
        with pytest.raises(CommandUpdateError) as excinfo:
            block.update('cmd-1', type='MergeCoins')
        assert excinfo.value.command_id == 'cmd-1'

    def test_update_same_type_is_allowed(self, block):
        """Passing the current type is harmless."""
        updated = block.update('cmd-1', type=CommandType.SPLIT_COINS, amounts=[PTBArgs.input(2)])
        assert isinstance(updated, SplitCoinsCommand)

    def test_update_cannot_change_id(self, block):
        """The id is fixed."""
        with pytest.raises(CommandUpdateError):
            block.update('cmd-1', id='cmd-7')

    def test_update_unknown_field(self, block):
        """Fields of another variant are rejected."""
        with pytest.raises(CommandUpdateError) as excinfo:
            block.update('cmd-1', target='0x2::m::f')
        assert excinfo.value.details == {'fields': ['target']}

    def test_update_bad_value_leaves_block_unchanged(self, block):
        """A badly typed value is rejected before anything is stored."""
        before = block.get_commands()
        with pytest.raises(CommandUpdateError):
            block.update('cmd-1', amounts=[1000])
        assert block.get_commands() == before

    def test_clear(self, block):
        """clear() empties the block and restarts ids."""
        block.clear()
        assert block.count() == 0
        assert block.add_publish(['AQID']).id == 'cmd-1'


class TestQueries:
    """Test cases for read access."""

    def test_get_commands_is_a_snapshot(self, block):
        """Later mutations do not show up in an earlier snapshot."""
        snapshot = block.get_commands()
        block.add_publish(['AQID'])
        block.remove('cmd-1')
        assert [command.id for command in snapshot] == ['cmd-1', 'cmd-2']
        assert isinstance(snapshot, tuple)

    def test_snapshot_mapping_inputs_are_read_only(self):
        """Mapping literals cannot be edited through a snapshot."""
        ptb = PTBlock()
        ptb.add_move_call('0x2::m::f', [PTBArgs.input({'k': 'v'})])
        ptb.add_move_call('0x2::m::g', [PTBArgs.input([{'k': 'v'}])])

        first, second = ptb.get_commands()
        with pytest.raises(TypeError):
            first.arguments[0].value['k'] = ''
        with pytest.raises(TypeError):
            second.arguments[0].value[0]['k'] = ''

        assert ptb.get_commands()[0].arguments[0].plain_value == {'k': 'v'}
        assert ptb.get_commands()[1].arguments[0].plain_value == [{'k': 'v'}]

    def test_plain_value_is_a_copy(self):
        """Editing an exported literal leaves the block untouched."""
        ptb = PTBlock()
        ptb.add_move_call('0x2::m::f', [PTBArgs.input({'k': ['v']})])
        exported = ptb.get_commands()[0].arguments[0].plain_value
        exported['k'].append('w')
        exported['x'] = 1
        assert ptb.to_json()[0]['arguments'][0]['value'] == {'k': ['v']}

    def test_caller_dict_is_not_shared(self):
        """Mutating the dict passed to input() does not reach the block."""
        literal = {'k': 'v'}
        ptb = PTBlock()
        ptb.add_move_call('0x2::m::f', [PTBArgs.input(literal)])
        literal['k'] = ''
        assert ptb.get_commands()[0].arguments[0].plain_value == {'k': 'v'}

    def test_get_command_missing(self, block):
        """Unknown ids return None / -1."""
        assert block.get_command('nope') is None
        assert block.get_command_index('nope') == -1

    def test_to_json(self, block):
        """to_json returns the UI command list."""
        data = block.to_json()
        assert data[0] == {
            'id': 'cmd-1',
            'type': 'SplitCoins',
            'coin': {'type': 'gas', 'value': 'gas'},
            'amounts': [{'type': 'input', 'value': 1000000}],
        }
        assert data[1]['recipient'] == {'type': 'input', 'value': ADDRESS}


class TestTemplates:
    """Test cases for template round trips."""

    def test_round_trip_preserves_commands(self, block):
        """to_template then from_template yields the same command list."""
        template = block.to_template('Pay', 'Pay someone', project_id='proj-1')
        restored = PTBlock.from_template(template)
        assert restored.get_commands() == block.get_commands()
        assert template.project_id == 'proj-1'
        assert template.id.startswith('ptb-')

    def test_round_trip_preserves_validation(self, block):
        """A restored block validates identically."""
        validator = GraphValidator()
        restored = PTBlock.from_template(PTBTemplate.from_dict(block.to_template('Pay').to_dict()))
        assert validator.validate(restored) == validator.validate(block)

    def test_restored_block_continues_ids(self):
        """Ids minted after a restore never collide with stored ones."""
        template = PTBTemplate(id='t', name='gappy', commands=(
            MoveCallCommand(id='cmd-1', target='0x2::m::f'),
            MoveCallCommand(id='cmd-5', target='0x2::m::g'),
        ))
        restored = PTBlock.from_template(template)
        assert restored.add_publish(['AQID']).id == 'cmd-6'


@given(st.lists(st.sampled_from(['split', 'publish', 'remove', 'move']), max_size=20))
def test_positions_stay_dense_property(operations):
    """Property test: positions always run 0..n-1 and ids stay unique."""
    ptb = PTBlock()
    for operation in operations:
        if operation == 'split':
            ptb.add_split_coins(PTBArgs.gas(), [PTBArgs.input(1)])
        elif operation == 'publish':
            ptb.add_publish(['AQID'])
        elif operation == 'remove' and ptb.count():
            ptb.remove(ptb.get_commands()[0].id)
        elif operation == 'move' and ptb.count() > 1:
            ptb.move(0, ptb.count() - 1)

    ids = [command.id for command in ptb]
    assert len(ids) == len(set(ids))
    assert [ptb.get_command_index(command_id) for command_id in ids] == list(range(len(ids)))
