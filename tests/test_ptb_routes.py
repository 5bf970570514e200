"""
Tests for the PTB HTTP routes.
"""

import pytest
from flask import Flask
from ptb_core.config import BuilderConfig
from ptb_core.exceptions import ModuleInterfaceError
from ptb_core.module_interface import (
    ModuleFunction, ModuleInterface, ModuleInterfaceCache, MoveModule,
)
from web_interface.ptb_routes import register_ptb_routes


ADDRESS = "0x" + "ab" * 32
PACKAGE = "0x" + "7" * 64

TRANSFER_COMMANDS = [
    {'id': 'cmd-1', 'type': 'SplitCoins', 'coin': {'type': 'gas', 'value': 'gas'},
     'amounts': [{'type': 'input', 'value': 1000000}]},
    {'id': 'cmd-2', 'type': 'TransferObjects',
     'objects': [{'type': 'result', 'value': '', 'resultFrom': 0}],
     'recipient': {'type': 'input', 'value': ADDRESS}},
]


@pytest.fixture
def app():
    app = Flask(__name__)
    app.config['TESTING'] = True
    register_ptb_routes(app, BuilderConfig())
    return app


@pytest.fixture
def client(app):
    return app.test_client()


class TestValidateRoute:
    """Test cases for POST /api/ptb/validate."""

    def test_valid_block(self, client):
        response = client.post('/api/ptb/validate', json={'commands': TRANSFER_COMMANDS})
        assert response.status_code == 200
        assert response.get_json() == {
            'success': True, 'isValid': True, 'errors': [], 'warnings': [],
        }

    def test_invalid_block(self, client):
        commands = [{'id': 'cmd-1', 'type': 'MoveCall', 'target': 'badtarget',
                     'arguments': [{'type': 'input', 'value': 'x'}]}]
        data = client.post('/api/ptb/validate', json={'commands': commands}).get_json()
        assert data['success'] is True
        assert data['isValid'] is False
        assert len(data['errors']) == 1

    def test_malformed_body(self, client):
        response = client.post('/api/ptb/validate', json={'commands': 'nope'})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_unknown_command_type(self, client):
        response = client.post('/api/ptb/validate', json={'commands': [{'type': 'Upgrade'}]})
        assert response.status_code == 400
        assert 'Unknown command type' in response.get_json()['error']

    @pytest.mark.parametrize("body", [[{'type': 'gas'}], 'commands', 42])
    def test_non_object_body(self, client, body):
        response = client.post('/api/ptb/validate', json=body)
        assert response.status_code == 400
        data = response.get_json()
        assert data['success'] is False
        assert 'must be a JSON object' in data['error']

    def test_missing_body(self, client):
        response = client.post('/api/ptb/validate')
        assert response.status_code == 400
        assert response.get_json()['error'] == "'commands' must be a list"


class TestCodeRoute:
    """Test cases for POST /api/ptb/code."""

    def test_default_language(self, client):
        data = client.post('/api/ptb/code', json={'commands': TRANSFER_COMMANDS}).get_json()
        assert data['success'] is True
        assert data['language'] == 'typescript'
        assert 'tx.splitCoins(tx.gas, [1000000])' in data['code']

    def test_python(self, client):
        data = client.post('/api/ptb/code',
                           json={'commands': TRANSFER_COMMANDS, 'language': 'python'}).get_json()
        assert 'tx.split_coins(tx.gas, [1000000])' in data['code']

    def test_unsupported_language(self, client):
        response = client.post('/api/ptb/code',
                               json={'commands': TRANSFER_COMMANDS, 'language': 'rust'})
        assert response.status_code == 400
        assert response.get_json()['details'] == {'supported': ['python', 'typescript']}

    def test_non_string_language(self, client):
        response = client.post('/api/ptb/code',
                               json={'commands': TRANSFER_COMMANDS, 'language': 5})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Unsupported language: 5'

    def test_non_object_body(self, client):
        response = client.post('/api/ptb/code', json=['typescript'])
        assert response.status_code == 400
        assert response.get_json()['success'] is False


class TestPreviewRoute:
    """Test cases for POST /api/ptb/preview."""

    def test_preview(self, client):
        data = client.post('/api/ptb/preview', json={'commands': TRANSFER_COMMANDS}).get_json()
        assert data['success'] is True
        calls = data['transaction']['commands']
        assert [call['primitive'] for call in calls] == ['splitCoins', 'transferObjects']
        assert calls[1]['arguments']['objects'] == [{'Result': 0}]

    def test_preview_rejects_invalid_block(self, client):
        commands = [{'id': 'cmd-1', 'type': 'SplitCoins', 'coin': {'type': 'gas'},
                     'amounts': [{'type': 'input', 'value': 0}]}]
        response = client.post('/api/ptb/preview', json={'commands': commands})
        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'Validation failed'
        assert data['isValid'] is False


class TestTemplatesRoute:
    """Test cases for GET /api/ptb/templates."""

    def test_templates(self, client):
        data = client.get('/api/ptb/templates').get_json()
        assert data['success'] is True
        assert [t['id'] for t in data['templates']] == ['simple-transfer', 'module-call']


def counter_interface(package_id, network):
    if package_id != PACKAGE:
        raise ModuleInterfaceError(f"No package {package_id}", package_id, network)
    increment = ModuleFunction(name='increment', module='counter',
                               parameters=['&mut 0x7::counter::Counter', 'u8',
                                           '&mut 0x2::tx_context::TxContext'])
    return ModuleInterface(package_id=package_id,
                           modules=[MoveModule(name='counter', address=PACKAGE, functions=[increment])])


@pytest.fixture
def checked_client():
    app = Flask(__name__)
    app.config['TESTING'] = True
    register_ptb_routes(app, BuilderConfig(), module_cache=ModuleInterfaceCache(counter_interface))
    return app.test_client()


def increment_commands(amount):
    return [{'id': 'cmd-1', 'type': 'MoveCall', 'target': f'{PACKAGE}::counter::increment',
             'arguments': [{'type': 'object', 'value': ADDRESS},
                           {'type': 'input', 'value': amount}]}]


class TestSignatureChecks:
    """Test cases for MoveCall checks against a registered module cache."""

    def test_matching_call(self, checked_client):
        data = checked_client.post('/api/ptb/validate',
                                   json={'commands': increment_commands('255')}).get_json()
        assert data['isValid'] is True

    def test_out_of_range_literal(self, checked_client):
        data = checked_client.post('/api/ptb/validate',
                                   json={'commands': increment_commands(300)}).get_json()
        assert data['errors'] == [
            "Command 1 (MoveCall): Argument 2: Value exceeds maximum of 255",
        ]

    def test_preview_uses_the_cache(self, checked_client):
        response = checked_client.post('/api/ptb/preview',
                                       json={'commands': increment_commands(300)})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Validation failed'

    def test_without_cache_no_signature_check(self, client):
        data = client.post('/api/ptb/validate',
                           json={'commands': increment_commands(300)}).get_json()
        assert data['isValid'] is True


class TestReferencesRoute:
    """Test cases for GET /api/ptb/references."""

    def test_references(self, client):
        data = client.get('/api/ptb/references?position=2').get_json()
        assert data['success'] is True
        assert [ref['argument'] for ref in data['references']] == [
            {'type': 'gas', 'value': 'gas'},
            {'type': 'result', 'value': '', 'resultFrom': 0},
            {'type': 'result', 'value': '', 'resultFrom': 1},
        ]
        assert data['references'][0]['label'] == 'Gas'
        assert data['references'][2]['label'] == 'Result(1) - Output from Step 2'

    def test_first_position_offers_gas_only(self, client):
        data = client.get('/api/ptb/references?position=0').get_json()
        assert len(data['references']) == 1

    @pytest.mark.parametrize("query", ['', '?position=abc', '?position=-1'])
    def test_bad_position(self, client, query):
        response = client.get(f'/api/ptb/references{query}')
        assert response.status_code == 400
        assert response.get_json()['success'] is False


class TestCheckTypeRoute:
    """Test cases for POST /api/ptb/check-type."""

    def test_valid_literal(self, client):
        data = client.post('/api/ptb/check-type', json={'value': '255', 'type': 'u8'}).get_json()
        assert data == {'success': True, 'isValid': True, 'error': None, 'suggestion': None}

    def test_invalid_literal(self, client):
        data = client.post('/api/ptb/check-type', json={'value': 256, 'type': 'u8'}).get_json()
        assert data['isValid'] is False
        assert data['error'] == 'Value exceeds maximum of 255'
        assert data['suggestion'] == 'Use a value between 0 and 255'

    def test_json_vector_value(self, client):
        data = client.post('/api/ptb/check-type',
                           json={'value': [1, 2], 'type': 'vector<u8>'}).get_json()
        assert data['isValid'] is True

    @pytest.mark.parametrize("body", [{'value': '1'}, {'value': '1', 'type': 8}, ['u8']])
    def test_bad_request(self, client, body):
        response = client.post('/api/ptb/check-type', json=body)
        assert response.status_code == 400
        assert response.get_json()['success'] is False
