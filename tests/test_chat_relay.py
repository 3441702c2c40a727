"""
Tests for the chat relay and its Socket.IO surface
"""
import pytest
from unittest.mock import patch, MagicMock

import requests

from ai_service import AIServiceError
from services.chat_relay import (
    ASSISTANT_ERROR,
    ASSISTANT_SYSTEM_PROMPT,
    INTEGRATION_HELP,
    REGISTRATION_FAILED,
    ChatRelay,
    ChatSession,
    McpRegistry,
    is_valid_endpoint,
    wants_integration,
)

MATRIX = {'uri': 'https://matrix.example.org', 'protocol': 'Matrix', 'apiKey': 'mx-key'}


@pytest.fixture
def relay(fake_ai):
    return ChatRelay(McpRegistry(), fake_ai, timeout=5)


@pytest.fixture
def chat_session():
    session = ChatSession('sid-1')
    session.user = {'id': 'u1', 'username': 'asha'}
    return session


def endpoint_reply(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


def only_message(outgoing):
    assert len(outgoing) == 1
    event, payload = outgoing[0]
    assert event == 'message'
    return payload


@pytest.mark.unit
class TestEndpointValidation:
    """Test endpoint descriptors"""

    def test_valid(self):
        assert is_valid_endpoint(MATRIX)

    @pytest.mark.parametrize('descriptor', [
        None,
        'https://matrix.example.org',
        {'uri': 'https://matrix.example.org'},
        {'uri': 'matrix.example.org', 'protocol': 'Matrix'},
        {'uri': 'ftp://matrix.example.org', 'protocol': 'Matrix'},
        {'uri': 'https://', 'protocol': 'Matrix'},
        {'uri': 'https://matrix.example.org', 'protocol': ''},
    ])
    def test_invalid(self, descriptor):
        assert not is_valid_endpoint(descriptor)

    def test_integration_intent(self):
        assert wants_integration('How do I connect to a Matrix server?')
        assert not wants_integration('How much does a kitchen cost?')
        assert not wants_integration('Connect me with a plumber')


@pytest.mark.unit
class TestMcpRegistry:
    """Test the endpoint registry"""

    def test_register_and_list_hides_keys(self):
        registry = McpRegistry()
        registry.register(MATRIX)

        assert registry.list() == [{'uri': MATRIX['uri'], 'protocol': 'Matrix'}]
        assert registry.list(include_secrets=True)[0]['apiKey'] == 'mx-key'
        assert len(registry) == 1

    def test_same_uri_replaces(self):
        registry = McpRegistry()
        registry.register(MATRIX)
        registry.register(dict(MATRIX, protocol='XMPP'))

        assert len(registry) == 1
        assert registry.first()['protocol'] == 'XMPP'

    def test_clear(self):
        registry = McpRegistry()
        registry.register(MATRIX)
        registry.clear()
        assert registry.first() is None


@pytest.mark.unit
class TestChatRelay:
    """Test message routing"""

    def test_welcome(self, relay, chat_session):
        payload = only_message(relay.authenticate(chat_session, {'id': 'u1', 'username': 'asha'}))
        assert payload['role'] == 'assistant'
        assert payload['content'].startswith('Hello asha! Welcome to RCB Assistant.')

    def test_model_reply(self, relay, chat_session, fake_ai):
        fake_ai.chat.return_value = 'Vitrified tiles suit Delhi summers.'

        payload = only_message(relay.handle_message(chat_session, 'Which floor tiles?'))

        assert payload['content'] == 'Vitrified tiles suit Delhi summers.'
        assert payload['timestamp']
        fake_ai.chat.assert_called_once_with(
            ASSISTANT_SYSTEM_PROMPT, [{'role': 'user', 'content': 'Which floor tiles?'}]
        )

    def test_model_failure_apologises(self, relay, chat_session, fake_ai):
        fake_ai.chat.side_effect = AIServiceError('timeout')

        payload = only_message(relay.handle_message(chat_session, 'Which floor tiles?'))

        assert payload['content'] == ASSISTANT_ERROR

    def test_endpoint_answers_first(self, relay, chat_session, fake_ai):
        relay.registry.register(MATRIX)

        with patch('services.chat_relay.requests.post') as post:
            post.return_value = endpoint_reply({'message': 'Hello from Matrix'})
            payload = only_message(relay.handle_message(chat_session, 'hi'))

        assert payload['content'] == 'Hello from Matrix'
        url = post.call_args[0][0]
        body = post.call_args.kwargs['json']
        assert url == 'https://matrix.example.org/api/chat'
        assert body == {'message': 'hi', 'sessionId': 'sid-1', 'protocol': 'Matrix', 'apiKey': 'mx-key'}
        assert post.call_args.kwargs['timeout'] == 5
        fake_ai.chat.assert_not_called()

    def test_endpoint_failure_falls_back(self, relay, chat_session, fake_ai):
        relay.registry.register(MATRIX)
        fake_ai.chat.return_value = 'Model answer'

        with patch('services.chat_relay.requests.post', side_effect=requests.ConnectionError('down')):
            payload = only_message(relay.handle_message(chat_session, 'hi'))

        assert payload['content'] == 'Model answer'

    def test_endpoint_without_message_falls_back(self, relay, chat_session, fake_ai):
        relay.registry.register(MATRIX)
        fake_ai.chat.return_value = 'Model answer'

        with patch('services.chat_relay.requests.post', return_value=endpoint_reply({'status': 'ok'})):
            payload = only_message(relay.handle_message(chat_session, 'hi'))

        assert payload['content'] == 'Model answer'

    def test_integration_suggestion(self, relay, chat_session, fake_ai):
        fake_ai.complete_json.return_value = {
            'suggestRegistration': True,
            'serverData': {'uri': 'https://matrix.org', 'protocol': 'Matrix'},
        }

        outgoing = relay.handle_message(chat_session, 'Can you connect to my Matrix server?')

        assert outgoing[0] == ('suggest-mcp-registration', {'uri': 'https://matrix.org', 'protocol': 'Matrix'})
        assert outgoing[1][0] == 'message'
        assert 'Matrix server' in outgoing[1][1]['content']
        fake_ai.chat.assert_not_called()

    def test_integration_help(self, relay, chat_session, fake_ai):
        fake_ai.complete_json.return_value = {'suggestRegistration': False}

        payload = only_message(relay.handle_message(chat_session, 'connect to a server'))

        assert payload['content'] == INTEGRATION_HELP

    def test_register_endpoint(self, relay):
        registered, message = relay.register_endpoint(MATRIX)

        assert registered is True
        assert message['role'] == 'system'
        assert message['content'] == 'Successfully connected to Matrix server at https://matrix.example.org'

    def test_register_invalid_endpoint(self, relay):
        registered, message = relay.register_endpoint({'uri': 'not a url', 'protocol': 'Matrix'})

        assert registered is False
        assert message['content'] == REGISTRATION_FAILED
        assert len(relay.registry) == 0

    def test_sessions(self, relay):
        session = relay.open_session('a')
        assert relay.open_session('a') is session
        relay.open_session('b')
        assert relay.session_count() == 2
        relay.close_session('a')
        assert relay.session_count() == 1


@pytest.mark.integration
class TestChatSocket:
    """Test the Socket.IO events end to end"""

    @pytest.fixture
    def socket_client(self, app, client):
        socketio = app.extensions['socketio']
        sio = socketio.test_client(app, flask_test_client=client)
        yield sio
        if sio.is_connected():
            sio.disconnect()

    @staticmethod
    def events(sio, name):
        return [packet['args'][0] for packet in sio.get_received() if packet['name'] == name]

    def test_guest_greeting(self, socket_client):
        socket_client.emit('authenticate', {'username': 'guest-ravi'})
        messages = self.events(socket_client, 'message')
        assert messages[0]['content'].startswith('Hello guest-ravi!')

    def test_logged_in_greeting(self, app, user, socket_client):
        socket_client.emit('authenticate', {'username': 'ignored'})
        messages = self.events(socket_client, 'message')
        assert messages[0]['content'].startswith('Hello asha!')

    def test_message_round_trip(self, app, fake_ai, socket_client):
        fake_ai.chat.return_value = 'Start with a site survey.'

        socket_client.emit('message', 'Where do I begin?')

        messages = self.events(socket_client, 'message')
        assert [m['content'] for m in messages] == ['Start with a site survey.']

    def test_empty_message_ignored(self, fake_ai, socket_client):
        socket_client.emit('message', '   ')
        assert self.events(socket_client, 'message') == []
        fake_ai.chat.assert_not_called()

    def test_register_and_list(self, app, socket_client):
        socket_client.emit('register-mcp', MATRIX)

        received = socket_client.get_received()
        names = [packet['name'] for packet in received]
        assert names == ['mcp-list', 'message']
        assert received[0]['args'][0] == [{'uri': MATRIX['uri'], 'protocol': 'Matrix'}]

        socket_client.emit('list-mcp')
        assert self.events(socket_client, 'mcp-list') == [[{'uri': MATRIX['uri'], 'protocol': 'Matrix'}]]

    def test_register_invalid(self, app, socket_client):
        socket_client.emit('register-mcp', {'uri': 'nope'})
        assert self.events(socket_client, 'message')[0]['content'] == REGISTRATION_FAILED
        assert len(app.chat_relay.registry) == 0

    def test_disconnect_closes_session(self, app, socket_client):
        assert app.chat_relay.session_count() == 1
        socket_client.disconnect()
        assert app.chat_relay.session_count() == 0
