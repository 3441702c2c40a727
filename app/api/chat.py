"""
Chat Socket.IO Handlers

Client events:  authenticate, message, register-mcp, list-mcp
Server events:  message, mcp-list, suggest-mcp-registration

The handlers are thin: ChatRelay decides what to say, this module only
moves events between the socket and the relay.
"""

import logging
from flask import request
from flask_socketio import emit

logger = logging.getLogger(__name__)


def get_auth():
    """Get auth module - imported lazily to avoid circular imports"""
    import auth
    return auth


def _send(outgoing):
    for event, payload in outgoing:
        emit(event, payload)


def register_chat_handlers(socketio, relay):
    """
    Bind the chat events to a SocketIO server

    Args:
        socketio: flask_socketio.SocketIO instance
        relay: ChatRelay owning the endpoint registry and sessions
    """

    @socketio.on('connect')
    def on_connect(auth_payload=None):
        relay.open_session(request.sid)
        logger.info(f"Chat client connected: {request.sid}")

    @socketio.on('disconnect')
    def on_disconnect(*args):
        relay.close_session(request.sid)
        logger.info(f"Chat client disconnected: {request.sid}")

    @socketio.on('authenticate')
    def on_authenticate(payload=None):
        session = relay.open_session(request.sid)
        user = get_auth().get_current_user()
        if user is None:
            # Guests get a greeting by the name they supplied but no user id
            username = payload.get('username') if isinstance(payload, dict) else None
            user = {'id': None, 'username': username or 'there'}
        _send(relay.authenticate(session, user))

    @socketio.on('message')
    def on_message(text):
        session = relay.open_session(request.sid)
        if not isinstance(text, str) or not text.strip():
            logger.debug(f"Ignoring empty chat message from {request.sid}")
            return
        _send(relay.handle_message(session, text.strip()))

    @socketio.on('register-mcp')
    def on_register_mcp(descriptor=None):
        registered, message = relay.register_endpoint(descriptor)
        if registered:
            socketio.emit('mcp-list', relay.registry.list())
        emit('message', message)

    @socketio.on('list-mcp')
    def on_list_mcp(*args):
        emit('mcp-list', relay.registry.list())

    logger.info("Chat handlers registered")
