"""
Chat relay - the assistant behind the real-time chat channel.

Messages are first offered to a registered external chat endpoint (an "MCP
server"); when none answers, connection requests are turned into registration
suggestions and everything else goes to the language model.

The relay knows nothing about the transport. Each handler returns the list of
(event, payload) pairs the transport should emit to the calling client.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests

from ai_service import AIService, AIServiceError

logger = logging.getLogger(__name__)

Outgoing = List[Tuple[str, Dict]]

ASSISTANT_SYSTEM_PROMPT = (
    "You are RCB Assistant, an expert in renovation and construction projects in India. "
    "You provide helpful advice about home improvement, construction costs, finding contractors, "
    "and managing renovation projects. Provide information specific to the Indian market in terms "
    "of materials, costs, and practices. Keep your responses focused on the construction and "
    "renovation domain."
)

INTEGRATION_SYSTEM_PROMPT = (
    "You are an assistant helping with MCP (Message Chat Protocol) server integration. Extract any "
    "potential server details from the user message. If the user is asking about connecting to a "
    "server but doesn't provide specific details, suggest they might want to connect to a Matrix "
    "server. Respond with JSON in this format: "
    "{ 'suggestRegistration': boolean, 'serverData': { 'uri': string, 'protocol': string } }"
)

INTEGRATION_HELP = (
    "To connect to an MCP server, click on the server icon in the top right of this chat window "
    "and enter the server details. I can help you manage connections to Matrix, XMPP, IRC or other "
    "compatible protocol servers."
)
INTEGRATION_ERROR = (
    "I encountered an error while processing your MCP integration request. Please try again later."
)
ASSISTANT_ERROR = (
    "I'm sorry, I encountered an error processing your request. Please try again later."
)
EMPTY_REPLY = "I'm sorry, I couldn't process that request."
REGISTRATION_FAILED = (
    "Failed to register MCP server. Please check the server details and try again."
)


def chat_message(role: str, content: str, user_id: Optional[str] = None) -> Dict:
    """Build a chat message payload."""
    message = {
        'role': role,
        'content': content,
        'timestamp': datetime.utcnow().isoformat(),
    }
    if user_id is not None:
        message['userId'] = user_id
    return message


def is_valid_endpoint(descriptor) -> bool:
    """An endpoint needs a protocol and an absolute http(s) URI."""
    if not isinstance(descriptor, dict):
        return False
    uri = descriptor.get('uri')
    protocol = descriptor.get('protocol')
    if not isinstance(uri, str) or not uri or not isinstance(protocol, str) or not protocol:
        return False
    parsed = urlparse(uri)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def wants_integration(text: str) -> bool:
    lowered = text.lower()
    return 'connect' in lowered and any(word in lowered for word in ('server', 'protocol', 'mcp'))


class McpRegistry:
    """
    Process-wide registry of external chat endpoints, keyed by URI.

    Owned by the application; cleared at shutdown.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._endpoints: Dict[str, Dict] = {}

    def register(self, descriptor: Dict) -> Dict:
        entry = {'uri': descriptor['uri'], 'protocol': descriptor['protocol']}
        if descriptor.get('apiKey'):
            entry['apiKey'] = descriptor['apiKey']
        with self._lock:
            self._endpoints[entry['uri']] = entry
        logger.info(f"Registered MCP server: {entry['uri']} ({entry['protocol']})")
        return dict(entry)

    def list(self, include_secrets: bool = False) -> List[Dict]:
        with self._lock:
            entries = [dict(e) for e in self._endpoints.values()]
        if not include_secrets:
            for entry in entries:
                entry.pop('apiKey', None)
        return entries

    def first(self) -> Optional[Dict]:
        with self._lock:
            for entry in self._endpoints.values():
                return dict(entry)
        return None

    def clear(self) -> None:
        with self._lock:
            self._endpoints.clear()
        logger.info("MCP registry cleared")

    def __len__(self):
        with self._lock:
            return len(self._endpoints)


class ChatSession:
    """State for one chat connection."""

    def __init__(self, sid: str):
        self.sid = sid
        self.user: Optional[Dict] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.get('id') if self.user else None


class ChatRelay:
    """Routes chat messages to an external endpoint or the language model."""

    def __init__(self, registry: McpRegistry, ai_service: AIService, timeout: int = 30):
        self.registry = registry
        self.ai_service = ai_service
        self.timeout = timeout
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # SESSIONS
    # =========================================================================

    def open_session(self, sid: str) -> ChatSession:
        with self._lock:
            session = self._sessions.get(sid)
            if session is None:
                session = self._sessions[sid] = ChatSession(sid)
        return session

    def close_session(self, sid: str) -> None:
        with self._lock:
            self._sessions.pop(sid, None)

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def authenticate(self, session: ChatSession, user: Dict) -> Outgoing:
        session.user = user
        logger.info(f"Chat user authenticated: {user.get('username')}")
        welcome = (
            f"Hello {user.get('username')}! Welcome to RCB Assistant. How can I help you with "
            f"your renovation or construction project today?"
        )
        return [('message', chat_message('assistant', welcome))]

    # =========================================================================
    # MESSAGES
    # =========================================================================

    def handle_message(self, session: ChatSession, text: str) -> Outgoing:
        logger.info(f"Chat message from {session.user_id or 'anonymous'} ({session.sid})")

        reply = self.relay_to_endpoint(session, text)
        if reply is not None:
            return [('message', chat_message('assistant', reply))]

        if wants_integration(text):
            return self._handle_integration_request(text)

        try:
            content = self.ai_service.chat(
                ASSISTANT_SYSTEM_PROMPT, [{'role': 'user', 'content': text}]
            )
        except AIServiceError as e:
            logger.error(f"Assistant reply failed: {e}")
            return [('message', chat_message('assistant', ASSISTANT_ERROR))]
        return [('message', chat_message('assistant', content or EMPTY_REPLY))]

    def relay_to_endpoint(self, session: ChatSession, text: str) -> Optional[str]:
        """Forward to the first registered endpoint; None when nobody answered."""
        endpoint = self.registry.first()
        if endpoint is None:
            return None

        url = f"{endpoint['uri'].rstrip('/')}/api/chat"
        try:
            response = requests.post(url, json={
                'message': text,
                'sessionId': session.sid,
                'protocol': endpoint['protocol'],
                'apiKey': endpoint.get('apiKey'),
            }, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Failed to route message to MCP server {endpoint['uri']}: {e}")
            return None

        if isinstance(data, dict) and data.get('message'):
            return str(data['message'])
        return None

    def _handle_integration_request(self, text: str) -> Outgoing:
        try:
            result = self.ai_service.complete_json(INTEGRATION_SYSTEM_PROMPT, text)
        except AIServiceError as e:
            logger.error(f"Error in MCP integration request: {e}")
            return [('message', chat_message('assistant', INTEGRATION_ERROR))]

        server_data = result.get('serverData')
        if result.get('suggestRegistration') and isinstance(server_data, dict):
            protocol = server_data.get('protocol') or 'MCP'
            return [
                ('suggest-mcp-registration', server_data),
                ('message', chat_message(
                    'assistant',
                    f"I can help you connect to a {protocol} server. Please check the dialog "
                    f"that appeared to complete the connection."
                )),
            ]
        return [('message', chat_message('assistant', INTEGRATION_HELP))]

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register_endpoint(self, descriptor) -> Tuple[bool, Dict]:
        """
        Validate and store an endpoint.

        Returns:
            (registered, system message for the caller)
        """
        if not is_valid_endpoint(descriptor):
            uri = descriptor.get('uri') if isinstance(descriptor, dict) else None
            logger.warning(f"Rejected invalid MCP server registration: uri={uri!r}")
            return False, chat_message('system', REGISTRATION_FAILED)

        entry = self.registry.register(descriptor)
        return True, chat_message(
            'system', f"Successfully connected to {entry['protocol']} server at {entry['uri']}"
        )
