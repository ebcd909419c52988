"""Pytest configuration and shared fixtures."""

import base64
import json
from io import BytesIO
from typing import Dict, List, Optional, Union

import pytest
from PIL import Image

from tryon_agent.core import Orchestrator, RequestBuilder
from tryon_agent.models import UserSession
from tryon_agent.providers.gemini import TransportResponse
from tryon_agent.providers.identity import IdentityProvider
from tryon_agent.utils.errors import AuthenticationError
from tryon_agent.utils.retry import RetryPolicy


def make_image(color=(200, 30, 30), size=(16, 16), fmt="PNG", mode="RGB") -> bytes:
    image = Image.new(mode, size, color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def gemini_body(image_bytes: Optional[bytes] = None, mime_type: str = "image/png", camel_case: bool = False) -> bytes:
    """Success-shaped response body carrying one inline image."""
    data = base64.b64encode(image_bytes or make_image(fmt="PNG")).decode("utf-8")
    if camel_case:
        part = {"inlineData": {"mimeType": mime_type, "data": data}}
    else:
        part = {"inline_data": {"mime_type": mime_type, "data": data}}
    return json.dumps({"candidates": [{"content": {"parts": [part]}}]}).encode("utf-8")


class ScriptedTransport:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses: List[Union[TransportResponse, BaseException]]):
        self._responses = list(responses)
        self.bodies: List[bytes] = []

    @property
    def calls(self) -> int:
        return len(self.bodies)

    async def send(self, body: bytes) -> TransportResponse:
        self.bodies.append(body)
        if not self._responses:
            raise AssertionError("transport called more times than scripted")
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class FakeIdentity(IdentityProvider):
    """In-memory identity issuing one token per sign-in."""

    def __init__(self, user: Optional[UserSession] = None):
        self._user = user
        self.tokens: Dict[str, UserSession] = {}
        if user is not None:
            self.tokens[self.token_for(user)] = user

    @staticmethod
    def token_for(user: UserSession) -> str:
        return f"token-{user.user_id}"

    @property
    def current_user(self) -> Optional[UserSession]:
        return self._user

    async def sign_in(self, email, password, remember=True):
        user = UserSession(user_id=f"user-{email.split('@')[0]}", email=email)
        user.access_token = self.token_for(user)
        self.tokens[user.access_token] = user
        if remember:
            self._user = user
        return user

    async def sign_up(self, email, password, remember=True):
        return await self.sign_in(email, password, remember)

    async def sign_out(self, access_token=None):
        if access_token is None:
            self._user = None
        else:
            self.tokens.pop(access_token, None)

    async def refresh(self):
        return self._user

    async def verify(self, access_token):
        user = self.tokens.get(access_token)
        if user is None:
            raise AuthenticationError("Invalid access token.")
        return user


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self, exc: Optional[BaseException] = None):
        self.delays: List[float] = []
        self._exc = exc

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self._exc is not None:
            raise self._exc


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def body_factory():
    return gemini_body


@pytest.fixture
def person_image() -> bytes:
    return make_image(color=(230, 200, 180), size=(32, 48))


@pytest.fixture
def clothing_image() -> bytes:
    return make_image(color=(20, 40, 200), size=(24, 24), mode="RGBA", fmt="PNG")


@pytest.fixture
def output_image() -> bytes:
    return make_image(color=(10, 120, 10), size=(20, 30), fmt="PNG")


@pytest.fixture
def ok_response(output_image) -> TransportResponse:
    return TransportResponse(status_code=200, content=gemini_body(output_image))


@pytest.fixture
def status_response():
    def _make(code: int, body: bytes = b'{"error": {"message": "nope"}}') -> TransportResponse:
        return TransportResponse(status_code=code, content=body)
    return _make


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_orchestrator(recording_sleep):
    def _make(responses, sleep=None) -> Orchestrator:
        transport = ScriptedTransport(responses)
        return Orchestrator(
            transport=transport,
            builder=RequestBuilder(),
            policy=RetryPolicy(max_attempts=3, base_delay=1.0),
            sleep=sleep or recording_sleep,
        )
    return _make


@pytest.fixture
def oversized_image(monkeypatch) -> bytes:
    """PNG whose pixel count is past Pillow's decompression-bomb limit."""
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 2000)
    return make_image(color=0, size=(100, 100), mode="1")
