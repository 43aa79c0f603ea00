"""Middleware rejecting requests that carry format-specifier patterns."""
from __future__ import annotations

import json
import logging
from urllib.parse import parse_qsl

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.sanitize import UNSAFE_INPUT_MESSAGE, contains_format_specifier

logger = logging.getLogger(__name__)


class InputSanitizerMiddleware:
    """Check path, query string and JSON body of every HTTP request.

    The body is read in full, inspected, then replayed to the wrapped app
    so downstream handlers see the original stream.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        query = scope.get("query_string", b"").decode("latin-1")
        params = parse_qsl(query, keep_blank_values=True)

        if contains_format_specifier(path) or contains_format_specifier(params):
            logger.warning("Rejected unsafe path/query on %s %s", scope["method"], path)
            await self._reject(scope, receive, send)
            return

        body, more_messages = await self._read_body(receive)
        if self._is_json(scope) and body:
            try:
                parsed = json.loads(body)
            except ValueError:
                # Malformed JSON is left for request validation to reject
                parsed = None
            if contains_format_specifier(parsed):
                logger.warning("Rejected unsafe body on %s %s", scope["method"], path)
                await self._reject(scope, receive, send)
                return

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            if more_messages:
                return more_messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    @staticmethod
    async def _read_body(receive: Receive) -> tuple[bytes, list[Message]]:
        chunks: list[bytes] = []
        extra: list[Message] = []
        while True:
            message = await receive()
            if message["type"] != "http.request":
                # Client went away before the body was complete
                extra.append(message)
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        return b"".join(chunks), extra

    @staticmethod
    def _is_json(scope: Scope) -> bool:
        for name, value in scope.get("headers", []):
            if name == b"content-type":
                content_type = value.decode("latin-1").split(";")[0].strip().lower()
                return content_type == "application/json" or content_type.endswith("+json")
        return False

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(status_code=400, content={"message": UNSAFE_INPUT_MESSAGE})
        await response(scope, receive, send)
