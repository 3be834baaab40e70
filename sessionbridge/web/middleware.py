"""
Server-side session middleware.

Works like ``starlette.middleware.sessions.SessionMiddleware`` except that the
cookie only carries a signed session id; the session payload lives in a
``SessionStore``.
"""
from __future__ import annotations

import copy
import logging
import secrets
from typing import Literal, Optional

from itsdangerous import BadSignature, TimestampSigner
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from sessionbridge.store.session_store import SessionStore

logger = logging.getLogger(__name__)


class ServerSessionMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        secret_key: str,
        session_cookie: str = "session",
        max_age: Optional[int] = 14 * 24 * 60 * 60,  # 14 days, in seconds
        path: str = "/",
        same_site: Literal["lax", "strict", "none"] = "lax",
        https_only: bool = False,
        domain: Optional[str] = None,
    ) -> None:
        self.app = app
        self.store = store
        self.signer = TimestampSigner(str(secret_key))
        self.session_cookie = session_cookie
        self.max_age = max_age
        self.path = path
        self.security_flags = "httponly; samesite=" + same_site
        if https_only:  # Secure flag can be used with HTTPS only
            self.security_flags += "; secure"
        if domain is not None:
            self.security_flags += f"; domain={domain}"

    def new_session_id(self) -> str:
        return secrets.token_urlsafe(32)

    def _read_session_id(self, connection: HTTPConnection) -> Optional[str]:
        cookie = connection.cookies.get(self.session_cookie)
        if not cookie:
            return None
        try:
            return self.signer.unsign(cookie.encode("utf-8"), max_age=self.max_age).decode("utf-8")
        except BadSignature:
            logger.debug("Ignoring session cookie with invalid signature")
            return None

    def _cookie_header(self, value: str, max_age: Optional[int]) -> str:
        header = f"{self.session_cookie}={value}; path={self.path}; "
        if max_age is not None:
            header += f"Max-Age={max_age}; "
        return header + self.security_flags

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):  # pragma: no cover
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        sid = self._read_session_id(connection)
        initial: dict = {}

        if sid is not None:
            payload = (await self.store.get(sid)).unwrap()
            if payload is None:
                # Expired or destroyed; never resurrect the old id
                sid = None
            else:
                initial = payload

        scope["session"] = copy.deepcopy(initial)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                await self._commit(scope["session"], sid, initial, MutableHeaders(scope=message))
            await send(message)

        await self.app(scope, receive, send_wrapper)

    async def _commit(self, session: dict, sid: Optional[str], initial: dict, headers: MutableHeaders) -> None:
        if session:
            if sid is None or session != initial:
                sid = sid or self.new_session_id()
                (await self.store.set(sid, session)).unwrap()
                signed = self.signer.sign(sid.encode("utf-8")).decode("utf-8")
                headers.append("Set-Cookie", self._cookie_header(signed, self.max_age))
            else:
                (await self.store.touch(sid, session)).unwrap()
        elif sid is not None:
            # Session was emptied: drop the record and expire the cookie
            (await self.store.destroy(sid)).unwrap()
            headers.append(
                "Set-Cookie",
                f"{self.session_cookie}=null; path={self.path}; "
                f"expires=Thu, 01 Jan 1970 00:00:00 GMT; {self.security_flags}",
            )
