"""Minimal asyncio IRC client used as the delivery sink."""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections import deque
from typing import Any, Awaitable, Callable, Iterable, Optional

from gitlab_irc.errors import DeliveryError

logger = logging.getLogger(__name__)

RPL_WELCOME = "001"
ERR_NICKNAMEINUSE = "433"

# 512 bytes per line including CRLF; leave room for the relayed ":nick!user@host " prefix.
MAX_LINE_BYTES = 510
PREFIX_ALLOWANCE = 96
PENDING_LIMIT = 500
RECONNECT_DELAY_SECONDS = 15.0

OpenConnection = Callable[..., Awaitable[tuple[Any, Any]]]


def parse_line(line: str) -> tuple[str, str, list[str]]:
    """
    Split a raw IRC line into ``(prefix, command, params)``.

    Example
    -------
    ':irc.example 001 bot :Welcome' → ('irc.example', '001', ['bot', 'Welcome'])
    """
    prefix = ""
    if line.startswith(":"):
        prefix, _, line = line[1:].partition(" ")
    trailing = None
    if " :" in line:
        line, trailing = line.split(" :", 1)
    elif line.startswith(":"):
        line, trailing = "", line[1:]
    parts = line.split()
    command = parts[0].upper() if parts else ""
    params = parts[1:]
    if trailing is not None:
        params.append(trailing)
    return prefix, command, params


def sanitize(text: str, limit: int) -> str:
    """One line only, at most ``limit`` UTF-8 bytes."""
    flat = " ".join((text or "").splitlines())
    data = flat.encode("utf-8")
    if len(data) <= limit:
        return flat
    return data[:limit].decode("utf-8", errors="ignore")


class IRCClient:
    """
    Holds one connection to an IRC network.

    Registers with NICK/USER, answers PING, joins every configured channel on
    the welcome numeric and sends PRIVMSG lines one at a time. Lines delivered
    before registration completes are queued and flushed after the welcome.
    A dropped connection is re-established after ``reconnect_delay`` seconds;
    only the initial connection failure is fatal.
    """

    def __init__(
        self,
        host: str,
        port: int,
        nickname: str,
        gecos: str,
        *,
        use_tls: bool = True,
        cafile: str = "",
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        open_connection: OpenConnection = asyncio.open_connection,
    ):
        self.host = host
        self.port = port
        self.nickname = nickname
        self.gecos = gecos
        self.use_tls = use_tls
        self.cafile = cafile
        self.reconnect_delay = reconnect_delay
        self._open_connection = open_connection

        self.nick = nickname
        self.channels: list[str] = []
        self.registered = asyncio.Event()
        self._pending: deque[tuple[str, str]] = deque(maxlen=PENDING_LIMIT)
        self._lock = asyncio.Lock()
        self._reader: Any = None
        self._writer: Any = None
        self._task: Optional[asyncio.Task] = None
        self._closing = False

    def ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.use_tls:
            return None
        try:
            return ssl.create_default_context(cafile=self.cafile or None)
        except (OSError, ssl.SSLError) as exc:
            raise DeliveryError(f"cannot load CA file {self.cafile!r}: {exc}") from exc

    async def start(self) -> None:
        await self._connect()
        self._task = asyncio.create_task(self._run())
        self._task.add_done_callback(self._run_finished)

    def _run_finished(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("IRC reader stopped: %r", exc, exc_info=exc)

    async def _connect(self) -> None:
        context = self.ssl_context()
        logger.info("Connecting to %s:%d (tls=%s)", self.host, self.port, self.use_tls)
        try:
            reader, writer = await self._open_connection(self.host, self.port, ssl=context)
        except OSError as exc:
            raise DeliveryError(f"cannot connect to {self.host}:{self.port}: {exc}") from exc
        self._reader, self._writer = reader, writer
        self.registered.clear()
        self.nick = self.nickname
        await self._send(f"NICK {self.nick}")
        await self._send(f"USER {self.nickname} 0 * :{self.gecos}")

    async def _run(self) -> None:
        while not self._closing:
            try:
                await self._read_loop()
            except (OSError, DeliveryError) as exc:
                logger.error("IRC connection error: %s", exc)
            if self._closing:
                break
            self.registered.clear()
            logger.warning(
                "Disconnected from %s, reconnecting in %.0fs", self.host, self.reconnect_delay
            )
            await asyncio.sleep(self.reconnect_delay)
            try:
                await self._connect()
            except DeliveryError as exc:
                logger.error("Reconnect failed: %s", exc)

    async def _read_loop(self) -> None:
        while True:
            try:
                raw = await self._reader.readline()
            except ValueError as exc:
                logger.warning("Skipping over-long line from %s: %s", self.host, exc)
                continue
            if not raw:
                return
            await self.handle_line(raw.decode("utf-8", errors="replace").rstrip("\r\n"))

    async def handle_line(self, line: str) -> None:
        _prefix, command, params = parse_line(line)
        if command == "PING":
            await self._send(f"PONG :{params[-1] if params else self.host}")
        elif command == RPL_WELCOME:
            logger.info("Registered on %s as %s", self.host, self.nick)
            await self._join(self.channels)
            await self._flush()
            # lines delivered during the flush were queued behind it
            self.registered.set()
        elif command == ERR_NICKNAMEINUSE:
            self.nick += "_"
            logger.warning("Nickname in use, trying %s", self.nick)
            await self._send(f"NICK {self.nick}")
        elif command == "ERROR":
            logger.error("Server error: %s", params[-1] if params else line)
        else:
            logger.debug("<- %s", line)

    async def join(self, channels: Iterable[str]) -> None:
        """Remember channels and join them now if already registered."""
        new = []
        for name in channels:
            if name not in self.channels:
                self.channels.append(name)
                new.append(name)
        if self.registered.is_set():
            await self._join(new)

    async def _join(self, channels: Iterable[str]) -> None:
        for name in channels:
            logger.info("Joining %s", name)
            await self._send(f"JOIN {name}")

    async def deliver(self, channel: str, text: str) -> None:
        budget = MAX_LINE_BYTES - PREFIX_ALLOWANCE - len(f"PRIVMSG {channel} :".encode())
        text = sanitize(text, budget)
        if not self.registered.is_set():
            logger.debug("Not registered yet, queueing line for %s", channel)
            self._pending.append((channel, text))
            return
        await self._send(f"PRIVMSG {channel} :{text}")

    async def _flush(self) -> None:
        while self._pending:
            channel, text = self._pending.popleft()
            await self._send(f"PRIVMSG {channel} :{text}")

    async def _send(self, line: str) -> None:
        async with self._lock:
            writer = self._writer
            if writer is None or writer.is_closing():
                raise DeliveryError("not connected")
            try:
                writer.write(line.encode("utf-8") + b"\r\n")
                await writer.drain()
            except OSError as exc:
                raise DeliveryError(str(exc)) from exc

    async def close(self) -> None:
        self._closing = True
        if self._writer is not None and not self._writer.is_closing():
            try:
                await self._send("QUIT :shutting down")
            except DeliveryError as exc:
                logger.debug("QUIT not sent: %s", exc)
            self._writer.close()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
