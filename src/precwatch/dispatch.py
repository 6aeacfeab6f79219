"""Delivery of console events to the game server over RCON."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from rcon.exceptions import EmptyResponse, SessionTimeout, WrongPassword
from rcon.source import Client

from .config import RconConfig
from .events import ConsoleEvent

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class CommandDispatcher:
    """Sends the command of each event over a fresh RCON connection.

    Failures are logged and never raised; the result of the command on the
    server is not checked.
    """

    def __init__(self, config: RconConfig, *, client_factory: ClientFactory = Client):
        self._config = config
        self._client_factory = client_factory

    async def dispatch(self, event: ConsoleEvent) -> bool:
        """Send the command for ``event``; return whether it was delivered."""

        return await asyncio.to_thread(self._send, event)

    def _send(self, event: ConsoleEvent) -> bool:
        command = event.command
        client = self._client_factory(
            self._config.host,
            self._config.port,
            timeout=self._config.timeout,
            passwd=self._config.password,
        )
        try:
            try:
                client.connect(login=True)
            except WrongPassword:
                logger.error(
                    "RCON login to %s:%s rejected the password",
                    self._config.host,
                    self._config.port,
                )
                return False
            except (OSError, EmptyResponse, SessionTimeout) as exc:
                logger.error("Failed to connect to RCON at %s:%s: %r", self._config.host, self._config.port, exc)
                return False
            except Exception:
                logger.exception("Unexpected error while connecting to RCON at %s:%s", self._config.host, self._config.port)
                return False

            logger.info("Sending %s (%s)", event.value, command)
            try:
                client.run(command)
            except EmptyResponse:
                logger.debug("No response to %s", command)
            except (OSError, SessionTimeout) as exc:
                logger.error("Error while sending %s over RCON: %s", command, exc)
                return False
            except Exception:
                logger.exception("Unexpected error while sending %s over RCON", command)
                return False
            return True
        finally:
            client.close()
