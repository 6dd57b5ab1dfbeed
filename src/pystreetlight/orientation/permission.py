"""Motion-permission gates.

Some platforms (iOS Safari) require an explicit, user-initiated grant before
orientation events fire; others deliver them unconditionally.  The gate is
chosen once by probing for a request function, never by platform name.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

_logger = logging.getLogger(__name__)

PermissionRequester = Callable[[], Awaitable[str]]


class MotionPermissionGate(Protocol):
    async def request(self) -> bool:
        ...


class DirectGrantGate:
    """Platform needs no explicit grant."""

    async def request(self) -> bool:
        return True


class ExplicitRequestGate:
    """Platform exposes a one-shot request returning ``"granted"``/``"denied"``."""

    def __init__(self, requester: PermissionRequester) -> None:
        self._requester = requester

    async def request(self) -> bool:
        try:
            result = await self._requester()
        except Exception:
            _logger.warning("Motion permission request failed", exc_info=True)
            return False
        granted = str(result).strip().lower() == "granted"
        if not granted:
            _logger.info("Motion permission not granted: %s", result)
        return granted


def select_permission_gate(requester: PermissionRequester | None) -> MotionPermissionGate:
    """Pick the gate variant for the capabilities the platform exposes."""
    if requester is not None and callable(requester):
        return ExplicitRequestGate(requester)
    return DirectGrantGate()
