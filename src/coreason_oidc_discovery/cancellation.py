# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_oidc_discovery

"""
Caller-controlled cancellation for discovery requests.
"""

import anyio

from coreason_oidc_discovery.exceptions import DiscoveryCancelledError


class CancelSignal:
    """
    A one-shot cancellation signal carrying a reason.

    The signal may be created outside of an event loop. `cancel()` must be called
    from the thread running the event loop that awaits `wait()`.
    """

    def __init__(self) -> None:
        self._reason: BaseException | None = None
        self._waiters: list[anyio.Event] = []

    @classmethod
    def cancelled_with(cls, reason: BaseException | str | None = None) -> "CancelSignal":
        """
        Create a signal that is already cancelled.

        Args:
            reason: The reason to report, see `cancel`.

        Returns:
            CancelSignal: A triggered signal.
        """
        signal = cls()
        signal.cancel(reason)
        return signal

    @property
    def cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> BaseException | None:
        return self._reason

    def cancel(self, reason: BaseException | str | None = None) -> None:
        """
        Trigger the signal. Later calls are ignored.

        Args:
            reason: The exception to raise in the cancelled operation. A string is wrapped
                in `DiscoveryCancelledError`; `None` uses a generic `DiscoveryCancelledError`.
        """
        if self._reason is not None:
            return

        if reason is None:
            reason = DiscoveryCancelledError("Discovery was cancelled.")
        elif isinstance(reason, str):
            reason = DiscoveryCancelledError(reason)

        self._reason = reason
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter.set()

    def raise_if_cancelled(self) -> None:
        """
        Raises:
            BaseException: The cancellation reason, if the signal was triggered.
        """
        if self._reason is not None:
            raise self._reason

    async def wait(self) -> None:
        """Block until the signal is triggered."""
        if self._reason is not None:
            return

        waiter = anyio.Event()
        self._waiters.append(waiter)
        try:
            await waiter.wait()
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)
