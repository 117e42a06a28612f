"""
Change notification with batching and deferred delivery.

Every committed rule-set mutation marks the notifier dirty. The "rebuild the
downstream query" signal is delivered once the outermost open batch closes.
Each public mutation opens its own batch, so outside an explicit batch a
mutation fires exactly one signal, synchronously, after its state changes are
complete.

Re-entrancy
-----------
Listeners may mutate the rule set. Such a mutation never delivers a nested
signal: it marks the notifier dirty and the delivery loop already running
fires again once the current round of listeners has returned. Listeners are
therefore never invoked from inside a mutation that is still in progress.

A listener that raises does not stop the round: every remaining listener is
still called, then the first failure is re-raised to the mutating caller.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from .errors import NotifierStateError

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChangeNotifier:
    """Coalesces change signals over batches."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._depth = 0
        self._pending = False
        self._delivering = False
        self._fired = 0

    @property
    def in_batch(self) -> bool:
        """True while at least one batch is open."""
        return self._depth > 0

    @property
    def fired_count(self) -> int:
        """Number of signals delivered since construction."""
        return self._fired

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for rebuild signals.

        Parameters
        ----------
        listener:
            Zero-argument callable.

        Returns
        -------
        Callable[[], None]
            Call to unsubscribe. Calling it twice is harmless.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def begin_batch(self) -> None:
        """Open a batch. Batches nest."""
        self._depth += 1

    def end_batch(self) -> None:
        """
        Close a batch; deliver one signal if anything changed and this was the
        outermost batch.

        Raises
        ------
        NotifierStateError
            If no batch is open.
        """
        if self._depth == 0:
            raise NotifierStateError("end_batch() called without a matching begin_batch().")
        self._depth -= 1
        if self._depth == 0:
            self._flush()

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Context manager form of begin_batch()/end_batch()."""
        self.begin_batch()
        try:
            yield
        finally:
            self.end_batch()

    def mark_changed(self) -> None:
        """Record a committed mutation."""
        self._pending = True
        if self._depth == 0:
            self._flush()

    def _flush(self) -> None:
        if self._delivering:
            # The running delivery loop picks up the pending flag.
            return
        self._delivering = True
        try:
            while self._pending:
                self._pending = False
                self._fired += 1
                logger.debug("Delivering rebuild signal to %d listener(s)", len(self._listeners))
                failure: Exception | None = None
                for listener in list(self._listeners):
                    try:
                        listener()
                    except Exception as exc:
                        logger.error("Rebuild listener %r failed: %s", listener, exc)
                        if failure is None:
                            failure = exc
                if failure is not None:
                    raise failure
        finally:
            self._delivering = False
