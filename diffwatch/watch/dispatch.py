# Copyright Red Hat
#
# diffwatch/watch/dispatch.py - Diff watcher observer dispatch
#
# This file is part of the diffwatch project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Observer registration and change notification.
"""
from typing import Any, Callable, Iterable, List, Tuple
import logging

from diffwatch import DIFFWATCH_SUBSYSTEM_DISPATCH, DiffwatchObserverError

from .snapshots import StoreView

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_dispatch(msg, *args, **kwargs):
    """A wrapper for dispatch subsystem debug logs."""
    _log.debug(
        msg, *args, extra={"subsystem": DIFFWATCH_SUBSYSTEM_DISPATCH}, **kwargs
    )


#: An observer is called with the changed path and a read-only store view.
Observer = Callable[[str, StoreView], Any]

#: Notice emitted when a change is dispatched with no observers registered.
NO_OBSERVER_NOTICE = "No observer configured: please set an observer"


def _observer_name(observer: Observer) -> str:
    return getattr(observer, "__name__", type(observer).__name__)


class Dispatcher:
    """
    Invoke an ordered list of observers for each accepted change.
    """

    def __init__(self, observers: Iterable[Observer] = (), raise_errors: bool = False):
        """
        Initialise a new ``Dispatcher``.

        :param observers: Initial observers in invocation order.
        :type observers: ``Iterable[Observer]``
        :param raise_errors: Raise ``DiffwatchObserverError`` from
                             ``notify()`` after all observers have run if
                             any of them failed.
        :type raise_errors: ``bool``
        """
        self._observers: List[Observer] = []
        self.raise_errors = raise_errors
        self.add_observers(*observers)

    @property
    def observers(self) -> Tuple[Observer, ...]:
        """The registered observers in invocation order."""
        return tuple(self._observers)

    def add_observers(self, *observers: Observer):
        """
        Append ``observers`` to the invocation list, preserving order.

        :param observers: Callables accepting ``(path, store_view)``.
        """
        for observer in observers:
            if not callable(observer):
                raise TypeError(f"Observer {observer!r} is not callable")
            self._observers.append(observer)
            _log_debug_dispatch("Registered observer %s", _observer_name(observer))

    def set_observers(self, observers: Iterable[Observer]):
        """
        Replace the invocation list with ``observers``.

        :param observers: Callables accepting ``(path, store_view)``.
        :type observers: ``Iterable[Observer]``
        """
        self._observers = []
        self.add_observers(*observers)

    def notify(
        self, changed_path: str, store_view: StoreView
    ) -> List[Tuple[Observer, Exception]]:
        """
        Invoke every observer, in registration order, for ``changed_path``.

        A failing observer does not prevent the remaining observers from
        running. If no observers are registered a warning notice is
        logged instead.

        :param changed_path: The canonical path that changed.
        :type changed_path: ``str``
        :param store_view: Read-only access to the snapshot store.
        :type store_view: ``StoreView``
        :returns: A list of ``(observer, exception)`` pairs for observers
                  that failed.
        :rtype: ``List[Tuple[Observer, Exception]]``
        :raises: ``DiffwatchObserverError`` if ``raise_errors`` is set and
                 any observer failed.
        """
        if not self._observers:
            _log_warn("%s (changed: %s)", NO_OBSERVER_NOTICE, changed_path)
            return []

        failures = []
        for observer in self._observers:
            _log_debug_dispatch(
                "Calling observer %s for %s", _observer_name(observer), changed_path
            )
            try:
                observer(changed_path, store_view)
            # Observers are arbitrary callables: contain their failures.
            except Exception as err:  # pylint: disable=broad-exception-caught
                _log_error(
                    "Observer %s failed for %s: %s",
                    _observer_name(observer),
                    changed_path,
                    err,
                )
                failures.append((observer, err))

        if failures and self.raise_errors:
            raise DiffwatchObserverError(changed_path, failures)
        return failures
