"""Applications that let only one instance run and pass messages to it.

The first instance to call :meth:`SingleCoreApplication.is_running` becomes
the running instance. Later instances find it running and can hand it data,
such as the file the user asked to open, with
:meth:`SingleCoreApplication.send_message`.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Protocol

from .localpeer import LocalPeer


class ActivatableWindow(Protocol):
    """What an activation window has to offer."""

    minimized: bool

    def raise_window(self) -> None: ...

    def activate_window(self) -> None: ...


class SingleCoreApplication:
    """Single-instance detection and messaging without any window handling.

    Two processes with the same identifier count as instances of the same
    application. An empty identifier stands for the path of the program.
    """

    def __init__(
        self,
        app_id: str = "",
        directory: str | os.PathLike[str] | None = None,
    ) -> None:
        self._peer = LocalPeer(app_id, directory)
        self._listeners: list[Callable[[str], object]] = []
        self._peer.add_listener(self._on_message)

    def __enter__(self) -> SingleCoreApplication:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def is_running(self) -> bool:
        """Return True if another instance of this application already runs.

        Instances run by another user are not found.
        """
        return self._peer.is_client()

    def send_message(self, message: str, timeout: int = 5000) -> bool:
        """Send ``message`` to the running instance within ``timeout`` ms.

        Returns True when the running instance received and acknowledged it;
        False when no instance runs or it did not answer in time.
        """
        return self._peer.send_message(message, timeout)

    def id(self) -> str:
        """The application identifier."""
        return self._peer.application_id()

    def add_listener(self, callback: Callable[[str], object]) -> None:
        """Call ``callback`` with each message received from another instance."""
        self._listeners.append(callback)

    def process_pending(self) -> str | None:
        """Serve one waiting message, if any, and return it."""
        return self._peer.receive_connection()

    def close(self) -> None:
        """Stop being the running instance and release its resources."""
        self._peer.close()

    def _on_message(self, message: str) -> None:
        for callback in list(self._listeners):
            callback(message)


class SingleApplication(SingleCoreApplication):
    """A single-instance application that can bring its main window forward."""

    def __init__(
        self,
        app_id: str = "",
        directory: str | os.PathLike[str] | None = None,
    ) -> None:
        self._window: ActivatableWindow | None = None
        self._activate_on_message = False
        super().__init__(app_id, directory)

    def set_activation_window(
        self, window: ActivatableWindow | None, activate_on_message: bool = True
    ) -> None:
        """Set the window that :meth:`activate_window` brings forward.

        With ``activate_on_message`` the window is activated each time a
        message arrives, before the listeners are called.
        """
        self._window = window
        self._activate_on_message = activate_on_message

    def activation_window(self) -> ActivatableWindow | None:
        return self._window

    def activate_window(self) -> None:
        """Restore, raise and activate the activation window, if one is set."""
        if self._window is None:
            return
        self._window.minimized = False
        self._window.raise_window()
        self._window.activate_window()

    def _on_message(self, message: str) -> None:
        if self._activate_on_message:
            self.activate_window()
        super()._on_message(message)