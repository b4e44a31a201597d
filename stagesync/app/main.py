# stagesync/app/main.py
from __future__ import annotations

import argparse
import logging
import signal
import threading
from typing import Any, Dict, Optional, Sequence

from ..adapters.api_rest import StagetimerApiClient
from ..adapters.settings_local import SettingsLocal
from ..adapters.socket_transport import SocketIOTransport
from ..adapters.state_memory import InMemoryStateStore
from ..adapters.status_logging import LoggingStatusSink
from ..domain.config import ServiceSettings
from ..domain.ports import TransportFactory, UseCaseError
from ..usecases.connection_session import ConnectionSession, SessionHooks
from ..utils import logging as logging_utils


class App:
    """Composition root: wires adapters into a ``ConnectionSession``."""

    def __init__(
        self,
        settings: ServiceSettings,
        *,
        transport_factory: TransportFactory = SocketIOTransport,
    ) -> None:
        self._log = logging.getLogger("stagesync.app")
        self.settings = settings.validate()
        self.store = InMemoryStateStore()
        self.status = LoggingStatusSink()
        self.api = StagetimerApiClient(self.settings)
        self.gave_up = threading.Event()
        self.session = ConnectionSession(
            status=self.status,
            api=self.api,
            store=self.store,
            transport_factory=transport_factory,
            hooks=SessionHooks(on_gave_up=self.gave_up.set),
        )
        self.store.subscribe(self._on_state_change)
        self.store.on_flash(self._on_flash)

    def start(self) -> None:
        self.gave_up.clear()
        self.session.start(self.settings.connection_config())

    def stop(self) -> None:
        self.session.stop()
        self.api.close()

    def _on_state_change(self, facet: str, changed: Dict[str, Any]) -> None:
        self._log.info("%s: %s", facet, changed)

    def _on_flash(self, count: int) -> None:
        self._log.info("flash x%s", count)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI args; flags override the settings file and environment."""
    parser = argparse.ArgumentParser(description="Mirror a Stagetimer.io room into local state.")
    parser.add_argument("--settings-dir", default=".", help="Directory holding stagesync_settings.json")
    parser.add_argument("--api-url", default=None)
    parser.add_argument("--room-id", default=None)
    parser.add_argument("--api-key", default=None)
    parser.add_argument("--save", action="store_true", help="Persist the effective settings before connecting")
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint: connect, log state changes, stop on Ctrl-C."""
    args = _parse_args(argv)
    level = logging_utils.configure_root(debug=args.debug)
    log = logging.getLogger("stagesync.app")
    log.debug("Effective log level: %s", logging_utils.level_name(level))

    storage = SettingsLocal(args.settings_dir)
    try:
        settings = storage.load(
            api_url=args.api_url,
            room_id=args.room_id,
            api_key=args.api_key,
        ).validate()
    except (UseCaseError, ValueError) as exc:
        log.error("Invalid settings: %s", exc)
        return 2
    if args.save:
        storage.save(settings)
        log.info("Settings saved to %s", storage.path)

    app = App(settings)
    done = threading.Event()

    def _shutdown(signum: int, _frame: Any) -> None:
        log.info("Received signal %s, stopping", signum)
        done.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    app.start()
    try:
        while not done.wait(0.5):
            if app.gave_up.is_set():
                return 1
    finally:
        app.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
