"""Runtime loop that serializes client messages and deadline checks."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any, Callable, Optional

from app_config import AppConfig
from pomodoro import PomodoroEngine, ReminderScheduler, StrictModeEnforcer
from server import UIServer

from .commands import RuntimeCommandDispatcher
from .ui import RuntimeUIPublisher, UIOverlayPresenter, UIReminderNotifier

TICK_POLL_SECONDS = 0.25
SLEEP_GAP_SECONDS = 30.0


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    engine: PomodoroEngine
    ui_server: Optional[UIServer]


@dataclass
class RuntimeResources:
    """Mutable runtime resources created for the event loop lifecycle."""
    message_queue: Queue[dict[str, Any]]
    stop_requested: threading.Event = field(default_factory=threading.Event)
    last_wall_time: Optional[float] = None
    last_monotonic: Optional[float] = None


class RuntimeEngine:
    """Main loop: the only thread that calls into the session engine."""
    def __init__(
        self,
        bootstrap: RuntimeBootstrap,
        *,
        wall_time: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._engine = bootstrap.engine
        self._wall_time = wall_time
        self._monotonic = monotonic

        app_config = bootstrap.app_config
        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._enforcer = StrictModeEnforcer(
            self._engine,
            UIOverlayPresenter(self._ui),
            emergency_exit_key=app_config.strict_mode.emergency_exit_key,
            double_press_interval_seconds=app_config.strict_mode.double_press_interval_ms / 1000.0,
            eye_exercises_enabled=app_config.strict_mode.eye_exercises_enabled,
            logger=logging.getLogger("strict_mode"),
        )
        self._reminders = ReminderScheduler(
            self._engine,
            UIReminderNotifier(self._ui),
            lead_seconds=app_config.notifications.reminder_lead_seconds,
            logger=logging.getLogger("reminders"),
        )
        self._dispatcher = RuntimeCommandDispatcher(
            logger=self._logger,
            engine=self._engine,
            reminders=self._reminders,
            enforcer=self._enforcer,
            ui=self._ui,
        )

        self._engine.subscribe(self._ui.handle_engine_event)
        self._engine.subscribe(self._enforcer.handle_engine_event)
        self._engine.subscribe(self._reminders.handle_engine_event)

        self._resources = RuntimeResources(message_queue=Queue())
        if bootstrap.ui_server is not None:
            bootstrap.ui_server.set_message_handler(self.submit)

    @property
    def enforcer(self) -> StrictModeEnforcer:
        return self._enforcer

    @property
    def reminders(self) -> ReminderScheduler:
        return self._reminders

    def submit(self, message: dict[str, Any]) -> None:
        """Queue a client message; safe to call from any thread."""
        self._resources.message_queue.put(message)

    def stop(self) -> None:
        self._resources.stop_requested.set()

    def run(self) -> int:
        self._engine.restore()
        self._logger.info("Session engine ready")

        try:
            while not self._resources.stop_requested.is_set():
                self.run_once()
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()
        return 0

    def run_once(self, timeout_seconds: float = TICK_POLL_SECONDS) -> None:
        self._detect_sleep_gap()
        self._engine.tick()

        try:
            message = self._resources.message_queue.get(timeout=timeout_seconds)
        except Empty:
            return

        while True:
            self._dispatcher.handle_message(message)
            try:
                message = self._resources.message_queue.get_nowait()
            except Empty:
                return

    def _detect_sleep_gap(self) -> None:
        resources = self._resources
        wall_now = self._wall_time()
        monotonic_now = self._monotonic()
        if resources.last_wall_time is not None and resources.last_monotonic is not None:
            wall_delta = wall_now - resources.last_wall_time
            awake_delta = monotonic_now - resources.last_monotonic
            if wall_delta - awake_delta > SLEEP_GAP_SECONDS:
                self._logger.info(
                    "Wall clock advanced %.0fs while suspended; re-checking deadline",
                    wall_delta - awake_delta,
                )
        resources.last_wall_time = wall_now
        resources.last_monotonic = monotonic_now

    def _shutdown(self) -> None:
        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
