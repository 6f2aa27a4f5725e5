import logging
import signal
import sys
from typing import Optional

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from cues import CueConfig, CueConfigurationError
from pomodoro import CuePlayer, JsonFileSessionStore, PomodoroConfig, PomodoroEngine, SessionStore
from runtime import RuntimeBootstrap, RuntimeEngine
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_app")


def setup_signal_handlers(runtime: RuntimeEngine, logger: logging.Logger) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        runtime.stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def build_cue_player(app_config, logger: logging.Logger) -> Optional[CuePlayer]:
    if not app_config.cues.enabled:
        return None
    try:
        cue_config = CueConfig.from_settings(app_config.cues)
    except CueConfigurationError as error:
        logger.warning("Sound cues disabled: %s", error)
        return None

    # Imported lazily so PortAudio is only required when cues are enabled.
    try:
        from cues.output import SoundDeviceCuePlayer
    except (ImportError, OSError) as error:
        logger.warning("Sound cues disabled, audio backend unavailable: %s", error)
        return None

    logger.info("Sound cues enabled (sounds: %s)", cue_config.sounds_dir)
    return SoundDeviceCuePlayer(cue_config, logger=logging.getLogger("cues"))


def build_ui_server(app_config, logger: logging.Logger) -> Optional[UIServer]:
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error(f"UI server configuration error: {error}")
        logger.warning("Continuing without UI server.")
        return None

    if not ui_server_config.enabled:
        return None

    ui_server = UIServer(
        config=ui_server_config,
        logger=logging.getLogger("ui_server"),
    )
    try:
        logger.info("Starting UI server...")
        ui_server.start(timeout_seconds=5.0)
    except RuntimeError as error:
        logger.error(f"UI server startup failed: {error}")
        logger.warning("Continuing without UI server.")
        return None

    logger.info(
        "UI server ready at http://%s:%d",
        ui_server.host,
        ui_server.port,
    )
    return ui_server


def main() -> int:
    """Run the focus/break session engine."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error(f"App configuration error: {error}")
        return 1

    store: Optional[SessionStore] = None
    if app_config.persistence.enabled:
        store = JsonFileSessionStore(
            app_config.persistence.session_file,
            logger=logging.getLogger("pomodoro.store"),
        )
        logger.info("Session snapshots: %s", app_config.persistence.session_file)

    engine = PomodoroEngine(
        PomodoroConfig.from_settings(app_config),
        store=store,
        cue_player=build_cue_player(app_config, logger),
        logger=logging.getLogger("pomodoro"),
    )

    ui_server = build_ui_server(app_config, logger)
    runtime = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            engine=engine,
            ui_server=ui_server,
        )
    )
    setup_signal_handlers(runtime, logger)
    return runtime.run()


if __name__ == "__main__":
    sys.exit(main())
