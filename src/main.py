import logging
import os
import sys

# High-DPI setup must happen before creating QApplication.
os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
os.environ.setdefault("QT_SCALE_FACTOR_ROUNDING_POLICY", "PassThrough")

from PySide6.QtWidgets import QApplication, QInputDialog

try:
    from core.color_mapper import BandConfigError
    from core.config_manager import ConfigManager
    from core.logger import setup_logger
    from core.paths import get_base_dir, get_log_dir, resolve_config_path
    from core.reflection import Reflection
    from core.scene import Scene
    from core.scene_loop import SceneLoop
    from ui.scene_widget import SceneWidget
except ModuleNotFoundError:
    from .core.color_mapper import BandConfigError
    from .core.config_manager import ConfigManager
    from .core.logger import setup_logger
    from .core.paths import get_base_dir, get_log_dir, resolve_config_path
    from .core.reflection import Reflection
    from .core.scene import Scene
    from .core.scene_loop import SceneLoop
    from .ui.scene_widget import SceneWidget


def _log_reflection(reflection: Reflection) -> None:
    # Notes are not persisted here; a notes service would subscribe instead.
    logging.getLogger("Daydream").info(
        "Reflection [%s %s]: %s", reflection.band_name, reflection.accent_color, reflection.text
    )


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName("Daydream")

    base_dir = get_base_dir()
    config_path = resolve_config_path()
    config_manager = ConfigManager(config_path)
    try:
        config = config_manager.load()
    except BandConfigError as exc:
        logger = setup_logger(get_log_dir(), debug=True)
        logger.critical("Refusing to start, invalid mood bands in %s: %s", config_path, exc)
        return 1

    logger = setup_logger(get_log_dir(), debug=config.behavior.debug_mode)
    logger.info("Application starting. base_dir=%s config=%s", base_dir, config_path)

    try:
        scene = Scene(config)
    except BandConfigError as exc:
        logger.critical("Refusing to start, invalid mood bands: %s", exc)
        return 1

    loop = SceneLoop(scene, reflection_sink=_log_reflection)
    widget = SceneWidget(loop)

    def _ask_for_note() -> None:
        text, accepted = QInputDialog.getText(widget, "A little note", "Write something:")
        if accepted:
            loop.submit_note(text)

    widget.note_requested.connect(_ask_for_note)
    loop.bloom_triggered.connect(lambda: logger.info("Bloom! mood=%.1f", scene.mood.mood))
    app.aboutToQuit.connect(loop.stop)

    widget.resize(900, 640)
    widget.show()
    loop.start()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
