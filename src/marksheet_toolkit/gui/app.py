"""
Entry point for the PySide6 bulk marksheet generator.
"""
import logging
import sys


def run():
    """
    Main entry point for the GUI application.
    """
    from PySide6.QtWidgets import QApplication, QMessageBox

    from marksheet_toolkit.gui.models.settings import SettingsStore
    from marksheet_toolkit.gui.styles.theme import GLOBAL_STYLESHEET
    from marksheet_toolkit.gui.utils.paths import APP_NAME, get_settings_path
    from marksheet_toolkit.gui.widgets.bulk_generator import BulkGeneratorWindow

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_NAME)
    app.setOrganizationName(APP_NAME)
    app.setStyleSheet(GLOBAL_STYLESHEET)

    settings = SettingsStore(get_settings_path())
    if settings.load_error:
        QMessageBox.warning(
            None,
            "Settings Error",
            f"{settings.load_error}\n\nDefault settings will be used.",
        )

    window = BulkGeneratorWindow(settings=settings)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
