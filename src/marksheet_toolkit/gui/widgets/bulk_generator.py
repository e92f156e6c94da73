"""
Bulk Marksheet Generator window.

Pick a state backup, a class and the students to include, then export
them in batch PDF files. The batch orchestrator runs on a worker thread;
progress, state transitions and completion come back through Qt signals.
"""
import logging
import queue
import threading
from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QFileDialog, QFormLayout, QGroupBox, QHBoxLayout,
    QLabel, QLineEdit, QListWidget, QListWidgetItem, QMainWindow, QMessageBox,
    QProgressBar, QPushButton, QSpinBox, QVBoxLayout, QWidget,
)

from marksheet_toolkit.builder import (
    BatchCancelled,
    BatchExporter,
    BatchExportError,
    BatchState,
    ExportConfig,
    InvalidJobError,
    MAX_BATCH_SIZE,
    PillowRenderer,
    Renderer,
)
from marksheet_toolkit.core import AppState, ClassConfig, Orientation, Student
from marksheet_toolkit.core.schemas import ValidationError
from marksheet_toolkit.core.utils import load_app_state, StateLoadError
from marksheet_toolkit.gui.models.settings import SettingsStore
from marksheet_toolkit.gui.styles.theme import Styles
from marksheet_toolkit.gui.utils.icons import MaterialIcons
from marksheet_toolkit.gui.utils.logging_utils import attach_queue_handler, detach_queue_handler
from marksheet_toolkit.gui.utils.paths import get_default_output_dir, get_settings_path
from marksheet_toolkit.gui.widgets.console_widget import ConsoleWidget

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "marksheet_toolkit"
LOG_POLL_MS = 100

RendererFactory = Callable[[Optional[Path]], Renderer]


class BulkGeneratorWindow(QMainWindow):
    # Worker thread -> main thread
    progress_changed = Signal(int, str)
    state_changed = Signal(str, str)
    # success, error message
    generation_finished = Signal(bool, object)

    def __init__(
        self,
        settings: Optional[SettingsStore] = None,
        log_queue: Optional[queue.Queue] = None,
        renderer_factory: Optional[RendererFactory] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.settings = settings or SettingsStore(get_settings_path())
        self.log_queue = log_queue or queue.Queue()
        self.renderer_factory = renderer_factory or _default_renderer

        self.app_state: Optional[AppState] = None
        self.base_dir: Optional[Path] = None
        self.exporter: Optional[BatchExporter] = None
        self.last_files: List[Path] = []
        self._thread: Optional[threading.Thread] = None

        self.setWindowTitle("Bulk Marksheet Generator")
        self.resize(720, 760)
        self._build_ui()

        self.progress_changed.connect(self._on_progress)
        self.state_changed.connect(self._on_state_changed)
        self.generation_finished.connect(self._finish_generation)

        self._log_timer = QTimer(self)
        self._log_timer.timeout.connect(self._drain_log_queue)
        self._log_timer.start(LOG_POLL_MS)

        stored = self.settings.get_state_path()
        if stored and Path(stored).exists():
            self.load_state_file(Path(stored))

    # ─────────────────────────────────────────────────────────────────────
    # UI
    # ─────────────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        # Source
        source_row = QHBoxLayout()
        self.state_entry = QLineEdit()
        self.state_entry.setReadOnly(True)
        self.state_entry.setPlaceholderText("Select a backup file (.json)")
        self.browse_state_btn = QPushButton("Open...")
        self.browse_state_btn.setIcon(MaterialIcons.file_document())
        self.browse_state_btn.setStyleSheet(Styles.BUTTON_SECONDARY)
        self.browse_state_btn.clicked.connect(self._browse_state_file)
        source_row.addWidget(self.state_entry, 1)
        source_row.addWidget(self.browse_state_btn)
        root.addLayout(source_row)

        # Class + students
        self.class_combo = QComboBox()
        self.class_combo.currentIndexChanged.connect(self._on_class_changed)
        class_row = QFormLayout()
        class_row.addRow("Class", self.class_combo)
        root.addLayout(class_row)

        students_box = QGroupBox("Students")
        students_layout = QVBoxLayout(students_box)
        self.select_all = QCheckBox("Select all")
        self.select_all.toggled.connect(self._on_select_all_toggled)
        self.student_list = QListWidget()
        self.student_list.itemChanged.connect(self._on_item_changed)
        self.selection_label = QLabel("0 selected")
        students_layout.addWidget(self.select_all)
        students_layout.addWidget(self.student_list, 1)
        students_layout.addWidget(self.selection_label)
        root.addWidget(students_box, 2)

        # Options
        options = QFormLayout()
        self.batch_spin = QSpinBox()
        self.batch_spin.setRange(1, MAX_BATCH_SIZE)
        self.batch_spin.setValue(self.settings.get_batch_size())
        self.batch_spin.setToolTip("Number of students per PDF file")
        options.addRow("Batch size", self.batch_spin)

        self.orientation_combo = QComboBox()
        self.orientation_combo.addItem("Use saved orientation", None)
        self.orientation_combo.addItem("Portrait", Orientation.PORTRAIT.value)
        self.orientation_combo.addItem("Landscape", Orientation.LANDSCAPE.value)
        override = self.settings.get_orientation_override()
        if override is not None:
            self.orientation_combo.setCurrentIndex(self.orientation_combo.findData(override.value))
        options.addRow("Orientation", self.orientation_combo)

        out_row = QHBoxLayout()
        self.out_entry = QLineEdit(self.settings.get_output_dir() or str(get_default_output_dir()))
        self.browse_out_btn = QPushButton()
        self.browse_out_btn.setIcon(MaterialIcons.folder_open())
        self.browse_out_btn.setStyleSheet(Styles.BUTTON_SECONDARY)
        self.browse_out_btn.clicked.connect(self._browse_output_dir)
        out_row.addWidget(self.out_entry, 1)
        out_row.addWidget(self.browse_out_btn)
        options.addRow("Output folder", out_row)
        root.addLayout(options)

        # Actions
        actions = QHBoxLayout()
        self.gen_btn = QPushButton("Generate PDFs")
        self.gen_btn.setIcon(MaterialIcons.file_pdf())
        self.gen_btn.setStyleSheet(Styles.BUTTON_PRIMARY)
        self.gen_btn.clicked.connect(self.start_generation)
        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.setIcon(MaterialIcons.cancel())
        self.cancel_btn.setStyleSheet(Styles.BUTTON_SECONDARY)
        self.cancel_btn.setEnabled(False)
        self.cancel_btn.clicked.connect(self.cancel_generation)
        actions.addWidget(self.gen_btn, 1)
        actions.addWidget(self.cancel_btn)
        root.addLayout(actions)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        self.status_label = QLabel("")
        self.status_label.setStyleSheet(Styles.STATUS_NORMAL)
        self.status_label.setWordWrap(True)
        root.addWidget(self.progress_bar)
        root.addWidget(self.status_label)

        self.console = ConsoleWidget()
        root.addWidget(self.console, 1)

    # ─────────────────────────────────────────────────────────────────────
    # State loading
    # ─────────────────────────────────────────────────────────────────────

    def _browse_state_file(self) -> None:
        start = self.settings.get_state_path() or str(Path.cwd())
        filename, _ = QFileDialog.getOpenFileName(
            self, "Open Backup", start, "JSON Files (*.json);;All Files (*)"
        )
        if filename:
            self.load_state_file(Path(filename))

    def load_state_file(self, path: Path) -> bool:
        """Load a backup and populate the class picker. Returns success."""
        try:
            state = load_app_state(path)
        except (StateLoadError, ValidationError) as e:
            self.console.append_log("ERROR", str(e))
            self._set_status(f"Could not load {path.name}", Styles.STATUS_ERROR)
            return False

        self.state_entry.setText(str(path))
        self.settings.set_state_path(str(path))
        self.set_state(state, base_dir=path.parent)
        self.console.append_log(
            "INFO", f"Loaded {len(state.classes)} classes and {len(state.students)} students"
        )
        return True

    def set_state(self, state: AppState, base_dir: Optional[Path] = None) -> None:
        self.app_state = state
        self.base_dir = base_dir
        self.class_combo.blockSignals(True)
        self.class_combo.clear()
        for class_config in state.classes:
            self.class_combo.addItem(class_config.class_name, class_config.id)
        self.class_combo.blockSignals(False)
        self._on_class_changed(self.class_combo.currentIndex())

    def current_class(self) -> Optional[ClassConfig]:
        if self.app_state is None:
            return None
        class_id = self.class_combo.currentData()
        return self.app_state.get_class(class_id) if class_id is not None else None

    def _on_class_changed(self, _index: int) -> None:
        self.student_list.blockSignals(True)
        self.student_list.clear()
        class_config = self.current_class()
        if class_config is not None:
            for student in self.app_state.students_in(class_config):
                label = f"{student.roll_no}. {student.name}" if student.roll_no else student.name
                item = QListWidgetItem(label)
                item.setData(Qt.ItemDataRole.UserRole, student.id)
                item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                item.setCheckState(Qt.CheckState.Checked)
                self.student_list.addItem(item)
        self.student_list.blockSignals(False)
        self._sync_select_all()

    # ─────────────────────────────────────────────────────────────────────
    # Selection
    # ─────────────────────────────────────────────────────────────────────

    def _items(self) -> List[QListWidgetItem]:
        return [self.student_list.item(i) for i in range(self.student_list.count())]

    def selected_students(self) -> List[Student]:
        """Checked students in list order."""
        if self.app_state is None:
            return []
        selected = []
        for item in self._items():
            if item.checkState() == Qt.CheckState.Checked:
                student = self.app_state.get_student(item.data(Qt.ItemDataRole.UserRole))
                if student is not None:
                    selected.append(student)
        return selected

    def _on_select_all_toggled(self, checked: bool) -> None:
        state = Qt.CheckState.Checked if checked else Qt.CheckState.Unchecked
        self.student_list.blockSignals(True)
        for item in self._items():
            item.setCheckState(state)
        self.student_list.blockSignals(False)
        self._update_selection_label()

    def _on_item_changed(self, _item: QListWidgetItem) -> None:
        self._sync_select_all()

    def _sync_select_all(self) -> None:
        items = self._items()
        all_checked = bool(items) and all(i.checkState() == Qt.CheckState.Checked for i in items)
        self.select_all.blockSignals(True)
        self.select_all.setChecked(all_checked)
        self.select_all.blockSignals(False)
        self._update_selection_label()

    def _update_selection_label(self) -> None:
        count = sum(1 for i in self._items() if i.checkState() == Qt.CheckState.Checked)
        self.selection_label.setText(f"{count} of {self.student_list.count()} selected")

    # ─────────────────────────────────────────────────────────────────────
    # Generation
    # ─────────────────────────────────────────────────────────────────────

    def _browse_output_dir(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Output Folder", self.out_entry.text())
        if folder:
            self.out_entry.setText(folder)

    def _orientation_override(self) -> Optional[Orientation]:
        value = self.orientation_combo.currentData()
        return Orientation.parse(value) if value else None

    def _orientation(self) -> Orientation:
        override = self._orientation_override()
        if override is not None:
            return override
        return self.app_state.orientation if self.app_state else Orientation.PORTRAIT

    def _validate_inputs(self) -> Optional[str]:
        """Validate generation inputs. Returns error message or None if valid."""
        if self.app_state is None:
            return "Load a backup file first."
        if self.current_class() is None:
            return "Select a class."
        if not self.selected_students():
            return "Select at least one student."
        if not self.out_entry.text().strip():
            return "Choose an output folder."
        return None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start_generation(self) -> bool:
        """Validate and start the batch export on a worker thread."""
        if self.is_running():
            return False

        validation_error = self._validate_inputs()
        if validation_error:
            self.console.append_log("ERROR", f"Validation failed: {validation_error}")
            QMessageBox.warning(self, "Cannot Generate", validation_error)
            return False

        class_config = self.current_class()
        students = self.selected_students()
        batch_size = self.batch_spin.value()
        orientation = self._orientation()
        output_dir = Path(self.out_entry.text().strip())

        self.settings.set_batch_size(batch_size)
        self.settings.set_output_dir(str(output_dir))
        self.settings.set_orientation_override(self._orientation_override())

        config = ExportConfig(batch_size=batch_size, output_dir=output_dir)
        self.exporter = BatchExporter(
            renderer=self.renderer_factory(self.base_dir),
            config=config,
            on_state=lambda state, message: self.state_changed.emit(state.value, message),
        )
        try:
            self.exporter.validate(students, class_config, batch_size)
        except InvalidJobError as e:
            self.console.append_log("ERROR", f"Validation failed: {e}")
            QMessageBox.warning(self, "Cannot Generate", str(e))
            return False

        self.console.append_log(
            "INFO",
            f"Generating {len(students)} marksheets for {class_config.class_name} "
            f"in batches of {batch_size}",
        )
        self.last_files = []
        self.set_ui_locked(True)
        self.progress_bar.setValue(0)
        self._set_status("Starting...", Styles.STATUS_NORMAL)

        exporter = self.exporter
        app_state = self.app_state

        def run_generation():
            success = False
            error: Optional[str] = None
            handler = attach_queue_handler(self.log_queue, PACKAGE_LOGGER)
            try:
                files = exporter.export_batch(
                    students, class_config, app_state.school_info, app_state.theme,
                    orientation, batch_size, progress=self.progress_changed.emit,
                )
                self.last_files = [f.path for f in files if f.path is not None]
                success = True
            except BatchCancelled as e:
                self.last_files = [f.path for f in e.saved_files if f.path is not None]
                error = str(e)
            except (InvalidJobError, BatchExportError) as e:
                if isinstance(e, BatchExportError):
                    self.last_files = [f.path for f in e.saved_files if f.path is not None]
                error = str(e)
            except Exception as e:
                logger.exception("Unexpected error during generation")
                error = f"Unexpected error: {e}"
            finally:
                detach_queue_handler(handler, PACKAGE_LOGGER)
                self.generation_finished.emit(success, error)

        self._thread = threading.Thread(target=run_generation, daemon=True)
        self._thread.start()
        return True

    def cancel_generation(self) -> None:
        if self.exporter is not None and self.is_running():
            self.console.append_log("WARNING", "Cancelling after the current student...")
            self.exporter.cancel()
            self.cancel_btn.setEnabled(False)

    def _on_progress(self, percent: int, message: str) -> None:
        self.progress_bar.setValue(percent)
        self._set_status(message, Styles.STATUS_NORMAL)

    def _on_state_changed(self, state: str, message: str) -> None:
        if state == BatchState.SAVING_BATCH_FILE.value:
            self.console.append_log("INFO", message)

    def _finish_generation(self, success: bool, error: Optional[str]) -> None:
        """Restore UI state and report the outcome."""
        self.set_ui_locked(False)
        self._drain_log_queue()

        if success:
            self.progress_bar.setValue(100)
            message = self.exporter.status_message if self.exporter else ""
            self._set_status(message, Styles.STATUS_SUCCESS)
            self.console.append_log("SUCCESS", f"{message} ({len(self.last_files)} file(s))")
            for path in self.last_files:
                self.console.append_log("INFO", f"Output: {path}")
            return

        if self.exporter is not None and self.exporter.state is BatchState.CANCELLED:
            self._set_status(error or "Generation cancelled.", Styles.STATUS_NORMAL)
            self.console.append_log("WARNING", f"Cancelled; {len(self.last_files)} file(s) kept")
            return

        msg = error or "Unknown error during generation."
        self._set_status(msg, Styles.STATUS_ERROR)
        self.console.append_log("ERROR", f"Generation failed: {msg}")
        QMessageBox.critical(self, "Generation Failed", msg)

    def set_ui_locked(self, locked: bool) -> None:
        """Lock or unlock inputs while a job runs."""
        self.gen_btn.setEnabled(not locked)
        self.gen_btn.setText("Generating..." if locked else "Generate PDFs")
        self.cancel_btn.setEnabled(locked)
        self.browse_state_btn.setEnabled(not locked)
        self.class_combo.setEnabled(not locked)
        self.select_all.setEnabled(not locked)
        self.student_list.setEnabled(not locked)
        self.batch_spin.setEnabled(not locked)
        self.orientation_combo.setEnabled(not locked)
        self.out_entry.setEnabled(not locked)
        self.browse_out_btn.setEnabled(not locked)

    def _set_status(self, text: str, style: str) -> None:
        self.status_label.setText(text)
        self.status_label.setStyleSheet(style)

    def _drain_log_queue(self) -> None:
        while True:
            try:
                message, level = self.log_queue.get_nowait()
            except queue.Empty:
                break
            self.console.append_log(level, message)

    def closeEvent(self, event):
        if self.exporter is not None and self.is_running():
            self.exporter.cancel()
        self._log_timer.stop()
        super().closeEvent(event)


def _default_renderer(base_dir: Optional[Path]) -> Renderer:
    return PillowRenderer(ExportConfig().supersample, base_dir=base_dir)
