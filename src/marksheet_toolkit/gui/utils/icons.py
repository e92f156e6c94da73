"""Material Design icons via QtAwesome."""
import qtawesome as qta
from marksheet_toolkit.gui.styles.theme import Colors


class MaterialIcons:
    """Centralized Material Design icon definitions using QtAwesome."""

    @staticmethod
    def folder_open():
        """Browse/Open folder icon."""
        return qta.icon('mdi6.folder-open-outline', color=Colors.TEXT_SECONDARY)

    @staticmethod
    def file_document():
        """State file picker icon."""
        return qta.icon('mdi6.file-document-outline', color=Colors.TEXT_SECONDARY)

    @staticmethod
    def file_pdf():
        """Generate PDFs icon."""
        return qta.icon('mdi6.file-pdf-box', color=Colors.TEXT_ON_PRIMARY)

    @staticmethod
    def cancel():
        """Cancel running job icon."""
        return qta.icon('mdi6.close-circle-outline', color=Colors.ERROR)
