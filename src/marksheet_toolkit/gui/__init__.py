"""PySide6 bulk marksheet generator."""
