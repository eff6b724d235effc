"""Spreadsheet bulk upload of students and colleges."""

__version__ = "0.1.0"
