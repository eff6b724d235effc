"""Spreadsheet decoding, header validation and template generation."""
