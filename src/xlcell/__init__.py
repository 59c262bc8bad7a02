"""xlcell: read and write cells in Office Open XML spreadsheet packages."""

__version__ = "0.1.0"
