"""DocTransform - fill Word and Excel templates from spreadsheet rows."""

__version__ = "0.1.0"
