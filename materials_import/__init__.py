"""Materials template importer: element/particular workbooks -> validated import reports."""

__version__ = "0.1.0"
