"""Output generation for query results.

This package assembles the uniform ``QueryResult`` envelope and renders
results as downloadable JSON or CSV documents.
"""

from spreadsheet_query.output.exporter import ExportedDocument, ResultExporter
from spreadsheet_query.output.result_formatter import ResultFormatter

__all__ = [
    "ExportedDocument",
    "ResultExporter",
    "ResultFormatter",
]
