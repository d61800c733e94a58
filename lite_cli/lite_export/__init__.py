"""Public exports for the lite-export package."""

from .encoder import SUPPORTED_FORMATS, UTF8_BOM, write_csv, write_json, write_rows
from .exporter import export_query, infer_format, stream_export_table

__all__ = [
    "SUPPORTED_FORMATS",
    "UTF8_BOM",
    "export_query",
    "infer_format",
    "stream_export_table",
    "write_csv",
    "write_json",
    "write_rows",
]
