"""Export and import package."""

from equipment_ledger.exports.files import (
    AccessError,
    ExportError,
    ParseError,
    WriteError,
    generate_file_name,
)
from equipment_ledger.exports.json_codec import (
    dumps_export,
    loads_export,
    read_export,
    write_export,
)
from equipment_ledger.exports.text_report import (
    period_label,
    render_report,
    write_report,
)

__all__ = [
    # Errors
    "AccessError",
    "ExportError",
    "ParseError",
    "WriteError",
    # JSON
    "dumps_export",
    "generate_file_name",
    "loads_export",
    "read_export",
    "write_export",
    # Report
    "period_label",
    "render_report",
    "write_report",
]
