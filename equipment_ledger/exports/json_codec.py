"""
JSON Export Codec

The export document is the only on-disk contract of the ledger:

- keys sorted, 2-space indentation, UTF-8
- timestamps in ISO-8601 with an explicit UTC offset
- amounts as exact decimal strings ("1234.50"); JSON numbers are also
  accepted when decoding
- absent optional fields (periodeDebut, materielNom...) omitted

Decoding is all-or-nothing: a document that fails validation anywhere
raises ParseError and yields no operation at all.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from equipment_ledger.exports.files import (
    ParseError,
    generate_file_name,
    read_source,
    write_destination,
)
from equipment_ledger.models.export import ComptabiliteExport
from equipment_ledger.models.operation import utc_now


def dumps_export(export: ComptabiliteExport) -> str:
    """Serialize an export to its canonical JSON text."""
    data = export.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def loads_export(document: Union[str, bytes]) -> ComptabiliteExport:
    """
    Parse an export document.

    Raises:
        ParseError: malformed JSON, missing fields, undecodable dates or
            amounts. The message lists the offending locations.
    """
    try:
        return ComptabiliteExport.model_validate_json(document)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'document'}: {err['msg']}"
            for err in e.errors()
        )
        raise ParseError(f"Invalid export document ({problems})") from e


def read_export(path: Path) -> ComptabiliteExport:
    """
    Read and parse an export file.

    Raises:
        AccessError: the file cannot be read
        ParseError: the content is not a valid export
    """
    return loads_export(read_source(path))


def write_export(
    export: ComptabiliteExport,
    directory: Path,
    now: Optional[datetime] = None,
    prefix: str = "comptabilite",
) -> Path:
    """
    Write an export as a timestamped JSON file in directory.

    Raises:
        WriteError: the file cannot be written
    """
    file_name = generate_file_name("json", now or utc_now(), prefix=prefix)
    return write_destination(directory, file_name, dumps_export(export).encode("utf-8"))
