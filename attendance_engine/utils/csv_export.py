"""
CSV export utilities
"""
import csv
import io
from enum import Enum
from typing import Any, Dict, Iterable, List
from fastapi.responses import StreamingResponse


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def stream_csv(headers: List[str], rows: Iterable[Dict[str, Any]], filename: str = "export.csv") -> StreamingResponse:
    """
    Stream rows as a CSV attachment

    Columns missing from a row are written empty; None is empty, booleans are yes/no
    and enums are written by value.

    Args:
        headers: Column names, in output order
        rows: Dictionaries keyed by column name
        filename: Filename for the Content-Disposition header
    """
    def generate():
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=headers, quoting=csv.QUOTE_MINIMAL)

        writer.writeheader()
        yield buffer.getvalue()

        for row in rows:
            buffer.seek(0)
            buffer.truncate(0)
            writer.writerow({header: _cell(row.get(header)) for header in headers})
            yield buffer.getvalue()

    return StreamingResponse(
        generate(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
