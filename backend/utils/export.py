# utils/export.py
import logging
from typing import Any, Dict, List, Sequence

import pandas as pd
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Excel opens UTF-8 CSV files correctly only with a BOM
UTF8_BOM = "\ufeff"


def fr_date(value) -> str:
    """dd/mm/yyyy as shown in the French back-office, '' for missing dates."""
    return value.strftime("%d/%m/%Y") if value else ""


def csv_response(records: List[Dict[str, Any]], columns: Sequence[str], filename: str) -> Response:
    df = pd.DataFrame.from_records(records, columns=list(columns))
    body = UTF8_BOM + df.to_csv(index=False)
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def export_error(kind: str, exc: Exception) -> JSONResponse:
    logger.exception("%s export failed: %s", kind, exc)
    return JSONResponse(
        status_code=500,
        content={"message": f"Error exporting {kind}", "error": str(exc)},
    )
