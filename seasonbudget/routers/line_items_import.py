# seasonbudget/routers/line_items_import.py
from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from sqlmodel import Session

from seasonbudget.db import get_session
from seasonbudget.models import Budget
from seasonbudget.services.budgets import get_row
from seasonbudget.services.line_item_import import (
    LineItemImportError,
    import_line_items,
    template_csv,
)

router = APIRouter(prefix="/budgets/{budget_id}/line-items", tags=["line-items-import"])


@router.get("/template.csv")
def download_template(budget_id: int):
    return Response(
        content=template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="line_items_template.csv"'},
    )


@router.post("/import")
async def import_submit(
    budget_id: int,
    session: Session = Depends(get_session),
    file: UploadFile = File(...),
):
    try:
        get_row(session, Budget, budget_id)
    except LookupError as ex:
        raise HTTPException(status_code=404, detail=str(ex))

    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")  # tolerate the BOM spreadsheet exports add
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail=["File must be UTF-8 text (CSV)."])

    try:
        imported = import_line_items(session, budget_id, text)
    except LineItemImportError as ex:
        raise HTTPException(status_code=400, detail=ex.errors)
    return {"imported": imported}
