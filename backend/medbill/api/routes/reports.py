"""CSV downloads for the Reports page. Admin and accountant only."""
from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, require_role
from medbill.models.user import User
from medbill.services import report_service

router = APIRouter()


def _csv_response(content: str, name: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={name}_{date.today()}.csv"},
    )


@router.get("/invoices.csv")
def export_invoices_csv(db: Session = Depends(get_db), current_user: User = Depends(require_role("admin", "accountant"))):
    """Export all invoices as CSV file."""
    return _csv_response(report_service.invoices_csv(db), "invoices")


@router.get("/inventory.csv")
def export_inventory_csv(db: Session = Depends(get_db), current_user: User = Depends(require_role("admin", "accountant"))):
    """Export inventory as CSV file."""
    return _csv_response(report_service.inventory_csv(db), "inventory")
