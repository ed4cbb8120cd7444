# freightmatch/routers/commission.py
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response
from typing import Any, Dict, Optional

from freightmatch.core.commission import (
    commission_report_csv,
    filter_by_status,
    mark_deducted,
    mark_paid,
    summarize,
)
from freightmatch.data import data_loader
from freightmatch.errors import InvalidTransition
from freightmatch.models import CommissionStatus

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", summary="List commissions with totals per state")
async def list_commissions(commission_status: Optional[CommissionStatus] = None) -> Dict[str, Any]:
    commissions = data_loader.get_commission_models()
    return {
        "status": True,
        "summary": summarize(commissions),
        "commissions": filter_by_status(commissions, commission_status),
    }


@router.get("/report", summary="Download the commission ledger as CSV")
async def download_commission_report():
    csv_text = commission_report_csv(data_loader.get_commission_models())
    file_name = f"commission_report_{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.csv"
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


def _advance(commission_id: str, step) -> Dict[str, Any]:
    commission = next(
        (item for item in data_loader.get_commission_models() if item.commission_id == commission_id), None
    )
    if commission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": False, "message": f"Commission with ID '{commission_id}' not found."}
        )
    try:
        updated = step(commission)
    except InvalidTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"status": False, "message": str(e)})

    data_loader.save_commissions(
        data_loader.replace_record(data_loader.get_commissions(), "commissionId", data_loader.to_record(updated))
    )
    logger.info(f"Commission {commission_id} is now {updated.status.value}")
    return {"status": True, "commission": updated}


@router.patch("/{commission_id}/deduct", summary="Mark a commission as deducted")
async def deduct_commission(commission_id: str) -> Dict[str, Any]:
    return _advance(commission_id, mark_deducted)


@router.patch("/{commission_id}/paid", summary="Mark a commission as paid")
async def pay_commission(commission_id: str) -> Dict[str, Any]:
    return _advance(commission_id, mark_paid)
