# freightmatch/core/commission.py
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import pandas as pd

from freightmatch.config import settings
from freightmatch.errors import InvalidTransition
from freightmatch.models import Commission, CommissionStatus, CommissionSummary, Load, Vehicle

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "commissionId", "loadId", "vehicleId", "loadProviderId", "vehicleOwnerId",
    "totalAmount", "commissionRate", "commissionAmount", "status",
    "createdAt", "deductedAt", "paidAt",
]


def is_commission_applicable(load: Load) -> bool:
    return load.with_xbow_support or load.commission_applicable


def open_commission(
    load: Load,
    vehicle: Vehicle,
    commission_id: str,
    agreed_price: Optional[float] = None,
    rate: Optional[float] = None,
) -> Optional[Commission]:
    """
    Creates a pending commission for an XBOW supported load.

    The commission is charged on the agreed price, falling back to the load's
    rate. Returns None when the load carries no commission or no amount is known.
    """
    if not is_commission_applicable(load):
        return None

    total_amount = agreed_price if agreed_price is not None else load.rate
    if total_amount is None:
        logger.warning(f"Load {load.load_id} is XBOW supported but has no agreed price or rate. No commission opened.")
        return None

    rate = settings.COMMISSION_RATE if rate is None else rate
    commission = Commission(
        commission_id=commission_id,
        load_id=load.load_id,
        vehicle_id=vehicle.vehicle_id,
        load_provider_id=load.load_provider_id,
        vehicle_owner_id=vehicle.owner_id,
        total_amount=total_amount,
        commission_rate=rate,
        commission_amount=round(total_amount * rate, 2),
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    logger.info(f"Commission {commission_id} opened for load {load.load_id}: {commission.commission_amount}")
    return commission


def mark_deducted(commission: Commission) -> Commission:
    if commission.status != CommissionStatus.PENDING:
        raise InvalidTransition("commission", commission.status.value, CommissionStatus.DEDUCTED.value)
    return commission.model_copy(update={
        "status": CommissionStatus.DEDUCTED,
        "deducted_at": datetime.now(timezone.utc).isoformat(),
    })


def mark_paid(commission: Commission) -> Commission:
    if commission.status != CommissionStatus.DEDUCTED:
        raise InvalidTransition("commission", commission.status.value, CommissionStatus.PAID.value)
    return commission.model_copy(update={
        "status": CommissionStatus.PAID,
        "paid_at": datetime.now(timezone.utc).isoformat(),
    })


def summarize(commissions: Iterable[Commission]) -> CommissionSummary:
    summary = CommissionSummary()
    for commission in commissions:
        summary.total_commission += commission.commission_amount
        if commission.status == CommissionStatus.PENDING:
            summary.pending_commission += commission.commission_amount
        elif commission.status == CommissionStatus.DEDUCTED:
            summary.deducted_commission += commission.commission_amount
        else:
            summary.paid_commission += commission.commission_amount
    return summary


def filter_by_status(commissions: Iterable[Commission], status: Optional[CommissionStatus]) -> List[Commission]:
    if status is None:
        return list(commissions)
    return [commission for commission in commissions if commission.status == status]


def commission_report_csv(commissions: Iterable[Commission]) -> str:
    """Renders the commission ledger as CSV, one row per commission."""
    rows = [commission.model_dump(mode="json", by_alias=True) for commission in commissions]
    report = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    return report.to_csv(index=False)
