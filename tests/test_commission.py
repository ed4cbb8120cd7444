import pytest

from freightmatch.core.commission import (
    commission_report_csv,
    filter_by_status,
    mark_deducted,
    mark_paid,
    open_commission,
    summarize,
)
from freightmatch.errors import InvalidTransition
from freightmatch.models import CommissionStatus


@pytest.fixture
def commission(make_load, make_vehicle):
    load = make_load(withXBowSupport=True, rate=42000, loadProviderId="LP1")
    return open_commission(load, make_vehicle("V1", ownerId="VO1"), commission_id="C101", agreed_price=40000)


def test_commission_is_five_percent_of_agreed_price(commission):
    assert commission.commission_rate == 0.05
    assert commission.total_amount == 40000
    assert commission.commission_amount == 2000
    assert commission.status == CommissionStatus.PENDING
    assert commission.vehicle_owner_id == "VO1"
    assert commission.load_provider_id == "LP1"


def test_commission_falls_back_to_load_rate(make_load, make_vehicle):
    load = make_load(withXBowSupport=True, rate=42000)
    opened = open_commission(load, make_vehicle("V1"), commission_id="C1")
    assert opened.commission_amount == 2100


def test_no_commission_without_platform_support(make_load, make_vehicle):
    assert open_commission(make_load(rate=42000), make_vehicle("V1"), commission_id="C1") is None


def test_no_commission_without_amount(make_load, make_vehicle):
    assert open_commission(make_load(withXBowSupport=True), make_vehicle("V1"), commission_id="C1") is None


def test_commission_states_move_forward_only(commission):
    with pytest.raises(InvalidTransition):
        mark_paid(commission)

    deducted = mark_deducted(commission)
    assert deducted.status == CommissionStatus.DEDUCTED
    assert deducted.deducted_at is not None
    with pytest.raises(InvalidTransition):
        mark_deducted(deducted)

    paid = mark_paid(deducted)
    assert paid.status == CommissionStatus.PAID
    assert paid.paid_at is not None


def test_summary_and_status_filter(commission):
    second = commission.model_copy(update={"commission_id": "C102", "commission_amount": 500})
    ledger = [mark_deducted(commission), second]

    summary = summarize(ledger)
    assert summary.total_commission == 2500
    assert summary.pending_commission == 500
    assert summary.deducted_commission == 2000
    assert summary.paid_commission == 0

    assert [c.commission_id for c in filter_by_status(ledger, CommissionStatus.PENDING)] == ["C102"]
    assert len(filter_by_status(ledger, None)) == 2


def test_report_csv(commission):
    lines = commission_report_csv([commission]).strip().splitlines()
    assert lines[0].startswith("commissionId,loadId,vehicleId")
    assert lines[1].startswith("C101,L1,V1")


def test_empty_report_has_header():
    assert commission_report_csv([]).strip().startswith("commissionId")


def test_timestamps_carry_utc_offset(commission):
    assert commission.created_at.endswith("+00:00")
    paid = mark_paid(mark_deducted(commission))
    assert paid.deducted_at.endswith("+00:00")
    assert paid.paid_at.endswith("+00:00")
