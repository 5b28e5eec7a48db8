from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from billrecon.models.bill import PaymentData
from billrecon.models.summary import BillFilters
from web.deps import get_bill_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bills")


def _filters(
    bill_type: str,
    payment_status: str,
    project_id: int | None,
    supplier_id: int | None,
    search: str,
) -> BillFilters:
    return BillFilters(
        bill_type=bill_type,
        payment_status=payment_status,
        project_id=project_id,
        supplier_id=supplier_id,
        search=search,
    )


@router.get("")
async def bill_list(
    request: Request,
    bill_type: str = "all",
    payment_status: str = "all",
    project_id: int | None = None,
    supplier_id: int | None = None,
    search: str = "",
):
    bills = get_bill_service(request).list_bills(_filters(bill_type, payment_status, project_id, supplier_id, search))
    logger.info("GET /bills: %d bill(s)", len(bills))
    return [bill.model_dump(mode="json") for bill in bills]


@router.get("/grouped")
async def bill_grouped(
    request: Request,
    payment_status: str = "all",
    project_id: int | None = None,
    supplier_id: int | None = None,
    search: str = "",
):
    # Grouping needs both bill types, so there is no bill_type filter here.
    filters = _filters("all", payment_status, project_id, supplier_id, search)
    result = get_bill_service(request).get_grouped_bills(filters)
    logger.info(
        "GET /bills/grouped: %d vendor bill(s), %d orphan(s)",
        len(result.grouped_bills),
        len(result.orphan_bills),
    )
    return result.to_dict()


@router.get("/summary")
async def bill_summary(
    request: Request,
    bill_type: str = "all",
    payment_status: str = "all",
    project_id: int | None = None,
    supplier_id: int | None = None,
    search: str = "",
):
    summary = get_bill_service(request).get_summary(
        _filters(bill_type, payment_status, project_id, supplier_id, search)
    )
    return summary.model_dump(mode="json", by_alias=True)


@router.post("/sync")
async def bill_sync(request: Request):
    report = get_bill_service(request).run_all_sync()
    logger.info("POST /bills/sync: %s", report.model_dump())
    return report.model_dump(mode="json", by_alias=True)


@router.get("/{bill_id}")
async def bill_detail(request: Request, bill_id: int):
    bill_service = get_bill_service(request)
    bill = bill_service.get_bill(bill_id)
    if bill is None:
        logger.warning("Bill not found: id=%s", bill_id)
        return JSONResponse({"error": "Bill not found"}, status_code=404)
    data = bill.model_dump(mode="json")
    data["payments"] = [payment.model_dump(mode="json") for payment in bill_service.list_payments(bill_id)]
    return data


@router.post("/{bill_id}/payment")
async def bill_record_payment(request: Request, bill_id: int, payment: PaymentData):
    bill_service = get_bill_service(request)
    if bill_service.get_bill(bill_id) is None:
        logger.warning("Payment on missing bill: id=%s", bill_id)
        return JSONResponse({"error": "Bill not found"}, status_code=404)
    try:
        bill = bill_service.record_payment(bill_id, payment)
    except ValueError as exc:
        logger.warning("Payment rejected on bill %s: %s", bill_id, exc)
        return JSONResponse({"error": str(exc)}, status_code=400)
    return bill.model_dump(mode="json")
