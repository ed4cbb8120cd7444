# freightmatch/routers/save_new_load.py
from freightmatch.data import data_loader
from freightmatch.models import Load, LoadStatus
from fastapi import APIRouter, HTTPException, Body, File, UploadFile
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
import pandas as pd
from io import BytesIO
from pydantic import ValidationError

logger = logging.getLogger(__name__)
router = APIRouter()

REQUIRED_SHEET_COLUMNS = [
    "loadProviderName", "loadingPlace", "unloadingPlace", "vehicleSize", "totalWeight",
]

TRUE_VALUES = {"true", "yes", "y", "1"}


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"Field '{field}': {first.get('msg')}"


def _new_load(payload: Dict[str, Any], load_id: str) -> Load:
    record = dict(payload)
    record["loadId"] = load_id
    record["status"] = LoadStatus.POSTED.value
    record.pop("assignedVehicleId", None)
    record.setdefault("createdAt", datetime.now(timezone.utc).isoformat())
    load = Load.model_validate(record)
    # XBOW supported loads always carry platform commission.
    if load.with_xbow_support:
        load = load.model_copy(update={"commission_applicable": True})
    return load


@router.post("/add-load", summary="Add a new load")
async def add_load(payload: Dict[str, Any] = Body(...)) -> dict:
    if "vehicleRequirement" not in payload:
        raise HTTPException(
            status_code=400,
            detail={"status": False, "message": "Missing field: vehicleRequirement"}
        )

    current_loads = data_loader.get_loads()
    new_load_id = data_loader.next_record_id(current_loads, "loadId", "L")

    try:
        new_load = _new_load(payload, new_load_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"status": False, "message": _validation_message(e)})

    current_loads.append(data_loader.to_record(new_load))
    data_loader.save_loads(current_loads)

    logger.info(f"Load {new_load_id} added for provider '{new_load.load_provider_name}'")
    return {"status": True, "message": "Load added successfully", "load": new_load}


def _cell(row: Dict[str, Any], column: str) -> Optional[Any]:
    value = row.get(column)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    if hasattr(value, "item") and not isinstance(value, pd.Timestamp):
        return value.item()  # numpy scalar
    return value


def _text(row: Dict[str, Any], column: str) -> str:
    value = _cell(row, column)
    return "" if value is None else str(value).strip()


def _flag(row: Dict[str, Any], column: str) -> bool:
    value = _cell(row, column)
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES if value is not None else False


def _date(row: Dict[str, Any], column: str) -> Optional[str]:
    value = _cell(row, column)
    if isinstance(value, pd.Timestamp):
        return value.strftime('%Y-%m-%d')
    return str(value) if value is not None else None


def _row_to_payload(row: Dict[str, Any]) -> Dict[str, Any]:
    """One spreadsheet row describes one load carrying a single material."""
    payload = {
        "loadProviderId": _text(row, "loadProviderId"),
        "loadProviderName": _text(row, "loadProviderName"),
        "loadingLocation": {
            "place": _text(row, "loadingPlace"),
            "district": _text(row, "loadingDistrict"),
            "state": _text(row, "loadingState"),
            "pincode": _text(row, "loadingPincode"),
        },
        "unloadingLocation": {
            "place": _text(row, "unloadingPlace"),
            "district": _text(row, "unloadingDistrict"),
            "state": _text(row, "unloadingState"),
            "pincode": _text(row, "unloadingPincode"),
        },
        "vehicleRequirement": {
            "vehicleType": _text(row, "vehicleType"),
            "size": _cell(row, "vehicleSize"),
            "trailerType": _cell(row, "trailerType"),
        },
        "materials": [{
            "name": _text(row, "materialName"),
            "totalWeight": _cell(row, "totalWeight"),
        }],
        "loadingDate": _date(row, "loadingDate"),
        "loadingTime": _cell(row, "loadingTime"),
        "paymentTerms": _cell(row, "paymentTerms"),
        "withXBowSupport": _flag(row, "withXBowSupport"),
        "rate": _cell(row, "rate"),
    }
    if payload["loadingTime"] is not None:
        payload["loadingTime"] = str(payload["loadingTime"])
    return payload


def _read_sheet(file_name: str, contents: bytes) -> pd.DataFrame:
    if file_name.endswith(".csv"):
        return pd.read_csv(BytesIO(contents))
    return pd.read_excel(BytesIO(contents))


@router.post("/upload-loads-excel", summary="Upload loads from an Excel or CSV file")
async def upload_loads_excel(file: UploadFile = File(...)):

    if not file.filename or not file.filename.endswith(('.xlsx', '.xls', '.csv')):
        raise HTTPException(status_code=400, detail={"status": False, "message": "Invalid file type. Please upload an Excel (.xlsx or .xls) or CSV file."})

    try:
        contents = await file.read()
        sheet = _read_sheet(file.filename, contents)
    except Exception as e:
        logger.error(f"Error reading uploaded file {file.filename}: {e}")
        raise HTTPException(status_code=400, detail={"status": False, "message": f"Error processing file: {str(e)}"})

    for col in REQUIRED_SHEET_COLUMNS:
        if col not in sheet.columns:
            raise HTTPException(
                status_code=400,
                detail={"status": False, "message": f"Missing required column in file: {col}"}
            )

    current_loads = data_loader.get_loads()
    newly_added_loads: List[Load] = []
    processing_errors = []

    for index, row in sheet.iterrows():
        row_data = row.to_dict()
        sheet_row = index + 2

        missing_fields_in_row = [field for field in REQUIRED_SHEET_COLUMNS if _cell(row_data, field) is None]
        if missing_fields_in_row:
            processing_errors.append({"row": sheet_row, "error": f"Missing data for fields: {', '.join(missing_fields_in_row)}"})
            continue

        new_load_id = data_loader.next_record_id(current_loads, "loadId", "L")
        try:
            new_load = _new_load(_row_to_payload(row_data), new_load_id)
        except ValidationError as e:
            processing_errors.append({"row": sheet_row, "error": _validation_message(e)})
            continue

        current_loads.append(data_loader.to_record(new_load))
        newly_added_loads.append(new_load)

    if newly_added_loads:
        data_loader.save_loads(current_loads)

    logger.info(f"Processed {file.filename}: {len(newly_added_loads)} added, {len(processing_errors)} rejected")
    return {
        "status": True,
        "message": f"Processed file. Added {len(newly_added_loads)} loads.",
        "added_loads": newly_added_loads,
        "errors": processing_errors
    }
