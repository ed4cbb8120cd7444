# freightmatch/data/data_loader.py

import json
import os
import re
import logging
from typing import List, Dict, Any

from pydantic import BaseModel, ValidationError

from freightmatch.config import settings
from freightmatch.models import Commission, Load, Vehicle

logger = logging.getLogger(__name__)

LOADS_FILE = "loads.json"
VEHICLES_FILE = "vehicles.json"
COMMISSIONS_FILE = "commissions.json"


def _data_path(file_name: str) -> str:
    # Resolved on every call so DATA_DIR can be changed at runtime.
    return os.path.join(settings.DATA_DIR, file_name)


def flatten_records(raw_data: Any) -> List[Dict[str, Any]]:
    """
    Flattens a potentially nested list structure read from a JSON file.
    Handles cases like [{}, [{}, {}], {}] into [{}, {}, {}, {}].
    """
    flattened_list = []
    if not isinstance(raw_data, list):
        logger.warning("Data read from file is not a list. Returning empty list.")
        return []

    for item_or_sublist in raw_data:
        if isinstance(item_or_sublist, list):
            for record in item_or_sublist:
                if isinstance(record, dict):
                    flattened_list.append(record)
                else:
                    logger.warning(f"Skipping non-dictionary item in sublist: {type(record)}")
        elif isinstance(item_or_sublist, dict):
            flattened_list.append(item_or_sublist)
        else:
            logger.warning(f"Skipping non-dictionary, non-list item in main list: {type(item_or_sublist)}")
    return flattened_list


def _read_records(file_name: str) -> List[Dict[str, Any]]:
    path = _data_path(file_name)
    try:
        if os.path.exists(path):
            with open(path, 'r', encoding='utf-8') as f:
                return flatten_records(json.load(f))
        logger.info(f"Data file {path} not found. Returning empty list.")
    except json.JSONDecodeError:
        logger.error(f"Error decoding JSON from {path}")
    except OSError as e:
        logger.error(f"Error reading {path}: {e}")
    return []


def _write_records(file_name: str, records: List[Dict[str, Any]]):
    """Saves the entire list to the JSON file, overwriting previous content."""
    path = _data_path(file_name)
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=4, ensure_ascii=False)
        logger.info(f"{len(records)} records saved to {path}")
    except OSError as e:
        logger.error(f"Error saving records to {path}: {e}")
        raise


def get_loads() -> List[Dict[str, Any]]:
    return _read_records(LOADS_FILE)


def save_loads(loads_to_save: List[Dict[str, Any]]):
    _write_records(LOADS_FILE, loads_to_save)


def get_vehicles() -> List[Dict[str, Any]]:
    return _read_records(VEHICLES_FILE)


def save_vehicles(vehicles_to_save: List[Dict[str, Any]]):
    _write_records(VEHICLES_FILE, vehicles_to_save)


def get_commissions() -> List[Dict[str, Any]]:
    return _read_records(COMMISSIONS_FILE)


def save_commissions(commissions_to_save: List[Dict[str, Any]]):
    _write_records(COMMISSIONS_FILE, commissions_to_save)


def replace_record(records: List[Dict[str, Any]], key: str, updated: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [updated if record.get(key) == updated.get(key) else record for record in records]


def next_record_id(records: List[Dict[str, Any]], key: str, prefix: str, start: int = 100) -> str:
    """Next id of the form <prefix><n>, one past the highest number in use."""
    numeric_ids = []
    for record in records:
        record_id = record.get(key)
        if record_id:
            match = re.match(r"[A-Za-z]*(\d+)", str(record_id))
            if match:
                numeric_ids.append(int(match.group(1)))

    max_id_num = max(numeric_ids) if numeric_ids else start
    return f"{prefix}{max_id_num + 1}"


def delete_load_by_id_from_file(load_id: str) -> bool:
    """
    Deletes a load from the loads file by its ID.
    Returns True if the load was found and deleted, False otherwise.
    """
    current_loads = get_loads()
    if not current_loads:
        logger.warning("Load list is empty or could not be loaded.")
        return False

    logger.debug(f"Attempting to delete load with ID: {load_id}")

    updated_loads = [load for load in current_loads if load.get("loadId") != load_id]

    if len(updated_loads) < len(current_loads):
        save_loads(updated_loads)
        logger.info(f"Load with ID '{load_id}' deleted.")
        return True
    else:
        logger.warning(f"Load with ID '{load_id}' not found. No changes made.")
        return False


def _validated(records: List[Dict[str, Any]], model, label: str) -> list:
    items = []
    for record in records:
        try:
            items.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {label} record {record.get(label + 'Id', 'N/A')}: {e}")
    return items


def get_load_models() -> List[Load]:
    return _validated(get_loads(), Load, "load")


def get_vehicle_models() -> List[Vehicle]:
    return _validated(get_vehicles(), Vehicle, "vehicle")


def get_commission_models() -> List[Commission]:
    return _validated(get_commissions(), Commission, "commission")


def to_record(item: BaseModel) -> Dict[str, Any]:
    return item.model_dump(mode="json", by_alias=True, exclude_none=True)
