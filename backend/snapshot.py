import json
import logging
from pathlib import Path

from pydantic import ValidationError

from backend.config import SNAPSHOT_KEY, SNAPSHOT_PATH
from models import Plan

logger = logging.getLogger(__name__)


def _read_slots(path):
    path = Path(path)
    if not path.exists():
        return {}

    try:
        slots = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Failed to read snapshot %s: %s", path, e)
        return {}

    return slots if isinstance(slots, dict) else {}


def save_snapshot(plan, path=SNAPSHOT_PATH):
    path = Path(path)
    slots = _read_slots(path)
    slots[SNAPSHOT_KEY] = plan.to_json_dict()

    path.write_text(json.dumps(slots, indent=2), encoding="utf-8")
    logger.info("Seating snapshot saved to %s (%d students)", path, plan.total_students)


def load_snapshot(path=SNAPSHOT_PATH):
    data = _read_slots(path).get(SNAPSHOT_KEY)
    if not data:
        return None

    try:
        return Plan.model_validate(data)
    except ValidationError as e:
        logger.error("Snapshot %s is not a valid seating plan: %s", path, e)
        return None


def clear_snapshot(path=SNAPSHOT_PATH):
    path = Path(path)
    slots = _read_slots(path)
    if slots.pop(SNAPSHOT_KEY, None) is None:
        return

    path.write_text(json.dumps(slots, indent=2), encoding="utf-8")
    logger.info("Seating snapshot cleared")
