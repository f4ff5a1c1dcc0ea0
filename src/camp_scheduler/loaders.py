"""Loading and saving class catalogs and camper rosters."""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from .constants import CLASS_RECORD_KEYS, ROSTER_FIXED_COLUMNS
from .exceptions import InvalidDataError
from .models import Camper, ClassCatalog, ClassCatalogEntry
from .validators import (
    validate_age,
    validate_allowed_periods,
    validate_class_title,
    validate_cutoff,
    validate_rank,
    validate_swim_level,
)

logger = logging.getLogger(__name__)

SPREADSHEET_SUFFIXES = {".xlsx", ".xls"}


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise InvalidDataError("file not found", source=str(path))
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidDataError(f"not valid JSON ({e})", source=str(path)) from e


def load_catalog(path: str | Path) -> ClassCatalog:
    """Load a class catalog from JSON.

    Accepts a list of class records or an object with a "classes" list.

    Raises:
        InvalidDataError: If a record is malformed
        DuplicateClassTitleError: If a title repeats
    """
    path = Path(path)
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("classes")
    if not isinstance(data, list):
        raise InvalidDataError("expected a list of classes", source=str(path))

    entries = []
    for index, record in enumerate(data, start=1):
        entries.append(_parse_class_record(record, str(path), index))

    catalog = ClassCatalog(entries)
    logger.info(f"Loaded {len(catalog)} classes from {path}")
    return catalog


def _parse_class_record(record: Any, source: str, row: int) -> ClassCatalogEntry:
    if not isinstance(record, dict):
        raise InvalidDataError("class record must be an object", source=source, row=row)

    extra = sorted(k for k in record if k not in CLASS_RECORD_KEYS)
    if extra:
        logger.warning(f"{source}: record {row} has unknown keys ignored: {', '.join(extra)}")

    valid, msg = validate_class_title(record.get("title"))
    if not valid:
        raise InvalidDataError(msg, source=source, row=row)

    valid, msg = validate_cutoff(record.get("single_period_cutoff", 10))
    if not valid:
        raise InvalidDataError(msg, source=source, row=row)

    periods = record.get("allowed_periods", [])
    if not isinstance(periods, list):
        raise InvalidDataError("allowed_periods must be a list", source=source, row=row)
    valid, msg = validate_allowed_periods(periods)
    if not valid:
        raise InvalidDataError(msg, source=source, row=row)

    try:
        return ClassCatalogEntry.from_dict(record)
    except (TypeError, ValueError) as e:
        raise InvalidDataError(str(e), source=source, row=row) from e


def save_catalog(catalog: ClassCatalog, path: str | Path) -> None:
    """Save a catalog as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"classes": catalog.to_records()}, f, indent=2, ensure_ascii=False)


def load_roster(path: str | Path, catalog: ClassCatalog) -> list[Camper]:
    """Load a camper roster.

    JSON rosters are lists of records with name, age, swim_level and a
    "rankings" object (title -> rank). CSV and Excel rosters have the
    columns name, age, swim_level followed by one rank column per class.

    Raises:
        InvalidDataError: If a record is malformed
        InvalidRankingError: If a ranking is incomplete or inconsistent
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        records = _roster_records_from_json(path)
    elif suffix == ".csv" or suffix in SPREADSHEET_SUFFIXES:
        records = _roster_records_from_table(path, catalog)
    else:
        raise InvalidDataError(
            f"unsupported roster format '{path.suffix}' (expected .json, .csv or .xlsx)",
            source=str(path),
        )

    campers = [
        _parse_camper_record(record, catalog, str(path), index)
        for index, record in enumerate(records, start=1)
    ]
    logger.info(f"Loaded {len(campers)} campers from {path}")
    return campers


def _roster_records_from_json(path: Path) -> list[dict[str, Any]]:
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("campers")
    if not isinstance(data, list):
        raise InvalidDataError("expected a list of campers", source=str(path))
    return data


def _roster_records_from_table(path: Path, catalog: ClassCatalog) -> list[dict[str, Any]]:
    if not path.exists():
        raise InvalidDataError("file not found", source=str(path))

    if path.suffix.lower() in SPREADSHEET_SUFFIXES:
        df = pd.read_excel(path)
    else:
        df = pd.read_csv(path)
    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in ROSTER_FIXED_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidDataError(f"missing columns: {', '.join(missing)}", source=str(path))

    class_columns = [c for c in df.columns if c not in ROSTER_FIXED_COLUMNS]
    unknown = [c for c in class_columns if c not in catalog]
    if unknown:
        raise InvalidDataError(
            f"columns are not catalog classes: {', '.join(unknown)}", source=str(path)
        )

    records = []
    for _, row in df.iterrows():
        records.append(
            {
                "name": row["name"],
                "age": row["age"],
                "swim_level": row["swim_level"],
                "rankings": {title: row[title] for title in class_columns},
            }
        )
    return records


def _parse_camper_record(
    record: Any, catalog: ClassCatalog, source: str, row: int
) -> Camper:
    if not isinstance(record, dict):
        raise InvalidDataError("camper record must be an object", source=source, row=row)

    name = record.get("name")
    if name is None or pd.isna(name) or not str(name).strip():
        raise InvalidDataError("camper name is empty", source=source, row=row)
    name = str(name).strip()

    valid, msg = validate_age(record.get("age"))
    if not valid:
        raise InvalidDataError(f"{name}: {msg}", source=source, row=row)

    valid, msg = validate_swim_level(record.get("swim_level"))
    if not valid:
        raise InvalidDataError(f"{name}: {msg}", source=source, row=row)

    rankings = record.get("rankings")
    if not isinstance(rankings, dict):
        raise InvalidDataError(f"{name}: rankings must be an object", source=source, row=row)

    ranks: dict[str, int] = {}
    for title, rank in rankings.items():
        valid, msg = validate_rank(rank, len(catalog))
        if not valid:
            raise InvalidDataError(f"{name}, class '{title}': {msg}", source=source, row=row)
        ranks[str(title).strip()] = int(float(rank))

    return Camper.from_ranks(
        name=name,
        age=int(float(record["age"])),
        swim_level=int(float(record["swim_level"])),
        ranks=ranks,
        catalog=catalog,
    )


def save_roster(campers: list[Camper], path: str | Path) -> None:
    """Save a roster as JSON, or as a wide CSV when the path ends in .csv."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() == ".csv":
        rows = []
        for camper in campers:
            row: dict[str, Any] = {
                "name": camper.name,
                "age": camper.age,
                "swim_level": camper.swim_level,
            }
            row.update(camper.ranks_by_title())
            rows.append(row)
        pd.DataFrame(rows).to_csv(path, index=False)
        return

    with open(path, "w", encoding="utf-8") as f:
        json.dump(
            {"campers": [c.to_dict() for c in campers]}, f, indent=2, ensure_ascii=False
        )


def load_inputs(
    classes_path: str | Path, roster_path: str | Path
) -> tuple[ClassCatalog, list[Camper]]:
    """Load a catalog and the roster ranking it.

    Raises:
        InputValidationError: If either file is malformed
    """
    catalog = load_catalog(classes_path)
    campers = load_roster(roster_path, catalog)
    return catalog, campers
