from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2.extras import Json

from ..models.import_report import ImportReport
from ..models.vocabulary import Category
from .batch_insert import BatchInsertError, batch_insert

"""Persistence of an accepted ImportReport into the project materials tables.

Tables (one materials record per enquiry task):
    task_materials_data (id, enquiry_task_id, project_info, created_at, updated_at)
    project_elements    (task_materials_data_id, element_type, name, category,
                         dimensions, is_included, notes, sort_order)
    element_materials   (project_element_id, description, unit_of_measurement,
                         quantity, is_included, notes, sort_order)

No BEGIN/COMMIT here: the orchestrator owns the per-file transaction so that
either every element of an upload is stored or none is.
"""

__all__ = [
    "PersistError",
    "PersistResult",
    "persist_report",
]

logger = logging.getLogger(__name__)

ELEMENT_COLUMNS = [
    "task_materials_data_id",
    "element_type",
    "name",
    "category",
    "dimensions",
    "is_included",
    "notes",
    "sort_order",
]

MATERIAL_COLUMNS = [
    "project_element_id",
    "description",
    "unit_of_measurement",
    "quantity",
    "is_included",
    "notes",
    "sort_order",
]


class PersistError(Exception):
    pass


@dataclass(frozen=True)
class PersistResult:
    task_materials_data_id: int
    elements: int
    materials: int
    replaced_elements: int = 0


def _ensure_materials_data(cursor: Any, task_id: int) -> int:
    cursor.execute(
        "SELECT id FROM task_materials_data WHERE enquiry_task_id = %s",
        (task_id,),
    )
    row = cursor.fetchone()
    if row is not None:
        cursor.execute(
            "UPDATE task_materials_data SET updated_at = now() WHERE id = %s",
            (row[0],),
        )
        return row[0]
    cursor.execute(
        "INSERT INTO task_materials_data (enquiry_task_id, project_info, created_at, updated_at) "
        "VALUES (%s, %s, now(), now()) RETURNING id",
        (task_id, Json({})),
    )
    return cursor.fetchone()[0]


def _canonical_category(value: str) -> str:
    member = Category.lookup(value)
    return member.value if member is not None else value


def persist_report(
    cursor: Any, task_id: int, report: ImportReport, *, replace: bool = True
) -> PersistResult:
    """Store every element and particular of report for the given enquiry task.

    Raises:
        PersistError: report still has errors, or a statement failed
    """
    if report.has_errors:
        raise PersistError(
            f"refusing to persist report with {report.stats.total_errors} error(s)"
        )

    try:
        data_id = _ensure_materials_data(cursor, task_id)
        replaced = 0
        if replace:
            # element_materials rows go with their element (ON DELETE CASCADE)
            cursor.execute(
                "DELETE FROM project_elements WHERE task_materials_data_id = %s",
                (data_id,),
            )
            replaced = max(cursor.rowcount, 0)

        element_rows = [
            (
                data_id,
                element.type,
                element.name,
                _canonical_category(element.category),
                Json(element.dimensions.to_dict()),
                True,
                None,
                order,
            )
            for order, element in enumerate(report.elements)
        ]
        inserted = batch_insert(
            cursor, "project_elements", ELEMENT_COLUMNS, element_rows, returning="id"
        )
        element_ids = [r[0] for r in inserted.returned_values or []]
        if len(element_ids) != len(report.elements):
            raise PersistError(
                f"expected {len(report.elements)} element ids, got {len(element_ids)}"
            )

        material_rows = [
            (
                element_id,
                p.description,
                p.unit,
                p.quantity,
                p.included,
                p.notes or None,
                order,
            )
            for element_id, element in zip(element_ids, report.elements)
            for order, p in enumerate(element.particulars)
        ]
        materials = batch_insert(cursor, "element_materials", MATERIAL_COLUMNS, material_rows)
    except (BatchInsertError, psycopg2.Error) as e:
        raise PersistError(str(e)) from e

    logger.debug(
        "persisted task_id=%s elements=%d materials=%d replaced=%d",
        task_id,
        len(element_ids),
        materials.inserted_rows,
        replaced,
    )
    return PersistResult(
        task_materials_data_id=data_id,
        elements=len(element_ids),
        materials=materials.inserted_rows,
        replaced_elements=replaced,
    )
