from __future__ import annotations

import logging
from datetime import date

from ..core.exceptions import MissingSalaryStructure
from .model import ResolvedSalary
from .repository import SalaryStructureRepository

logger = logging.getLogger(__name__)


class SalaryStructureResolver:
    def __init__(self, structures: SalaryStructureRepository):
        self._structures = structures

    def resolve(self, staff_id: int, reference_date: date) -> ResolvedSalary:
        """Structure whose [effective_from, effective_to) contains `reference_date`.

        Overlapping structures are not prevented at write time; the latest
        effective_from wins.
        """
        candidates = [s for s in self._structures.list_covering(int(staff_id), reference_date) if s.covers(reference_date)]
        if not candidates:
            raise MissingSalaryStructure(int(staff_id), reference_date)

        candidates.sort(key=lambda s: (s.effective_from, s.structure_id), reverse=True)
        if len(candidates) > 1:
            logger.warning(
                "Staff %s has %s overlapping salary structures on %s; using #%s",
                staff_id,
                len(candidates),
                reference_date,
                candidates[0].structure_id,
            )

        structure = candidates[0]
        return ResolvedSalary(
            structure=structure,
            basic=structure.basic_salary,
            allowances=dict(structure.allowances),
            gross=structure.gross_salary,
        )
