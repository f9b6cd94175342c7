"""Алгебра позиций записей внутри раздела доски.

Инвариант: для каждой пары (доска, раздел) множество позиций
равно {0, 1, ..., count-1}. Движок только вычисляет планы сдвигов,
применяет их TransactionalStore в одной транзакции.
"""
import uuid
from collections import Counter
from typing import Dict, Iterable, List, Sequence

from gapsboard.core.errors import InvalidArgumentError
from gapsboard.domains.entities.entry import Entry, MovePlan, PositionShift, Section


class OrderingEngine:
    """Вычисление изменений позиций для структурных операций"""

    def plan_insert(self, count: int) -> int:
        """Позиция новой записи: всегда в конец раздела"""
        if count < 0:
            raise InvalidArgumentError(f"Section size cannot be negative: {count}")
        return count

    def plan_move(
        self,
        entry: Entry,
        target_section: Section,
        target_index: int,
        target_count: int
    ) -> MovePlan:
        """План перемещения записи.

        target_count - текущее число записей в целевом разделе
        (включая саму запись, если раздел не меняется).
        """
        if isinstance(target_index, bool) or not isinstance(target_index, int):
            raise InvalidArgumentError(f"Target index must be an integer, got {target_index!r}")

        source_section = entry.section
        source_index = entry.position
        plan = MovePlan(
            entry_id=entry.uuid,
            source_section=source_section,
            source_index=source_index,
            target_section=target_section,
            target_index=target_index
        )

        # Внутри раздела последняя допустимая позиция count-1, в другом разделе - count
        upper = target_count if plan.crosses_sections else target_count - 1
        if target_index < 0 or target_index > upper:
            raise InvalidArgumentError(
                f"Target index {target_index} out of range 0..{upper} for section {target_section.value}"
            )

        if plan.is_noop:
            return plan

        if not plan.crosses_sections:
            if source_index < target_index:
                plan.shifts.append(PositionShift(source_section, source_index + 1, target_index, -1))
            else:
                plan.shifts.append(PositionShift(source_section, target_index, source_index - 1, 1))
        else:
            # Закрываем дыру в исходном разделе и открываем слот в целевом
            plan.shifts.append(PositionShift(source_section, source_index + 1, None, -1))
            plan.shifts.append(PositionShift(target_section, target_index, None, 1))

        return plan

    def plan_delete(self, entry: Entry) -> List[PositionShift]:
        """Сдвиги, закрывающие дыру после удаления записи"""
        return [PositionShift(entry.section, entry.position + 1, None, -1)]

    def plan_bulk_reorder(
        self,
        current_ids: Iterable[uuid.UUID],
        ordered_ids: Sequence[uuid.UUID]
    ) -> Dict[uuid.UUID, int]:
        """Новые позиции по явной перестановке.

        ordered_ids должен совпадать с текущим набором записей раздела.
        """
        current = set(current_ids)

        duplicates = [item for item, seen in Counter(ordered_ids).items() if seen > 1]
        if duplicates:
            raise InvalidArgumentError(f"Duplicate ids in order: {', '.join(map(str, duplicates))}")

        requested = set(ordered_ids)
        foreign = requested - current
        if foreign:
            raise InvalidArgumentError(f"Ids do not belong to section: {', '.join(map(str, foreign))}")

        missing = current - requested
        if missing:
            raise InvalidArgumentError(f"Order is missing ids: {', '.join(map(str, missing))}")

        return {entry_id: index for index, entry_id in enumerate(ordered_ids)}


def find_violations(positions: Iterable[int]) -> List[str]:
    """Описание нарушений инварианта для набора позиций одного раздела"""
    counts = Counter(positions)
    total = sum(counts.values())
    problems = []

    for position, seen in sorted(counts.items()):
        if seen > 1:
            problems.append(f"position {position} used {seen} times")
        if position < 0 or position >= total:
            problems.append(f"position {position} outside 0..{total - 1}")

    missing = [p for p in range(total) if p not in counts]
    if missing:
        problems.append(f"missing positions {missing}")

    return problems


def check_invariant(positions: Iterable[int]) -> bool:
    return not find_violations(positions)
