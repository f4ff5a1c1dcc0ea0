"""Resolution of each camper's three operative choices."""

import logging

from ..constants import TOP_CHOICES_COUNT
from ..exceptions import ChoiceExhaustedError
from ..models import ClassCatalog, ClassCatalogEntry
from .constants import STAGE_RESOLVE
from .context import CamperState, TrialContext

logger = logging.getLogger(__name__)


class ChoiceResolver:
    """Derives final choices from each camper's full ranking.

    Each top choice is walked down the ranking until a class the camper can
    take, that is not yet buffered and not eliminated, is found. The buffer
    is then resolved into the best, middle and worst slots, with the worst
    slot replaced by the required class for campers who need swim lessons.
    """

    def __init__(self, catalog: ClassCatalog):
        self.catalog = catalog

    def resolve(self, context: TrialContext) -> None:
        """Run one resolver pass over every camper, from empty buffers.

        Raises:
            ChoiceExhaustedError: If a camper's ranking runs out
        """
        for state in context.campers:
            self.resolve_camper(state, context.eliminated)

    def resolve_camper(self, state: CamperState, eliminated: set[str]) -> None:
        state.reset_choices()
        self._fill_buffer(state, eliminated)
        self._assign_slots(state)
        logger.debug(
            f"{state.name}: final choices "
            f"{[c.title if c else None for c in state.final_choices]}"
        )

    def _fill_buffer(self, state: CamperState, eliminated: set[str]) -> None:
        camper = state.camper

        def unusable(entry: ClassCatalogEntry) -> bool:
            return entry.title in state.buffer or entry.title in eliminated

        for top in camper.top_choices:
            if len(state.buffer) >= TOP_CHOICES_COUNT:
                break
            if camper.can_take(top) and not unusable(top):
                choice = top
            else:
                choice = camper.next_eligible_after(top, skip=unusable)
            if choice is None:
                raise ChoiceExhaustedError(camper.name, STAGE_RESOLVE, after=top.title)
            state.buffer[choice.title] = camper.rank_of(choice)

        if len(state.buffer) < TOP_CHOICES_COUNT:
            raise ChoiceExhaustedError(camper.name, STAGE_RESOLVE)

    def _assign_slots(self, state: CamperState) -> None:
        ordered = sorted(state.buffer.items(), key=lambda item: item[1])
        entries = [self.catalog[title] for title, _ in ordered]

        best, middle, worst = entries[0], entries[1], entries[-1]
        third: ClassCatalogEntry | None = worst

        required = self.catalog.required_class
        if (
            state.camper.requires_swim_lessons
            and required is not None
            and required not in (best, middle)
        ):
            third = required

        if best.is_double_period or middle.is_double_period:
            third = None

        state.final_choices = [best, middle, third]
