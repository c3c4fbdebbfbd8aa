"""Score registry: maps score ids to prepared definitions.

A registry is constructed once (usually by ``load_registry``) and passed to
whatever needs lookups. There is no module-level instance, so tests can build
isolated registries freely.
"""

import logging
from typing import Dict, Iterator, List, Optional

from klinscore.definitions.schemas import ScoreDefinition, Specialty
from klinscore.definitions.validation import PreparedScore, prepare_definition
from klinscore.errors import ScoreNotFoundError

logger = logging.getLogger(__name__)


class ScoreRegistry:
    """Collection of prepared scores, indexed by id and by specialty."""

    def __init__(self) -> None:
        self._scores: Dict[str, PreparedScore] = {}
        self._by_specialty: Dict[Specialty, List[str]] = {}

    def register(self, score_id: str, definition: ScoreDefinition) -> PreparedScore:
        """Validate and add a definition.

        Raises:
            InvalidDefinitionError: If the definition fails validation.
            ValueError: If ``score_id`` is already registered.
        """
        if score_id in self._scores:
            raise ValueError(f"Score id already registered: {score_id}")
        prepared = prepare_definition(definition, score_id=score_id)
        self._scores[score_id] = prepared
        self._by_specialty.setdefault(definition.specialty, []).append(score_id)
        logger.debug(f"Registered score '{score_id}' ({definition.specialty.value})")
        return prepared

    def get(self, score_id: str) -> PreparedScore:
        """Look up a prepared score.

        Raises:
            ScoreNotFoundError: If no score has this id.
        """
        try:
            return self._scores[score_id]
        except KeyError:
            raise ScoreNotFoundError(score_id) from None

    def find(self, score_id: str) -> Optional[PreparedScore]:
        return self._scores.get(score_id)

    def ids(self) -> List[str]:
        return sorted(self._scores)

    def for_specialty(self, specialty: Specialty) -> List[PreparedScore]:
        return [self._scores[sid] for sid in self._by_specialty.get(specialty, [])]

    def specialties(self) -> List[Specialty]:
        return sorted(self._by_specialty, key=lambda s: s.value)

    def __contains__(self, score_id: object) -> bool:
        return score_id in self._scores

    def __len__(self) -> int:
        return len(self._scores)

    def __iter__(self) -> Iterator[PreparedScore]:
        for sid in self.ids():
            yield self._scores[sid]
