"""Label hierarchy traversal."""

import logging
from typing import Dict, FrozenSet, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from labelvault.models.label import Label

logger = logging.getLogger(__name__)


class HierarchyResolver:
    """
    Resolves the descendant scope of a label.

    One resolver lives for one request; results are memoised on the
    instance and dropped with it. Callers that create or reparent labels
    must call ``invalidate()`` before resolving again.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._scopes: Dict[str, FrozenSet[str]] = {}

    async def descendant_scope(self, root_label_id: Optional[str]) -> FrozenSet[str]:
        """Return the root label id together with every transitive child.

        An unknown root yields the singleton set of that id.
        """
        if not root_label_id:
            return frozenset()

        cached = self._scopes.get(root_label_id)
        if cached is not None:
            return cached

        # UNION (not UNION ALL) so corrupt cyclic data still reaches a fixpoint
        scope = (
            select(Label.id)
            .where(Label.id == root_label_id)
            .cte(name="label_scope", recursive=True)
        )
        scope_alias = scope.alias()
        child = aliased(Label)
        scope = scope.union(
            select(child.id).where(child.parent_label_id == scope_alias.c.id)
        )

        result = await self.session.execute(select(scope.c.id))
        label_ids = frozenset(row[0] for row in result.all())
        label_ids = label_ids | {root_label_id}

        self._scopes[root_label_id] = label_ids
        logger.debug(f"Resolved scope of label {root_label_id}: {len(label_ids)} labels")
        return label_ids

    async def is_descendant(self, label_id: str, ancestor_id: str) -> bool:
        """True when ``label_id`` is ``ancestor_id`` or sits below it."""
        return label_id in await self.descendant_scope(ancestor_id)

    async def parent_of(self, label_id: str) -> Optional[str]:
        result = await self.session.execute(
            select(Label.parent_label_id).where(Label.id == label_id)
        )
        return result.scalar_one_or_none()

    def invalidate(self) -> None:
        self._scopes.clear()
