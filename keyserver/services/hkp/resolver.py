"""Resolves HKP lookup requests against the published keys."""
import logging
from typing import Annotated, Optional

from fastapi import Depends

from keyserver.services.hkp.render import Rendered, render
from keyserver.services.hkp.search import classify_search, parse_operation, parse_options
from keyserver.services.lifecycle import KeyLifecycle

logger = logging.getLogger(__name__)


class HKPResolver:
    """Implements the `get`, `index` and `vindex` lookup operations."""

    def __init__(self, lifecycle: Annotated[KeyLifecycle, Depends()]) -> None:
        self.lifecycle = lifecycle

    async def lookup(
        self,
        op: Optional[str],
        search: Optional[str],
        options: Optional[str] = None,
    ) -> Rendered:
        """
        Resolve a lookup.

        :raises NotImplementedSearchError: unsupported operation or search syntax.
        :raises KeyNotFoundError: no published key matches.
        """
        operation = parse_operation(op)
        term = classify_search(search)
        machine_readable = "mr" in parse_options(options)
        logger.debug("HKP %s lookup for %s", operation.value, term)
        key = await self.lifecycle.lookup(**term.selector())
        # One published key per selector.
        return render(operation, [key], machine_readable)
