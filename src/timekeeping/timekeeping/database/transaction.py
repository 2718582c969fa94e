from __future__ import annotations

from typing import ContextManager, Protocol


class TransactionManager(Protocol):
    """Unit of atomicity shared by services.

    Every repository call made inside ``with tm.transaction():`` on the same
    thread commits or rolls back together. Nested blocks join the outer one.
    """

    def transaction(self) -> ContextManager[object]:
        raise NotImplementedError
