"""
Postboard Backend — GraphQL Request Context
=============================================

What:  Per-request context handed to every resolver.
How:   Built by a FastAPI dependency, so the GraphQL endpoint shares the REST
       routes' session-per-request lifecycle and the identity resolved by
       AuthMiddleware.

Sibling query fields resolve concurrently, while an AsyncSession allows one
operation at a time. Resolvers therefore reach the database only through
`async with info.context.session() as db:`, which serializes access.

When one root field fails, the executor cancels its siblings, possibly in the
middle of a statement. `session()` rolls back on any exception, cancellation
included, so the connection is usable again before the next resolver or the
request teardown touches it. Mutations pass `commit=True` and are committed
before their result is returned.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from postboard.database import commit_session, get_db_session
from postboard.middleware.auth import get_identity, require_identity
from postboard.schemas.auth import Identity


class GraphQLContext(BaseContext):
    """
    Attributes:
        db:        request-scoped AsyncSession
        identity:  the caller, or None for anonymous requests
    """

    def __init__(self, db: AsyncSession, identity: Optional[Identity]):
        super().__init__()
        self.db = db
        self.identity = identity
        self._db_lock = asyncio.Lock()

    @property
    def is_auth(self) -> bool:
        return self.identity is not None

    def require_identity(self) -> Identity:
        """Raises AuthenticationError ("Not authenticated!") for anonymous callers."""
        return require_identity(self.identity)

    @asynccontextmanager
    async def session(self, commit: bool = False) -> AsyncIterator[AsyncSession]:
        """
        Exclusive access to the request session.

        Args:
            commit: commit the block's writes on success (DatabaseError when
                    the commit fails)
        """
        async with self._db_lock:
            try:
                yield self.db
                if commit:
                    await commit_session(self.db)
            except BaseException:
                # shielded: the task may already be cancelled
                await asyncio.shield(self.db.rollback())
                raise

    async def drain(self) -> None:
        """Waits until no resolver holds the session, so it can be closed."""
        async with self._db_lock:
            pass


async def get_context(
    db: AsyncSession = Depends(get_db_session),
    identity: Optional[Identity] = Depends(get_identity),
) -> AsyncIterator[GraphQLContext]:
    context = GraphQLContext(db=db, identity=identity)
    try:
        yield context
    finally:
        await context.drain()
