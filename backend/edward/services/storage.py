"""
Edward Backend — Storage Handle
=================================

What:  Decides where a user's documents live and gives services an explicit
       handle to server-side storage.
Why:   Premium tiers keep documents on the server; demo and limited accounts
       keep them in the browser. The client learns which backend to use from
       `storage_mode_for()` (reported by GET /api/user/current). On the server,
       every content operation receives a `ServerStorage` built for the current
       request, so no operation depends on process-wide resolved state.

Usage:
    @router.get("/chapters/{document_id}")
    async def get_chapters(document_id: str, storage: ServerStorage = Depends(get_server_storage)):
        return await chapter_service.get_chapters(storage, document_id)
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edward.exceptions import NotFoundError
from edward.models.document import Document
from edward.models.plan import Plan
from edward.models.user import AccountType

SERVER = "server"
LOCAL = "local"


def storage_mode_for(account_type: str) -> str:
    """'server' for premium tiers, 'local' for everyone else."""
    return SERVER if account_type in AccountType.PREMIUM_TYPES else LOCAL


@dataclass
class ServerStorage:
    """
    Request-scoped capability to read and write one user's server-side content.

    Attributes:
        db:       The request's session; its transaction spans the whole request.
        user_id:  Owner id supplied by the identity collaborator.
    """

    db: AsyncSession
    user_id: int

    async def document(self, guid: str) -> Document:
        """Load one of the owner's documents by guid or raise NotFoundError."""
        result = await self.db.execute(
            select(Document).where(
                Document.guid == guid,
                Document.user_id == self.user_id,
            )
        )
        document = result.scalar_one_or_none()
        if document is None:
            raise NotFoundError(resource="document", resource_id=guid)
        return document

    async def plan(self, document: Document, guid: str) -> Plan:
        """Load a plan of `document` by guid or raise NotFoundError."""
        result = await self.db.execute(
            select(Plan).where(
                Plan.guid == guid,
                Plan.document_id == document.id,
                Plan.user_id == self.user_id,
            )
        )
        plan = result.scalar_one_or_none()
        if plan is None:
            raise NotFoundError(resource="plan", resource_id=guid)
        return plan
