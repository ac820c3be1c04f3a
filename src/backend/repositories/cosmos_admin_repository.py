"""
Cosmos DB Admin repository.

Admins are keyed by email through the identity-lookup container.
"""

import logging
from typing import Optional

from db.cosmos_session import (
    ADMINS_CONTAINER,
    create_item,
    delete_item,
    patch_item,
    read_item,
    upsert_item,
)
from models.cosmos_documents import AdminDocument
from repositories import identity_lookup

logger = logging.getLogger(__name__)


class CosmosAdminRepository:
    """Repository for admin operations using Cosmos DB."""

    async def get_by_id(self, admin_id: str) -> Optional[AdminDocument]:
        """Get an admin by ID (direct point read)."""
        data = await read_item(ADMINS_CONTAINER, admin_id, partition_key=admin_id)
        if data is None:
            return None
        return AdminDocument(**data)

    async def get_by_email(self, email: str) -> Optional[AdminDocument]:
        """Get an admin by email using secondary index lookup."""
        admin_id = await identity_lookup.resolve(identity_lookup.login_key("admin-email", email))
        if not admin_id:
            return None
        return await self.get_by_id(admin_id)

    async def get_or_create(self, admin: AdminDocument) -> AdminDocument:
        """Return the admin registered under ``admin.email``, creating it if needed."""
        key = identity_lookup.login_key("admin-email", admin.email)
        existing = await self.get_by_email(admin.email)
        if existing:
            return existing

        await create_item(ADMINS_CONTAINER, admin.model_dump(mode="json"))
        if await identity_lookup.claim(key, admin.id):
            logger.info(f"Created admin {admin.id}")
            return admin

        await delete_item(ADMINS_CONTAINER, admin.id, partition_key=admin.id)
        winner = await self.get_by_email(admin.email)
        if winner is None:
            raise RuntimeError(f"Login key {key} claimed but admin missing")
        return winner

    async def save(self, admin: AdminDocument) -> AdminDocument:
        """Persist changes to an admin document."""
        await upsert_item(ADMINS_CONTAINER, admin.model_dump(mode="json"))
        return admin

    async def record_otp_failure(self, admin_id: str) -> int:
        """
        Atomically count one wrong login-code guess.

        Returns the number of failures since the code was issued.
        """
        data = await patch_item(
            ADMINS_CONTAINER,
            admin_id,
            partition_key=admin_id,
            operations=[{"op": "incr", "path": "/otp_failed_attempts", "value": 1}],
        )
        if data is None:
            return 0
        return int(data.get("otp_failed_attempts", 0))

    async def clear_otp(self, admin_id: str) -> None:
        """Discard the pending login code."""
        await patch_item(
            ADMINS_CONTAINER,
            admin_id,
            partition_key=admin_id,
            operations=[
                {"op": "set", "path": "/otp_hash", "value": None},
                {"op": "set", "path": "/otp_expires_at", "value": None},
            ],
        )
        logger.info(f"Cleared pending login code for admin {admin_id}")
