"""
Secondary index for login keys.

Cosmos DB has no unique constraint across a container, so uniqueness of a
login key (voter name, voter email, admin email) is claimed by creating a
lookup document whose id is the key itself.
"""

import logging
import re
from typing import Optional

from azure.cosmos.exceptions import CosmosResourceExistsError

from db.cosmos_session import IDENTITY_LOOKUP_CONTAINER, create_item, read_item
from models.cosmos_documents import IdentityLookupDocument

logger = logging.getLogger(__name__)


def login_key(kind: str, value: str) -> str:
    """Build a namespaced, normalized lookup id."""
    # Cosmos ids may not contain / \ ? or #
    normalized = re.sub(r"[/\\?#]", "_", " ".join(value.split()).lower())
    return f"{kind}:{normalized}"


async def resolve(key: str) -> Optional[str]:
    """Return the owner id registered for a login key."""
    data = await read_item(IDENTITY_LOOKUP_CONTAINER, key, partition_key=key)
    if data is None:
        return None
    return data.get("owner_id")


async def claim(key: str, owner_id: str) -> bool:
    """
    Register a login key for an owner.

    Returns False if another owner already holds the key.
    """
    lookup = IdentityLookupDocument(id=key, owner_id=owner_id)
    try:
        await create_item(IDENTITY_LOOKUP_CONTAINER, lookup.model_dump(mode="json"))
    except CosmosResourceExistsError:
        logger.debug(f"Login key {key} already claimed")
        return False
    return True

