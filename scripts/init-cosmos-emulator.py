#!/usr/bin/env python3
"""
Initialize Cosmos DB Emulator with the TeamVote database and containers.

Run this once after starting the emulator to set up the local development environment.

Prerequisites:
1. Install Cosmos DB Emulator: https://aka.ms/cosmosdb-emulator
2. Start the emulator (it runs on https://localhost:8081)
3. Run this script: python scripts/init-cosmos-emulator.py

The emulator uses a well-known key that is safe for local development only.
"""

import asyncio
import os

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient

# Cosmos DB Emulator connection details (well-known credentials)
EMULATOR_ENDPOINT = os.environ.get("COSMOS_EMULATOR_ENDPOINT", "https://localhost:8081")
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
DATABASE_NAME = os.environ.get("AZURE_COSMOS_DATABASE", "teamvote")

# Container definitions with partition keys.
# votes: one logical partition per event, document id = voter id, so the
# emulator enforces one vote per (event, voter) exactly like the cloud service.
CONTAINERS = [
    {"name": "events", "partition_key": "/id"},
    {"name": "votes", "partition_key": "/event_id"},
    {"name": "voters", "partition_key": "/id"},
    {"name": "admins", "partition_key": "/id"},
    {"name": "identity-lookup", "partition_key": "/id"},
]


async def init_emulator() -> None:
    """Create the database and containers if they do not exist."""
    print(f"Connecting to Cosmos DB Emulator at {EMULATOR_ENDPOINT}...")

    # Disable SSL verification for emulator's self-signed certificate
    client = CosmosClient(
        url=EMULATOR_ENDPOINT,
        credential=EMULATOR_KEY,
        connection_verify=False,
    )

    try:
        database = await client.create_database_if_not_exists(id=DATABASE_NAME)
        print(f"  database '{DATABASE_NAME}' ready")

        for container_def in CONTAINERS:
            await database.create_container_if_not_exists(
                id=container_def["name"],
                partition_key=PartitionKey(path=container_def["partition_key"]),
            )
            print(f"  container '{container_def['name']}' (partition: {container_def['partition_key']})")

        print("\nDone. Next steps:")
        print("  1. Set AZURE_COSMOS_CONNECTION_STRING and SECRET_KEY in src/backend/.env")
        print("  2. Start the backend: cd src/backend && uvicorn main:app --reload")
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(init_emulator())
