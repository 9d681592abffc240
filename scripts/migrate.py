"""One-time migration script: Copy a JSON storage file into MongoDB.

Usage:
    python scripts/migrate.py \\
        --source data/agile-canvas.json \\
        --mongodb-url mongodb://localhost:27017

    # Show what would be copied without writing
    python scripts/migrate.py --source data/agile-canvas.json --dry-run
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient
from agile_canvas.storage import JsonFileStorage, MongoStorage


class StorageMigrator:
    """Copies the project slot from a JSON file into MongoDB."""

    def __init__(
        self,
        source_path: Path,
        mongodb_url: str,
        db_name: str,
        key: str,
        dry_run: bool = False,
    ):
        """Initialize migrator.

        Args:
            source_path: Path to the JSON storage file
            mongodb_url: MongoDB connection URL
            db_name: Target database name
            key: Storage slot to copy
            dry_run: If True, don't write, just show what would be done
        """
        self.source_path = source_path
        self.mongodb_url = mongodb_url
        self.db_name = db_name
        self.key = key
        self.dry_run = dry_run
        self.client: Optional[AsyncIOMotorClient] = None

    async def connect(self):
        """Connect to MongoDB."""
        self.client = AsyncIOMotorClient(self.mongodb_url)
        print(f"Connected to MongoDB: {self.mongodb_url}")

    async def close(self):
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            print("Closed MongoDB connection")

    async def run(self):
        """Run migration."""
        print(f"Reading slot '{self.key}' from {self.source_path}")
        projects = JsonFileStorage(self.source_path, self.key).load()

        tasks = sum(len(p.tasks) for p in projects)
        history = sum(len(p.history) for p in projects)
        print(f"Found {len(projects)} projects ({tasks} tasks, {history} history entries)")

        if self.dry_run:
            for project in projects:
                print(f"  Would copy: {project.name} ({project.id})")
            return

        await self.connect()

        try:
            target = MongoStorage(self.client[self.db_name]["storage"], self.key)
            target.save(projects)
            await target.flush()

            # Read back to confirm
            await target.prime()
            copied = target.load()

            print("\n=== Migration Summary ===")
            print(f"Projects read: {len(projects)}")
            print(f"Projects in MongoDB: {len(copied)}")

        finally:
            await self.close()


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Copy a JSON storage file to MongoDB")
    parser.add_argument(
        "--source",
        required=True,
        help="Path to the JSON storage file",
    )
    parser.add_argument(
        "--mongodb-url",
        default="mongodb://localhost:27017",
        help="MongoDB connection URL",
    )
    parser.add_argument(
        "--db-name",
        default="agile_canvas",
        help="MongoDB database name",
    )
    parser.add_argument(
        "--key",
        default="agile-canvas-projects",
        help="Storage slot to copy",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be copied without writing",
    )

    args = parser.parse_args()

    source_path = Path(args.source)
    if not source_path.exists():
        print(f"Error: Source path does not exist: {source_path}")
        sys.exit(1)

    migrator = StorageMigrator(
        source_path=source_path,
        mongodb_url=args.mongodb_url,
        db_name=args.db_name,
        key=args.key,
        dry_run=args.dry_run,
    )

    await migrator.run()


if __name__ == "__main__":
    asyncio.run(main())
