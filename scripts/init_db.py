"""
Initialize the database: create all tables.
Run with: python -m scripts.init_db
"""

import asyncio
from healthcare_backend.config import get_settings
from healthcare_backend.database import Database


async def init():
    settings = get_settings()
    database = Database(settings.database_url)
    print(f"Creating database tables in {database.engine.url.render_as_string(hide_password=True)}...")
    await database.create_all()
    print("All tables created successfully.")
    await database.dispose()


if __name__ == "__main__":
    asyncio.run(init())
