import argparse
import asyncio

import uvicorn
from sqlmodel import SQLModel

import src.domain  # noqa: F401
from config import ApplicationConfig
from src.api.app import create_app
from src.depends import engine

app = create_app(ApplicationConfig)


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="File Credits Service API")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables and exit")
    args = parser.parse_args()

    if args.create_tables:
        asyncio.run(create_tables())
    else:
        uvicorn.run(
            "api:app",
            host=ApplicationConfig.API_HOST,
            port=ApplicationConfig.API_PORT,
            reload=True,
            log_level=ApplicationConfig.LOG_LEVEL.lower(),
        )
