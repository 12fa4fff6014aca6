import asyncio
import os

import asyncpg

from moviescore.db.postgres import (create_preferences_table,
                                    create_ratings_table,
                                    create_recommendations_table)
from moviescore.logger import logger


async def main():
    pool = await asyncpg.create_pool(os.environ["POSTGRES_URI"])

    logger.info("creating database tables")
    await create_ratings_table(pool)
    await create_recommendations_table(pool)
    await create_preferences_table(pool)
    logger.info("created all required tables")
    await pool.close()


if __name__ == "__main__":
    asyncio.run(main())
