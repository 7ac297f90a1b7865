import asyncio
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text
from core.config import get_settings
from core.logger import setup_logging, logger
from db.session import build_engine, build_sessionmaker

async def reset_statistics():
    print("⚠️  WARNING: This will RESET ALL PERFORMANCE STATISTICS (topic accuracy, daily study stats).")
    print("Users will keep their quiz history and bookmarks, but analytics will start from zero.")
    confirm = input("Type 'CONFIRM' to proceed: ")

    if confirm != "CONFIRM":
        print("Operation cancelled.")
        return

    engine = build_engine(get_settings())
    session_factory = build_sessionmaker(engine)
    async with session_factory() as session:
        try:
            print("Cleaning mcq_performance table...")
            await session.execute(text("TRUNCATE TABLE mcq_performance RESTART IDENTITY CASCADE"))

            print("Cleaning study_stats table...")
            await session.execute(text("TRUNCATE TABLE study_stats RESTART IDENTITY CASCADE"))

            await session.commit()
            print("✅ All statistics have been reset successfully.")

        except Exception as e:
            await session.rollback()
            print(f"❌ Error resetting statistics: {e}")
            logger.error("Error resetting statistics", error=str(e))
    await engine.dispose()

if __name__ == "__main__":
    setup_logging()
    if os.name == 'nt':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(reset_statistics())
