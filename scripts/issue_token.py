import argparse
import asyncio
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import get_settings
from core.logger import setup_logging
from core.security import create_token
from db.session import build_engine, build_sessionmaker
from services.user_service import UserService


async def issue_token(email: str, full_name: str = None):
    """Create the user if needed and print a signed API token for local testing."""
    settings = get_settings()
    engine = build_engine(settings)
    session_factory = build_sessionmaker(engine)
    async with session_factory() as session:
        user, created = await UserService(session).get_or_create_user(email, full_name=full_name)
    await engine.dispose()

    if not user.is_active:
        print(f"❌ User {email} is inactive.")
        return

    print(f"{'Created' if created else 'Found'} user #{user.id} ({email})")
    print(create_token(user.id, settings.SECRET_KEY))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Issue a signed API token for a user")
    parser.add_argument("email")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()

    setup_logging()
    asyncio.run(issue_token(args.email, args.name))
