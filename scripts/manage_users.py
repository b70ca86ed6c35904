# scripts/manage_users.py

import argparse
import asyncio
import sys
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy.future import select

from app.auth.config import auth_config
from app.db import async_session
from app.models.user import User

if sys.platform.startswith('win') and sys.version_info < (3, 10):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


async def _get_user(session, email):
    result = await session.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def list_users():
    async with async_session() as session:
        result = await session.execute(select(User).order_by(User.email))
        for user in result.scalars().all():
            state = "active" if user.is_active else "deactivated"
            print(f"  {user.email:<32} {user.role.value:<11} tenant={user.tenant_id or '-'} {state}")


async def set_active(email, active):
    async with async_session() as session:
        user = await _get_user(session, email)
        if not user:
            print(f"⚠️  No user found with email: {email}")
            return
        user.is_active = active
        await session.commit()
        print(f"✅ {email} is now {'active' if active else 'deactivated'}")


async def print_token(email, hours):
    """Development token for a staff user; production tokens come from the identity service."""
    async with async_session() as session:
        user = await _get_user(session, email)
        if not user:
            print(f"⚠️  No user found with email: {email}")
            return
    claims = {
        "sub": user.id,
        "aud": auth_config.audience,
        "exp": datetime.now(timezone.utc) + timedelta(hours=hours),
    }
    print(jwt.encode(claims, auth_config.secret, algorithm=auth_config.algorithm))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Manage FoodDupe staff users")
    parser.add_argument("--list", action="store_true", help="List staff users")
    parser.add_argument("--deactivate", type=str, metavar="EMAIL", help="Deactivate a user")
    parser.add_argument("--activate", type=str, metavar="EMAIL", help="Re-activate a user")
    parser.add_argument("--token", type=str, metavar="EMAIL", help="Print a development bearer token")
    parser.add_argument("--hours", type=int, default=12, help="Token lifetime in hours")

    args = parser.parse_args()

    if args.list:
        asyncio.run(list_users())
    elif args.deactivate:
        asyncio.run(set_active(args.deactivate, False))
    elif args.activate:
        asyncio.run(set_active(args.activate, True))
    elif args.token:
        asyncio.run(print_token(args.token, args.hours))
    else:
        print("❗ Usage:")
        print("  python -m scripts.manage_users --list")
        print("  python -m scripts.manage_users --deactivate kassier@pizzamario.nl")
        print("  python -m scripts.manage_users --token owner@pizzamario.nl")
