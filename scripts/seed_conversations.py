#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import func, select

from chatlist.core.config import get_settings
from chatlist.db.models import Message, UserProfile
from chatlist.db.session import AsyncSessionLocal, async_engine


@dataclass
class SeedStats:
    owner_id: UUID
    created_profiles: int
    created_messages: int


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Seed a user with synthetic counterparts and message exchanges for local testing.",
    )
    parser.add_argument(
        "--owner-id",
        type=UUID,
        default=None,
        help="Existing profile to seed conversations for (default: create a new one).",
    )
    parser.add_argument(
        "--counterparts",
        required=True,
        type=int,
        help="Number of counterpart profiles to create.",
    )
    parser.add_argument(
        "--messages-per-counterpart",
        type=int,
        default=4,
        help="Messages exchanged with each counterpart (default: 4).",
    )
    parser.add_argument(
        "--minutes-between-conversations",
        type=int,
        default=15,
        help="Gap between conversations for timestamp staggering (default: 15).",
    )
    parser.add_argument(
        "--anonymous-every",
        type=int,
        default=0,
        help="Leave every Nth counterpart without a display name (default: never).",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Execute seeding without interactive confirmation.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print what would be created.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Allow running against non-dev environments.",
    )
    args = parser.parse_args()

    if args.counterparts <= 0:
        raise SystemExit("--counterparts must be greater than 0.")
    if args.messages_per_counterpart <= 0:
        raise SystemExit("--messages-per-counterpart must be greater than 0.")
    if args.minutes_between_conversations < 0:
        raise SystemExit("--minutes-between-conversations must be 0 or greater.")
    if args.anonymous_every < 0:
        raise SystemExit("--anonymous-every must be 0 or greater.")
    return args


def ensure_dev_target(*, force: bool) -> None:
    settings = get_settings()
    environment = settings.environment.lower()
    db_name = settings.db_name.lower()

    looks_like_dev = environment in {"development", "dev", "local"} or "dev" in db_name
    if looks_like_dev or force:
        return

    raise SystemExit(
        "Refusing to run outside a dev-like database target. "
        "Set ENVIRONMENT=development / DB_NAME containing 'dev', or pass --force."
    )


def build_message_content(*, counterpart_seq: int, message_seq: int, outgoing: bool) -> str:
    if outgoing:
        return f"Hi #{counterpart_seq}, message {message_seq + 1} from me."
    return f"Reply {message_seq + 1} from counterpart #{counterpart_seq}."


async def get_existing_message_count() -> int:
    async with AsyncSessionLocal() as session:
        return int(await session.scalar(select(func.count(Message.id))) or 0)


async def seed_conversations(args: argparse.Namespace) -> SeedStats:
    now = datetime.now(timezone.utc)
    created_profiles = 0
    created_messages = 0

    async with AsyncSessionLocal() as session:
        if args.owner_id is not None:
            owner = await session.get(UserProfile, args.owner_id)
            if owner is None:
                raise SystemExit(f"Profile '{args.owner_id}' was not found.")
        else:
            owner = UserProfile(display_name="Seed Owner")
            session.add(owner)
            await session.flush()
            created_profiles += 1

        for offset in range(args.counterparts):
            sequence = offset + 1
            anonymous = args.anonymous_every and sequence % args.anonymous_every == 0
            counterpart = UserProfile(display_name=None if anonymous else f"Seed Contact {sequence}")
            session.add(counterpart)
            await session.flush()
            created_profiles += 1

            started_at = now - timedelta(minutes=offset * args.minutes_between_conversations)
            for message_offset in range(args.messages_per_counterpart):
                outgoing = message_offset % 2 == 0
                session.add(
                    Message(
                        sender_id=owner.id if outgoing else counterpart.id,
                        recipient_id=counterpart.id if outgoing else owner.id,
                        content=build_message_content(
                            counterpart_seq=sequence,
                            message_seq=message_offset,
                            outgoing=outgoing,
                        ),
                        created_at=started_at - timedelta(seconds=args.messages_per_counterpart - message_offset),
                    )
                )
                created_messages += 1

        await session.commit()
        owner_id = owner.id

    return SeedStats(
        owner_id=owner_id,
        created_profiles=created_profiles,
        created_messages=created_messages,
    )


def print_plan(args: argparse.Namespace, *, existing_messages: int) -> None:
    print("Seed plan")
    print(f"- existing_messages: {existing_messages}")
    print(f"- owner_id: {args.owner_id or '(new profile)'}")
    print(f"- counterparts_to_create: {args.counterparts}")
    print(f"- messages_per_counterpart: {args.messages_per_counterpart}")
    print(f"- total_messages_to_create: {args.counterparts * args.messages_per_counterpart}")
    print(f"- minutes_between_conversations: {args.minutes_between_conversations}")


async def main() -> int:
    args = parse_args()
    ensure_dev_target(force=args.force)

    existing_messages = await get_existing_message_count()
    print_plan(args, existing_messages=existing_messages)

    if args.dry_run:
        print("Dry run complete. No data was created.")
        return 0

    if not args.yes:
        print("Aborted: pass --yes to execute seeding (or --dry-run to preview).")
        return 1

    stats = await seed_conversations(args)
    print("Seed complete")
    print(f"- owner_id: {stats.owner_id}")
    print(f"- created_profiles: {stats.created_profiles}")
    print(f"- created_messages: {stats.created_messages}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(asyncio.run(main()))
    finally:
        asyncio.run(async_engine.dispose())
