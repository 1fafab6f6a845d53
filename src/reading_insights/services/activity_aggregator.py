"""Reading activity statistics derived from a user's transaction log."""

from collections import Counter
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from reading_insights.domain import MONTH_NAMES, WEEKDAY_NAMES
from reading_insights.schemas.insights import (
    ActivityStats,
    CalendarDay,
    DayCount,
    HourCount,
    MonthCount,
    RecentActivity,
)
from reading_insights.schemas.transaction import Transaction

_ONE_DAY = timedelta(days=1)


def sunday_first_weekday(moment: datetime) -> int:
    return (moment.weekday() + 1) % 7


def calendar_heatmap(
    dates: Sequence[date], today: date, window_days: int = 365
) -> list[CalendarDay]:
    """Daily counts for ``[today - window_days, today]``, zero-filled and ascending."""
    start = today - timedelta(days=window_days)
    counts = Counter(d for d in dates if start <= d <= today)
    days = (start + timedelta(days=offset) for offset in range(window_days + 1))
    return [CalendarDay(day=day.isoformat(), value=counts[day]) for day in days]


def aggregate(
    transactions: Sequence[Transaction],
    now: datetime | None = None,
    timezone: str | tzinfo = "UTC",
    window_days: int = 365,
    recent_size: int = 5,
) -> ActivityStats:
    """Reduce transactions into hour/weekday/month histograms, a calendar
    heatmap, message-mix counts and first/last activity scalars.

    Buckets use *timezone* local time; the histograms always have 24, 7 and
    12 entries. Malformed stored messages are left out of message counts.
    """
    now = now or datetime.now(UTC)
    tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
    local_created = [t.created_at.astimezone(tz) for t in transactions]

    hours = Counter(moment.hour for moment in local_created)
    weekdays = Counter(sunday_first_weekday(moment) for moment in local_created)
    months = Counter(moment.month - 1 for moment in local_created)

    total_messages = user_messages = bot_messages = books_with_messages = 0
    for transaction in transactions:
        book_messages = 0
        for message in transaction.decoded_messages():
            book_messages += 1
            if message.role == "user":
                user_messages += 1
            else:
                bot_messages += 1
        total_messages += book_messages
        if book_messages:
            books_with_messages += 1

    by_created = sorted(transactions, key=lambda t: t.created_at)
    first_read = by_created[0].created_at if by_created else None
    last_read = by_created[-1].created_at if by_created else None

    recent = sorted(transactions, key=lambda t: t.updated_at, reverse=True)[:recent_size]

    return ActivityStats(
        total_books=len(transactions),
        total_authors=len({t.book_author for t in transactions if t.book_author}),
        total_messages=total_messages,
        user_message_count=user_messages,
        bot_message_count=bot_messages,
        average_messages_per_book=(
            round(total_messages / books_with_messages, 1) if books_with_messages else 0.0
        ),
        books_with_messages=books_with_messages,
        reading_hours_data=[HourCount(hour=h, count=hours[h]) for h in range(24)],
        reading_days_data=[
            DayCount(name=name, count=weekdays[i]) for i, name in enumerate(WEEKDAY_NAMES)
        ],
        reading_months_data=[
            MonthCount(month=name, count=months[i]) for i, name in enumerate(MONTH_NAMES)
        ],
        days_since_first_read=(now - first_read) // _ONE_DAY if first_read else 0,
        days_since_last_read=(now - last_read) // _ONE_DAY if last_read else None,
        first_read_date=first_read,
        last_read_date=last_read,
        recent_activity=[
            RecentActivity(
                id=t.id,
                book_id=t.book_id,
                title=t.book_title,
                author=t.book_author,
                date=t.updated_at,
                message_count=t.message_count,
                transaction_id=t.id,
            )
            for t in recent
        ],
        calendar_data=calendar_heatmap(
            [moment.date() for moment in local_created],
            today=now.astimezone(tz).date(),
            window_days=window_days,
        ),
    )
