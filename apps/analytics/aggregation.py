"""
Pure computations over a user's daily activity records.

The functions accept any objects exposing the DailyActivity attributes
(`date`, `study_time`, `courses_accessed`, `achievements_earned`,
`resources_viewed`, `login_time`) so they can be used on model instances
and on plain test doubles alike.
"""

import calendar
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Iterable

from apps.common.utils import round_half_up

XP_PER_LEVEL = 100
COURSE_COMPLETION_XP = 100
PATH_COMPLETION_XP = 250
ACHIEVEMENT_XP = 50

INSIGHT_WINDOW = 30
MIN_ACTIVE_DAYS = 10
MIN_SESSION_MINUTES = 25
STREAK_MILESTONE = 7

RESOURCE_TYPES = ("pdfs", "videos", "links", "notes")


class Priority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Insight:
    type: str
    message: str
    priority: str

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class WeeklySummary:
    week_start: date
    week_end: date
    total_study_time: int
    average_daily_time: int
    courses_accessed: int
    achievements_earned: int
    most_active_day: str
    learning_streak: int

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    total_study_time: int
    active_days: int
    average_session_time: int
    total_sessions: int
    achievements_earned: int
    courses_accessed: int
    longest_streak: int
    productivity_score: int
    resources_viewed: dict = field(default_factory=dict)

    def to_dict(self):
        return asdict(self)


def level_for(experience_points: int) -> int:
    """
    Level for an experience total. Totals are never negative; deductions
    clamp at 0 in AnalyticsService.add_experience_points.
    """
    return experience_points // XP_PER_LEVEL + 1


def streak_ending_at(active_dates: Iterable[date], end: date) -> int:
    """Number of consecutive active days ending at `end` (0 if `end` is idle)."""
    active = set(active_dates)
    streak = 0
    day = end
    while day in active:
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_run(active_dates: Iterable[date]) -> int:
    """Length of the longest run of consecutive dates."""
    longest = 0
    run = 0
    previous = None
    for day in sorted(set(active_dates)):
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def _active(records):
    return [record for record in records if record.study_time > 0]


def weekly_summary(records, week_start: date, current_streak: int) -> WeeklySummary:
    """
    Summary of the seven days starting at `week_start`, both ends inclusive.

    The daily average is taken over days with study time; the most active
    day is the weekday with the highest study time, the earliest one on a tie.
    """
    week_end = week_start + timedelta(days=6)
    in_week = sorted(
        (record for record in records if week_start <= record.date <= week_end),
        key=lambda record: record.date,
    )

    total = sum(record.study_time for record in in_week)
    active_days = len(_active(in_week))

    by_day = {}
    for record in in_week:
        name = calendar.day_name[record.date.weekday()]
        by_day[name] = by_day.get(name, 0) + record.study_time

    most_active_day = "None"
    best = None
    for name, minutes in by_day.items():
        if best is None or minutes > best:
            most_active_day, best = name, minutes

    return WeeklySummary(
        week_start=week_start,
        week_end=week_end,
        total_study_time=total,
        average_daily_time=round_half_up(total / active_days) if active_days else 0,
        courses_accessed=sum(len(record.courses_accessed or []) for record in in_week),
        achievements_earned=sum(len(record.achievements_earned or []) for record in in_week),
        most_active_day=most_active_day,
        learning_streak=current_streak,
    )


def monthly_summary(records, year: int, month: int) -> MonthlySummary:
    days_in_month = calendar.monthrange(year, month)[1]
    in_month = [record for record in records if record.date.year == year and record.date.month == month]
    active = _active(in_month)

    total = sum(record.study_time for record in in_month)
    resources = dict.fromkeys(RESOURCE_TYPES, 0)
    for record in in_month:
        for key in RESOURCE_TYPES:
            resources[key] += (record.resources_viewed or {}).get(key, 0)

    return MonthlySummary(
        year=year,
        month=month,
        total_study_time=total,
        active_days=len(active),
        average_session_time=round_half_up(total / len(active)) if active else 0,
        total_sessions=sum(1 for record in in_month if record.login_time is not None),
        achievements_earned=sum(len(record.achievements_earned or []) for record in in_month),
        courses_accessed=sum(len(record.courses_accessed or []) for record in in_month),
        longest_streak=longest_run(record.date for record in active),
        productivity_score=round_half_up(len(active) / days_in_month * 100),
        resources_viewed=resources,
    )


def generate_insights(recent_records, current_streak: int) -> list[Insight]:
    """
    Insights over the most recent daily records, in a fixed order:
    consistency, productivity, achievement.
    """
    records = sorted(recent_records, key=lambda record: record.date, reverse=True)[:INSIGHT_WINDOW]
    active_days = len(_active(records))
    total = sum(record.study_time for record in records)

    insights = []
    if active_days < MIN_ACTIVE_DAYS:
        insights.append(
            Insight(
                type="consistency",
                message="Try to study more consistently. Aim for at least 15 minutes daily.",
                priority=Priority.MEDIUM,
            )
        )
    if total / max(active_days, 1) < MIN_SESSION_MINUTES:
        insights.append(
            Insight(
                type="productivity",
                message="Consider longer study sessions for better focus and retention.",
                priority=Priority.LOW,
            )
        )
    if current_streak >= STREAK_MILESTONE:
        insights.append(
            Insight(
                type="achievement",
                message=f"Great job! You're on a {current_streak}-day streak!",
                priority=Priority.HIGH,
            )
        )
    return insights


def week_start_for(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def timeframe_start(today: date, days: int) -> date:
    return today - timedelta(days=days)
