"""Derived dashboard metrics.

Everything here is a pure function of an ``ActivityRecord`` and the current
date. Nothing is cached; the dashboard recomputes on every render.
"""

import calendar
import math
from datetime import date, timedelta
from typing import Any, Dict, List

from analytics.models import ActivityRecord

WEEK_DAYS = 7
TREND_MONTHS = 6


def weekly_series(record: ActivityRecord, today: date) -> List[Dict[str, Any]]:
    """Hours and XP for the trailing seven days ending today, oldest first."""
    series = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        entry = record.daily_activity.get(day.isoformat())
        series.append({
            "day": calendar.day_abbr[day.weekday()],
            "date": day.isoformat(),
            "hours": entry.hours_studied if entry else 0,
            "xp": entry.xp_earned if entry else 0,
        })
    return series


def _previous_months(today: date, count: int) -> List[tuple]:
    year, month = today.year, today.month
    months = []
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def monthly_performance(record: ActivityRecord, today: date) -> List[Dict[str, Any]]:
    """Mean quiz percentage for the current month and the five before it."""
    performance = []
    for year, month in _previous_months(today, TREND_MONTHS):
        percentages = [
            quiz.percentage
            for quiz in record.quiz_scores
            if quiz.date.year == year and quiz.date.month == month
        ]
        # half-up, so 62.5 shows as 63
        score = math.floor(sum(percentages) / len(percentages) + 0.5) if percentages else 0
        performance.append({
            "month": calendar.month_abbr[month],
            "year": year,
            "score": score,
        })
    return performance


def weekly_hours(record: ActivityRecord, today: date) -> float:
    return sum(day["hours"] for day in weekly_series(record, today))


def average_score(record: ActivityRecord, today: date) -> int:
    """This month's average quiz percentage."""
    return monthly_performance(record, today)[-1]["score"]


def subject_distribution(record: ActivityRecord) -> List[Dict[str, Any]]:
    return [
        {
            "subject": subject.name,
            "lessons": subject.lessons_completed,
            "progress": round(subject.progress),
            "color": subject.color,
        }
        for subject in record.subjects
    ]


def achievements(record: ActivityRecord) -> List[Dict[str, Any]]:
    """Dashboard badges and whether the learner has earned each one."""
    perfect_quizzes = sum(1 for quiz in record.quiz_scores if quiz.score == quiz.total_questions)
    best_day_hours = max((day.hours_studied for day in record.daily_activity.values()), default=0)

    badges = [
        ("Week Warrior", "7-day learning streak", "🔥", record.current_streak >= 7),
        ("Quiz Master", "10 perfect quiz scores", "🎯", perfect_quizzes >= 10),
        ("Study Marathon", "5+ hours in one day", "⏰", best_day_hours >= 5),
        ("Subject Expert", "Complete a subject path", "🎓",
         any(subject.progress >= 100 for subject in record.subjects)),
        ("AI Explorer", "Generate 5 AI study materials", "🤖", len(record.ai_materials_generated) >= 5),
        ("Consistent Learner", "30-day streak", "📚", record.current_streak >= 30),
    ]
    return [
        {"title": title, "description": description, "icon": icon, "earned": earned}
        for title, description, icon, earned in badges
    ]
