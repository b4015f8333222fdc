from datetime import date, datetime

from analytics import metrics
from analytics.models import ActivityRecord, DailyActivity, QuizScore


def _quiz(day, score, total=5, subject="Mathematics"):
    return QuizScore(subject=subject, score=score, total_questions=total, date=day)


def test_weekly_series_always_has_seven_days():
    record = ActivityRecord()
    series = metrics.weekly_series(record, date(2025, 6, 11))

    assert len(series) == 7
    assert series[0]["date"] == "2025-06-05"
    assert series[-1]["date"] == "2025-06-11"
    assert series[-1]["day"] == "Wed"
    assert all(day["hours"] == 0 and day["xp"] == 0 for day in series)


def test_weekly_series_looks_up_exact_dates():
    record = ActivityRecord(daily_activity={
        "2025-06-09": DailyActivity(hours_studied=2.5, xp_earned=150),
        "2025-06-11": DailyActivity(hours_studied=1.0, xp_earned=20),
        "2025-05-01": DailyActivity(hours_studied=9.0, xp_earned=900),
    })
    series = metrics.weekly_series(record, date(2025, 6, 11))

    by_date = {day["date"]: day for day in series}
    assert by_date["2025-06-09"]["hours"] == 2.5
    assert by_date["2025-06-09"]["xp"] == 150
    assert by_date["2025-06-10"]["hours"] == 0
    assert metrics.weekly_hours(record, date(2025, 6, 11)) == 3.5


def test_monthly_performance_covers_six_months():
    record = ActivityRecord(quiz_scores=[
        _quiz(datetime(2025, 6, 2), 4),
        _quiz(datetime(2025, 6, 9), 3, total=4),
        _quiz(datetime(2025, 3, 15), 5),
        _quiz(datetime(2024, 6, 15), 1),
    ])
    performance = metrics.monthly_performance(record, date(2025, 6, 11))

    assert [m["month"] for m in performance] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
    assert performance[-1]["score"] == 78
    assert performance[2]["score"] == 100
    assert performance[0]["score"] == 0
    assert metrics.average_score(record, date(2025, 6, 11)) == 78


def test_monthly_performance_crosses_year_boundary():
    record = ActivityRecord(quiz_scores=[_quiz(datetime(2024, 11, 3), 2, total=4)])
    performance = metrics.monthly_performance(record, date(2025, 2, 1))

    assert [(m["month"], m["year"]) for m in performance] == [
        ("Sep", 2024), ("Oct", 2024), ("Nov", 2024), ("Dec", 2024), ("Jan", 2025), ("Feb", 2025)
    ]
    assert performance[2]["score"] == 50


def test_achievements():
    record = ActivityRecord(
        current_streak=8,
        quiz_scores=[_quiz(datetime(2025, 6, 1), 5) for _ in range(10)],
        daily_activity={"2025-06-01": DailyActivity(hours_studied=5)},
    )
    earned = {a["title"]: a["earned"] for a in metrics.achievements(record)}

    assert earned["Week Warrior"] is True
    assert earned["Quiz Master"] is True
    assert earned["Study Marathon"] is True
    assert earned["Subject Expert"] is False
    assert earned["AI Explorer"] is False
    assert earned["Consistent Learner"] is False


def test_subject_distribution():
    record = ActivityRecord()
    record.subjects[0].lessons_completed = 5
    record.subjects[0].progress = 20.0

    distribution = metrics.subject_distribution(record)
    assert distribution[0] == {"subject": "Mathematics", "lessons": 5, "progress": 20, "color": "#3B82F6"}
    assert len(distribution) == 4
