import sys
import math
import logging
import argparse
from config import load_settings, configure_logging
from learning_hub import LearningHub
from agents.exceptions import LearnHubError

logger = logging.getLogger(__name__)

def check_environment(hub: LearningHub) -> bool:
    """Report whether the AI features have credentials."""
    if hub.ai_ready:
        return True
    print(
        "OpenRouter API key not found. AI tutor and material generation are disabled.\n"
        "You can enable them by:\n"
        "1. Creating a .env file with OPENROUTER_API_KEY=your-api-key-here\n"
        "2. Or setting it directly in your environment: export OPENROUTER_API_KEY=your-api-key-here\n"
        "3. Or setting LEARNHUB_USE_CANNED=1 for offline demo replies"
    )
    return False

def print_progress_report(dashboard: dict):
    """Print the progress dashboard in a readable format."""
    print("\n=== Learning Progress ===\n")

    print(f"🏆 Total XP: {dashboard['total_xp']}  ({dashboard['current_level']})")
    print(f"🔥 Streak: {dashboard['current_streak']} day(s)")
    print(f"📘 Lessons: {dashboard['completed_lessons']}/{dashboard['total_lessons']} "
          f"({dashboard['lessons_percentage']}% complete)")
    print(f"🎯 Weekly goal: {dashboard['weekly_completed']}/{dashboard['weekly_goal']}")

    print("\n📚 Subjects:")
    for subject in dashboard["subjects"]:
        print(f"  {subject['subject']:<12} {subject['progress']:>3}%  ({subject['lessons']} lessons)")

    print(f"\n📈 This week: {dashboard['weekly_hours']:.1f} hours")
    for day in dashboard["weekly_series"]:
        print(f"  {day['day']} {day['date']}: {day['hours']:.1f}h, {day['xp']} XP")

    print(f"\n📊 Average score this month: {dashboard['average_score']}%")
    for month in dashboard["monthly_performance"]:
        print(f"  {month['month']} {month['year']}: {month['score']}%")

    earned = [a for a in dashboard["achievements"] if a["earned"]]
    print(f"\n🏅 Achievements: {len(earned)}/{len(dashboard['achievements'])}")
    for achievement in dashboard["achievements"]:
        mark = "✓" if achievement["earned"] else " "
        print(f"  [{mark}] {achievement['icon']} {achievement['title']} - {achievement['description']}")
    print()

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LearnHub progress tracker")
    parser.add_argument("--lesson", metavar="SUBJECT", help="complete one lesson in SUBJECT")
    parser.add_argument("--study", nargs=2, metavar=("SUBJECT", "HOURS"), help="log a study session")
    parser.add_argument("--quiz", nargs=3, metavar=("SUBJECT", "SCORE", "TOTAL"), help="log a quiz result")
    parser.add_argument("--ask", metavar="QUESTION", help="ask the AI tutor one question")
    return parser

def main(argv=None) -> int:
    """Apply an optional activity and print the progress report."""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings)

    try:
        with LearningHub.from_settings(settings) as hub:
            if args.lesson:
                hub.store.complete_lesson(args.lesson)
            if args.study:
                subject, hours = args.study
                hours = float(hours)
                if not math.isfinite(hours):
                    raise ValueError(f"hours must be a finite number, got {args.study[1]}")
                hub.store.record_study_session(subject, hours)
            if args.quiz:
                subject, score, total = args.quiz
                hub.store.record_quiz_score(subject, int(score), int(total))
            if args.ask:
                if check_environment(hub):
                    reply = hub.tutor.ask(args.ask)
                    print(f"\n🤖 {reply.content}\n")

            print_progress_report(hub.dashboard())

    except ValueError as value_error:
        logger.error(f"Invalid argument: {str(value_error)}")
        print(f"Invalid argument: {str(value_error)}")
        return 2

    except LearnHubError as hub_error:
        logger.error(f"LearnHub error: {str(hub_error)}")
        print(f"Error: {str(hub_error)}")
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
