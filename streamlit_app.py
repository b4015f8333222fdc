import random
import logging
import pandas as pd
import streamlit as st
from config import load_settings, configure_logging
from learning_hub import LearningHub
from quiz_system import QUIZ_BANK, format_time
from typing import Optional
from agents.exceptions import (
    CredentialsError,
    LearnHubError,
    MaterialAgentError,
    StateError,
    TutorAgentError,
    ValidationError
)

logger = logging.getLogger(__name__)

def get_hub() -> Optional[LearningHub]:
    """Return the session's LearningHub, creating it on first run."""
    if 'hub' not in st.session_state:
        settings = load_settings()
        configure_logging(settings)
        try:
            st.session_state.hub = LearningHub.from_settings(settings)
        except LearnHubError as e:
            logger.error(f"Failed to start learning hub: {str(e)}")
            st.error(f"⚠️ Could not start LearnHub: {str(e)}")
            return None
    return st.session_state.hub

def render_header(hub: LearningHub):
    record = hub.store.record
    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        st.title("📘 AI LearnHub")
        st.markdown("*Your AI-Powered Learning Platform*")
    with col2:
        st.metric("XP", record.total_xp)
    with col3:
        st.metric("Streak", f"{record.current_streak} days")

def render_dashboard(hub: LearningHub):
    """Stat cards, subject progress, weekly goal and charts."""
    data = hub.dashboard()

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Total XP", data["total_xp"])
        st.caption("Keep learning to earn more!")
    with col2:
        st.metric("Streak", f"{data['current_streak']} days")
        st.caption("Keep it up!" if data["current_streak"] > 0 else "Start your streak today!")
    with col3:
        st.metric("Lessons", f"{data['completed_lessons']}/{data['total_lessons']}")
        st.caption(f"{data['lessons_percentage']}% complete")
    with col4:
        st.metric("Level", data["current_level"])

    left, right = st.columns(2)
    with left:
        st.subheader("Subject Progress")
        for subject in hub.store.record.subjects:
            st.write(f"{subject.icon} **{subject.name}** - {round(subject.progress)}%")
            st.progress(int(round(subject.progress)))
            st.caption(f"{subject.lessons_completed}/{subject.total_lessons} lessons completed")

    with right:
        st.subheader("Weekly Goal")
        st.write(f"Lessons completed this week: **{data['weekly_completed']}/{data['weekly_goal']}**")
        st.progress(int(data["weekly_completed"] / data["weekly_goal"] * 100))
        remaining = data["weekly_goal"] - data["weekly_completed"]
        if remaining <= 0:
            st.success("Goal achieved! Great work!")
        else:
            st.info(f"{remaining} more lessons to reach your goal!")

        if st.button("▶️ Start Lesson", key="start_lesson_button"):
            # Demo lesson in a random subject
            subject = random.choice([s.name for s in hub.store.record.subjects])
            try:
                hub.store.complete_lesson(subject)
                st.toast(f"Lesson completed in {subject}! +25 XP")
                st.rerun()
            except StateError as e:
                st.error(f"Could not save progress: {str(e)}")

        with st.form("study_session_form", clear_on_submit=True):
            subject_names = [s.name for s in hub.store.record.subjects]
            study_subject = st.selectbox("Subject", subject_names)
            hours = st.number_input("Hours studied", min_value=0.0, max_value=24.0, value=1.0, step=0.25)
            if st.form_submit_button("⏱️ Log Study Session"):
                try:
                    hub.store.record_study_session(study_subject, hours)
                    st.toast(f"Logged {hours:g}h of {study_subject}")
                except (ValidationError, StateError) as e:
                    st.warning(str(e))

    st.subheader("📈 Weekly Learning Activity")
    weekly = pd.DataFrame(data["weekly_series"])
    st.line_chart(weekly, x="date", y="hours")
    st.caption(f"{data['weekly_hours']:.1f} hours studied in the last 7 days")

    left, right = st.columns(2)
    with left:
        st.subheader("Subject Distribution")
        subjects = pd.DataFrame(data["subjects"])
        st.bar_chart(subjects, x="subject", y="lessons")
    with right:
        st.subheader("Performance Trend")
        performance = pd.DataFrame(data["monthly_performance"])
        performance["label"] = performance["month"] + " " + performance["year"].astype(str)
        st.bar_chart(performance, x="label", y="score")
        st.caption(f"Average score this month: {data['average_score']}%")

    st.subheader("🏅 Achievements")
    for achievement in data["achievements"]:
        if achievement["earned"]:
            st.success(f"{achievement['icon']} **{achievement['title']}** - {achievement['description']}")
        else:
            st.write(f"{achievement['icon']} {achievement['title']} - {achievement['description']}")

def render_api_key_setup(hub: LearningHub):
    """Blocking setup prompt shown while no API key is configured."""
    st.subheader("🤖 Setup AI Tutor")
    st.write(
        "Enter your OpenRouter API key to start chatting with the AI tutor. "
        "You can get a free API key from [OpenRouter.ai](https://openrouter.ai)."
    )
    api_key = st.text_input("OpenRouter API key", type="password", key="api_key_input")
    if st.button("Save API Key", key="save_api_key_button"):
        try:
            hub.save_api_key(api_key)
            st.toast("API Key Set. You can now start chatting with the AI tutor!")
            st.rerun()
        except ValidationError as e:
            st.warning(str(e))

def _ask_tutor(hub: LearningHub, question: str) -> bool:
    """Send ``question`` to the tutor. Returns False when a notice was shown instead."""
    try:
        with st.spinner("Thinking..."):
            hub.tutor.ask(question)
        return True
    except ValidationError as e:
        st.warning(str(e))
    except TutorAgentError as e:
        logger.error(f"Tutor error: {str(e)}")
        st.error("Failed to get response from AI. Please check your API key and try again.")
    return False

def render_tutor(hub: LearningHub):
    if not hub.ai_ready:
        render_api_key_setup(hub)
        return

    tutor = hub.tutor
    st.subheader("🤖 AI Learning Assistant")

    for message in tutor.messages:
        with st.chat_message(message.role):
            st.write(message.content)
            st.caption(message.timestamp.strftime("%H:%M:%S"))

    cols = st.columns(len(tutor.quick_prompts))
    for col, prompt in zip(cols, tutor.quick_prompts):
        with col:
            if st.button(prompt, key=f"quick_prompt_{prompt}"):
                if _ask_tutor(hub, prompt):
                    st.rerun()

    question = st.chat_input("Ask me anything about learning...")
    if question and _ask_tutor(hub, question):
        st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🧹 New Conversation", key="reset_tutor_button"):
            tutor.reset()
            st.rerun()
    with col2:
        if st.button("🔑 Change API Key", key="change_api_key_button"):
            hub.clear_api_key()
            st.rerun()

def render_material(material):
    """Render one generated material according to its kind."""
    if not material.is_structured:
        st.text(material.content)
        return

    if material.kind == "flashcard":
        cols = st.columns(2)
        for index, card in enumerate(material.content):
            with cols[index % 2]:
                with st.container(border=True):
                    st.caption(f"Question {index + 1}")
                    st.write(f"**{card.question}**")
                    st.write(f"Answer: {card.answer}")
        return

    for index, question in enumerate(material.content, 1):
        with st.container(border=True):
            st.write(f"**{index}. {question.question}**")
            for opt_index, option in enumerate(question.options):
                letter = chr(65 + opt_index)
                if opt_index == question.correct:
                    st.success(f"{letter}. {option}")
                else:
                    st.write(f"{letter}. {option}")
            if question.explanation:
                st.info(f"Explanation: {question.explanation}")

def render_materials(hub: LearningHub):
    try:
        generator = hub.generator
    except CredentialsError as e:
        st.warning(f"API Key Required. {str(e)}")
        return

    generate_tab, list_tab = st.tabs(["✨ Generate Materials", f"📂 My Materials ({len(generator.materials)})"])

    with generate_tab:
        st.write("Generate personalized study materials using AI. Enter your topic and subject to get started.")
        col1, col2 = st.columns(2)
        with col1:
            subject = st.text_input("Subject", placeholder="e.g., Mathematics, Biology, History", key="material_subject")
        with col2:
            topic = st.text_input("Topic", placeholder="e.g., Photosynthesis, World War II", key="material_topic")

        buttons = [
            ("summary", "📝 Generate Summary", "Comprehensive overview with key points"),
            ("flashcard", "🧠 Create Flashcards", "Interactive cards for quick review"),
            ("quiz", "❓ Generate Quiz", "Test your knowledge with questions"),
        ]
        cols = st.columns(3)
        for col, (kind, label, help_text) in zip(cols, buttons):
            with col:
                if st.button(label, key=f"generate_{kind}_button", help=help_text):
                    try:
                        with st.spinner("Generating AI content..."):
                            generator.generate(kind, topic, subject)
                        st.toast(f"{kind.capitalize()} created successfully.")
                    except ValidationError as e:
                        st.warning(f"Missing Information. {str(e)}")
                    except MaterialAgentError as e:
                        logger.error(f"Material error: {str(e)}")
                        st.error("Generation Failed. Failed to generate study material. Please try again.")
                    except StateError as e:
                        st.error(f"Could not save progress: {str(e)}")

    with list_tab:
        if not generator.materials:
            st.info("No Materials Yet. Generate some study materials to get started!")
        for material in generator.materials:
            with st.expander(f"{material.title}  ·  {material.subject}  ·  {material.kind}"):
                st.caption(f"Created on {material.created_at.strftime('%Y-%m-%d')}")
                render_material(material)

def render_quiz(hub: LearningHub):
    session = st.session_state.get('quiz_session')

    if session is None:
        st.subheader("🎯 Interactive Quiz System")
        st.write("Test your knowledge with our quizzes. Choose a subject to get started!")
        cols = st.columns(len(QUIZ_BANK))
        for col, (key, quiz) in zip(cols, QUIZ_BANK.items()):
            with col:
                with st.container(border=True):
                    st.write(f"**{quiz.title}**")
                    st.caption(f"{quiz.subject} · {quiz.difficulty} · {len(quiz.questions)} questions")
                    if st.button("▶️ Start", key=f"start_quiz_{key}"):
                        st.session_state.quiz_session = hub.start_quiz(key)
                        st.rerun()

        recent = list(reversed(hub.store.record.quiz_scores[-5:]))
        if recent:
            st.subheader("Recent Quiz Results")
            for quiz_score in recent:
                percent = round(quiz_score.percentage)
                source = " (AI)" if quiz_score.is_ai_generated else ""
                st.write(f"🏆 **{quiz_score.subject}**{source} - {percent}% "
                         f"({quiz_score.date.strftime('%Y-%m-%d')})")
        return

    if session.completed:
        result = session.result()
        st.subheader(f"🏆 {session.quiz.title} - Results")
        col1, col2, col3 = st.columns(3)
        col1.metric("Score", f"{result['score']}/{result['total_questions']}")
        col2.metric("Percentage", f"{result['percentage']}%")
        col3.metric("Time", format_time(result["time_spent_seconds"]))
        for answer, question in zip(result["answers"], session.quiz.questions):
            icon = "✅" if answer == question.correct else "❌"
            st.write(f"{icon} **{question.question}**")
            st.caption(f"Your answer: {question.options[answer]} · Correct: {question.options[question.correct]}")
            st.caption(question.explanation)
        if st.button("🔄 Back to Quizzes", key="reset_quiz_button"):
            st.session_state.quiz_session = None
            st.rerun()
        return

    question = session.current_question
    st.subheader(session.quiz.title)
    st.progress(int(session.progress))
    st.caption(f"Question {session.current_index + 1} of {len(session.quiz.questions)}")
    st.write(f"**{question.question}**")
    choice = st.radio(
        "Choose an answer",
        options=list(range(len(question.options))),
        format_func=lambda i: question.options[i],
        index=None,
        key=f"quiz_answer_{session.quiz_key}_{session.current_index}"
    )
    if st.button("Next ➡️", key="next_question_button"):
        try:
            if choice is not None:
                session.select_answer(choice)
            finished = session.next_question()
            if finished:
                result = session.result()
                st.toast(f"Quiz Completed! You scored {result['score']} out of {result['total_questions']}.")
            st.rerun()
        except ValidationError as e:
            st.warning(str(e))

def main():
    st.set_page_config(
        page_title="AI LearnHub",
        page_icon="📘",
        layout="wide",
        initial_sidebar_state="collapsed"
    )

    hub = get_hub()
    if hub is None:
        st.stop()
    render_header(hub)

    dashboard_tab, tutor_tab, materials_tab, quiz_tab = st.tabs([
        "📊 Dashboard", "🤖 AI Tutor", "📚 Materials", "🎯 Quiz"
    ])
    with dashboard_tab:
        render_dashboard(hub)
    with tutor_tab:
        render_tutor(hub)
    with materials_tab:
        render_materials(hub)
    with quiz_tab:
        render_quiz(hub)

if __name__ == "__main__":
    main()
