"""
TeachMe: Terminal front end.

Teach a simulated student, then watch it take the quiz.

Commands:
- teachme subjects  - Show the curriculum and statuses
- teachme teach     - Teach one subtopic directly
- teachme study     - Browse subjects and topics, then teach
"""
from __future__ import annotations

import asyncio
import sys

import typer
from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import Settings, get_settings
from teachme.curriculum.catalog import CurriculumStore
from teachme.curriculum.models import MasteryStatus, Subtopic
from teachme.errors import EmptyUserInput, TeachMeError
from teachme.session.navigator import SessionNavigator
from teachme.session.state_machine import QuizOutcome, SessionPhase, TeachingSession
from teachme.transcript import Message, Sender
from teachme.tutor.gateway import GeminiGateway

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="teachme",
    help="TeachMe: learn by teaching a simulated student",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
    "status": {
        MasteryStatus.NOT_STARTED: "dim",
        MasteryStatus.IN_PROGRESS: "yellow",
        MasteryStatus.COMPLETED: "green",
        MasteryStatus.MASTERED: "bold magenta",
    },
}

TEACHING_HELP = (
    "[dim]Type an explanation to teach. Commands: "
    "/quiz  /restart  /back  /help[/dim]"
)
GRADED_HELP = "[dim]Commands: /teach (keep teaching)  /restart  /back[/dim]"


def style_status(status: MasteryStatus) -> str:
    style = STYLES["status"].get(status, "white")
    return f"[{style}]{status.value.replace('_', ' ')}[/{style}]"


# =============================================================================
# Display Helpers
# =============================================================================


def display_problem(subtopic: Subtopic) -> None:
    problem = subtopic.practice_problem
    content = f"{problem.question}\n\n{problem.format_choices()}"
    console.print(Panel(
        content,
        title=f"Problem to Solve  |  {subtopic.name}",
        title_align="left",
        border_style="cyan",
        padding=(1, 2),
    ))
    console.print(
        "[dim]You are the teacher! Explain concepts to your AI student who has "
        "the understanding level of a 15-year-old.[/dim]"
    )


def display_message(message: Message) -> None:
    if message.sender == Sender.USER:
        console.print(Panel(message.content, title="You", title_align="right", border_style="blue"))
    else:
        console.print(Panel(Markdown(message.content), title="Student", title_align="left", border_style="white"))


def display_outcome(session: TeachingSession, outcome: QuizOutcome) -> None:
    problem = session.subtopic.practice_problem

    lines = []
    for choice in problem.choices:
        marker = "[bold blue]●[/bold blue]" if choice.id in outcome.selected_answers else "○"
        lines.append(f"{marker} {choice.id}. {choice.text}")
    console.print(Panel("\n".join(lines), title=problem.question, title_align="left", border_style="cyan"))

    if outcome.thinking_process:
        console.print(Panel(Markdown(outcome.thinking_process), title="My Thinking Process", border_style="blue"))

    if outcome.correct:
        console.print(f"[{STYLES['correct']}]I got it right![/{STYLES['correct']}]")
    else:
        console.print(f"[{STYLES['incorrect']}]I need to learn more[/{STYLES['incorrect']}]")
        if outcome.failure:
            console.print(f"[{STYLES['warning']}]The quiz could not be graded: {outcome.failure}[/{STYLES['warning']}]")
        correct = "\n".join(f"{c.id}. {c.text}" for c in problem.correct_choices())
        console.print(Panel(correct, title="Correct Answers", border_style="green"))
        if outcome.misconception_analysis:
            console.print(Panel(Markdown(outcome.misconception_analysis), title="Teacher's Analysis", border_style="yellow"))
        if problem.explanation:
            console.print(Panel(problem.explanation, title="Explanation", border_style="dim"))

    console.print(f"Status: {style_status(session.subtopic.status)}")


def display_progress(navigator: SessionNavigator) -> None:
    for subject, summary in zip(navigator.store.subjects, navigator.progress()):
        stars = "★" * summary.completed_topics + "☆" * (summary.total_topics - summary.completed_topics)
        console.print(f"{subject.icon} {subject.name}: [yellow]{stars}[/yellow] {summary.label}")


# =============================================================================
# Teaching Loop
# =============================================================================


async def run_teaching_loop(session: TeachingSession) -> None:
    """Read intents until the user goes back."""
    display_problem(session.subtopic)
    display_message(session.transcript.seed)
    console.print(TEACHING_HELP)

    while True:
        text = Prompt.ask("[bold blue]Teach[/bold blue]" if session.phase == SessionPhase.TEACHING else "[bold]Next[/bold]")
        command = text.strip().lower()

        try:
            if command == "/back":
                return
            if command == "/help":
                console.print(TEACHING_HELP if session.phase == SessionPhase.TEACHING else GRADED_HELP)
            elif command == "/restart":
                session.start_over()
                console.print(f"[{STYLES['info']}]Starting over.[/{STYLES['info']}]")
                display_message(session.transcript.seed)
            elif command == "/teach":
                session.return_to_teaching()
                console.print(TEACHING_HELP)
            elif command == "/quiz":
                with console.status("Thinking..."):
                    outcome = await session.request_quiz()
                if outcome is not None:
                    display_outcome(session, outcome)
                    console.print(GRADED_HELP)
            else:
                with console.status("Thinking..."):
                    reply = await session.send_message(text)
                if reply is not None:
                    display_message(reply)
                    if session.ready_advanced:
                        console.print("[dim]The student might be ready - type /quiz to test it.[/dim]")
        except EmptyUserInput:
            continue
        except TeachMeError as e:
            console.print(f"[{STYLES['warning']}]{e}[/{STYLES['warning']}]")


def _build_navigator() -> SessionNavigator:
    store = CurriculumStore.from_settings()

    def on_complete(subtopic_id: str, success: bool) -> None:
        if success:
            console.print(f"[{STYLES['correct']}]★ {subtopic_id} completed![/{STYLES['correct']}]")

    return SessionNavigator(store, GeminiGateway(), on_complete=on_complete)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def subjects() -> None:
    """Show the curriculum with subtopic statuses."""
    store = CurriculumStore.from_settings()

    table = Table(title="Curriculum")
    table.add_column("Subject")
    table.add_column("Topic")
    table.add_column("Subtopic")
    table.add_column("Fundamental", justify="center")
    table.add_column("Status")

    for subject in store.subjects:
        for topic in subject.topics:
            for subtopic in topic.subtopics:
                table.add_row(
                    f"{subject.icon} {subject.id}",
                    topic.id,
                    f"{subtopic.id} [dim]({subtopic.name})[/dim]",
                    "✓" if subtopic.is_fundamental else "",
                    style_status(subtopic.status),
                )

    console.print(table)


@app.command()
def teach(
    subject_id: str = typer.Argument(..., help="Subject id, e.g. cs"),
    topic_id: str = typer.Argument(..., help="Topic id, e.g. programming-basics"),
    subtopic_id: str = typer.Argument(..., help="Subtopic id, e.g. variables"),
) -> None:
    """Teach one subtopic."""
    navigator = _build_navigator()
    try:
        navigator.select_subject(subject_id)
        navigator.select_topic(topic_id)
        session = navigator.select_subtopic(subtopic_id)
    except TeachMeError as e:
        console.print(f"[{STYLES['incorrect']}]{e}[/{STYLES['incorrect']}]")
        raise typer.Exit(1)

    console.rule(navigator.title)
    asyncio.run(run_teaching_loop(session))
    navigator.back()
    display_progress(navigator)


@app.command()
def study() -> None:
    """Browse the curriculum and teach subtopics."""
    navigator = _build_navigator()

    while True:
        console.rule(navigator.title)
        if navigator.subject is None:
            display_progress(navigator)
            options = {s.id: s.name for s in navigator.store.subjects}
        elif navigator.topic is None:
            options = {t.id: f"{t.name} - {t.description}" for t in navigator.subject.topics}
        else:
            options = {
                s.id: f"{s.name} [{s.status.value}]" for s in navigator.topic.subtopics
            }

        for key, label in options.items():
            console.print(f"  [cyan]{key}[/cyan]  {label}")
        choice = Prompt.ask("Choose (or 'back' / 'quit')", choices=[*options, "back", "quit"])

        if choice == "quit":
            return
        if choice == "back":
            navigator.back()
        elif navigator.subject is None:
            navigator.select_subject(choice)
        elif navigator.topic is None:
            navigator.select_topic(choice)
        else:
            session = navigator.select_subtopic(choice)
            console.rule(navigator.title)
            asyncio.run(run_teaching_loop(session))
            navigator.back()


# =============================================================================
# Entry Point
# =============================================================================


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="1 MB",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
