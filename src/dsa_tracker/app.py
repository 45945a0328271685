"""Interactive CLI application."""
import asyncio
import logging
import webbrowser
from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from dsa_tracker.api import QuestionService
from dsa_tracker.config import Settings, settings as default_settings
from dsa_tracker.dashboard import StatsBoard, difficulty_color, progress_color
from dsa_tracker.errors import FetchError, QuestionNotFound, RemoteError, TrackerError
from dsa_tracker.models import Question, Status
from dsa_tracker.mutations import QuestionMutations, TopicSelection
from dsa_tracker.notify import Notifier
from dsa_tracker.session import SessionGateway
from dsa_tracker.store import QuestionStore
from dsa_tracker.timer import AttemptTimer, format_time
from dsa_tracker.views import (
    available_topics, company_aggregates, company_detail, difficulty_progress,
    filter_questions, format_frequency, search_companies,
)

console = Console()
logger = logging.getLogger(__name__)

STATUS_MARKS = {Status.SOLVED: "[blue]✓[/blue]", Status.PRACTICE: "[yellow]●[/yellow]", Status.UNATTEMPTED: ""}


@dataclass
class Tracker:
    settings: Settings
    session: SessionGateway
    service: QuestionService
    store: QuestionStore
    stats: StatsBoard
    mutations: QuestionMutations
    notifier: Notifier


def build_tracker(settings: Settings = default_settings, transport=None) -> Tracker:
    """Wire the session, service, cache and mutation layer together."""
    notifier = Notifier(console)
    session = SessionGateway(settings.db_path)
    service = QuestionService(settings.api_url, session, timeout=settings.request_timeout, transport=transport)
    store = QuestionStore(service, session)
    stats = StatsBoard(service)
    tracker = Tracker(
        settings=settings, session=session, service=service, store=store, stats=stats,
        mutations=QuestionMutations(store, service, notifier), notifier=notifier,
    )

    def expire_session() -> None:
        store.clear()
        stats.clear()
        notifier.error("Session Expired: Please log in again.")

    session.on_unauthorized(expire_session)
    return tracker


async def ask(prompt: str, **kwargs) -> str:
    """Prompt without blocking the event loop, so timers keep ticking."""
    return await asyncio.to_thread(Prompt.ask, prompt, **kwargs)


def split_choices(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def show_welcome(tracker: Tracker):
    user = tracker.session.user
    greeting = f"Signed in as [bold]{user.username or user.email}[/bold]" if user else "[dim]Not signed in[/dim]"
    console.print(Panel(
        f"[bold]DSA Tracker[/bold]\n[dim]Interview question practice[/dim]\n{greeting}",
        title="Welcome", border_style="magenta",
    ))


def show_menu(signed_in: bool):
    console.print("\n[bold]Commands:[/bold]")
    if signed_in:
        commands = [
            ("companies", "Browse companies"),
            ("company", "Questions asked by one company"),
            ("questions", "Search and filter questions"),
            ("question", "Open a question"),
            ("stats", "Progress statistics"),
            ("refresh", "Reload questions and stats"),
            ("logout", "Sign out"),
            ("quit", "Exit"),
        ]
    else:
        commands = [
            ("login", "Sign in"),
            ("register", "Create an account"),
            ("quit", "Exit"),
        ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def questions_table(title: str, questions: list[Question]) -> Table:
    table = Table(title=title)
    table.add_column("Id", justify="right", style="dim")
    table.add_column("Question", style="bold")
    table.add_column("Difficulty")
    table.add_column("Frequency", justify="right")
    table.add_column("")
    for q in questions:
        color = difficulty_color(q.difficulty)
        table.add_row(
            str(q.id), q.name, f"[{color}]{q.difficulty.value}[/{color}]",
            format_frequency(q.average_frequency), STATUS_MARKS[q.status],
        )
    return table


async def load_questions(tracker: Tracker) -> bool:
    try:
        await tracker.store.load()
    except FetchError as e:
        tracker.notifier.error(e)
        return False
    return True


async def cmd_login(tracker: Tracker, register: bool = False):
    email = await ask("Email")
    password = await ask("Password", password=True)
    try:
        if register:
            username = await ask("Username")
            token, user = await tracker.service.register(email, password, username)
        else:
            token, user = await tracker.service.login(email, password)
    except RemoteError as e:
        tracker.notifier.error(e.detail or ("Registration failed" if register else "Login failed"))
        return
    tracker.session.establish(token, user)
    tracker.notifier.info(f"Welcome, {user.username or user.email}!")
    await load_questions(tracker)


def cmd_logout(tracker: Tracker):
    tracker.session.logout()
    tracker.store.clear()
    tracker.stats.clear()
    console.print("[dim]Signed out.[/dim]")


async def cmd_companies(tracker: Tracker):
    text = await ask("Search companies", default="")
    companies = search_companies(company_aggregates(tracker.store.snapshot()), text)
    if not companies:
        console.print("[yellow]No companies match.[/yellow]")
        return
    table = Table(title="Companies")
    table.add_column("Company", style="cyan")
    table.add_column("Questions", justify="right")
    table.add_column("Solved", justify="right")
    table.add_column("")
    for c in companies:
        color = progress_color(c.solved_questions, c.total_questions)
        table.add_row(
            c.name, str(c.total_questions),
            f"[{color}]{c.solved_questions}[/{color}]",
            "[blue]✓[/blue]" if c.fully_solved else "",
        )
    console.print(table)


async def cmd_company(tracker: Tracker):
    name = await ask("Company")
    detail = company_detail(tracker.store.snapshot(), name)
    if not detail.questions:
        console.print(f"[yellow]No questions for {name}.[/yellow]")
        return
    console.print(
        f"\n  Solved: [blue]{detail.solved}[/blue]  |  Practice: [yellow]{detail.practice}[/yellow]  |  "
        f"Pending: [bold]{detail.unattempted}[/bold]  |  Total: [magenta]{detail.total}[/magenta]\n"
    )
    console.print(questions_table(detail.name, list(detail.questions)))


async def cmd_questions(tracker: Tracker):
    snapshot = tracker.store.snapshot()
    search = await ask("Search", default="")
    difficulties = split_choices(await ask("Difficulties (comma separated: EASY, MEDIUM, HARD)", default=""))
    topics = available_topics(snapshot)
    if topics:
        console.print(f"[dim]Topics: {', '.join(topics)}[/dim]")
    chosen_topics = split_choices(await ask("Topics (comma separated)", default=""))
    try:
        results = filter_questions(snapshot, search, difficulties, chosen_topics)
    except ValueError:
        console.print("[red]Difficulty must be one of EASY, MEDIUM, HARD.[/red]")
        return
    console.print(questions_table(f"Questions ({len(results)})", results))
    progress = "  |  ".join(
        f"[{difficulty_color(p.difficulty)}]{p.difficulty.value}[/{difficulty_color(p.difficulty)}] {p.solved}/{p.total}"
        for p in difficulty_progress(results)
    )
    console.print(f"  {progress}")


def show_question(question: Question, timer: AttemptTimer, selection: TopicSelection):
    color = difficulty_color(question.difficulty)
    topics = ", ".join(
        f"[red strike]{t}[/red strike]" if t in selection else t for t in question.topics
    ) or "[dim]none[/dim]"
    timing = f"[green]{format_time(timer.elapsed_seconds)} (running)[/green]" if timer.running else "[dim]idle[/dim]"
    console.print(Panel(
        f"[{color}]{question.difficulty.value}[/{color}]  Frequency: {format_frequency(question.average_frequency)}\n"
        f"Companies: {', '.join(question.companies) or '-'}\n"
        f"Topics: {topics}\n"
        f"Status: [bold]{question.status.value.capitalize()}[/bold]\n"
        f"Attempts: {question.attempt_count}  |  Best time: {format_time(question.best_time)}\n"
        f"Timer: {timing}",
        title=question.name, border_style="cyan",
    ))


def open_link(tracker: Tracker, question: Question):
    if question.link:
        webbrowser.open(question.link)
    else:
        tracker.notifier.warning("No link available")


async def cmd_question(tracker: Tracker, question_id: int | None = None):
    if question_id is None:
        raw = await ask("Question id")
        if not raw.strip().isdigit():
            console.print("[red]Question id must be a number.[/red]")
            return
        question_id = int(raw)
    try:
        tracker.store.get(question_id)
    except QuestionNotFound as e:
        tracker.notifier.error(e)
        return

    selection = TopicSelection()
    timer = AttemptTimer(question_id, tracker.mutations, tick_interval=tracker.settings.tick_interval)
    try:
        while True:
            try:
                question = tracker.store.get(question_id)
            except QuestionNotFound:
                # cache was cleared, e.g. the session expired
                return
            show_question(question, timer, selection)
            actions = ["status", "stop" if timer.running else "start", "topic", "remove", "open", "back"]
            choice = await ask("Action", choices=actions, default="back")
            if choice == "status":
                status = await ask("New status", choices=[s.value for s in Status], default=question.status.value)
                await tracker.mutations.set_status(question_id, status)
            elif choice == "start":
                await timer.start()
            elif choice == "stop":
                elapsed = await timer.stop()
                console.print(f"[green]Attempt time: {format_time(elapsed)}[/green]")
            elif choice == "topic":
                if not question.topics:
                    console.print("[yellow]This question has no topics.[/yellow]")
                    continue
                topic = await ask("Topic", choices=list(question.topics))
                selection.toggle(topic)
            elif choice == "remove":
                await tracker.mutations.remove_topics(question_id, selection)
            elif choice == "open":
                open_link(tracker, question)
            else:
                return
    finally:
        timer.close()


async def cmd_stats(tracker: Tracker):
    try:
        stats = await tracker.stats.refresh()
    except FetchError as e:
        tracker.notifier.error(e)
        return
    console.print(Panel(
        f"Total: [magenta]{stats.total}[/magenta]  |  "
        f"Solved: [blue]{stats.by_status.get('solved', 0)}[/blue]  |  "
        f"Practice: [yellow]{stats.by_status.get('practice', 0)}[/yellow]  |  "
        f"Pending: [bold]{stats.by_status.get('unattempted', 0)}[/bold]",
        title="Statistics", border_style="blue",
    ))
    table = Table(title="By Difficulty")
    table.add_column("Difficulty")
    table.add_column("Solved", justify="right")
    for row in stats.by_difficulty:
        color = difficulty_color(row.difficulty)
        table.add_row(f"[{color}]{row.difficulty.value}[/{color}]", f"{row.solved}/{row.total}")
    console.print(table)
    user = tracker.session.user
    if user:
        console.print(f"\n  Email: {user.email}  |  Username: {user.username}")


async def cmd_refresh(tracker: Tracker):
    results = await asyncio.gather(tracker.store.load(), tracker.stats.refresh(), return_exceptions=True)
    failed = False
    for result in results:
        if isinstance(result, TrackerError):
            tracker.notifier.error(result)
            failed = True
        elif isinstance(result, BaseException):
            raise result
    if not failed:
        console.print(f"[green]Loaded {len(tracker.store)} questions.[/green]")


async def run(tracker: Tracker):
    tracker.session.restore()
    show_welcome(tracker)
    if tracker.session.is_authenticated:
        await load_questions(tracker)

    while True:
        signed_in = tracker.session.is_authenticated
        show_menu(signed_in)
        default = "companies" if signed_in else "login"
        choice = (await ask("\n[bold]>[/bold]", default=default)).strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck with your interviews![/dim]")
                break
            elif choice == "login" and not signed_in:
                await cmd_login(tracker)
            elif choice == "register" and not signed_in:
                await cmd_login(tracker, register=True)
            elif not signed_in:
                console.print("[yellow]Please log in first.[/yellow]")
            elif choice == "logout":
                cmd_logout(tracker)
            elif choice == "companies":
                await cmd_companies(tracker)
            elif choice == "company":
                await cmd_company(tracker)
            elif choice == "questions":
                await cmd_questions(tracker)
            elif choice == "question":
                await cmd_question(tracker)
            elif choice == "stats":
                await cmd_stats(tracker)
            elif choice == "refresh":
                await cmd_refresh(tracker)
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except TrackerError as e:
            tracker.notifier.error(e)


async def _main():
    tracker = build_tracker()
    async with tracker.service:
        await run(tracker)


def main():
    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        console.print("\n[dim]Bye.[/dim]")


if __name__ == "__main__":
    main()
