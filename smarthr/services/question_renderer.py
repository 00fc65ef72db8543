from __future__ import annotations

from datetime import datetime, timezone
from html import escape
from zoneinfo import ZoneInfo

from smarthr.schemas.profile import QuestionSet, TaskSet


def format_display_date(moment: datetime, tz_name: str) -> str:
    local = moment.astimezone(ZoneInfo(tz_name))
    return local.strftime("%d/%m/%Y, %I:%M:%S %p")


def _list_items(items: list[str]) -> str:
    return "\n".join(f"<li>{escape(item)}</li>" for item in items)


def render_questions(questions: QuestionSet, tz_name: str, now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return (
        "<div>\n"
        '  <div style="color:#fff">\n'
        f"    <b>Current date:</b> <date>{escape(format_display_date(moment, tz_name))}</date>\n"
        "  </div>\n"
        "  <h5>🛠 Technical Interview Questions</h5>\n"
        f"  <ul>\n{_list_items(questions.technical)}\n  </ul>\n"
        "  <h5>🤝 Behavioural Interview Questions</h5>\n"
        f"  <ul>\n{_list_items(questions.behavioral)}\n  </ul>\n"
        "</div>"
    )


def _task_card(title: str, items: list[str]) -> str:
    return (
        '  <div class="task-card">\n'
        f"    <h5>{escape(title)}</h5>\n"
        f"    <ol>\n{_list_items(items)}\n    </ol>\n"
        "  </div>\n"
    )


def render_tasks(tasks: TaskSet, tz_name: str, now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return (
        "<div>\n"
        f"  <p><b>Generated:</b> {escape(format_display_date(moment, tz_name))}</p>\n"
        f"{_task_card('💻 Technical Challenge', tasks.technical_tasks)}"
        f"{_task_card('🧩 Scenario Challenge', tasks.scenario_tasks)}"
        "</div>"
    )
