"""Console theme and task formatting for Task Hub."""

from datetime import date
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

from .storage import short_path
from .task import Task


CITY_LIGHTS_COLORS = {
    'primary': '#68D5F3',
    'secondary': '#5CCFE6',
    'accent': '#B7C5D3',
    'success': '#8BD649',
    'warning': '#FFD93D',
    'error': '#F78C6C',
    'critical': '#FF5370',
    'text_primary': '#B7C5D3',
    'text_muted': '#4F5B66',
    'text_bright': '#FFFFFF',
}

TASK_HUB_THEME = Theme({
    'muted': f"{CITY_LIGHTS_COLORS['text_muted']}",
    'success': f"{CITY_LIGHTS_COLORS['success']} bold",
    'warning': f"{CITY_LIGHTS_COLORS['warning']} bold",
    'error': f"{CITY_LIGHTS_COLORS['error']} bold",
    'priority_high': f"{CITY_LIGHTS_COLORS['warning']}",
    'priority_medium': f"{CITY_LIGHTS_COLORS['text_primary']}",
    'priority_low': f"{CITY_LIGHTS_COLORS['text_muted']}",
    'status_open': f"{CITY_LIGHTS_COLORS['primary']}",
    'status_in_progress': f"{CITY_LIGHTS_COLORS['secondary']} bold",
    'status_complete': f"{CITY_LIGHTS_COLORS['success']}",
    'status_canceled': f"{CITY_LIGHTS_COLORS['text_muted']}",
    'accent': f"{CITY_LIGHTS_COLORS['accent']}",
    'assignee': f"{CITY_LIGHTS_COLORS['success']}",
    'due_date': f"{CITY_LIGHTS_COLORS['primary']}",
    'due_date_overdue': f"{CITY_LIGHTS_COLORS['critical']}",
    'header': f"{CITY_LIGHTS_COLORS['text_bright']} bold",
})


def get_themed_console(no_color: bool = False) -> Console:
    """Get a console instance with the Task Hub theme applied."""
    return Console(theme=TASK_HUB_THEME, no_color=no_color, highlight=False)


def get_priority_style(priority: str) -> str:
    """Get the style name for a priority level."""
    priority_map = {
        'high': 'priority_high',
        'medium': 'priority_medium',
        'low': 'priority_low',
    }
    return priority_map.get((priority or '').lower(), 'priority_medium')


def get_status_style(status: str) -> str:
    """Get the style name for a status."""
    status_map = {
        'open': 'status_open',
        'in progress': 'status_in_progress',
        'complete': 'status_complete',
        'canceled': 'status_canceled',
        'cancelled': 'status_canceled',
    }
    return status_map.get((status or '').lower(), 'muted')


def get_status_emoji(status: str) -> str:
    """Get emoji for a task status."""
    status_emojis = {
        'open': '⏳',
        'in progress': '🔄',
        'complete': '✅',
        'canceled': '❌',
        'cancelled': '❌',
    }
    return status_emojis.get((status or '').lower(), '❔')


def format_count_header(count: int) -> str:
    """Header line with the number of listed tasks."""
    return f"[header]Task Hub[/header] [muted]({count} task{'' if count == 1 else 's'})[/muted]"


def format_task_main_row(task: Task) -> str:
    """Status and priority badges followed by the task text."""
    status_style = get_status_style(task.status)
    priority_style = get_priority_style(task.priority)
    return (
        f"{get_status_emoji(task.status)} "
        f"[{status_style}]\\[{escape(task.status)}][/{status_style}] "
        f"[{priority_style}]\\[{escape(task.priority)}][/{priority_style}] "
        f"{escape(task.text)}"
    )


def format_task_meta_row(task: Task, today: date, show_file_path: bool = True) -> str:
    """Secondary line: due, created, project, people and location."""
    parts: List[str] = []

    if task.due:
        style = 'due_date_overdue' if task.is_overdue(today) and not task.is_closed() else 'due_date'
        parts.append(f"[{style}]Due {escape(task.due)}[/{style}]")
    if task.created:
        parts.append(f"Created {escape(task.created)}")
    if task.project:
        parts.append(f"[accent]Project: {escape(task.project)}[/accent]")
    if task.people:
        parts.append(f"[assignee]People: {escape(', '.join(task.people))}[/assignee]")
    if show_file_path:
        parts.append(f"[muted]{escape(short_path(task.document_id))}:{task.line_number}[/muted]")

    return " • ".join(parts)
