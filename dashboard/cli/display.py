"""Rich terminal output for the dashboard CLI."""

from datetime import datetime
from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modules.attendance.models import (
    AbsenceReasonCount,
    AttendanceRecord,
    DashboardStats,
    DistrictAttendance,
)
from modules.auth.models import CountdownTick
from modules.export_requests.models import ExportRequest, RequestStatus, RequestSummary
from modules.exports.models import EmittedFile
from shared.models import Session

console = Console()
err_console = Console(stderr=True)

STATUS_STYLES = {
    RequestStatus.PENDING: "yellow",
    RequestStatus.APPROVED: "green",
    RequestStatus.REJECTED: "red",
}


def format_role(role: str) -> str:
    """Display name for a role, e.g. "superadmin" -> "Super Admin"."""
    names = {
        "fieldworker": "Field Worker",
        "manager": "Manager",
        "superadmin": "Super Admin",
        "schooladmin": "School Admin",
    }
    return names.get(role.replace("-", "").lower(), role)


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def print_error(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def print_session(session: Session, tick: Optional[CountdownTick]) -> None:
    lines = [
        f"[bold]{session.name or session.phone}[/bold] ({format_role(session.role)})",
        f"Phone: {session.phone}",
    ]
    if session.school:
        lines.append(f"School: {session.school}")
    if session.district:
        lines.append(f"District: {session.district}")
    if tick is not None:
        lines.append(countdown_markup(tick))
    console.print(Panel("\n".join(lines), title="Session", border_style="blue"))


def countdown_markup(tick: CountdownTick) -> str:
    style = "bold red" if tick.warning else "green"
    return f"Session expires in [{style}]{tick.display}[/{style}]"


def countdown_text(tick: CountdownTick) -> Text:
    return Text.from_markup(countdown_markup(tick))


def attendance_table(records: Iterable[AttendanceRecord]) -> Table:
    table = Table(title="Attendance Records", show_lines=False)
    table.add_column("Teacher")
    table.add_column("School")
    table.add_column("District")
    table.add_column("Topic")
    table.add_column("Present", justify="right")
    table.add_column("Absent", justify="right")
    table.add_column("Absence Reason")
    table.add_column("Date")

    for record in records:
        table.add_row(
            record.teacher_name or "-",
            record.school or "-",
            record.district or "-",
            record.topic_covered or "-",
            str(record.students_present),
            str(record.students_absent),
            record.absence_reason or "-",
            format_timestamp(record.created_at),
        )
    return table


def print_stats(
    stats: DashboardStats,
    reasons: Iterable[AbsenceReasonCount],
    districts: Iterable[DistrictAttendance],
) -> None:
    console.print(
        Panel(
            f"Students present: [bold]{stats.total_present}[/bold]\n"
            f"Students absent: [bold]{stats.total_absent}[/bold]\n"
            f"Attendance rate: [bold]{stats.attendance_rate}%[/bold]\n"
            f"Teachers reporting: {stats.total_teachers}\n"
            f"Schools: {stats.total_schools}  Districts: {stats.total_districts}",
            title="Overview",
            border_style="blue",
        )
    )

    reason_table = Table(title="Absence Reasons")
    reason_table.add_column("Reason")
    reason_table.add_column("Students", justify="right")
    for reason in reasons:
        reason_table.add_row(reason.name, str(reason.value))
    console.print(reason_table)

    district_table = Table(title="Attendance by District")
    district_table.add_column("District")
    district_table.add_column("Present", justify="right")
    district_table.add_column("Absent", justify="right")
    for district in districts:
        district_table.add_row(district.district, str(district.present), str(district.absent))
    console.print(district_table)


def requests_table(requests: Iterable[ExportRequest], title: str = "Export Requests") -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Requester")
    table.add_column("Data Type")
    table.add_column("Records", justify="right")
    table.add_column("Reason")
    table.add_column("Status")
    table.add_column("Resolved By")
    table.add_column("Resolved")

    for request in requests:
        style = STATUS_STYLES.get(request.status, "white")
        reason = request.reason
        if request.rejection_reason:
            reason = f"{reason}\n[red]Rejected: {request.rejection_reason}[/red]"
        table.add_row(
            str(request.id),
            f"{request.requester_name}\n[dim]{request.requester_phone}[/dim]",
            request.data_type,
            str(request.record_count),
            reason,
            f"[{style}]{request.status.value}[/{style}]",
            request.approved_by or "-",
            format_timestamp(request.approved_at),
        )
    return table


def print_request_summary(summary: RequestSummary) -> None:
    console.print(
        f"[bold]{summary.total}[/bold] requests: "
        f"[yellow]{summary.pending} pending[/yellow], "
        f"[green]{summary.approved} approved[/green] "
        f"({summary.approved_today} today), "
        f"[red]{summary.rejected} rejected[/red]"
    )


def print_emitted(file: EmittedFile) -> None:
    print_success(f"Exported {file.row_count} rows to {file.path}")
