"""
HygieneQuest dashboard CLI.

Logs operators in with phone + OTP, shows attendance data, and runs the
role-dependent export workflows:

- super admins export at once
- managers verify an export OTP first (the token is reused for 30 minutes)
- field workers file an export request and download once it is approved
"""

import argparse
import asyncio
import sys
from typing import Optional

from rich.live import Live
from rich.prompt import Confirm, Prompt

from shared.config import get_settings
from shared.exceptions import AuthenticationError, DashboardError, NotFoundError
from shared.models import Role

from modules.attendance.models import AttendanceFilter
from modules.auth.exceptions import EmptyOtpError, SessionExpiredError
from modules.export_requests.exceptions import EmptyReasonError
from modules.export_requests.models import (
    ExportRequest,
    RequestScope,
    RequestStatus,
    filter_by_status,
    partition_requests,
    summarize_requests,
)
from modules.exports.exceptions import NoDataToExportError, ResendNotAvailableError
from modules.exports.models import EmittedFile, OtpState
from modules.exports.otp_workflow import ExportOtpWorkflow

from .dependencies import ServiceContainer, get_container
from .display import (
    attendance_table,
    console,
    countdown_text,
    format_role,
    print_emitted,
    print_error,
    print_request_summary,
    print_session,
    print_stats,
    print_success,
    print_warning,
    requests_table,
)
from .logging_config import setup_logging

DEFAULT_DATA_TYPE = "Attendance Data"


async def ask(prompt: str, **kwargs) -> str:
    """Prompt without blocking the event loop (the cooldown keeps ticking)."""
    return await asyncio.to_thread(Prompt.ask, prompt, **kwargs)


def parse_role(value: str) -> Role:
    try:
        return Role.parse(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"unknown role: {value}")


def attendance_filter(args: argparse.Namespace) -> AttendanceFilter:
    return AttendanceFilter(
        search=getattr(args, "search", None),
        district=getattr(args, "district", None),
        school=getattr(args, "school", None),
    )


# -----------------------------------------------------------------------------
# Auth
# -----------------------------------------------------------------------------


async def cmd_login(args: argparse.Namespace, container: ServiceContainer) -> None:
    phone = args.phone or await ask("Phone number")
    await container.auth.send_login_otp(phone, args.role)
    console.print(f"OTP sent to [bold]{phone}[/bold]")

    while True:
        otp = await ask("Enter OTP")
        try:
            session = await container.auth.login(phone, otp, args.role)
            break
        except EmptyOtpError as e:
            print_error(e.message)

    print_success(f"Welcome, {session.name or session.phone} ({format_role(session.role)})")


async def cmd_logout(args: argparse.Namespace, container: ServiceContainer) -> None:
    container.auth.logout()
    print_success("Logged out")


async def cmd_session_status(args: argparse.Namespace, container: ServiceContainer) -> None:
    session = container.sessions.current()
    if session is None:
        console.print("Not logged in. Run [bold]hq-dashboard login[/bold].")
        return
    print_session(session, container.countdown().tick())


async def cmd_session_watch(args: argparse.Namespace, container: ServiceContainer) -> None:
    countdown = container.countdown()
    container.sessions.require()

    with Live(console=console, auto_refresh=False) as live:
        await countdown.run(
            on_tick=lambda tick: live.update(countdown_text(tick), refresh=True),
            on_expire=lambda: None,
        )
    raise SessionExpiredError()


# -----------------------------------------------------------------------------
# Attendance
# -----------------------------------------------------------------------------


async def cmd_attendance_list(args: argparse.Namespace, container: ServiceContainer) -> None:
    if container.attendance.degraded_mode:
        print_warning("Degraded mode is on: sample data is shown if the API is unreachable")
    records = await container.attendance.list_attendance(attendance_filter(args))
    shown = records[: args.limit] if args.limit else records
    console.print(attendance_table(shown))
    console.print(f"[dim]{len(shown)} of {len(records)} records[/dim]")


async def cmd_attendance_stats(args: argparse.Namespace, container: ServiceContainer) -> None:
    overview = await container.attendance.overview()
    print_stats(overview.stats, overview.absence_reasons, overview.districts)


# -----------------------------------------------------------------------------
# Export
# -----------------------------------------------------------------------------


async def run_otp_workflow(workflow: ExportOtpWorkflow) -> Optional[EmittedFile]:
    """Drive the OTP workflow interactively until a file is written or the operator quits."""
    console.print(
        f"Exporting unmasked {workflow.data_type} requires verification. "
        "An OTP will be sent to your phone."
    )
    try:
        while True:
            state = workflow.state
            try:
                if state == OtpState.AWAITING_OTP_SEND:
                    await workflow.send_otp()
                    console.print("OTP sent. Enter [bold]r[/bold] to resend, [bold]q[/bold] to cancel.")
                elif state == OtpState.AWAITING_OTP_ENTRY:
                    code = await ask("Enter export OTP", default="", show_default=False)
                    if code.strip().lower() == "q":
                        return None
                    if code.strip().lower() == "r":
                        await workflow.resend()
                        console.print("A new OTP has been sent")
                        continue
                    await workflow.verify(code)
                    print_success("Verified. Export access lasts 30 minutes.")
                elif state == OtpState.AUTHORIZED:
                    return await workflow.fetch_and_emit()
                elif state == OtpState.FAILED:
                    question = "Request a new OTP?" if workflow.cooldown.can_resend else "Enter the OTP again?"
                    if not await asyncio.to_thread(Confirm.ask, question, default=True):
                        return None
                    workflow.retry()
                else:
                    return workflow.file
            except (EmptyOtpError, ResendNotAvailableError) as e:
                print_error(e.message)
            except (AuthenticationError, NoDataToExportError):
                raise
            except DashboardError as e:
                print_error(e.message)
    finally:
        workflow.close()


async def submit_request_interactive(
    container: ServiceContainer,
    data_type: str,
    record_count: int,
    reason: Optional[str],
) -> None:
    console.print(
        "As a field worker, you need approval from a super admin to export data. "
        "Please provide a reason for your request."
    )
    while True:
        text = reason if reason is not None else await ask("Reason for export request", default="", show_default=False)
        try:
            await container.export_requests.submit_request(text, data_type, record_count)
            break
        except EmptyReasonError as e:
            if reason is not None:
                raise
            print_error(e.message)

    print_success("Export request submitted successfully! You will be notified when approved.")


async def cmd_export(args: argparse.Namespace, container: ServiceContainer) -> None:
    records = await container.attendance.list_attendance(attendance_filter(args))
    decision = await container.exports.export(args.data_type, records)

    if decision.file is not None:
        print_emitted(decision.file)
    elif decision.requires_otp:
        file = await run_otp_workflow(decision.workflow)
        if file is not None:
            print_emitted(file)
        else:
            console.print("Export cancelled")
    elif decision.requires_request:
        await submit_request_interactive(container, decision.data_type, decision.record_count, args.reason)


# -----------------------------------------------------------------------------
# Export requests
# -----------------------------------------------------------------------------


def request_scope(args: argparse.Namespace, container: ServiceContainer) -> RequestScope:
    if getattr(args, "mine", False):
        return RequestScope.requester(container.sessions.require().id)
    return container.export_requests.default_scope()


async def find_request(container: ServiceContainer, request_id: str) -> ExportRequest:
    scope = container.export_requests.default_scope()
    for request in await container.export_requests.list_requests(scope):
        if str(request.id) == request_id:
            return request
    raise NotFoundError(f"Export request {request_id} not found", code="REQUEST_NOT_FOUND")


def render_requests(
    requests: list[ExportRequest],
    scope: RequestScope,
    container: ServiceContainer,
) -> None:
    print_request_summary(summarize_requests(requests, now=container.clock()))
    if scope.is_approver_view:
        pending, processed = partition_requests(requests)
        console.print(requests_table(pending, title="Pending Requests"))
        console.print(requests_table(processed, title="Processed Requests"))
    else:
        console.print(requests_table(requests, title="My Export Requests"))


async def cmd_requests_list(args: argparse.Namespace, container: ServiceContainer) -> None:
    scope = request_scope(args, container)
    requests = await container.export_requests.list_requests(scope)
    if args.status:
        console.print(requests_table(filter_by_status(requests, RequestStatus(args.status))))
    else:
        render_requests(requests, scope, container)


async def cmd_requests_submit(args: argparse.Namespace, container: ServiceContainer) -> None:
    await container.export_requests.submit_request(args.reason, args.data_type, args.count)
    print_success("Export request submitted successfully! You will be notified when approved.")


async def cmd_requests_resolve(args: argparse.Namespace, container: ServiceContainer) -> None:
    request = await find_request(container, args.id)
    requests = await container.export_requests.resolve_request(request, args.decision)
    print_success(f"Request {request.id} {args.decision.value}")
    render_requests(requests, RequestScope.all(), container)


async def cmd_requests_download(args: argparse.Namespace, container: ServiceContainer) -> None:
    request = await find_request(container, args.id)
    print_emitted(await container.export_requests.download_approved_data(request))


async def cmd_requests_watch(args: argparse.Namespace, container: ServiceContainer) -> None:
    scope = request_scope(args, container)

    with Live(console=console, auto_refresh=False) as live:
        poller = container.export_requests.create_poller(
            scope,
            on_update=lambda requests: live.update(requests_table(requests), refresh=True),
            on_error=lambda error: live.console.print(f"[red]Error:[/red] {error}"),
        )
        await poller.run()

    if not poller.auto_refresh:
        console.print("[dim]Auto-refresh is off for this view; run the command again to refresh.[/dim]")


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------


def add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--search", "-s", help="Match teacher, school, topic or absence reason")
    parser.add_argument("--district", help="Only this district")
    parser.add_argument("--school", help="Only this school")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hq-dashboard",
        description="HygieneQuest dashboard: attendance data and gated exports",
    )
    parser.add_argument("--log-level", help="Logging level (default: HQ_LOG_LEVEL or INFO)")
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Log in with phone number and OTP")
    login.add_argument("--phone", "-p", help="Phone number (prompted if omitted)")
    login.add_argument(
        "--role",
        type=parse_role,
        help="Log in as this role; school admins must pass schooladmin",
    )
    login.set_defaults(handler=cmd_login)

    logout = commands.add_parser("logout", help="Log out and discard export access")
    logout.set_defaults(handler=cmd_logout)

    session = commands.add_parser("session", help="Session information")
    session_commands = session.add_subparsers(dest="session_command", required=True)
    session_commands.add_parser("status", help="Show who is logged in").set_defaults(
        handler=cmd_session_status
    )
    session_commands.add_parser("watch", help="Live session countdown").set_defaults(
        handler=cmd_session_watch
    )

    attendance = commands.add_parser("attendance", help="Attendance data")
    attendance_commands = attendance.add_subparsers(dest="attendance_command", required=True)
    attendance_list = attendance_commands.add_parser("list", help="List attendance records")
    add_filter_arguments(attendance_list)
    attendance_list.add_argument("--limit", "-n", type=int, help="Show at most N records")
    attendance_list.set_defaults(handler=cmd_attendance_list)
    attendance_commands.add_parser("stats", help="Attendance overview").set_defaults(
        handler=cmd_attendance_stats
    )

    export = commands.add_parser("export", help="Export attendance data to CSV")
    add_filter_arguments(export)
    export.add_argument("--data-type", default=DEFAULT_DATA_TYPE, help="Dataset label")
    export.add_argument("--reason", help="Reason for an export request (field workers)")
    export.set_defaults(handler=cmd_export)

    requests = commands.add_parser("requests", help="Export requests")
    request_commands = requests.add_subparsers(dest="requests_command", required=True)

    request_list = request_commands.add_parser("list", help="List export requests")
    request_list.add_argument("--mine", action="store_true", help="Only my requests")
    request_list.add_argument(
        "--status",
        choices=[status.value for status in RequestStatus],
        help="Only requests with this status",
    )
    request_list.set_defaults(handler=cmd_requests_list)

    submit = request_commands.add_parser("submit", help="File an export request")
    submit.add_argument("--reason", "-r", required=True, help="Why the export is needed")
    submit.add_argument("--data-type", default=DEFAULT_DATA_TYPE, help="Dataset label")
    submit.add_argument("--count", type=int, required=True, help="Number of records")
    submit.set_defaults(handler=cmd_requests_submit)

    for name, decision in (("approve", RequestStatus.APPROVED), ("reject", RequestStatus.REJECTED)):
        resolve = request_commands.add_parser(name, help=f"{name.title()} a pending request")
        resolve.add_argument("id", help="Request ID")
        resolve.set_defaults(handler=cmd_requests_resolve, decision=decision)

    download = request_commands.add_parser("download", help="Download data for an approved request")
    download.add_argument("id", help="Request ID")
    download.set_defaults(handler=cmd_requests_download)

    watch = request_commands.add_parser("watch", help="Keep the request list up to date")
    watch.add_argument("--mine", action="store_true", help="Only my requests")
    watch.set_defaults(handler=cmd_requests_watch)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the CLI. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level or get_settings().log_level)

    try:
        asyncio.run(args.handler(args, get_container()))
    except AuthenticationError as e:
        print_error(e.message)
        console.print("Run [bold]hq-dashboard login[/bold] to continue.")
        return 1
    except DashboardError as e:
        print_error(e.message)
        return 1
    except KeyboardInterrupt:
        console.print()
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
