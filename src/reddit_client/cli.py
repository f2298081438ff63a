"""Command-line interface for the Reddit client."""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from typing import Any

import typer
from prometheus_client import CollectorRegistry, generate_latest

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install reddit-client[cli]' to enable this command."
    ) from exc

from . import RedditClient
from .cli_schema import CLI_TABLE_VIEWS, TableView
from .client import AuthenticatedClient
from .config import DEFAULT_USER_AGENT
from .exceptions import RedditError
from .ids import post_id_from_context, split_id
from .metrics import NullMetrics, PrometheusMetrics

app = typer.Typer(help="Reddit API client CLI.", no_args_is_help=True)


def _build_client(
    client_id: str,
    client_secret: str,
    user_agent: str,
    timeout: float | None,
    registry: CollectorRegistry | None = None,
) -> RedditClient:
    if not client_id or not client_secret:
        raise typer.BadParameter("--client-id and --client-secret are required.")
    return RedditClient(
        client_id=client_id,
        client_secret=client_secret,
        metrics=PrometheusMetrics(registry) if registry is not None else NullMetrics(),
        user_agent=user_agent,
        timeout=timeout,
    )


def _authenticate(
    client: RedditClient, refresh_token: str | None, access_token: str | None
) -> AuthenticatedClient:
    if not refresh_token and not access_token:
        raise typer.BadParameter("--refresh-token or --access-token is required.")
    return client.authenticated(refresh_token or "", access_token or "")


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


console = Console(force_terminal=False, color_system=None)


def _render_rich_table(view: TableView, rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(
        title=view.title,
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    for column in view.columns:
        table.add_column(column.header, justify=column.justify)
    ordered_rows = list(rows)
    if view.sort_key:
        ordered_rows.sort(key=view.sort_key)
    for row in ordered_rows:
        table.add_row(*(column.render(row) for column in view.columns))
    console.print(table)


def _present_output(payload: Any, *, view_id: str | None, json_output: bool) -> None:
    if json_output or view_id is None:
        _echo_json(payload)
        return
    view = CLI_TABLE_VIEWS.get(view_id)
    if not view or not isinstance(payload, list) or not payload:
        _echo_json(payload)
        return
    _render_rich_table(view, payload)


def _metrics_registry(show_metrics: bool) -> CollectorRegistry | None:
    return CollectorRegistry() if show_metrics else None


def _echo_metrics(registry: CollectorRegistry | None) -> None:
    if registry is not None:
        typer.echo(generate_latest(registry).decode("utf-8"), err=True)


def _handle_error(exc: RedditError) -> None:
    if exc.status_code is not None:
        message = f"Request failed (status {exc.status_code}): {exc}"
    else:
        message = f"Request failed: {exc}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    return {
        "client_id": typer.Option(
            ..., "--client-id", envvar="REDDIT_CLIENT_ID", help="Application client id."
        ),
        "client_secret": typer.Option(
            ...,
            "--client-secret",
            envvar="REDDIT_CLIENT_SECRET",
            help="Application client secret.",
            hide_input=True,
        ),
        "refresh_token": typer.Option(
            None,
            "--refresh-token",
            envvar="REDDIT_REFRESH_TOKEN",
            help="Long-lived OAuth refresh token.",
        ),
        "access_token": typer.Option(
            None,
            "--access-token",
            envvar="REDDIT_ACCESS_TOKEN",
            help="Short-lived OAuth access token.",
        ),
        "user_agent": typer.Option(
            DEFAULT_USER_AGENT,
            "--user-agent",
            envvar="REDDIT_USER_AGENT",
            help="User-Agent header sent with every request.",
            show_default=True,
        ),
        "timeout": typer.Option(
            None, help="Request timeout (seconds). Unset waits indefinitely."
        ),
        "show_metrics": typer.Option(
            False,
            "--show-metrics",
            help="Print the request metrics in Prometheus text format to stderr.",
        ),
        "output_json": typer.Option(
            False,
            "--json",
            "-j",
            help="Return raw JSON instead of rendering a table.",
        ),
    }


_SHARED_OPTIONS = _shared_options()


@app.command("refresh")
def refresh(
    client_id: str = _SHARED_OPTIONS["client_id"],
    client_secret: str = _SHARED_OPTIONS["client_secret"],
    refresh_token: str | None = _SHARED_OPTIONS["refresh_token"],
    user_agent: str = _SHARED_OPTIONS["user_agent"],
    timeout: float | None = _SHARED_OPTIONS["timeout"],
    show_metrics: bool = _SHARED_OPTIONS["show_metrics"],
) -> None:
    """Exchange the refresh token for a new access token."""

    if not refresh_token:
        raise typer.BadParameter("--refresh-token is required.")
    registry = _metrics_registry(show_metrics)
    with _build_client(client_id, client_secret, user_agent, timeout, registry) as client:
        session = _authenticate(client, refresh_token, None)
        try:
            tokens = session.refresh_tokens()
        except RedditError as exc:
            _echo_metrics(registry)
            _handle_error(exc)
            return
    _echo_metrics(registry)
    _echo_json(asdict(tokens))


@app.command("inbox")
def inbox(
    client_id: str = _SHARED_OPTIONS["client_id"],
    client_secret: str = _SHARED_OPTIONS["client_secret"],
    refresh_token: str | None = _SHARED_OPTIONS["refresh_token"],
    access_token: str | None = _SHARED_OPTIONS["access_token"],
    user_agent: str = _SHARED_OPTIONS["user_agent"],
    timeout: float | None = _SHARED_OPTIONS["timeout"],
    show_metrics: bool = _SHARED_OPTIONS["show_metrics"],
    before: str = typer.Option("", "--before", help="Fullname cursor; list messages newer than it."),
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """List inbox messages."""

    registry = _metrics_registry(show_metrics)
    with _build_client(client_id, client_secret, user_agent, timeout, registry) as client:
        session = _authenticate(client, refresh_token, access_token)
        try:
            listing = session.message_inbox(before)
        except RedditError as exc:
            _echo_metrics(registry)
            _handle_error(exc)
            return
    _echo_metrics(registry)
    rows = [{**asdict(message), "post_id": message.post_id} for message in listing.messages]
    if output_json:
        _echo_json({"messages": rows, "after": listing.after, "before": listing.before})
        return
    _present_output(rows, view_id="inbox.list", json_output=False)


@app.command("me")
def me(
    client_id: str = _SHARED_OPTIONS["client_id"],
    client_secret: str = _SHARED_OPTIONS["client_secret"],
    refresh_token: str | None = _SHARED_OPTIONS["refresh_token"],
    access_token: str | None = _SHARED_OPTIONS["access_token"],
    user_agent: str = _SHARED_OPTIONS["user_agent"],
    timeout: float | None = _SHARED_OPTIONS["timeout"],
    show_metrics: bool = _SHARED_OPTIONS["show_metrics"],
) -> None:
    """Show the authenticated account."""

    registry = _metrics_registry(show_metrics)
    with _build_client(client_id, client_secret, user_agent, timeout, registry) as client:
        session = _authenticate(client, refresh_token, access_token)
        try:
            account = session.me()
        except RedditError as exc:
            _echo_metrics(registry)
            _handle_error(exc)
            return
    _echo_metrics(registry)
    _echo_json(asdict(account))


@app.command("split-id")
def split_id_command(fullname: str = typer.Argument(..., help="Fullname such as t1_abc123.")) -> None:
    """Split a fullname into its kind and id."""

    kind, value = split_id(fullname)
    _echo_json({"kind": kind, "id": value})


@app.command("post-id")
def post_id_command(context: str = typer.Argument(..., help="Permalink context path.")) -> None:
    """Extract the post id from a comment permalink."""

    typer.echo(post_id_from_context(context))
