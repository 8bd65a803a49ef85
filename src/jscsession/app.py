"""Typer application and CLI entry point for jscsession.

Commands:

* ``jscsession login`` -- run the Jamf ID browser login and print the
  ``SESSION`` and ``XSRF-TOKEN`` values.
* ``jscsession request METHOD PATH`` -- log in, then make one authenticated
  call against the tenant API and print the response.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~jscsession.exceptions.JscSessionError` messages are printed
verbatim and mapped to their exit codes; any other exception is written to
a crash log under the data directory.

See Also:
    :mod:`jscsession.config`: Login configuration resolution.
    :mod:`jscsession.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import json
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from jscsession import __version__
from jscsession.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="jscsession",
    help="Log into Jamf Security Cloud through the Jamf ID web login.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"jscsession {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Trace every login step."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~jscsession.output.OutputManager` from
    CLI flags.
    """
    from jscsession.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )


_DOMAIN_OPTION = typer.Option(
    None, "--domain", "-d", help="JSC tenant domain [env: JSC_DOMAIN]."
)
_USERNAME_OPTION = typer.Option(
    None, "--username", "-u", help="Local Jamf ID account [env: JSC_USERNAME]."
)
_PASSWORD_SOURCE_OPTION = typer.Option(
    None,
    "--password-source",
    "-s",
    help="Password source: env:VAR, file:/path, or prompt [env: JSC_PASSWORD_SOURCE].",
)


@app.command("login")
def login_command(
    domain: Optional[str] = _DOMAIN_OPTION,
    username: Optional[str] = _USERNAME_OPTION,
    password_source: Optional[str] = _PASSWORD_SOURCE_OPTION,
) -> None:
    """Log in and print the session and anti-forgery tokens.

    Example::

        jscsession --json login -u admin@example.com -s env:JSC_PW
    """
    from jscsession.auth.flow import authenticate
    from jscsession.config import resolve_login_config
    from jscsession.output import format_response, info, success

    config = resolve_login_config(domain, username, password_source)
    info(f"Logging into {config.domain} as {config.username}...")
    result = authenticate(config)
    success("Login succeeded.")

    format_response(
        {
            "session": result.credentials.session_token,
            "xsrf_token": result.credentials.xsrf_token,
            "final_url": result.final_url,
            "warnings": [w.model_dump() for w in result.warnings],
        }
    )


@app.command("request")
def request_command(
    method: str = typer.Argument(help="HTTP method: GET, POST, PUT, DELETE."),
    path: str = typer.Argument(help="Tenant API path, may contain {customerid}."),
    data: Optional[str] = typer.Option(
        None, "--data", help="JSON request body."
    ),
    customer_id: Optional[str] = typer.Option(
        None, "--customer-id", "-c", help="Customer id for {customerid} [env: JSC_CUSTOMER_ID]."
    ),
    domain: Optional[str] = _DOMAIN_OPTION,
    username: Optional[str] = _USERNAME_OPTION,
    password_source: Optional[str] = _PASSWORD_SOURCE_OPTION,
) -> None:
    """Log in, then make one authenticated API request.

    Example::

        jscsession request GET /gate/identity-service/v1/connections
    """
    from jscsession.auth.flow import authenticate
    from jscsession.client import SyncClient
    from jscsession.client.response import format_api_response
    from jscsession.config import resolve_customer_id, resolve_login_config

    body: dict[str, Any] = {} if data is None else {"json_body": _parse_body(data)}

    config = resolve_login_config(domain, username, password_source)
    result = authenticate(config)

    with SyncClient(
        config.domain,
        result.credentials,
        customer_id=resolve_customer_id(customer_id),
        request=config.request,
        scheme=config.scheme,
    ) as client:
        response = client.request(method, path, **body)
    format_api_response(response)


def _parse_body(body: str) -> Any:  # noqa: ANN401
    """Parse the ``--data`` value as JSON."""
    from jscsession.exceptions import InvalidUsageError

    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--data is not valid JSON: {body}") from exc


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from jscsession.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``jscsession`` console script.

    Unhandled :class:`~jscsession.exceptions.JscSessionError` instances
    cause a clean exit with the error's ``exit_code`` and the message
    printed unchanged, so a rejected password and a provider outage stay
    distinguishable. All other exceptions produce a crash log and a generic
    failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from jscsession.exceptions import JscSessionError, LoginError
        from jscsession.output import error, get_output, suggest

        if isinstance(exc, JscSessionError):
            error(str(exc))
            if isinstance(exc, LoginError) and not get_output().is_verbose:
                suggest("Re-run with --verbose to trace each login step.")
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
