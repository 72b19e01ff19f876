"""Command-line interface for mailru_cloud."""

from __future__ import annotations

import json
import logging
import posixpath
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

from mailru_cloud import (
    AuthenticationError,
    CloudMailClient,
    CloudMailError,
    FileInfo,
    FolderInfo,
)

logger = logging.getLogger(__name__)

# Remembers the last used login between runs
DEFAULT_CONFIG_PATH = Path.home() / ".mailru-cloud" / "config.json"


def _load_last_login(config_path: Path) -> str | None:
    """Load the last used login from the config file."""
    if not config_path.exists():
        return None
    try:
        data = json.loads(config_path.read_text())
    except (OSError, ValueError) as e:
        logger.debug(f"Ignoring unreadable config {config_path}: {e}")
        return None
    return data.get("last_login") if isinstance(data, dict) else None


def _save_last_login(config_path: Path, login: str) -> None:
    """Save the last used login to the config file."""
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        data = json.loads(config_path.read_text()) if config_path.exists() else {}
        data["last_login"] = login
        config_path.write_text(json.dumps(data, indent=2))
    except (OSError, ValueError) as e:
        logger.debug(f"Could not remember login in {config_path}: {e}")


def get_client(
    login: str | None = None,
    password: str | None = None,
    domain: str = "mail.ru",
    config_path: Path | None = None,
) -> CloudMailClient:
    """Log in, prompting for whatever was not given on the command line.

    The login falls back to the last one used successfully.
    """
    config_path = config_path or DEFAULT_CONFIG_PATH

    login = login or _load_last_login(config_path)
    if not login:
        login = click.prompt("Login")
    if not password:
        password = click.prompt("Password", hide_input=True)

    client = CloudMailClient(login, password, domain)  # type: ignore[arg-type]
    _save_last_login(config_path, login)  # type: ignore[arg-type]
    return client


def _check_status(response: Any, action: str) -> None:
    """Raise if an API response carries a non-2xx status field."""
    status = response.get("status") if isinstance(response, dict) else None
    if isinstance(status, int) and not 200 <= status < 300:
        raise CloudMailError(f"{action} failed with HTTP {status}: {response.get('body')!r}")


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except AuthenticationError as e:
        click.echo(click.style(f"Authentication failed: {e}", fg="red"), err=True)
        sys.exit(1)
    except (CloudMailError, OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


def credential_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the --login/--password/--domain/--config options to a command."""
    func = click.option(
        "--config",
        "config_path",
        type=click.Path(path_type=Path),
        default=None,
        help=f"Config file path (default: {DEFAULT_CONFIG_PATH})",
    )(func)
    func = click.option(
        "--domain",
        envvar="MAILRU_DOMAIN",
        default="mail.ru",
        show_default=True,
        help="Mail domain of the account",
    )(func)
    func = click.option(
        "--password", "-p", envvar="MAILRU_PASSWORD", help="Account password"
    )(func)
    func = click.option("--login", "-l", envvar="MAILRU_LOGIN", help="Account login")(func)
    return func


@click.group()
@click.version_option(package_name="mailru-cloud")
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP activity")
def main(verbose: bool) -> None:
    """Mail.Ru Cloud CLI - Manage files in your Mail.Ru Cloud."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@main.command()
@credential_options
def login(
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Check credentials and remember the login."""
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            click.echo(click.style("Login successful!", fg="green"))
            click.echo(f"Account: {client.account_email}")
        finally:
            client.close()


@main.command("ls")
@click.argument("path", default="/")
@credential_options
def list_folder(
    path: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """List contents of a cloud folder.

    PATH: Folder path to list (default: /)

    Examples:

        mailru-cloud ls

        mailru-cloud ls /Documents
    """
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            items = client.list_entries(path)
        finally:
            client.close()

        if not items:
            click.echo(f"(empty folder: {path})")
        for item in items:
            if isinstance(item, FolderInfo):
                click.echo(click.style(f"  {item.name}/", fg="blue"))
            elif isinstance(item, FileInfo):
                click.echo(f"  {item.name}  ({_format_size(item.size)})")


@main.command()
@click.argument("path")
@credential_options
def mkdir(
    path: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Create a folder.

    Example:

        mailru-cloud mkdir /Documents/Work
    """
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            _check_status(client.create_folder(path), f"Creating {path}")
        finally:
            client.close()
        click.echo(click.style(f"Created folder: {path}", fg="green"))


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--folder", "-f", default="/", help="Target cloud folder (default: /)")
@credential_options
def upload(
    files: tuple[Path, ...],
    folder: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Upload files to the cloud.

    FILES: One or more local files to upload.

    Examples:

        mailru-cloud upload report.pdf

        mailru-cloud upload *.jpg --folder /Photos
    """
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            results = client.upload_many(list(files), folder)
        finally:
            client.close()

    success_count = 0
    for result in results:
        if result.success:
            click.echo(
                click.style("✓ ", fg="green") + f"{result.file_name} -> {result.cloud_path}"
            )
            success_count += 1
        else:
            click.echo(
                click.style("✗ ", fg="red") + f"{result.file_name}: {result.error}",
                err=True,
            )

    total = len(results)
    if success_count == total:
        click.echo(click.style(f"\nAll {total} file(s) uploaded successfully!", fg="green"))
    else:
        click.echo(f"\n{success_count}/{total} file(s) uploaded.", err=True)
        sys.exit(1)


@main.command()
@click.argument("path")
@click.argument("dest", required=False, type=click.Path(path_type=Path))
@credential_options
def download(
    path: str,
    dest: Path | None,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Download a cloud file.

    DEST defaults to the file name in the current directory.
    """
    target = dest or Path(posixpath.basename(path.rstrip("/")))
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            saved = client.download(path, target)
        finally:
            client.close()
        click.echo(click.style(f"Saved {path} -> {saved}", fg="green"))


@main.command("rm")
@click.argument("path")
@credential_options
def remove(
    path: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Delete a file or folder."""
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            _check_status(client.delete(path), f"Deleting {path}")
        finally:
            client.close()
        click.echo(click.style(f"Deleted: {path}", fg="green"))


@main.command("mv")
@click.argument("path")
@click.argument("folder")
@credential_options
def move(
    path: str,
    folder: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Move a file or folder into FOLDER."""
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            _check_status(client.move(path, folder), f"Moving {path}")
        finally:
            client.close()
        click.echo(click.style(f"Moved {path} -> {folder}", fg="green"))


@main.command("cp")
@click.argument("path")
@click.argument("folder")
@credential_options
def copy(
    path: str,
    folder: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Copy a file or folder into FOLDER."""
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            _check_status(client.copy(path, folder), f"Copying {path}")
        finally:
            client.close()
        click.echo(click.style(f"Copied {path} -> {folder}", fg="green"))


@main.command()
@click.argument("path")
@click.argument("name")
@credential_options
def rename(
    path: str,
    name: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Rename a file or folder to NAME."""
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            _check_status(client.rename(path, name), f"Renaming {path}")
        finally:
            client.close()
        click.echo(click.style(f"Renamed {path} -> {name}", fg="green"))


@main.command()
@click.argument("path")
@credential_options
def link(
    path: str,
    login: str | None,
    password: str | None,
    domain: str,
    config_path: Path | None,
) -> None:
    """Publish a file or folder and print its public link."""
    with _reporting_errors():
        client = get_client(login, password, domain, config_path)
        try:
            url = client.get_link(path)
        finally:
            client.close()
        click.echo(url)


def _format_size(size_bytes: int) -> str:
    """Format file size in human-readable form."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}" if unit != "B" else f"{size_bytes} {unit}"
        size_bytes /= 1024  # type: ignore[assignment]
    return f"{size_bytes:.1f} TB"


if __name__ == "__main__":
    main()
