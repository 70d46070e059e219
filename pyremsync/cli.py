"""CLI interface for pyremsync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from . import __version__
from .cache import TransportCache
from .cli_progress import run_sync_with_progress
from .config import S3RemoteConfig, SftpRemoteConfig, config
from .exceptions import RemsyncConfigError, RemsyncError, RemsyncOperationError
from .output import OutputFormatter
from .sync import RemoteLister, RemoteTarget, SyncEngine, load_sync_jobs_from_json
from .transports import create_transport
from .utils import DEFAULT_SFTP_PORT, format_size

logger = logging.getLogger(__name__)

# Libraries that are chatty at DEBUG level
_THIRD_PARTY_LOGGERS = ("paramiko", "botocore", "boto3", "s3transfer", "urllib3")


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        # Enable debug logging for pyremsync modules
        logging.getLogger("pyremsync").setLevel(logging.DEBUG)
    else:
        # Set default logging level to WARNING to suppress debug/info messages
        logging.basicConfig(level=logging.WARNING)

    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """pyremsync - Mirror a local directory to S3 or SFTP."""
    # Store settings in context for subcommands to access
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    _configure_logging(verbose)


@main.command()
@click.argument("local_dir", type=click.Path(path_type=Path))
@click.argument("target")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be done without making changes",
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Glob pattern of local files to skip (repeatable)",
)
@click.option(
    "--exclude-dot-files",
    is_flag=True,
    help="Skip files and folders whose name starts with a dot",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress display",
)
@click.pass_context
def sync(
    ctx: Any,
    local_dir: Path,
    target: str,
    dry_run: bool,
    exclude: tuple[str, ...],
    exclude_dot_files: bool,
    no_progress: bool,
) -> None:
    """Make a remote directory mirror LOCAL_DIR.

    TARGET is a configured remote and a path on it, written as
    remote:path. Remote files that do not exist locally are deleted.

    Examples:
        pyremsync sync ./public site:www/
        pyremsync sync ./build box:/var/www/html --exclude "*.map"
        pyremsync sync ./docs site:docs --dry-run
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        remote_target = RemoteTarget.parse(target)
        remote_config = config.get_remote(remote_target.remote)
        transport = create_transport(remote_config)
    except RemsyncError as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    sync_kwargs = {
        "local_dir": local_dir,
        "remote_root": remote_target.path,
        "dry_run": dry_run,
        "ignore_patterns": list(exclude),
        "exclude_dot_files": exclude_dot_files,
    }

    try:
        # Create output formatter for engine (respect no_progress)
        engine_out = OutputFormatter(
            json_output=out.json_output, quiet=no_progress or out.quiet
        )
        engine = SyncEngine(transport, engine_out)

        if no_progress or out.quiet or out.json_output:
            stats = engine.sync(**sync_kwargs)
        else:
            stats = run_sync_with_progress(engine, sync_kwargs)

        if out.json_output:
            out.output_json(stats)

    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT
    except RemsyncOperationError as e:
        out.error(f"Sync aborted: {e}")
        ctx.exit(1)
    except RemsyncError as e:
        out.error(str(e))
        ctx.exit(1)
    finally:
        transport.close()


@main.command("sync-jobs")
@click.argument(
    "jobs_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be done without making changes",
)
@click.pass_context
def sync_jobs(ctx: Any, jobs_file: Path, dry_run: bool) -> None:
    """Run the sync jobs listed in JOBS_FILE, one after another.

    JOBS_FILE is a JSON list of jobs (or an object with a "jobs" list):

    \b
        [
          {"local": "./public", "target": "site:www/", "exclude": ["*.map"]},
          {"local": "./docs", "target": "box:/srv/docs", "excludeDotFiles": true}
        ]

    Jobs targeting the same remote share one connection. The run stops at
    the first failing job.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        jobs = load_sync_jobs_from_json(jobs_file)
    except RemsyncError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if not jobs:
        out.warning(f"No sync jobs found in {jobs_file}")
        return

    cache: TransportCache = TransportCache()
    results: list[dict] = []

    try:
        for index, job in enumerate(jobs, start=1):
            out.info(f"[{index}/{len(jobs)}] {job.name}")
            try:
                remote_config = config.get_remote(job.target.remote)
                transport = cache.get_or_create(
                    remote_config.cache_key,
                    lambda: create_transport(remote_config),
                )
                engine = SyncEngine(transport, out)
                stats = engine.sync(
                    job.local,
                    job.target.path,
                    dry_run=dry_run,
                    ignore_patterns=job.exclude,
                    exclude_dot_files=job.exclude_dot_files,
                )
            except RemsyncError as e:
                out.error(f"Job '{job.name}' failed: {e}")
                if out.json_output:
                    out.output_json(results)
                ctx.exit(1)
                return
            results.append({"job": job.name, **stats})

        if out.json_output:
            out.output_json(results)
        else:
            out.success(f"Completed {len(results)} sync job(s)")

    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    finally:
        cache.close_all()


@main.command()
@click.argument("target")
@click.pass_context
def ls(ctx: Any, target: str) -> None:
    """List the files under a remote TARGET (remote:path).

    Examples:
        pyremsync ls site:www/
        pyremsync --json ls box:/var/www
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        remote_target = RemoteTarget.parse(target)
        remote_config = config.get_remote(remote_target.remote)
        transport = create_transport(remote_config)
    except RemsyncError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    try:
        prefix = transport.normalize_root(remote_target.path)
        files = RemoteLister(transport).list_files(prefix)
    except KeyboardInterrupt:
        out.warning("\nListing cancelled by user")
        ctx.exit(130)
        return
    except RemsyncError as e:
        out.error(str(e))
        ctx.exit(1)
        return
    finally:
        transport.close()

    if out.json_output:
        out.output_json(
            [
                {"path": path, "size": files[path].size, "mtime": files[path].mtime}
                for path in sorted(files)
            ]
        )
        return

    if not files:
        out.info("No files found")
        return

    rows = [
        {
            "path": path,
            "size": format_size(files[path].size)
            if files[path].size is not None
            else "-",
        }
        for path in sorted(files)
    ]
    out.output_table(rows, ["path", "size"], {"path": "Path", "size": "Size"})
    out.info(f"\n{len(files)} file(s)")


@main.group()
@click.pass_context
def remote(ctx: Any) -> None:
    """Manage named remotes.

    Examples:
        pyremsync remote add site --type s3 --bucket www --region eu-west-1
        pyremsync remote add box --type sftp --host example.com --user deploy
        pyremsync remote list
        pyremsync remote remove site
    """
    pass


@remote.command("add")
@click.argument("name")
@click.option(
    "--type",
    "remote_type",
    type=click.Choice(["s3", "sftp"]),
    required=True,
    help="Remote backend type",
)
@click.option("--bucket", help="S3 bucket name")
@click.option("--region", help="S3 region")
@click.option("--endpoint-url", help="Endpoint of an S3-compatible service")
@click.option("--access-key-id", help="S3 access key (default: boto3 chain)")
@click.option("--secret-access-key", help="S3 secret key")
@click.option("--host", help="SFTP host")
@click.option("--port", type=int, default=DEFAULT_SFTP_PORT, help="SFTP port")
@click.option("--user", help="SFTP user name")
@click.option("--password", help="SFTP password (default: keys/agent)")
@click.option("--key-file", help="SFTP private key file")
@click.pass_context
def remote_add(
    ctx: Any,
    name: str,
    remote_type: str,
    bucket: Optional[str],
    region: Optional[str],
    endpoint_url: Optional[str],
    access_key_id: Optional[str],
    secret_access_key: Optional[str],
    host: Optional[str],
    port: int,
    user: Optional[str],
    password: Optional[str],
    key_file: Optional[str],
) -> None:
    """Add or replace the remote NAME."""
    out: OutputFormatter = ctx.obj["out"]

    remote_config: Any
    try:
        if remote_type == "s3":
            remote_config = S3RemoteConfig(
                bucket=bucket or "",
                region=region,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                endpoint_url=endpoint_url,
            )
        else:
            remote_config = SftpRemoteConfig(
                host=host or "",
                user=user or "",
                port=port,
                password=password,
                key_file=key_file,
            )
        config.save_remote(name, remote_config)
    except RemsyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json({name: remote_config.to_dict(mask_secrets=True)})
    else:
        out.success(f"Saved remote '{name}' ({remote_type})")


@remote.command("list")
@click.pass_context
def remote_list(ctx: Any) -> None:
    """List configured remotes."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        remotes = config.load_remotes()
    except RemsyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            {name: remotes[name].to_dict(mask_secrets=True) for name in sorted(remotes)}
        )
        return

    if not remotes:
        out.info("No remotes configured. Add one with 'pyremsync remote add'.")
        return

    rows = []
    for name in sorted(remotes):
        remote_config = remotes[name]
        if isinstance(remote_config, S3RemoteConfig):
            location = f"s3://{remote_config.bucket}"
            if remote_config.endpoint_url:
                location = f"{location} ({remote_config.endpoint_url})"
        else:
            location = (
                f"{remote_config.user}@{remote_config.host}:{remote_config.port}"
            )
        rows.append({"name": name, "type": remote_config.type, "location": location})

    out.output_table(
        rows,
        ["name", "type", "location"],
        {"name": "Name", "type": "Type", "location": "Location"},
    )


@remote.command("remove")
@click.argument("name")
@click.pass_context
def remote_remove(ctx: Any, name: str) -> None:
    """Remove the remote NAME."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        removed = config.remove_remote(name)
    except RemsyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if not removed:
        out.error(f"Remote '{name}' is not configured")
        ctx.exit(1)
        return

    out.success(f"Removed remote '{name}'")


if __name__ == "__main__":
    main()
