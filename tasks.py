"""Invoke tasks for Rollcall application management."""

import shutil
import sys
from pathlib import Path

from invoke import task
from invoke.context import Context

# Must match rollcall/cli/server.py
LOG_FILE = Path("data/rollcall.log")
UPLOADS_DIR = Path("data/uploads")


@task
def start(ctx: Context, host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Start the Rollcall server in the foreground.

    Args:
        ctx: Invoke context
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable auto-reload for development
    """
    cmd = f"rollcall-server start --host {host} --port {port} --foreground"
    if reload:
        cmd += " --reload"

    try:
        ctx.run(cmd, pty=True)
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)


@task(name="start-background")
def start_background(ctx: Context, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the Rollcall server in the background."""
    ctx.run(f"rollcall-server start --host {host} --port {port}")


@task
def stop(ctx: Context) -> None:
    """Stop the Rollcall server."""
    ctx.run("rollcall-server stop")


@task
def restart(ctx: Context, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Restart the Rollcall server."""
    ctx.run(f"rollcall-server restart --host {host} --port {port}")


@task
def status(ctx: Context) -> None:
    """Check the status of the Rollcall server."""
    ctx.run("rollcall-server status")


@task
def logs(ctx: Context, follow: bool = False, lines: int = 50) -> None:
    """View the server log.

    Args:
        ctx: Invoke context
        follow: Follow log output (like tail -f)
        lines: Number of lines to show (default: 50)
    """
    if not LOG_FILE.exists():
        print("No log file found. Server may not have been started in background mode.")
        return

    if follow:
        ctx.run(f"tail -f {LOG_FILE}", pty=True)
    else:
        ctx.run(f"tail -n {lines} {LOG_FILE}")


@task
def test(ctx: Context, verbose: bool = False, coverage: bool = False) -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        coverage: Run with coverage report
    """
    cmd = "pytest"
    if verbose:
        cmd += " -v"
    if coverage:
        cmd += " --cov=rollcall --cov-report=term-missing"
    ctx.run(cmd, pty=True)


@task
def clean(ctx: Context, uploads: bool = False) -> None:
    """Clean up temporary files.

    Args:
        ctx: Invoke context
        uploads: Also remove uploads of imports that were never committed
    """
    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)

    if uploads and UPLOADS_DIR.exists():
        count = len(list(UPLOADS_DIR.glob("*")))
        shutil.rmtree(UPLOADS_DIR)
        UPLOADS_DIR.mkdir(parents=True)
        print(f"Removed {count} pending uploads")

    print("Cleanup complete")
