"""Rollcall server control script.

Usage:
    rollcall-server start [--port PORT] [--reload] [--foreground]
    rollcall-server stop
    rollcall-server restart [--port PORT]
    rollcall-server status
"""

import argparse
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import httpx

from rollcall.config import settings

APP_PATH = "rollcall.main:app"
RUN_DIR = Path("data")
PID_FILE = RUN_DIR / "rollcall.pid"
LOG_FILE = RUN_DIR / "rollcall.log"


def read_pid() -> int | None:
    """Return the PID of the running server, clearing a stale PID file."""
    if not PID_FILE.exists():
        return None

    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def find_server_process() -> int | None:
    """Find a uvicorn process serving Rollcall that has no PID file."""
    try:
        result = subprocess.run(
            ["pgrep", "-f", f"uvicorn {APP_PATH}"],
            capture_output=True,
            text=True,
        )
    except OSError:
        return None
    if result.returncode == 0 and result.stdout.strip():
        return int(result.stdout.split()[0])
    return None


def build_command(host: str, port: int, reload: bool) -> list[str]:
    """Build the uvicorn command line."""
    cmd = [sys.executable, "-m", "uvicorn", APP_PATH, "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")
    elif settings.config.server.workers > 1:
        cmd.extend(["--workers", str(settings.config.server.workers)])
    return cmd


def start_server(host: str, port: int, reload: bool = False, foreground: bool = False) -> bool:
    """Start the Rollcall server.

    Returns:
        True if the server started.
    """
    pid = read_pid() or find_server_process()
    if pid:
        print(f"Server is already running (PID: {pid})")
        return False

    RUN_DIR.mkdir(parents=True, exist_ok=True)
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    cmd = build_command(host, port, reload)

    print(f"Starting Rollcall on http://{host}:{port}")

    if foreground:
        print("Press Ctrl+C to stop the server")
        try:
            subprocess.run(cmd)
        except KeyboardInterrupt:
            print("\nServer stopped")
        return True

    with open(LOG_FILE, "w") as log:
        process = subprocess.Popen(
            cmd,
            stdout=log,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )

    time.sleep(1)
    if process.poll() is not None:
        print(f"Failed to start server. See {LOG_FILE}")
        return False

    PID_FILE.write_text(str(process.pid))
    print(f"Server started with PID: {process.pid}")
    print(f"Logs available at: {LOG_FILE}")
    return True


def stop_server() -> bool:
    """Stop the Rollcall server, escalating to SIGKILL after five seconds.

    Returns:
        True if a server was stopped.
    """
    pid = read_pid() or find_server_process()
    if not pid:
        print("Server is not running")
        return False

    print(f"Stopping server (PID: {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
        for _ in range(10):
            time.sleep(0.5)
            try:
                os.kill(pid, 0)
            except ProcessLookupError:
                break
        else:
            print("Server didn't stop gracefully, forcing...")
            os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        print("Server was not running")
        PID_FILE.unlink(missing_ok=True)
        return False
    except PermissionError:
        print(f"Permission denied to stop process {pid}")
        return False

    PID_FILE.unlink(missing_ok=True)
    print("Server stopped")
    return True


def server_status(port: int) -> None:
    """Print whether the server is running and what /health reports."""
    pid = read_pid() or find_server_process()
    if not pid:
        print("Rollcall server is not running")
        return

    print(f"Rollcall server is running (PID: {pid})")
    try:
        response = httpx.get(f"http://localhost:{port}/health", timeout=2)
        data = response.json()
    except (httpx.HTTPError, ValueError):
        print("  (Could not fetch health status)")
        return
    print(f"  Status: {data.get('status', 'unknown')}")
    print(f"  Version: {data.get('version', 'unknown')}")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rollcall server control script",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s start                  Start server on the configured port
  %(prog)s start --port 8080      Start server on port 8080
  %(prog)s start --reload         Start with auto-reload for development
  %(prog)s stop                   Stop the server
  %(prog)s status                 Check server status
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    for name, help_text in (("start", "Start the server"), ("restart", "Restart the server")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--port", "-p", type=int, default=settings.port, help="Port to bind to")
        sub.add_argument("--host", default=settings.host, help="Host to bind to")
        if name == "start":
            sub.add_argument("--reload", "-r", action="store_true", help="Enable auto-reload")
            sub.add_argument("--foreground", "-f", action="store_true", help="Run in foreground")

    subparsers.add_parser("stop", help="Stop the server")
    status_parser = subparsers.add_parser("status", help="Check server status")
    status_parser.add_argument("--port", "-p", type=int, default=settings.port)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "start":
            ok = start_server(args.host, args.port, reload=args.reload, foreground=args.foreground)
        elif args.command == "stop":
            ok = stop_server()
        elif args.command == "restart":
            print("Restarting Rollcall server...")
            stop_server()
            time.sleep(1)
            ok = start_server(args.host, args.port)
        else:
            server_status(args.port)
            ok = True
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
