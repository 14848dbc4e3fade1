"""AWARE — dev launcher. Starts the backend API in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")


def main():
    parser = argparse.ArgumentParser(description="AWARE dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--pacing", choices=["fast", "medium", "native"], default=None,
                        help="Store a pacing preference before starting")
    parser.add_argument("--language", choices=["en", "it", "ka", "fa"], default=None,
                        help="Store a language preference before starting")
    parser.add_argument("--port", default=BACKEND_PORT,
                        help=f"Port to serve the API on (default: {BACKEND_PORT})")
    parser.add_argument("--no-reload", action="store_true",
                        help="Serve without watching for code changes")
    args = parser.parse_args()

    # Preferences are written to config.json so the server picks them up
    if args.pacing or args.language:
        from backend import storage
        storage.init_storage(args.data_dir or ROOT / "data")
        fields = {}
        if args.pacing:
            fields["pacing"] = args.pacing
        if args.language:
            fields["language"] = args.language
        storage.update_config(fields)

    # Build env for the subprocess so the backend picks up the same data dir
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())

    cmd = ["uv", "run", "uvicorn", "backend.app:app", "--host", HOST, "--port", str(args.port)]
    if not args.no_reload:
        cmd.append("--reload")

    print(f"Serving AWARE on http://localhost:{args.port}/api ...")
    proc = subprocess.Popen(cmd, cwd=ROOT, env=env)

    def shutdown(*_):
        print("\nStopping AWARE...")
        proc.terminate()
        proc.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    proc.wait()


if __name__ == "__main__":
    main()
