"""Chronicle Weaver: dev launcher. Serves the session API with uvicorn."""

import argparse
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "13013"))


def main():
    parser = argparse.ArgumentParser(description="Chronicle Weaver dev launcher")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Save slot directory (default: ./data)")
    parser.add_argument("--offline", action="store_true",
                        help="Use the offline echo provider instead of the network")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    # The app reads its settings from the environment when uvicorn imports it
    if args.data_dir:
        os.environ["DATA_DIR"] = str(args.data_dir.resolve())
    if args.offline:
        os.environ["OFFLINE"] = "1"

    print(f"Starting Chronicle Weaver on http://{args.host}:{args.port} ...")
    uvicorn.run(
        "chronicle_weaver.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
