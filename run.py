#!/usr/bin/env python3
"""
hoopfund dev launcher.

- Local dev:             ./run.py --env development
- Local dev (no reload): ./run.py --env development --no-reload
- Gunicorn export:       gunicorn "wsgi:app"
"""

from __future__ import annotations

import argparse
import logging
import os
import socket

from dotenv import load_dotenv


def _port_in_use(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(0.3)
        return s.connect_ex(("127.0.0.1" if host in ("0.0.0.0", "") else host, port)) == 0


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run the hoopfund development server.")
    p.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "5000")))
    p.add_argument("--env", choices=["development", "testing", "production"], default=os.getenv("APP_ENV", "development"))
    p.add_argument("--no-reload", action="store_true", help="Disable Werkzeug reloader.")
    p.add_argument("--force", dest="force_run", action="store_true", help="Start even if the port looks busy.")
    return p.parse_args(argv)


def main(argv=None) -> None:
    load_dotenv(override=False)
    args = parse_args(argv)
    os.environ["APP_ENV"] = args.env
    os.environ["FLASK_CONFIG"] = args.env

    if not args.force_run and _port_in_use(args.host, args.port):
        logging.error("Port %s already in use (host=%s). Stop the other process or use --force.", args.port, args.host)
        raise SystemExit(2)

    from hoopfund import create_app

    app = create_app(args.env)
    debug = args.env != "production"
    app.run(host=args.host, port=args.port, debug=debug, use_reloader=debug and not args.no_reload)


if __name__ == "__main__":
    main()
