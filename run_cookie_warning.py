#!/usr/bin/env python3
"""Cookie Warning — wiki cookie notice service.

Launch: python3 run_cookie_warning.py
Serves at http://0.0.0.0:8000 (or PORT env var)
"""

import logging

import uvicorn

from cookie_warning.config import HOST, LOG_LEVEL, PORT, SUPABASE_URL


def main():
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("  Cookie Warning")
    print("=" * 60)

    if not SUPABASE_URL:
        print("\n  WARNING: SUPABASE_URL not set. Logged-in dismissals will fail.")
        print("    Set SUPABASE_URL, SUPABASE_SERVICE_KEY")
        print("  Continuing anyway for local development...\n")

    print(f"Starting server on {HOST}:{PORT}")
    print(f"\n  Main page: http://{HOST}:{PORT}/wiki/Main_Page")
    print("  Press Ctrl+C to stop\n")

    from cookie_warning.app import create_app
    app = create_app()
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
