"""Command-line access to Firebase Authentication and the Realtime Database.

This module serves as a CLI wrapper around firerest.core.firebase services.
"""
from __future__ import annotations
import argparse
import json
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from firerest.config import load_settings
from firerest.core.firebase import FirebaseApp, InvalidPathError


def _fail(cmd: str, message: str) -> None:
    print(f"[{cmd}] Error: {message}", file=sys.stderr)
    sys.exit(1)


def _parse_data(parser: argparse.ArgumentParser, raw: str):
    try:
        return json.loads(raw)
    except ValueError as e:
        parser.error(f"--data must be valid JSON: {e}")


def build_app(args: argparse.Namespace) -> FirebaseApp:
    """Create the app from CLI flags, falling back to environment settings."""
    if args.project_id and args.api_key:
        return FirebaseApp(args.project_id, args.api_key)
    config = load_settings()
    return FirebaseApp(
        args.project_id or config.project_id,
        args.api_key or config.api_key,
        database_host=config.database_host,
        identity_url=config.identity_url,
        token_url=config.token_url,
        timeout=config.request_timeout,
    )


def sign_in(app: FirebaseApp, args: argparse.Namespace) -> None:
    """Sign in with a refresh token or email/password when either is given."""
    if args.refresh_token:
        app.auth.sign_in_with_token(args.refresh_token)
    elif args.email and args.password:
        app.auth.sign_in_with_password(args.email, args.password)
    else:
        print("[rtdb] No credentials given, continuing unauthenticated", file=sys.stderr)
        return
    if app.auth.current_user is None:
        _fail("sign-in", str(app.auth.last_error))
    print(f"[rtdb] Signed in as {app.auth.current_user.local_id}", file=sys.stderr)


def main() -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Firebase Realtime Database helper")
    parser.add_argument("--project-id", default=os.environ.get("FIREBASE_PROJECT_ID"))
    parser.add_argument("--api-key", default=os.environ.get("FIREBASE_API_KEY"))
    parser.add_argument("--email", default=os.environ.get("FIREBASE_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("FIREBASE_PASSWORD"))
    parser.add_argument("--refresh-token", default=os.environ.get("FIREBASE_REFRESH_TOKEN"))

    sub = parser.add_subparsers(dest="cmd")

    su = sub.add_parser("signup")
    su.add_argument("--email", dest="signup_email", required=True)
    su.add_argument("--password", dest="signup_password", required=True)

    rp = sub.add_parser("reset-password")
    rp.add_argument("--email", dest="reset_email", required=True)

    sg = sub.add_parser("get")
    sg.add_argument("--path", default="")

    ss = sub.add_parser("set")
    ss.add_argument("--path", required=True)
    ss.add_argument("--data", required=True)

    sp = sub.add_parser("update")
    sp.add_argument("--path", required=True)
    sp.add_argument("--data", required=True)

    sd = sub.add_parser("delete")
    sd.add_argument("--path", required=True)

    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    data = _parse_data(parser, args.data) if args.cmd in {"set", "update"} else None
    app = build_app(args)

    if args.cmd == "signup":
        user = app.auth.sign_up(args.signup_email, args.signup_password)
        if user is None:
            _fail("signup", str(app.auth.last_error))
        print(f"[signup] Created user {user.local_id}", file=sys.stderr)
        print(json.dumps({"localId": user.local_id, "refreshToken": user.refresh_token}))
        return

    if args.cmd == "reset-password":
        if not app.auth.send_password_reset_email(args.reset_email):
            _fail("reset-password", str(app.auth.last_error))
        print(f"[reset-password] Reset email sent to {args.reset_email}", file=sys.stderr)
        return

    sign_in(app, args)
    try:
        ref = app.database.get_reference(args.path)
    except InvalidPathError as e:
        _fail(args.cmd, str(e))

    if args.cmd == "get":
        raw = ref.read_raw()
        if raw is None:
            _fail("get", f"Read failed for {ref}")
        print(raw)
    elif args.cmd == "set":
        if not ref.write(data):
            _fail("set", f"Write failed for {ref}")
        print(f"[set] Wrote {ref}", file=sys.stderr)
    elif args.cmd == "update":
        if not ref.update(data):
            _fail("update", f"Update failed for {ref}")
        print(f"[update] Updated {ref}", file=sys.stderr)
    elif args.cmd == "delete":
        if not ref.remove():
            _fail("delete", f"Delete failed for {ref}")
        print(f"[delete] Removed {ref}", file=sys.stderr)


if __name__ == "__main__":
    main()
