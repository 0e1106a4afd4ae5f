import argparse
import datetime
import getpass
import sys
from typing import Optional

import requests

from client import (
    DEFAULT_API_URL,
    DEFAULT_SESSION_FILE,
    AuthContext,
    ClientError,
    FitnessClient,
    SessionStore,
    render_catalog,
    render_entry,
    render_stats,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fitness-cli", description="Workout Buddy command line client")
    parser.add_argument("--api-url", default=DEFAULT_API_URL)
    parser.add_argument("--session-file", default=DEFAULT_SESSION_FILE)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("health", help="check the API is up")

    reg = sub.add_parser("register", help="create an account")
    reg.add_argument("name")
    reg.add_argument("email")
    reg.add_argument("--password")
    reg.add_argument("--goals", default="")

    login = sub.add_parser("login", help="sign in and remember the token")
    login.add_argument("email")
    login.add_argument("--password")

    sub.add_parser("logout", help="forget the stored token")
    sub.add_parser("whoami", help="show the signed-in user")
    sub.add_parser("exercises", help="list default and own exercises")
    sub.add_parser("workouts", help="list default and own workouts")

    show = sub.add_parser("workout", help="show one workout with its exercises")
    show.add_argument("workout_id")

    log = sub.add_parser("log", help="record a workout session")
    log.add_argument("name")
    log.add_argument("--duration", type=float, required=True)
    log.add_argument("--calories", type=float, required=True)
    log.add_argument("--date", default=None, help="ISO date, defaults to today")
    log.add_argument("--notes", default="")
    log.add_argument("--workout-id", default=None)
    log.add_argument("--in-progress", action="store_true", help="log as not yet completed")

    sub.add_parser("history", help="list logged sessions")
    sub.add_parser("stats", help="show totals over completed sessions")
    return parser


def _password(value: Optional[str]) -> str:
    return value if value is not None else getpass.getpass("Password: ")


def run(args: argparse.Namespace, auth: AuthContext) -> None:
    client = auth.client

    if args.command == "health":
        print(client.health().get("message", "ok"))
        return
    if args.command == "register":
        user = auth.register(args.name, args.email, _password(args.password), args.goals)
        print(f"Account created for {user['email']}. Please log in.")
        return
    if args.command == "login":
        user = auth.login(args.email, _password(args.password))
        print(f"Welcome back, {user['name']}!")
        return
    if args.command == "logout":
        auth.logout()
        print("Logged out successfully")
        return

    auth.restore()
    user = auth.user

    if args.command == "whoami":
        if user is None:
            print("Not logged in")
        else:
            print(f"{user['name']} <{user['email']}> ({user.get('role', 'user')})")
    elif args.command == "exercises":
        print("\n".join(render_catalog(client.list_exercises(), user)))
    elif args.command == "workouts":
        print("\n".join(render_catalog(client.list_workouts(), user)))
    elif args.command == "workout":
        workout = client.get_workout(args.workout_id)
        print(render_entry(workout, user))
        for position, exercise in enumerate(workout.get("exercises", []), start=1):
            print(f"  {position}. {render_entry(exercise, user)}")
    elif args.command == "log":
        created = client.log_progress(
            {
                "workoutId": args.workout_id,
                "workoutName": args.name,
                "date": args.date or datetime.date.today().isoformat(),
                "duration": args.duration,
                "caloriesBurned": args.calories,
                "notes": args.notes,
                "completed": not args.in_progress,
            }
        )
        print(f"Logged {created['workoutName']} ({created['id']})")
    elif args.command == "history":
        for entry in client.list_progress():
            status = "done" if entry.get("completed") else "in progress"
            print(f"{entry['date'][:10]}  {entry['workoutName']}  {entry['duration']:g} min  "
                  f"{entry['caloriesBurned']:g} kcal  [{status}]")
    elif args.command == "stats":
        print("\n".join(render_stats(client.stats())))


def main(argv: Optional[list] = None, auth: Optional[AuthContext] = None) -> int:
    args = build_parser().parse_args(argv)
    if auth is None:
        auth = AuthContext(FitnessClient(args.api_url), SessionStore(args.session_file))
    try:
        run(args, auth)
    except ClientError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except requests.RequestException as exc:
        print(f"Error: could not reach {args.api_url} ({exc})", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
