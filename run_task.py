"""Submit an automation task from the command line and wait for the result.

Examples:
    python run_task.py find_account --username alice
    python run_task.py create_account --username bob --password s3cret --package 101
    python run_task.py extend_package --username bob --package 103 \\
        --api http://localhost:8000 --login admin --login-password admin
"""
import argparse
import asyncio
import json
import sys

from app.models.enums import TaskName
from app.services.task_poller import TaskPoller, TaskPollError, TaskPollTimeout


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run an Account Editor automation task")
    parser.add_argument("name", choices=[t.value for t in TaskName])
    parser.add_argument("--username", default="")
    parser.add_argument("--password", default="")
    parser.add_argument("--package", type=int, default=0)
    parser.add_argument("--api", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--login", default="admin", help="API username")
    parser.add_argument("--login-password", default="admin", help="API password")
    parser.add_argument("--interval", type=float, default=2.0)
    parser.add_argument("--timeout", type=float, default=300.0)
    return parser.parse_args(argv)


async def main(args: argparse.Namespace) -> int:
    async with TaskPoller(args.api) as poller:
        await poller.login(args.login, args.login_password)
        task = await poller.run(
            {
                "name": args.name,
                "username": args.username or None,
                "password": args.password or None,
                "package": args.package,
            },
            interval=args.interval,
            timeout=args.timeout,
        )

    print(json.dumps(task, indent=2, default=str))
    return 0 if task["status"] == "completed" else 1


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main(parse_args())))
    except (TaskPollError, TaskPollTimeout) as e:
        print(f"[X] {e}", file=sys.stderr)
        sys.exit(2)
