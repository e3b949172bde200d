"""
Headless runner for the EduConnect student scenario in locustfile.py.

  python run_locust.py [smoke|read|full]

Profiles pick users, spawn rate, duration and tags; EDUCONNECT_HOST points
at the server (default http://localhost:5000). The run writes
locust_<profile>.html next to this file.
"""

import os
import sys

PROFILES = {
    # name: (users, spawn rate, duration, tags)
    "smoke": ("5", "5", "30s", ()),
    "read": ("200", "20", "5m", ("read",)),
    "full": ("100", "10", "10m", ("read", "submit")),
}


def build_args(profile="smoke", env=os.environ):
    if profile not in PROFILES:
        raise SystemExit(f"unknown profile {profile!r}, choose one of {', '.join(PROFILES)}")
    users, spawn_rate, duration, tags = PROFILES[profile]
    args = [
        "locust", "-f", os.path.join(os.path.dirname(os.path.abspath(__file__)), "locustfile.py"),
        "--host", env.get("EDUCONNECT_HOST", "http://localhost:5000"),
        "--headless", "-u", users, "-r", spawn_rate, "-t", duration,
        "--html", f"locust_{profile}.html",
    ]
    for t in tags:
        args += ["--tags", t]
    return args


if __name__ == "__main__":
    args = build_args(*sys.argv[1:2])
    print("Running:", " ".join(args))
    # replaces this process; fails with FileNotFoundError if locust is not installed
    os.execvp(args[0], args)
