"""Example: drive a scan session directly (no Flask).

The camera side only has to hand decoded strings to submit_scan; everything
after that is the session's job.
"""

import importlib

from dotenv import load_dotenv

from qr_attendance.config import get_settings_module
from qr_attendance.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    session = container.sessions.get("front-gate")

    session.on("resolved", lambda outcome: print("resolved:", outcome.message))
    session.on("committed", lambda record: print("committed:", record))
    session.on("failed", lambda error: print("failed:", error))

    snap = session.submit_scan("2021-00001").result(timeout=30)
    if snap.outcome is not None and snap.outcome.actionable:
        session.confirm().result(timeout=30)

    for entry in session.history.entries():
        print(entry.scanned_at.strftime("%H:%M:%S"), entry.payload, entry.status.value, entry.message)

    container.close()


if __name__ == "__main__":
    main()
