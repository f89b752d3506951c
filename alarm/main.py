"""Main entry point for the alarm service and API."""

import os
import signal
import sys

from app import create_app
from .hardware import Vibrator
from .scheduler import AlarmService

# Global service reference for signal handler
_service: AlarmService = None


def signal_handler(signum, frame):
    """Handle shutdown signals."""
    print("\n[Alarm] Shutting down...")
    if _service is not None:
        _service.shutdown()
    sys.exit(0)


def main():
    """Main entry point."""
    global _service

    # Set up signal handlers
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print("=" * 50)
    print("Morning Routine Alarm Service")
    print("=" * 50)

    vibrator = Vibrator()
    if vibrator.is_available:
        print(f"Vibration motor active (GPIO {Vibrator.VIBRATION_GPIO})")
    else:
        print("Vibration not available (software-only mode)")
    print()

    _service = AlarmService(vibrator=vibrator)
    app = create_app({"ALARM_SERVICE": _service})

    status = _service.status()
    if status["scheduled"]:
        print(f"Next alarm: {status['nextAlarm']}")
    else:
        print("No alarm set. POST /api/alarm to set one.")
    print()

    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "5000"))

    try:
        # Reloader would start a second scheduler
        app.run(host=host, port=port, use_reloader=False)
    finally:
        vibrator.close()
        _service.shutdown()


if __name__ == "__main__":
    main()
