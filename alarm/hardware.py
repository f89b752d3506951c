"""Vibration motor control for the alarm."""

from typing import Optional

# Hardware available flag
HARDWARE_AVAILABLE = False

try:
    from gpiozero import DigitalOutputDevice
    HARDWARE_AVAILABLE = True
except ImportError as e:
    print(f"[Hardware] Libraries not available: {e}")
except Exception as e:
    print(f"[Hardware] Error loading libraries: {e}")


class Vibrator:
    """Pulses a vibration motor while the alarm rings."""

    # GPIO pin driving the motor transistor
    VIBRATION_GPIO = 27

    # Pulse pattern (seconds)
    ON_TIME = 0.8
    OFF_TIME = 0.4

    def __init__(self, pin: int = VIBRATION_GPIO):
        self._motor: Optional["DigitalOutputDevice"] = None
        self._active = False

        if not HARDWARE_AVAILABLE:
            print("[Hardware] gpiozero not available, vibration disabled")
            return

        try:
            self._motor = DigitalOutputDevice(pin, initial_value=False)
            print(f"[Hardware] Vibration motor initialized on GPIO {pin}")
        except Exception as e:
            print(f"[Hardware] Error initializing vibration motor: {e}")
            self._motor = None

    @property
    def is_available(self) -> bool:
        return self._motor is not None

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> bool:
        """Start pulsing in the background. Returns False without hardware."""
        if self._motor is None:
            return False

        try:
            self._motor.blink(on_time=self.ON_TIME, off_time=self.OFF_TIME, background=True)
            self._active = True
            print("[Hardware] Vibration started")
            return True
        except Exception as e:
            print(f"[Hardware] Error starting vibration: {e}")
            return False

    def stop(self) -> bool:
        """Stop pulsing."""
        if self._motor is None or not self._active:
            return False

        try:
            self._motor.off()
        except Exception as e:
            print(f"[Hardware] Error stopping vibration: {e}")
        self._active = False
        print("[Hardware] Vibration stopped")
        return True

    def close(self):
        self.stop()
        if self._motor is not None:
            self._motor.close()
            self._motor = None
