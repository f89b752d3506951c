"""Alarm tone player using mpv."""

import os
import subprocess
from typing import Optional

from .tones import AlarmTone, write_tone_file

MPV_BINARY = os.environ.get("MPV_BINARY", "mpv")

# Global reference to current player process
_current_player: Optional[subprocess.Popen] = None


def play_tone(tone: AlarmTone, loop: bool = True) -> bool:
    """
    Play an alarm tone, looping until stopped.

    Returns True if playback started, False on error.
    """
    global _current_player

    # Stop any existing playback
    stop_playback()

    try:
        path = write_tone_file(tone)
    except OSError as e:
        print(f"[Alarm] Error writing tone file: {e}")
        return False

    print(f"[Alarm] Playing {tone.label} ({tone.frequency:g} Hz)")

    args = [MPV_BINARY, "--no-video"]
    if loop:
        args.append("--loop=inf")  # Loop forever until stopped
    args += ["--", str(path)]

    try:
        _current_player = subprocess.Popen(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return True
    except FileNotFoundError:
        print("[Alarm] Error: mpv not installed. Run: sudo apt install mpv")
        return False
    except Exception as e:
        print(f"[Alarm] Error starting playback: {e}")
        return False


def stop_playback() -> bool:
    """
    Stop current tone playback.

    Returns True if stopped, False if nothing was playing.
    """
    global _current_player

    if _current_player is None:
        return False

    try:
        # Send SIGTERM for graceful shutdown
        _current_player.terminate()
        _current_player.wait(timeout=2)
    except subprocess.TimeoutExpired:
        # Force kill if it doesn't respond
        _current_player.kill()
        _current_player.wait()
    except Exception as e:
        print(f"[Alarm] Error stopping playback: {e}")

    _current_player = None
    print("[Alarm] Playback stopped")
    return True


def is_playing() -> bool:
    """Check if a tone is currently playing."""
    if _current_player is None:
        return False

    # Check if process is still running
    return _current_player.poll() is None
