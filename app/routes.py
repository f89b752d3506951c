"""Flask routes for the Morning Routine companion."""

import base64
import binascii

from flask import Blueprint, request, jsonify, Response

from alarm.challenges import ChallengeType
from alarm.tones import ALARM_TONES, DEFAULT_TONE_ID, is_known_tone, get_tone
from app import get_state
from app.feed import FeedController
from app.onboarding import OnboardingFlow
from app.records import ScheduledAlarm
from app.routine import RoutineRun, RoutineError
from app.steps import ROUTINE_STEPS
from app.storage import AlarmStorage, FeedStorage, ProfileStorage, PreferenceStore
from app.validation import validate_alarm_request, parse_time

main_bp = Blueprint("main", __name__)


def _error(message: str, status: int = 400):
    return jsonify({"status": "error", "message": message}), status


def _json_body():
    """Request JSON as a dict, {} when absent, None when it is not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _feed() -> FeedController:
    feed = FeedController(FeedStorage(PreferenceStore()))
    feed.load()
    return feed


# --- Catalogs ---

@main_bp.route("/api/tones")
def list_tones():
    """List the built-in alarm tones."""
    return jsonify({
        "tones": [t.to_dict() for t in ALARM_TONES],
        "default": DEFAULT_TONE_ID,
    })


@main_bp.route("/api/tones/<tone_id>.wav")
def preview_tone(tone_id):
    """Serve a tone as WAV for previewing."""
    if not is_known_tone(tone_id):
        return _error("Tone not found", 404)
    return Response(get_tone(tone_id).bytes, mimetype="audio/wav")


@main_bp.route("/api/challenges")
def list_challenges():
    return jsonify({"challenges": [c.to_dict() for c in ChallengeType]})


@main_bp.route("/api/steps")
def list_steps():
    return jsonify({"steps": [s.to_dict() for s in ROUTINE_STEPS]})


# --- Alarm ---

@main_bp.route("/api/alarm", methods=["GET"])
def get_alarm():
    """Current alarm and ringing state."""
    return jsonify(get_state().alarm_service.status())


@main_bp.route("/api/alarm", methods=["POST"])
def set_alarm():
    """Validate, persist and schedule the alarm."""
    data = request.get_json(silent=True)

    validation = validate_alarm_request(data)
    if not validation.is_valid:
        return _error(validation.error_message)

    hour, minute = parse_time(data["time"])
    alarm = ScheduledAlarm(
        hour=hour,
        minute=minute,
        days=sorted(set(data["days"])),
        tone_id=data.get("toneId") or DEFAULT_TONE_ID,
        challenges=[ChallengeType.parse(c).value for c in data["challenges"]],
        morning_tasks=list(data.get("morningTasks", [])),
        vibrate=bool(data.get("vibrate", True)),
    )

    service = get_state().alarm_service
    fire_at = service.schedule(alarm)
    saved = AlarmStorage(PreferenceStore()).save(alarm)

    return jsonify({
        "status": "ok",
        "nextAlarm": fire_at.isoformat(),
        "saved": saved,
        "alarm": alarm.to_dict(),
    })


@main_bp.route("/api/alarm", methods=["DELETE"])
def cancel_alarm():
    """Cancel the alarm."""
    cancelled = get_state().alarm_service.cancel()
    AlarmStorage(PreferenceStore()).clear()
    return jsonify({"status": "ok", "cancelled": cancelled})


@main_bp.route("/api/alarm/trigger", methods=["POST"])
def trigger_alarm():
    """Ring the scheduled alarm now (for testing the setup)."""
    service = get_state().alarm_service
    if service.alarm is None:
        return _error("No alarm is set", 409)
    service.trigger()
    return jsonify(service.status())


@main_bp.route("/api/alarm/challenges/<challenge_id>", methods=["POST"])
def submit_challenge(challenge_id):
    """
    Submit input for a challenge of the ringing alarm.

    Body: {} for a tap, {"answer": n} for maths, {"text": "..."} for copy.
    """
    service = get_state().alarm_service
    gate = service.gate
    if gate is None:
        return _error("Alarm is not ringing", 409)

    challenge_type = ChallengeType.parse(challenge_id)
    challenge = gate.challenge(challenge_type) if challenge_type else None
    if challenge is None:
        return _error(f"Challenge '{challenge_id}' is not part of this alarm", 404)

    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object")

    if challenge_type is ChallengeType.TAP:
        accepted = True
        challenge.tap()
        message = None
    elif challenge_type is ChallengeType.MATH:
        accepted = challenge.submit(data.get("answer", ""))
        message = None if accepted or challenge.is_complete else "Not quite, try again."
    else:
        text = data.get("text", "")
        if not isinstance(text, str):
            return _error("Text must be a string")
        accepted = challenge.update(text)
        message = None if accepted else "Keep typing, the sentence must match exactly."

    return jsonify({
        "status": "ok",
        "accepted": accepted,
        "message": message,
        "challenge": challenge.to_dict(),
        "canDismiss": gate.is_complete,
    })


@main_bp.route("/api/alarm/dismiss", methods=["POST"])
def dismiss_alarm():
    """Dismiss the ringing alarm and start the morning routine."""
    state = get_state()
    service = state.alarm_service
    if not service.is_ringing:
        return _error("Alarm is not ringing", 409)

    alarm = service.alarm
    if not service.dismiss():
        return _error("Complete every challenge before dismissing", 409)

    state.routine_run = RoutineRun.for_tasks(alarm.morning_tasks)
    state.routine_run.start()

    return jsonify({
        "status": "ok",
        "nextAlarm": service.status()["nextAlarm"],
        "routine": state.routine_run.to_dict(),
    })


# --- Routine ---

def _routine_or_error():
    run = get_state().routine_run
    if run is None:
        raise RoutineError("No routine has been started")
    return run


@main_bp.errorhandler(RoutineError)
def handle_routine_error(e):
    return _error(str(e), 409)


@main_bp.route("/api/routine", methods=["GET"])
def get_routine():
    run = get_state().routine_run
    return jsonify({"routine": run.to_dict() if run else None})


@main_bp.route("/api/routine/start", methods=["POST"])
def start_routine():
    """Start a routine with the profile's tasks (or an explicit list)."""
    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object")
    task_ids = data.get("taskIds")
    if task_ids is None:
        profile = ProfileStorage(PreferenceStore()).load()
        task_ids = profile.routine_task_ids if profile else []
    if not isinstance(task_ids, list) or not all(isinstance(t, str) for t in task_ids):
        return _error("taskIds must be a list of step ids")

    run = RoutineRun.for_tasks(task_ids)
    run.start()
    get_state().routine_run = run
    return jsonify({"status": "ok", "routine": run.to_dict()})


@main_bp.route("/api/routine/photo", methods=["POST"])
def attach_photo():
    """Attach a base64 photo, or {"simulate": true} without a camera."""
    run = _routine_or_error()
    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object")

    if data.get("simulate"):
        run.simulate_photo()
    else:
        image = data.get("imageBase64") or ""
        if not isinstance(image, str):
            return _error("Unable to read photo. Try again or use a simulated photo.")
        try:
            photo = base64.b64decode(image, validate=True)
        except (binascii.Error, TypeError, ValueError):
            return _error("Unable to read photo. Try again or use a simulated photo.")
        if not photo:
            return _error("Unable to read photo. Try again or use a simulated photo.")
        run.attach_photo(photo)

    return jsonify({"status": "ok", "routine": run.to_dict()})


@main_bp.route("/api/routine/complete", methods=["POST"])
def complete_step():
    """Complete the current step with an optional note."""
    run = _routine_or_error()
    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object")
    note = data.get("note")
    if note is not None and not isinstance(note, str):
        return _error("Note must be text")
    entry = run.complete_step(note=note)
    return jsonify({
        "status": "ok",
        "finished": entry is not None,
        "routine": run.to_dict(),
    })


@main_bp.route("/api/routine/abandon", methods=["POST"])
def abandon_routine():
    run = _routine_or_error()
    run.abandon()
    return jsonify({"status": "ok", "routine": run.to_dict()})


@main_bp.route("/api/routine/post", methods=["POST"])
def post_routine():
    """Post the finished routine to the feed."""
    run = _routine_or_error()
    entry = run.take_entry()
    feed = _feed()
    saved = feed.add_entry(entry)
    return jsonify({"status": "ok", "saved": saved, "entry": entry.to_dict()})


# --- Feed ---

@main_bp.route("/api/feed")
def get_feed():
    """Completed routines, newest first."""
    return jsonify(_feed().to_dict())


# --- Profile & onboarding ---

@main_bp.route("/api/profile")
def get_profile():
    profile = ProfileStorage(PreferenceStore()).load()
    return jsonify({"profile": profile.to_dict() if profile else None})


@main_bp.route("/api/onboarding/start", methods=["POST"])
def start_onboarding():
    """Start onboarding, or an edit of the existing profile."""
    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object")
    state = get_state()

    profile = ProfileStorage(PreferenceStore()).load() if data.get("edit") else None
    if profile is not None:
        state.onboarding = OnboardingFlow.from_profile(profile)
    else:
        state.onboarding = OnboardingFlow()

    return jsonify({"status": "ok", "onboarding": state.onboarding.to_dict()})


@main_bp.route("/api/onboarding/answer", methods=["POST"])
def answer_onboarding():
    """Answer the current onboarding question."""
    state = get_state()
    flow = state.onboarding
    if flow is None:
        return _error("Onboarding has not been started", 409)

    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object")
    result = flow.answer(str(data.get("text", "")))

    response = {
        "status": "ok" if result.is_valid else "error",
        "message": result.error_message or result.warning_message,
        "onboarding": flow.to_dict(),
        "profile": None,
    }

    if result.is_valid and flow.is_complete:
        profile = flow.build_profile()
        response["saved"] = ProfileStorage(PreferenceStore()).save(profile)
        response["profile"] = profile.to_dict()
        state.onboarding = None

    return jsonify(response), 200 if result.is_valid else 400
