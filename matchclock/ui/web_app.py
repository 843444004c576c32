"""
Web application module for the match clock.

This module contains the Flask application exposing the live match console
API: clock read/mutate, rosters, substitutions, play time, fatigue and
possessions.
"""
import logging
import math
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from ..models import PeriodConfig, get_template, SYSTEM_TEMPLATES
from ..utils import APP_TITLE
from ..services import (
    AdvanceOutcome, ConcurrencyConflict, DuplicateGame, InvalidTransition,
    MatchClockError, NotFound, ServiceFactory, ValidationError,
)

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for one web application instance.

    All request handlers share the services built by the factory, which in
    turn share one store. Nothing here keeps time on its own.
    """

    def __init__(self, factory: ServiceFactory) -> None:
        self.service_factory = factory
        self.clock_service = factory.create_clock_service()
        self.roster_service = factory.create_roster_service()
        self.substitution_service = factory.create_substitution_service()
        self.play_time_service = factory.create_play_time_service()
        self.fatigue_service = factory.create_fatigue_service()
        self.possession_service = factory.create_possession_service()


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _int_field(data: Dict[str, Any], key: str, *, required: bool = True) -> Optional[int]:
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f"{key} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be an integer") from exc


def _bool_field(data: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _int_query(key: str) -> Optional[int]:
    value = request.args.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValidationError(f"{key} must be an integer") from exc


def _period_config(data: Dict[str, Any], base: Optional[PeriodConfig] = None) -> PeriodConfig:
    """Build a configuration from minutes-based request fields over ``base``."""
    base = base or PeriodConfig()
    try:
        period_minutes = data.get("period_duration_minutes")
        overtime_minutes = data.get("overtime_period_duration_minutes")
        return PeriodConfig(
            period_duration=(
                int(period_minutes) * 60 if period_minutes is not None else base.period_duration
            ),
            number_of_periods=int(data.get("number_of_periods", base.number_of_periods)),
            overtime_enabled=_bool_field(data, "overtime_enabled", base.overtime_enabled),
            overtime_period_duration=(
                int(overtime_minutes) * 60
                if overtime_minutes is not None
                else base.overtime_period_duration
            ),
            max_overtime_periods=int(data.get("max_overtime_periods", base.max_overtime_periods)),
            golden_goal=_bool_field(data, "golden_goal", base.golden_goal),
        )
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from exc


def create_app(
    factory: Optional[ServiceFactory] = None,
    data_file: Optional[str] = None,
) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        factory: Service factory to use; a new one is built when omitted
        data_file: JSON snapshot path for a newly built factory

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    state = WebAppState(factory or ServiceFactory(data_file=data_file))
    app.extensions["matchclock"] = state

    # ==================== Error handling ==================== #

    @app.errorhandler(NotFound)
    def handle_not_found(error: NotFound):
        return jsonify({"success": False, "error": str(error)}), 404

    @app.errorhandler(InvalidTransition)
    def handle_invalid_transition(error: InvalidTransition):
        return jsonify({
            "success": False,
            "error": str(error),
            "current_state": error.current_state,
        }), 409

    @app.errorhandler(ConcurrencyConflict)
    def handle_conflict(error: ConcurrencyConflict):
        return jsonify({"success": False, "error": str(error)}), 409

    @app.errorhandler(DuplicateGame)
    def handle_duplicate_game(error: DuplicateGame):
        return jsonify({"success": False, "error": str(error)}), 409

    @app.errorhandler(ValidationError)
    def handle_validation(error: ValidationError):
        return jsonify({"success": False, "error": str(error)}), 400

    @app.errorhandler(MatchClockError)
    def handle_match_clock_error(error: MatchClockError):
        logger.exception("Unhandled match clock error")
        return jsonify({"success": False, "error": str(error)}), 500

    # ==================== Games & templates ==================== #

    @app.route("/api/games", methods=["POST"])
    def create_game():
        """Schedule a game clock, optionally from a match template."""
        data = _json_body()
        game_id = _int_field(data, "game_id")

        base = None
        template_key = data.get("template")
        if template_key:
            template = get_template(template_key)
            if template is None:
                raise NotFound(f"Match template '{template_key}' not found")
            base = template.to_config()
        config = _period_config(data, base)
        state.clock_service.create_clock(game_id, config)
        return jsonify({"success": True, "clock": state.clock_service.read(game_id).to_dict()}), 201

    @app.route("/api/match-templates", methods=["GET"])
    def list_templates():
        return jsonify({"success": True, "templates": [t.to_dict() for t in SYSTEM_TEMPLATES]})

    @app.route("/api/match-templates/<template_key>/apply/<int:game_id>", methods=["POST"])
    def apply_template(template_key: str, game_id: int):
        template = get_template(template_key)
        if template is None:
            raise NotFound(f"Match template '{template_key}' not found")
        reading = state.clock_service.configure(game_id, template.to_config())
        return jsonify({"success": True, "template": template.key, "clock": reading.to_dict()})

    # ==================== Clock ==================== #

    @app.route("/api/timer/<int:game_id>", methods=["GET"])
    def read_timer(game_id: int):
        """Freshly derived clock state. Safe to poll at high frequency."""
        response = jsonify({"success": True, "clock": state.clock_service.read(game_id).to_dict()})
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        return response

    @app.route("/api/timer/<int:game_id>/start", methods=["POST"])
    def start_timer(game_id: int):
        reading = state.clock_service.start(game_id)
        return jsonify({"success": True, "message": "Timer started", "clock": reading.to_dict()})

    @app.route("/api/timer/<int:game_id>/pause", methods=["POST"])
    def pause_timer(game_id: int):
        reading = state.clock_service.pause(game_id)
        return jsonify({"success": True, "message": "Timer paused", "clock": reading.to_dict()})

    @app.route("/api/timer/<int:game_id>/stop", methods=["POST"])
    def stop_timer(game_id: int):
        reading = state.clock_service.stop(game_id)
        return jsonify({"success": True, "message": "Timer stopped", "clock": reading.to_dict()})

    @app.route("/api/timer/<int:game_id>/next-period", methods=["POST"])
    def next_period(game_id: int):
        data = _json_body()
        result = state.clock_service.advance_period(
            game_id,
            force=_bool_field(data, "force"),
            scores_level=_bool_field(data, "scores_level"),
        )
        closed = None
        if result.outcome is not AdvanceOutcome.NO_CHANGE:
            closed = state.possession_service.close_open_possession(game_id)
        return jsonify({
            "success": True,
            "advance": result.to_dict(),
            "closed_possession": closed.to_json() if closed else None,
            "clock": state.clock_service.read(game_id).to_dict(),
        })

    @app.route("/api/timer/<int:game_id>/period", methods=["PUT"])
    def set_period(game_id: int):
        period = _int_field(_json_body(), "period")
        reading = state.clock_service.set_period(game_id, period)
        return jsonify({"success": True, "message": "Period updated", "clock": reading.to_dict()})

    @app.route("/api/timer/<int:game_id>/config", methods=["PUT"])
    def configure_timer(game_id: int):
        current = state.clock_service.get_clock(game_id)
        config = _period_config(_json_body(), current.config)
        reading = state.clock_service.configure(game_id, config)
        return jsonify({"success": True, "message": "Timer configured", "clock": reading.to_dict()})

    @app.route("/api/timer/<int:game_id>/reset", methods=["POST"])
    def reset_timer(game_id: int):
        reading = state.clock_service.reset(game_id)
        return jsonify({"success": True, "message": "Timer reset", "clock": reading.to_dict()})

    # ==================== Rosters ==================== #

    @app.route("/api/game-rosters/<int:game_id>", methods=["GET"])
    def get_roster(game_id: int):
        state.clock_service.get_clock(game_id)
        entries = state.roster_service.list_roster(game_id, club_id=_int_query("club_id"))
        return jsonify({"success": True, "roster": [e.to_json() for e in entries]})

    @app.route("/api/game-rosters/<int:game_id>", methods=["POST"])
    def add_to_roster(game_id: int):
        data = _json_body()
        players = data.get("players")
        if players is None:
            players = [data]
        if not isinstance(players, list):
            raise ValidationError("players must be a list")

        entries = []
        for item in players:
            if not isinstance(item, dict):
                raise ValidationError("Each roster entry must be an object")
            entries.append(
                state.roster_service.add_player(
                    game_id,
                    _int_field(item, "club_id"),
                    _int_field(item, "player_id"),
                    is_starting=_bool_field(item, "is_starting"),
                    starting_position=item.get("starting_position"),
                )
            )
        return jsonify({"success": True, "roster": [e.to_json() for e in entries]}), 201

    # ==================== Substitutions ==================== #

    @app.route("/api/substitutions/<int:game_id>", methods=["GET"])
    def list_substitutions(game_id: int):
        events = state.substitution_service.list_substitutions(
            game_id,
            club_id=_int_query("club_id"),
            period=_int_query("period"),
            overtime_period_number=_int_query("overtime_period_number"),
            player_id=_int_query("player_id"),
        )
        return jsonify({"success": True, "substitutions": [e.to_json() for e in events]})

    @app.route("/api/substitutions/<int:game_id>", methods=["POST"])
    def record_substitution(game_id: int):
        data = _json_body()
        event = state.substitution_service.record_substitution(
            game_id,
            _int_field(data, "club_id"),
            _int_field(data, "player_in_id"),
            _int_field(data, "player_out_id"),
            period=_int_field(data, "period", required=False),
            time_remaining=data.get("time_remaining"),
            overtime_period_number=_int_field(data, "overtime_period_number", required=False),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "substitution": event.to_json()}), 201

    @app.route("/api/substitutions/<int:game_id>/active-players", methods=["GET"])
    def active_players(game_id: int):
        clubs = state.substitution_service.active_players(game_id)
        return jsonify({
            "success": True,
            "clubs": {str(club_id): lineup for club_id, lineup in clubs.items()},
        })

    @app.route("/api/substitutions/<int:game_id>/players/<int:player_id>", methods=["GET"])
    def player_substitutions(game_id: int, player_id: int):
        events = state.substitution_service.player_events(game_id, player_id)
        return jsonify({
            "success": True,
            "is_starting": state.roster_service.is_starting(game_id, player_id),
            "events": [e.to_dict() for e in events],
        })

    # ==================== Analytics ==================== #

    @app.route("/api/play-time/<int:game_id>/<int:player_id>", methods=["GET"])
    def play_time(game_id: int, player_id: int):
        report = state.play_time_service.play_time(game_id, player_id)
        return jsonify({"success": True, "play_time": report.to_dict()})

    @app.route("/api/fatigue/<int:game_id>/<int:player_id>", methods=["POST"])
    def fatigue(game_id: int, player_id: int):
        data = _json_body()
        shots = data.get("shots", [])
        if not isinstance(shots, list):
            raise ValidationError("shots must be a list")
        degradation = data.get("degradation")
        if degradation is not None:
            try:
                degradation = float(degradation)
            except (TypeError, ValueError) as exc:
                raise ValidationError("degradation must be a number") from exc
            if not math.isfinite(degradation):
                raise ValidationError("degradation must be a finite number")
        assessment = state.fatigue_service.assess(
            game_id, player_id, shots=shots, degradation=degradation
        )
        return jsonify({"success": True, "fatigue": assessment.to_dict()})

    # ==================== Possessions ==================== #

    @app.route("/api/possessions/<int:game_id>", methods=["POST"])
    def start_possession(game_id: int):
        data = _json_body()
        possession = state.possession_service.start_possession(
            game_id,
            _int_field(data, "club_id"),
            _int_field(data, "period"),
            player_id=_int_field(data, "player_id", required=False),
        )
        return jsonify({"success": True, "possession": possession.to_json()}), 201

    @app.route("/api/possessions/<int:game_id>/<int:possession_id>", methods=["PUT"])
    def end_possession(game_id: int, possession_id: int):
        result = _json_body().get("result")
        if not result:
            raise ValidationError("result is required")
        possession = state.possession_service.end_possession(game_id, possession_id, result)
        return jsonify({"success": True, "possession": possession.to_json()})

    @app.route("/api/possessions/<int:game_id>", methods=["GET"])
    def list_possessions(game_id: int):
        possessions = state.possession_service.list_possessions(
            game_id, club_id=_int_query("club_id"), period=_int_query("period")
        )
        return jsonify({"success": True, "possessions": [p.to_json() for p in possessions]})

    @app.route("/api/possessions/<int:game_id>/active", methods=["GET"])
    def active_possession(game_id: int):
        possession = state.possession_service.active_possession(game_id)
        if possession is None:
            return jsonify({"success": False, "error": "No active possession found"}), 404
        return jsonify({"success": True, "possession": possession})

    @app.route("/api/possessions/<int:game_id>/stats", methods=["GET"])
    def possession_stats(game_id: int):
        return jsonify({"success": True, "stats": state.possession_service.possession_stats(game_id)})

    @app.route("/api/possessions/<int:game_id>/<int:possession_id>/increment-shots", methods=["PATCH"])
    def increment_shots(game_id: int, possession_id: int):
        possession = state.possession_service.increment_shots(game_id, possession_id)
        return jsonify({"success": True, "possession": possession.to_json()})

    @app.route("/api/possessions/<int:game_id>/shots", methods=["POST"])
    def record_shot(game_id: int):
        """Attribute a shot to whichever possession is open."""
        state.clock_service.get_clock(game_id)
        possession = state.possession_service.record_shot(game_id)
        if possession is None:
            return jsonify({"success": False, "error": "No active possession found"}), 404
        return jsonify({"success": True, "possession": possession.to_json()})

    return app


def run_web_app(
    host: str = "127.0.0.1",
    port: int = 7122,
    data_file: Optional[str] = None,
    debug: bool = False,
) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        data_file: JSON snapshot file for match data
        debug: Run Flask in debug mode
    """
    app = create_app(data_file=data_file)
    logger.info("Starting %s API on %s:%s", APP_TITLE, host, port)
    app.run(host=host, port=port, debug=debug)
