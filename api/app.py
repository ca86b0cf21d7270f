"""Flask REST API exposing the show-business record keeping services."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from showbiz.config import Settings
from showbiz.exceptions import (
    DuplicateRecordError,
    MalformedRecordLineError,
    PersistenceError,
    RecordFileNotFoundError,
    RecordNotFoundError,
    ValidationError,
)
from showbiz.models import RecordKind, categories_for
from showbiz.services import CastingService, ContractService, EventService, FinanceService
from showbiz.validators import validate_enum, validate_relative_path


def create_app(settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_development:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": list(settings.allowed_origins)}}, supports_credentials=True)
    else:
        CORS(app)

    app.logger.setLevel(settings.log_level)

    finance_service = FinanceService(codec=settings.codec(), data_file=settings.data_file)
    finance_service.hydrate()
    casting_service = CastingService()
    contract_service = ContractService()
    event_service = EventService()

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(DuplicateRecordError)
    def handle_duplicate(exc: DuplicateRecordError):
        return _handle_error(exc, 409, "Duplicate record")

    @app.errorhandler(RecordFileNotFoundError)
    def handle_missing_file(exc: RecordFileNotFoundError):
        return _handle_error(exc, 404, "File not found")

    @app.errorhandler(MalformedRecordLineError)
    def handle_malformed_file(exc: MalformedRecordLineError):
        return _handle_error(exc, 422, "Malformed record file")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _optional_json_body() -> Dict[str, Any]:
        if not request.data:
            return {}
        return _json_body()

    def _ledger_path(payload: Dict[str, Any]):
        # alternative ledger files must live next to the configured data file
        return validate_relative_path(payload.get("path"), settings.data_file.parent, "path")

    def _clean_filters(raw: Dict[str, Optional[str]]) -> Dict[str, str]:
        return {k: v for k, v in raw.items() if v not in (None, "")}

    # Finance ledger -------------------------------------------------------
    @app.get("/categories")
    def list_categories():
        kind = request.args.get("kind")
        kinds = [validate_enum(kind, "kind", RecordKind)] if kind else list(RecordKind)
        return _success({
            k.value: [category.value for category in categories_for(k)] for k in kinds
        })

    @app.get("/records")
    def list_records():
        filters = {
            "kind": request.args.get("kind"),
            "category": request.args.get("category"),
            "start": request.args.get("start"),
            "end": request.args.get("end"),
        }
        records = finance_service.list(**_clean_filters(filters))
        return _success({"items": [record.to_dict() for record in records]})

    @app.post("/records")
    def create_record():
        payload = _json_body()
        record = finance_service.add_record(
            payload.get("kind"),
            payload.get("amount"),
            payload.get("description"),
            payload.get("date"),
            payload.get("category"),
        )
        return _success(record.to_dict(), 201)

    @app.get("/records/<record_id>")
    def get_record(record_id: str):
        return _success(finance_service.get(record_id).to_dict())

    @app.patch("/records/<record_id>")
    def update_record_amount(record_id: str):
        payload = _json_body()
        unsupported = set(payload) - {"amount"}
        if unsupported:
            raise ValidationError(
                f"only amount can be changed, got: {', '.join(sorted(unsupported))}"
            )
        record = finance_service.update_amount(record_id, payload.get("amount"))
        return _success(record.to_dict())

    @app.get("/balance")
    def balance():
        summary = finance_service.totals(request.args.get("start"), request.args.get("end"))
        return _success(summary.to_dict())

    @app.post("/records/save")
    def save_records():
        payload = _optional_json_body()
        written = finance_service.save(_ledger_path(payload))
        return _success({"saved": written, "nothing_to_save": written == 0})

    @app.post("/records/load")
    def load_records():
        payload = _optional_json_body()
        result = finance_service.load(_ledger_path(payload))
        return _success({"loaded": len(result.records), "skipped": result.skipped})

    # Castings -------------------------------------------------------------
    @app.get("/castings")
    def list_castings():
        return _success({"items": [casting.to_dict() for casting in casting_service.list()]})

    @app.post("/castings")
    def create_casting():
        casting = casting_service.register(_json_body())
        return _success(casting.to_dict(), 201)

    @app.get("/castings/<casting_id>")
    def get_casting(casting_id: str):
        return _success(casting_service.get(casting_id).to_dict())

    @app.post("/castings/<casting_id>/participants")
    def register_participant(casting_id: str):
        participant = casting_service.register_participant(casting_id, _json_body())
        return _success(participant.to_dict(), 201)

    @app.put("/castings/<casting_id>/participants/<participant_id>")
    def update_participant(casting_id: str, participant_id: str):
        payload = _json_body()
        participant = casting_service.update_participant_status(
            casting_id, participant_id, payload.get("status")
        )
        return _success(participant.to_dict())

    # Contracts ------------------------------------------------------------
    @app.get("/contracts")
    def list_contracts():
        return _success({
            "items": [_contract_view(contract) for contract in contract_service.list()]
        })

    @app.post("/contracts")
    def create_contract():
        contract = contract_service.add(_json_body())
        return _success(_contract_view(contract), 201)

    @app.get("/contracts/expiring")
    def expiring_contracts():
        contracts = contract_service.expiring(request.args.get("days", 30))
        return _success({"items": [_contract_view(contract) for contract in contracts]})

    @app.get("/contracts/<contract_id>")
    def get_contract(contract_id: str):
        return _success(_contract_view(contract_service.get(contract_id)))

    @app.patch("/contracts/<contract_id>")
    def update_contract(contract_id: str):
        contract = contract_service.update(contract_id, _json_body())
        return _success(_contract_view(contract))

    # Events ---------------------------------------------------------------
    @app.get("/events")
    def list_events():
        return _success({"items": [event.to_dict() for event in event_service.list()]})

    @app.post("/events")
    def create_event():
        event = event_service.add(_json_body())
        return _success(event.to_dict(), 201)

    @app.get("/events/<event_id>")
    def get_event(event_id: str):
        return _success(event_service.get(event_id).to_dict())

    @app.delete("/events/<event_id>")
    def delete_event(event_id: str):
        event_service.remove(event_id)
        return _success({}, 204)

    @app.post("/events/<event_id>/tickets")
    def sell_tickets(event_id: str):
        event = event_service.get(event_id)
        event.sell_tickets(_json_body().get("count"))
        return _success(event.to_dict())

    @app.post("/events/<event_id>/artists")
    def add_artist(event_id: str):
        event = event_service.get(event_id)
        event.add_artist(_json_body().get("name"))
        return _success(event.to_dict(), 201)

    @app.delete("/events/<event_id>/artists/<artist_name>")
    def remove_artist(event_id: str, artist_name: str):
        event_service.get(event_id).remove_artist(artist_name)
        return _success({}, 204)

    @app.get("/events/<event_id>/profit")
    def event_profit(event_id: str):
        event = event_service.get(event_id)
        profit = event.calculate_profit(request.args.get("expenses", "0"))
        return _success({"event_id": event.id, "profit": f"{profit:.2f}"})

    return app


def _contract_view(contract) -> Dict[str, Any]:
    view = contract.to_dict()
    view["active"] = contract.is_active()
    view["days_until_expiration"] = contract.days_until_expiration()
    return view
