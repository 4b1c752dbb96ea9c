# File: ethanol_gauging/api/app.py
import logging
from typing import List, Optional

from flask import Flask, jsonify, abort, request
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from waitress import serve

from config import settings
from api.auth import require_api_key
from calculation_service.calculation_service import CalculationService
from core.calibration import CalibrationPoint, interpolate_volume, interpolate_volume_for_trim
from core.models import Measurement
from core.volumetrics import REGULATORY_SPECS, default_grid_provider
from utils.helpers import finite_or_none, setup_main_logging, to_number

# --- Logging and App Setup ---
logger = logging.getLogger("gauging_api")
app = Flask(__name__)
app.config["API_KEY"] = settings.API_KEY

grid_provider = default_grid_provider()
calculation_service = CalculationService(grid_provider)


# --- Pydantic Models ---
class BatchPayload(BaseModel):
    measurements: List[Measurement]


class CalibrationPointPayload(BaseModel):
    position: float = Field(validation_alias=AliasChoices('position', 'height', 'ullage', 'empty_space_mm'))
    volume: float = Field(validation_alias=AliasChoices('volume', 'volume_l'))
    trim: float = 0.0

    @field_validator('position', 'volume', 'trim', mode='before')
    @classmethod
    def validate_numbers(cls, v):
        return to_number(v)


class InterpolationPayload(BaseModel):
    position: float
    points: List[CalibrationPointPayload]
    trim: Optional[float] = None

    @field_validator('position', mode='before')
    @classmethod
    def validate_position(cls, v):
        return to_number(v)


def _json_payload() -> dict:
    if not request.is_json:
        abort(400, description="Request content type must be application/json.")
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object.")
    return payload


# --- Error Handlers ---
@app.errorhandler(400)
def bad_request(e): return jsonify({"error": "Bad Request", "details": getattr(e, 'description', str(e))}), 400
@app.errorhandler(401)
def unauthorized(e): return jsonify(error="Unauthorized"), 401
@app.errorhandler(404)
def resource_not_found(e): return jsonify(error=getattr(e, 'description', "Resource not found")), 404
@app.errorhandler(500)
def internal_server_error(e):
    logger.error(f"API Internal Server Error: {e}", exc_info=True)
    return jsonify(error="Internal server error occurred."), 500


# --- API Endpoints ---
@app.route('/health', methods=['GET'])
def health_check():
    return jsonify(status="ok", grid_ready=grid_provider.is_built)

@app.route('/api/v1/specs', methods=['GET'])
@require_api_key
def get_regulatory_specs():
    return jsonify({product.value: spec.to_dict() for product, spec in REGULATORY_SPECS.items()})

@app.route('/api/v1/measurements/calculate', methods=['POST'])
@require_api_key
def calculate_measurement():
    payload = _json_payload()
    try:
        measurement = Measurement(**payload)
    except ValidationError as e:
        abort(400, description=e.errors(include_url=False, include_context=False))

    result = calculation_service.calculator.calculate(measurement)
    return jsonify({**result.to_dict(), "formatted": result.formatted()})

@app.route('/api/v1/measurements/batch', methods=['POST'])
@require_api_key
def calculate_measurement_batch():
    payload = _json_payload()
    try:
        batch = BatchPayload(**payload)
    except ValidationError as e:
        abort(400, description=e.errors(include_url=False, include_context=False))

    results, summary = calculation_service.run_batch(batch.measurements)
    return jsonify({"results": [r.to_dict() for r in results], "summary": summary.to_dict()})

@app.route('/api/v1/calibration/interpolate', methods=['POST'])
@require_api_key
def interpolate_calibration():
    payload = _json_payload()
    try:
        args = InterpolationPayload(**payload)
    except ValidationError as e:
        abort(400, description=e.errors(include_url=False, include_context=False))

    points = [CalibrationPoint(p.position, p.volume, p.trim) for p in args.points]
    if args.trim is None:
        volume = interpolate_volume(args.position, points)
    else:
        volume = interpolate_volume_for_trim(args.position, points, args.trim)
    return jsonify(volume=finite_or_none(volume))


# --- Main Execution Block ---
def main():
    setup_main_logging(settings.LOG_LEVEL)
    if settings.PREBUILD_CORRECTION_GRID:
        grid_provider.get()
    logger.info(f"Starting API server with Waitress on http://0.0.0.0:{settings.FLASK_PORT}")
    serve(app, host='0.0.0.0', port=settings.FLASK_PORT, threads=settings.API_THREADS)


if __name__ == '__main__':
    main()
