import logging
import sys
from pathlib import Path

from flask import Flask, jsonify, redirect, render_template, request, url_for

# Ensure repository root is on sys.path for package import
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from vaporcheck.core import analyze  # noqa: E402
from vaporcheck.inputs import (  # noqa: E402
    InvalidInput,
    climate_from_mapping,
    layers_from_columns,
    layers_from_records,
)
from vaporcheck.report import report  # noqa: E402

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.update(HOST="127.0.0.1", PORT=8089, DEBUG=False)
app.config.from_prefixed_env("VAPORCHECK")


@app.route('/', methods=['GET'])
def index():
    return render_template('index.html')


@app.route('/submit', methods=['POST'])
def submit():
    form = request.form
    try:
        layers = layers_from_columns(
            form.getlist('nume'), form.getlist('d'), form.getlist('miu'), form.getlist('lambda')
        )
        climate = climate_from_mapping(form)
    except InvalidInput as e:
        logger.warning("Rejected form input: %s", e)
        return render_template('index.html', error=str(e)), 400
    result = analyze(layers, climate)
    logger.info("Form analysis: %d layers, condensing=%s", len(layers), result['condensing'])
    return render_template('index.html', report=report(result))


@app.route('/analyze', methods=['GET', 'POST'])
def analyze_api():
    # Simple help on GET to avoid 405 if user navigates directly
    if request.method == 'GET':
        return jsonify({
            'ok': True,
            'usage': 'POST JSON to this endpoint with {layers, climate}',
            'example': {
                'layers': [
                    {'name': 'Brick', 'd': 25, 'mu': 8, 'lambda_': 0.8},
                    {'name': 'Mineral wool', 'd': 10, 'mu': 1, 'lambda_': 0.04},
                ],
                'climate': {'theta_i': 20, 'phi_i': 60, 'theta_e': -15, 'phi_e': 85},
            },
        })
    try:
        data = request.get_json(force=True, silent=True)
        if not isinstance(data, dict):
            raise InvalidInput('Request body must be a JSON object')
        layers = layers_from_records(data.get('layers', []))
        climate = climate_from_mapping(data.get('climate'))
        result = analyze(layers, climate)
    except InvalidInput as e:
        logger.warning("Rejected API input: %s", e)
        return jsonify({'ok': False, 'error': str(e)}), 400
    except Exception as e:
        logger.exception("Analysis failed")
        return jsonify({'ok': False, 'error': str(e)}), 500
    logger.info("API analysis: %d layers, condensing=%s", len(layers), result['condensing'])
    return jsonify({'ok': True, 'result': result})


@app.errorhandler(405)
def handle_405(e):
    # If someone POSTs to '/', redirect to the main page
    if request.path == '/':
        return redirect(url_for('index'), code=303)
    return jsonify({'ok': False, 'error': 'Method Not Allowed', 'hint': 'GET / for UI, POST JSON to /analyze'}), 405


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG if app.config['DEBUG'] else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    app.run(host=app.config['HOST'], port=int(app.config['PORT']), debug=app.config['DEBUG'])
