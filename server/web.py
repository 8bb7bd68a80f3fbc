"""Flask app serving saved event files to the browser viewer."""
import logging
import os

from flask import Flask, jsonify, send_from_directory

from storage.json_storage import JsonEventStorage

logger = logging.getLogger(__name__)


def create_app(storage: JsonEventStorage, public_dir: str) -> Flask:
    """
    Build the viewer application.

    Args:
        storage: Storage over the output directory
        public_dir: Directory with the static viewer files

    Returns:
        Configured Flask app
    """
    public_dir = os.path.abspath(public_dir)
    app = Flask(__name__, static_folder=None)
    storage.ensure_output_dir()

    @app.route('/api/list-files')
    def list_files():
        try:
            return jsonify(storage.list_files())
        except OSError as e:
            logger.error(f"Error reading output directory: {e}")
            return jsonify({'error': 'Failed to read output directory'}), 500

    @app.route('/api/events/<path:filename>')
    def get_events(filename):
        try:
            events = storage.load_events(filename)
        except FileNotFoundError:
            logger.error(f"File not found: {filename}")
            return jsonify({'error': 'File not found'}), 404
        except (OSError, ValueError) as e:
            logger.error(f"Error reading file {filename}: {e}")
            return jsonify({'error': 'Failed to read event file'}), 500

        logger.info(f"Serving {len(events)} events from {filename}")
        return jsonify(events)

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def static_files(path):
        if path and os.path.isfile(os.path.join(public_dir, path)):
            return send_from_directory(public_dir, path)
        if os.path.isfile(os.path.join(public_dir, 'index.html')):
            return send_from_directory(public_dir, 'index.html')
        return jsonify({'error': 'Viewer not found'}), 404

    return app


def start_server(storage: JsonEventStorage, public_dir: str, port: int = 3000) -> None:
    """Run the viewer until interrupted."""
    app = create_app(storage, public_dir)
    logger.info(f"Server running at http://localhost:{port}")
    logger.info(
        f"Open your browser and navigate to http://localhost:{port} to view events"
    )
    app.run(host='0.0.0.0', port=port)
