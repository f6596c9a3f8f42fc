"""File viewer server settings."""

from server.settings.components import config

# Directory served as `/`, overridden by the run_viewer_server argument
VIEWER_ROOT_DIR = config('LFV_DEFAULT_FOLDER', default='')

# Viewer server host and port
VIEWER_HOST = config('VIEWER_HOST', default='0.0.0.0')
VIEWER_PORT = config('VIEWER_PORT', cast=int, default=8080)
