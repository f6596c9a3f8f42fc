"""Django management command to run the file viewer server."""

import logging
from pathlib import Path
from typing import Any, final, override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.core.wsgi import get_wsgi_application

from server.apps.viewer.logic.browse_operations import configure_browser

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Run the file viewer using cheroot WSGI server."""

    help = 'Serve directory listings and file content as JSON'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            'root_dir',
            nargs='?',
            default=None,
            help='Directory to serve (default: LFV_DEFAULT_FOLDER)',
        )
        parser.add_argument(
            '--host',
            type=str,
            default=None,
            help='Host to bind to (default: from settings)',
        )
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to bind to (default: from settings)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        root_directory = self._resolve_root_directory(options['root_dir'])
        configure_browser(root_directory)
        self._run_server(options, root_directory)

    def _resolve_root_directory(self, root_dir: str | None) -> str:
        """Pick the served directory from the argument or settings.

        Args:
            root_dir: Directory given on the command line, if any.

        Returns:
            Directory to serve.

        Raises:
            CommandError: If no directory is configured or it is missing.
        """
        if root_dir:
            root_directory = str(Path(root_dir).resolve())
        else:
            root_directory = getattr(settings, 'VIEWER_ROOT_DIR', '')

        if not root_directory:
            raise CommandError(
                'No directory to serve: pass root_dir or set '
                'LFV_DEFAULT_FOLDER',
            )

        if not Path(root_directory).is_dir():
            raise CommandError(f'Not a directory: {root_directory}')

        return root_directory

    def _run_server(self, options: dict[str, Any], root_directory: str) -> None:
        """Run the viewer server.

        Args:
            options: Command options.
            root_directory: Directory being served.
        """
        host = options['host'] or getattr(
            settings,
            'VIEWER_HOST',
            '0.0.0.0',  # noqa: S104
        )
        port = options['port'] or getattr(settings, 'VIEWER_PORT', 8080)

        self.stdout.write(
            self.style.SUCCESS(
                f'Serving {root_directory} on {host}:{port}',
            ),
        )

        # Create and configure the cheroot server
        server = WSGIServer(
            bind_addr=(host, port),
            wsgi_app=get_wsgi_application(),
        )

        # Set server name for HTTP headers
        server.server_name = 'FileViewer'

        try:
            logger.info(
                'Viewer server starting on %s:%d',
                host,
                port,
            )
            server.start()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
        finally:
            server.stop()
            self.stdout.write(self.style.SUCCESS('Viewer server stopped'))
