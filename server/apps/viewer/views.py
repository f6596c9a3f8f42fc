"""HTTP view for the file viewer."""

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from server.apps.viewer.logic.browse_operations import get_browser

logger = logging.getLogger(__name__)


@require_GET
async def browse_view(request: HttpRequest, file_path: str = '') -> JsonResponse:
    """Return the directory, file or error view for a path.

    Args:
        request: HTTP request with optional ``query`` and ``query_dir``.
        file_path: Path relative to the served root.

    Returns:
        JSON body of the view. Errors are reported in the body.
    """
    query = request.GET.get('query') or None
    query_dir = request.GET.get('query_dir') or ''

    logger.debug(
        'Browse %r (query=%r, query_dir=%r)',
        file_path,
        query,
        query_dir,
    )

    body = await get_browser().browse(file_path, query, query_dir)
    return JsonResponse(body)
