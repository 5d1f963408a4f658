from http import HTTPStatus

from django.conf import settings
from django.utils import timezone
from rest_framework.renderers import JSONRenderer


class ApiRenderer(JSONRenderer):
    """
    Wraps every JSON payload in the service envelope.
    Errors go under ``errors``, successful payloads under ``data``.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        renderer_context = renderer_context or {}
        response = renderer_context.get('response')

        # 204 and other bodiless responses stay empty
        if response is None or data is None:
            return super().render(data, accepted_media_type, renderer_context)

        status_code = response.status_code
        if not 200 <= status_code < 300:
            return super().render({
                "status": HTTPStatus(status_code).phrase,
                "code": status_code,
                "errors": data
            }, accepted_media_type, renderer_context)

        request = renderer_context.get('request')
        return super().render({
            "status": HTTPStatus(status_code).phrase,
            "code": status_code,
            "data": data,
            "metadata": {
                "timestamp": timezone.now().isoformat(),
                "path": request.path if request is not None else None,
                "version": settings.API_VERSION
            }
        }, accepted_media_type, renderer_context)
