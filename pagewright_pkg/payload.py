import copy

from .errors import NoConverterAvailable


class PayloadBuilder:
    """
    Builds the variable mapping a single render exposes to templates.

    The base payload holds site-wide values and is shared between renders,
    so every build starts from a deep copy of it.
    """

    def __init__(self, base_payload=None):
        self.base_payload = base_payload or {}

    def fresh(self):
        payload = copy.deepcopy(self.base_payload)
        payload['site'] = payload.get('site') or {}
        payload.pop('paginator', None)
        return payload

    def build(self, document, converters, output_ext=None):
        payload = self.fresh()
        payload['page'] = document.to_liquid(output_ext)

        if document.pager is not None:
            payload['paginator'] = document.pager.to_liquid()

        # Always assigned so a value from an earlier render cannot leak through
        if document.collection == 'posts':
            payload['site']['related_posts'] = document.related_posts
        else:
            payload['site']['related_posts'] = None

        self.set_highlighter_markers(payload, document, converters)
        return payload

    @staticmethod
    def set_highlighter_markers(payload, document, converters):
        if not converters:
            raise NoConverterAvailable(document.extname)
        first = converters[0]
        payload['highlighter_prefix'] = first.highlighter_prefix
        payload['highlighter_suffix'] = first.highlighter_suffix
