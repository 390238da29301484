"""
Hook registry: callbacks that run at fixed points of a render.
"""

import logging

from .converters import PRIORITIES

OWNERS = ('pages', 'documents', 'posts')
EVENTS = ('pre_render', 'post_convert', 'post_render')


class Hooks:
    """Register callbacks per owner and event, then trigger them in priority order."""

    def __init__(self):
        self._registry = {owner: {event: [] for event in EVENTS} for owner in OWNERS}
        self.logger = logging.getLogger('Pagewright')

    def register(self, owners, event, callback=None, priority='normal'):
        """
        Register ``callback`` for ``event`` on one owner or a list of owners.

        Can be used as a decorator when ``callback`` is omitted.
        """
        if isinstance(owners, str):
            owners = [owners]
        for owner in owners:
            if owner not in self._registry:
                raise ValueError(f"Unknown hook owner: {owner}")
            if event not in self._registry[owner]:
                raise ValueError(f"Unknown hook event '{event}' for {owner}")

        def decorator(func):
            for owner in owners:
                self._registry[owner][event].append((PRIORITIES[priority], func))
                self._registry[owner][event].sort(key=lambda entry: -entry[0])
            return func

        if callback is None:
            return decorator
        return decorator(callback)

    def trigger(self, owner, event, *args):
        for _, callback in self._registry.get(owner, {}).get(event, []):
            self.logger.debug(f"Running {event} hook {getattr(callback, '__name__', callback)} for {owner}")
            callback(*args)

    def clear(self):
        for events in self._registry.values():
            for callbacks in events.values():
                callbacks.clear()
