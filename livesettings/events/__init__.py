"""Change listener plumbing for livesettings."""

from .listeners import Listener, ListenerRegistry

__all__ = ['Listener', 'ListenerRegistry']
