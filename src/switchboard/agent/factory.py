"""Runner construction from configuration."""

from __future__ import annotations

from switchboard.agent.backends import BACKENDS, get_backend
from switchboard.agent.registry import ProcessRegistry
from switchboard.agent.runner import AgentRunner
from switchboard.config.models import AgentSettings


def create_runner(
    settings: AgentSettings,
    registry: ProcessRegistry | None = None,
) -> AgentRunner:
    """Create an ``AgentRunner`` for ``settings.backend``."""
    return AgentRunner(get_backend(settings.backend), settings, registry=registry)


def get_backend_display_name(name: str) -> str:
    """Human-readable backend name; unknown names are returned unchanged."""
    backend_cls = BACKENDS.get(name)
    return backend_cls.display_name if backend_cls is not None else name
