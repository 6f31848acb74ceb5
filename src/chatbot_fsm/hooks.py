"""Transition lifecycle hooks for machine instances.

Hooks let callers attach side effects to transitions without touching the
machine document. Four phases are supported, invoked synchronously by
:meth:`MachineInstance.fire` in this order:

1. ``before`` - before the transition, per event or global
2. ``leave`` - when leaving the source state, per state or global
3. ``enter`` - after the pointer moved, per destination state or global
4. ``after`` - after the transition, per event or global

``before`` and ``leave`` callbacks may veto the transition by returning
``False``; the machine then raises
:class:`~chatbot_fsm.exceptions.TransitionCanceledError` and keeps its
current state. ``enter`` and ``after`` callbacks run once the transition has
been applied; their return value is ignored.

Example:
    ```python
    from chatbot_fsm.hooks import MachineHooks

    hooks = MachineHooks()
    hooks.on_enter(lambda ctx: print(f"Now in {ctx.dest}"))
    hooks.on_before(lambda ctx: user.is_verified, event="ShowBilling")

    machine = new_instance(definition, hooks=hooks)
    ```
"""

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from chatbot_fsm.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BEFORE = "before"
LEAVE = "leave"
ENTER = "enter"
AFTER = "after"

PHASES = (BEFORE, LEAVE, ENTER, AFTER)


@dataclass(frozen=True)
class TransitionContext:
    """Context passed to hook callbacks.

    Attributes:
        event: Name of the event being fired
        source: State the machine is leaving
        dest: State the machine is moving to
    """

    event: str
    source: str
    dest: str


HookCallback = Callable[[TransitionContext], Any]


@dataclass
class _HookRegistration:
    """Internal registration for a hook callback."""

    callback: HookCallback
    target: str | None = None  # None means global

    def matches(self, name: str) -> bool:
        return self.target is None or self.target == name


def resolve_callback(func_ref: str) -> HookCallback:
    """Resolve a ``"module.path:function"`` reference to a callable.

    Raises:
        ConfigurationError: If the reference is malformed or cannot be loaded.
    """
    module_path, sep, func_name = func_ref.strip().partition(":")
    if not sep:
        module_path, _, func_name = func_ref.strip().rpartition(".")
    if not module_path or not func_name:
        raise ConfigurationError(
            f"Invalid hook reference '{func_ref}'. "
            "Expected format: 'module.path:function_name'",
            context={"reference": func_ref},
        )

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import module '{module_path}' for hook '{func_ref}': {e}",
            context={"reference": func_ref},
        ) from e

    func = getattr(module, func_name, None)
    if not callable(func):
        raise ConfigurationError(
            f"Hook '{func_name}' not found or not callable in module '{module_path}'",
            context={"reference": func_ref},
        )
    return func


class MachineHooks:
    """Registry of transition lifecycle callbacks."""

    def __init__(self) -> None:
        self._hooks: Dict[str, List[_HookRegistration]] = {phase: [] for phase in PHASES}

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MachineHooks":
        """Create hooks from a configuration dict.

        Args:
            config: Mapping of phase name (``before``, ``leave``, ``enter``,
                ``after``) to a list of entries. Each entry is either a
                ``"module.path:function"`` string (global hook) or a dict with
                a ``function`` key and an optional ``event`` (for
                ``before``/``after``) or ``state`` (for ``leave``/``enter``).

        Returns:
            Configured MachineHooks instance

        Raises:
            ConfigurationError: If a phase is unknown or a hook can't be loaded.

        Example config:
            ```yaml
            hooks:
              enter:
                - "myapp.hooks:log_state"
                - function: "myapp.hooks:send_menu"
                  state: Hello
              before:
                - function: "myapp.hooks:check_access"
                  event: ShowBilling
            ```
        """
        hooks = cls()
        for phase, entries in config.items():
            if phase not in PHASES:
                raise ConfigurationError(
                    f"Unknown hook phase '{phase}'",
                    context={"phase": phase, "phases": list(PHASES)},
                )
            target_key = "event" if phase in (BEFORE, AFTER) else "state"
            for entry in entries or []:
                if isinstance(entry, str):
                    hooks.register(phase, resolve_callback(entry))
                elif isinstance(entry, dict) and entry.get("function"):
                    hooks.register(
                        phase, resolve_callback(entry["function"]), entry.get(target_key)
                    )
                else:
                    raise ConfigurationError(
                        f"Invalid {phase} hook entry: {entry!r}",
                        context={"phase": phase},
                    )
        return hooks

    def register(
        self, phase: str, callback: HookCallback, target: str | None = None
    ) -> "MachineHooks":
        """Register a callback for a phase.

        Args:
            phase: One of ``before``, ``leave``, ``enter``, ``after``
            callback: Function(TransitionContext)
            target: Event name (before/after) or state name (leave/enter)
                to limit the hook to; None registers a global hook

        Returns:
            Self for method chaining
        """
        if phase not in PHASES:
            raise ValueError(f"Unknown hook phase '{phase}'")
        self._hooks[phase].append(_HookRegistration(callback=callback, target=target))
        return self

    def on_before(self, callback: HookCallback, event: str | None = None) -> "MachineHooks":
        """Register a callback invoked before an event is applied."""
        return self.register(BEFORE, callback, event)

    def on_leave(self, callback: HookCallback, state: str | None = None) -> "MachineHooks":
        """Register a callback invoked when leaving a state."""
        return self.register(LEAVE, callback, state)

    def on_enter(self, callback: HookCallback, state: str | None = None) -> "MachineHooks":
        """Register a callback invoked after entering a state."""
        return self.register(ENTER, callback, state)

    def on_after(self, callback: HookCallback, event: str | None = None) -> "MachineHooks":
        """Register a callback invoked after an event was applied."""
        return self.register(AFTER, callback, event)

    def has_hooks(self, phase: str | None = None) -> bool:
        if phase is not None:
            return bool(self._hooks[phase])
        return any(self._hooks.values())

    def trigger(self, phase: str, context: TransitionContext) -> bool:
        """Run the callbacks registered for a phase.

        Event-phase hooks (before/after) match on ``context.event``;
        state-phase hooks match on ``context.source`` (leave) or
        ``context.dest`` (enter).

        Args:
            phase: Phase to trigger
            context: Transition being applied

        Returns:
            False if a callback returned ``False``, True otherwise. Remaining
            callbacks are skipped once one vetoes.
        """
        if phase in (BEFORE, AFTER):
            name = context.event
        elif phase == LEAVE:
            name = context.source
        else:
            name = context.dest

        for registration in self._hooks[phase]:
            if registration.matches(name) and registration.callback(context) is False:
                logger.debug(
                    "%s hook %r vetoed '%s' from '%s'",
                    phase, registration.callback, context.event, context.source,
                )
                return False
        return True
