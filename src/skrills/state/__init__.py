"""
Persisted state for Skrills: pins, auto-pin flag, history, runtime overrides.

Every store is a small JSON file in the state directory (``~/.codex`` by
default). A missing or malformed file reads as the store's empty value.
"""

from skrills.state.history import (
    HistoryEntry,
    HistoryStore,
    append_entry,
    auto_pin_from_history,
    auto_pin_window,
    recent,
)
from skrills.state.paths import (
    agents_manifest_file,
    auto_pin_file,
    history_file,
    home_dir,
    pinned_file,
    runtime_overrides_file,
    state_dir,
)
from skrills.state.pins import (
    AutoPinFlag,
    PinStore,
    effective_pins,
    parse_env_pins,
)
from skrills.state.runtime import RuntimeOverrides, RuntimeOverridesCache

__all__ = [
    # History
    "HistoryEntry",
    "HistoryStore",
    "append_entry",
    "auto_pin_from_history",
    "auto_pin_window",
    "recent",
    # Pins
    "PinStore",
    "AutoPinFlag",
    "effective_pins",
    "parse_env_pins",
    # Runtime overrides
    "RuntimeOverrides",
    "RuntimeOverridesCache",
    # Paths
    "home_dir",
    "state_dir",
    "pinned_file",
    "auto_pin_file",
    "history_file",
    "runtime_overrides_file",
    "agents_manifest_file",
]
