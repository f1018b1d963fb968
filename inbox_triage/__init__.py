"""
inbox_triage package

Keyboard-driven triage of a Gmail inbox: load, group by sender, label.
"""

__all__ = [
    "config",
    "logging_config",
    "models",
    "normalizer",
    "gmail_client",
    "triage_engine",
    "screen",
    "cli",
]
