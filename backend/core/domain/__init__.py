"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF handler translating those exceptions into responses.
notifications      Authority e-mail notifier used to gate the "Email Sent" stage.
transactions       ``select_for_update`` + compare-and-set helpers.
access             ``Actor`` identity passed from views into services.

Usage from any app::

    from core.domain.access import Actor
    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.notifications import AuthorityNotifier
    from core.domain.transactions import compare_and_set, lock_for_update
"""
