"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Services take the request's ``Repos`` set, apply role and ownership rules,
and translate not-found results into HTTP exceptions. Each module exposes a
module-level singleton (e.g. ``form_service``).
"""
