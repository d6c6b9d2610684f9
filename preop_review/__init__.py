"""FastAPI application package for the MyPreOp questionnaire review service.

Administrators upload a master questionnaire as a MyPreOp CSV, clone it into
trust instances, and every displayed question carries a readable explanation
of its EnableWhen logic. The parsing and translation core lives in
`preop_review/logic/`, route handlers in `preop_review/routes/`.
"""

from __future__ import annotations

from preop_review.main import create_app

__all__ = ["create_app"]
