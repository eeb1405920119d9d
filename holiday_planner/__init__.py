"""
AI service for the family holiday planner.

This package contains:
- shared/: Common infrastructure (settings, LLM provider, logging, errors, contracts)
- cache/: Cache key derivation, the persistent result cache and the bypass policy
- persistence/: SQLAlchemy models and the user-scoped trip repository
- operations/: One definition per AI endpoint (validation, context, prompts, parsing)
- graph/: LangGraph request pipeline shared by every operation
- api/: FastAPI routers and request dependencies
"""

from holiday_planner.graph.build import create_ai_request_graph
from holiday_planner.cache.keys import derive_cache_key

__all__ = ["create_ai_request_graph", "derive_cache_key"]
