"""
Top-level package for the Skill Swap API.

All functionality lives in submodules under ``app``; this marker lets
them be imported with fully qualified names such as
``skill_swap_api.app.main``.
"""

__all__ = []
