"""
Leads feature package.

Everything that turns synced email into lead records lives here: domain
models, repositories, the recency / detection / follow-up pipeline, the
text generation capability, the HTTP router and the background job.
"""

from .api.router import router as leads_router  # noqa: F401
