"""
Supadata Command Dispatcher

Exposes Supadata's remote content-extraction operations (page scrape,
site map, multi-page crawl, transcript extraction) as named,
schema-validated commands with a uniform reply envelope.

Features:
- Static command table with argument validation and defaults
- Bounded exponential backoff for rate-limited remote calls
- Uniform reply envelopes for immediate results and asynchronous jobs
- Stateless job handling: status checks always go to the remote API
- Configurable via YAML/JSON and environment variables
"""

__version__ = "1.0.0"
