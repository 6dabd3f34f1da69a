"""
PhantomBuster LinkedIn Profile Relay.

Core components:
- tools: LinkedIn search URL builder, PhantomBuster API client
- agents: Job launcher (staggered/parallel with backoff) and status poller
- store: In-memory batch table
- utils: Result normalization, deduplication and merging
- api: FastAPI application and routes
"""
