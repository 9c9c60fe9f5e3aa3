"""
Agent teams built on the state-graph engine.

Modules:
- state: TypedDict channel schemas for each team
- builder: supervisor/worker star topology
- research: Brainstormer, Search and WebScraper under a topic-aware supervisor
- document: DocWriter, NoteTaker and ChartGenerator over a shared workspace
- hierarchy: top-level supervisor with both teams embedded as nodes
"""
