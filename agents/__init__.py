"""
Agent package for the hierarchical agent teams.

Modules:
- supervisor: decision-oracle supervisor node and its closed routing contract
- workers: tool-calling, search-grounded and brainstorming worker nodes
- models: lazily created Gemini chat models
"""
