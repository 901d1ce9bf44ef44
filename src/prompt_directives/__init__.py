"""
Prompt Directives - Declarative metadata and rules embedded in prompt text.

Prompts carry `{{// @keyword value }}` blocks that describe them (tooltips,
tags, authorship) and constrain them (dependencies, exclusivity, category
limits, message-count triggers). This package parses those blocks, checks
what enabling a prompt would break, fixes it where the prompt allows, and
flips prompts as a conversation grows.
"""

__version__ = "1.0.0"
