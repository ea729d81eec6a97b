"""Generic shared utilities module.

This module contains domain-agnostic helpers used by the deployment workflow:
logging, YAML loading and ``config.env`` parsing.
"""
