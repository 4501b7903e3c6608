"""
Reports package for HostAlloc Engine.

Provides the plain-text operator summary of an allocation plan.
"""

from .formatters import PlanReporter

__all__ = ["PlanReporter"]
