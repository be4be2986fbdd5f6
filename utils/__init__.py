"""
Utility modules for the group availability scheduler
"""

from .logger import SchedulerLogger

__all__ = ['SchedulerLogger']
