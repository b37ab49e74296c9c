"""
MLFQ 스케줄러 시뮬레이터 핵심 모듈
"""

from .process import Process, ProcessState, BurstResult, create_process_copy
from .errors import (SchedulerError, EmptyQueueError,
                     InvalidQueueOperationError, InvalidInterruptError)
from .scheduler_base import (QueueType, SchedulerInterrupt, TurnOutcome, Interrupt, Turn,
                             GanttEntry, SchedulerStats, SimulatedClock)
from .queue import Queue
from .scheduler import MLFQScheduler

__all__ = [
    'Process',
    'ProcessState',
    'BurstResult',
    'create_process_copy',
    'SchedulerError',
    'EmptyQueueError',
    'InvalidQueueOperationError',
    'InvalidInterruptError',
    'QueueType',
    'SchedulerInterrupt',
    'TurnOutcome',
    'Interrupt',
    'Turn',
    'GanttEntry',
    'SchedulerStats',
    'SimulatedClock',
    'Queue',
    'MLFQScheduler'
]
