"""
스케줄러 공통 정의: 설정 상수, 인터럽트, 통계, 시뮬레이션 시계
"""

from typing import Optional, TYPE_CHECKING
from dataclasses import dataclass
from enum import Enum
from .process import Process, ProcessState

if TYPE_CHECKING:
    from .queue import Queue

# 기본 설정값 (시간 단위)
PRIORITY_LEVELS = 3
BASE_QUANTUM = 10  # Q0 퀀텀
QUANTUM_STEP = 20  # 레벨마다 증가하는 퀀텀 (10, 30, 50)
BLOCKING_QUANTUM = 50
DEFAULT_TIME_SLICE = 10  # 한 틱마다 흐르는 시뮬레이션 시간

# 무한 루프 방지
MAX_ITERATIONS = 100000


class QueueType(Enum):
    """큐 타입"""
    CPU_QUEUE = "CPU"
    BLOCKING_QUEUE = "Blocking"


class SchedulerInterrupt(Enum):
    """큐가 스케줄러에게 보내는 인터럽트"""
    PROCESS_BLOCKED = "Process Blocked"  # CPU 버스트 완료, I/O 대기
    PROCESS_READY = "Process Ready"  # I/O 완료, CPU 대기
    LOWER_PRIORITY = "Lower Priority"  # 퀀텀 소진


class TurnOutcome(Enum):
    """한 번의 작업 턴 결과"""
    TERMINATED = "Terminated"
    BLOCKED = "Blocked"
    READY = "Ready"
    DEMOTED = "Demoted"
    REQUEUED = "Requeued"


@dataclass(frozen=True)
class Interrupt:
    """큐 작업이 반환하는 인터럽트 레코드"""
    kind: SchedulerInterrupt
    queue: "Queue"
    process: Process


@dataclass(frozen=True)
class Turn:
    """큐가 한 프로세스에게 시간을 준 결과"""
    queue: "Queue"
    process: Process
    granted: int
    consumed: int
    outcome: TurnOutcome
    interrupt: Optional[Interrupt] = None


@dataclass
class GanttEntry:
    """Gantt Chart 엔트리"""
    pid: int
    start_time: int
    end_time: int
    state: ProcessState  # Running, Waiting 등
    queue_level: int = 0  # -1: Blocking 큐


class SchedulerStats:
    """스케줄링 통계"""

    def __init__(self):
        self.total_waiting_time = 0
        self.total_turnaround_time = 0
        self.total_response_time = 0
        self.context_switches = 0
        self.cpu_busy_time = 0
        self.io_busy_time = 0
        self.total_simulation_time = 0
        self.process_count = 0
        self.demotions = 0
        self.promotions = 0
        self.blocks = 0

    def calculate_averages(self):
        """평균 계산"""
        if self.process_count == 0:
            return {
                'avg_waiting_time': 0,
                'avg_turnaround_time': 0,
                'avg_response_time': 0,
                'cpu_utilization': 0,
                'context_switches': 0,
                'demotions': 0,
                'promotions': 0
            }

        return {
            'avg_waiting_time': self.total_waiting_time / self.process_count,
            'avg_turnaround_time': self.total_turnaround_time / self.process_count,
            'avg_response_time': self.total_response_time / self.process_count,
            'cpu_utilization': (self.cpu_busy_time / self.total_simulation_time * 100)
                               if self.total_simulation_time > 0 else 0,
            'context_switches': self.context_switches,
            'demotions': self.demotions,
            'promotions': self.promotions
        }


class SimulatedClock:
    """
    시뮬레이션 시계
    advance()를 호출할 때마다 tick만큼 시간이 흐른다
    """

    def __init__(self, start: int = 0, tick: int = DEFAULT_TIME_SLICE):
        if tick < 0:
            raise ValueError(f"tick은 0 이상이어야 합니다: {tick}")
        self.time = start
        self.tick = tick

    def advance(self) -> int:
        self.time += self.tick
        return self.time
