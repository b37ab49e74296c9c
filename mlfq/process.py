"""
프로세스 및 PCB (Process Control Block) 관리 모듈
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
from copy import deepcopy


class ProcessState(Enum):
    """프로세스 상태"""
    NEW = "New"
    READY = "Ready"
    RUNNING = "Running"
    WAITING = "Waiting"
    TERMINATED = "Terminated"


@dataclass(frozen=True)
class BurstResult:
    """한 번의 작업 요청 결과"""
    consumed: int
    burst_finished: bool
    sequence_exhausted: bool


class Process:
    """
    프로세스 제어 블록 (PCB)
    CPU/I/O 버스트 패턴을 가지고, 스케줄러가 요청한 만큼 현재 버스트를 소비한다
    """

    def __init__(self, pid: int, execution_pattern: List[int], arrival_time: int = 0):
        """
        프로세스 초기화

        Args:
            pid: 프로세스 ID
            execution_pattern: 실행 패턴 [CPU_burst1, IO_burst1, CPU_burst2, ...]
            arrival_time: 도착 시간 (시뮬레이션 시간)
        """
        if not execution_pattern:
            raise ValueError("실행 패턴이 비어있습니다")
        if any(t <= 0 for t in execution_pattern):
            raise ValueError("모든 버스트 시간은 양수여야 합니다")
        if arrival_time < 0:
            raise ValueError(f"도착 시간은 0 이상이어야 합니다: {arrival_time}")

        self.pid = pid
        self.arrival_time = arrival_time
        self.execution_pattern = list(execution_pattern)

        # 실행 상태 추적
        self.state = ProcessState.NEW
        self.current_burst_index = 0  # 현재 처리 중인 버스트 인덱스
        self.remaining_burst_time = self.execution_pattern[0]

        # MLFQ용 큐 레벨 (-1: Blocking 큐)
        self.queue_level = 0
        self.time_slice_used = 0  # 현재 레벨에서 사용한 퀀텀

        # 통계 정보
        self.start_time: Optional[int] = None  # 첫 실행 시간
        self.finish_time: Optional[int] = None  # 완료 시간
        self.response_time: Optional[int] = None  # 응답 시간
        self.waiting_time = 0
        self.turnaround_time = 0
        self.cpu_time = 0  # 실제로 소비한 CPU 시간
        self.io_time = 0  # 실제로 소비한 I/O 시간
        self.demotions = 0

    def get_total_burst_time(self) -> int:
        """총 CPU 버스트 시간 계산 (I/O 제외)"""
        return sum(self.execution_pattern[i] for i in range(0, len(self.execution_pattern), 2))

    def get_total_io_time(self) -> int:
        """총 I/O 버스트 시간 계산"""
        return sum(self.execution_pattern[i] for i in range(1, len(self.execution_pattern), 2))

    def get_remaining_time(self) -> int:
        """남은 전체 작업량 (현재 버스트 잔여 + 이후 버스트)"""
        if self.is_completed():
            return 0
        return self.remaining_burst_time + sum(self.execution_pattern[self.current_burst_index + 1:])

    def is_cpu_burst(self) -> bool:
        """현재 버스트가 CPU 버스트인지 확인"""
        return not self.is_completed() and self.current_burst_index % 2 == 0

    def is_io_burst(self) -> bool:
        """현재 버스트가 I/O 버스트인지 확인"""
        return not self.is_completed() and self.current_burst_index % 2 == 1

    def is_completed(self) -> bool:
        """프로세스가 완료되었는지 확인"""
        return self.current_burst_index >= len(self.execution_pattern)

    def consume_cpu(self, units: int) -> BurstResult:
        """
        현재 CPU 버스트를 최대 units만큼 소비

        Args:
            units: 허용된 시간 단위

        Returns:
            실제 소비량과 버스트/패턴 완료 여부
        """
        if not self.is_cpu_burst():
            raise ValueError("CPU 버스트가 아닌 상태에서는 실행할 수 없습니다.")
        result = self._consume(units)
        self.cpu_time += result.consumed
        return result

    def consume_io(self, units: int) -> BurstResult:
        """현재 I/O 버스트를 최대 units만큼 소비"""
        if not self.is_io_burst():
            raise ValueError("I/O 버스트가 아닌 상태에서는 I/O 작업을 할 수 없습니다.")
        result = self._consume(units)
        self.io_time += result.consumed
        return result

    def _consume(self, units: int) -> BurstResult:
        if units < 0:
            raise ValueError(f"시간 단위는 0 이상이어야 합니다: {units}")

        consumed = min(units, self.remaining_burst_time)
        self.remaining_burst_time -= consumed

        finished = self.remaining_burst_time == 0
        if finished:
            self.complete_current_burst()
        return BurstResult(consumed, finished, self.is_completed())

    def complete_current_burst(self):
        """현재 버스트 완료 처리 및 다음 버스트로 이동"""
        self.current_burst_index += 1

        if self.current_burst_index < len(self.execution_pattern):
            self.remaining_burst_time = self.execution_pattern[self.current_burst_index]
        else:
            # 모든 버스트 완료
            self.state = ProcessState.TERMINATED
            self.remaining_burst_time = 0

    def __repr__(self):
        return f"P{self.pid}[{self.state.value}]"

    def __str__(self):
        return f"Process {self.pid}: State={self.state.value}, Level={self.queue_level}, " \
               f"Remaining={self.get_remaining_time()}"


def create_process_copy(process: Process) -> Process:
    """
    프로세스의 깊은 복사본 생성
    각 시뮬레이션을 독립적으로 수행하기 위함
    """
    return deepcopy(process)
