"""
MLFQ 큐 모듈

큐는 자신이 가진 프로세스에게 시간을 나눠주고, 다른 큐로 옮겨야 하는
프로세스는 인터럽트 레코드로 반환한다. 큐끼리, 그리고 큐와 스케줄러 사이에는
참조가 없다.
"""

from collections import deque
from typing import Deque, Iterator
from .process import Process
from .errors import EmptyQueueError, InvalidQueueOperationError
from .scheduler_base import QueueType, SchedulerInterrupt, TurnOutcome, Interrupt, Turn


class Queue:
    """
    FIFO 프로세스 큐

    quantum, priority_level, queue_type은 생성 후 바뀌지 않는다.
    """

    def __init__(self, quantum: int, priority_level: int, queue_type: QueueType):
        """
        Args:
            quantum: 한 턴에 허용되는 최대 시간
            priority_level: 우선순위 레벨 (0이 가장 높음, Blocking 큐는 -1)
            queue_type: CPU_QUEUE 또는 BLOCKING_QUEUE
        """
        if quantum <= 0:
            raise ValueError(f"퀀텀은 양수여야 합니다: {quantum}")
        self._quantum = quantum
        self._priority_level = priority_level
        self._queue_type = queue_type
        self.processes: Deque[Process] = deque()

    @property
    def quantum(self) -> int:
        return self._quantum

    @property
    def priority_level(self) -> int:
        return self._priority_level

    @property
    def queue_type(self) -> QueueType:
        return self._queue_type

    def get_queue_type(self) -> QueueType:
        return self._queue_type

    def get_priority_level(self) -> int:
        return self._priority_level

    def get_quantum(self) -> int:
        return self._quantum

    def is_empty(self) -> bool:
        return not self.processes

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self) -> Iterator[Process]:
        return iter(list(self.processes))

    def enqueue(self, process: Process):
        """프로세스를 큐의 꼬리에 추가"""
        if self._queue_type == QueueType.CPU_QUEUE and not process.is_cpu_burst():
            raise InvalidQueueOperationError(
                f"P{process.pid}는 CPU 버스트 상태가 아니므로 CPU 큐에 넣을 수 없습니다")
        if self._queue_type == QueueType.BLOCKING_QUEUE and not process.is_io_burst():
            raise InvalidQueueOperationError(
                f"P{process.pid}는 I/O 버스트 상태가 아니므로 Blocking 큐에 넣을 수 없습니다")

        process.queue_level = self._priority_level
        self.processes.append(process)

    def dequeue_front(self) -> Process:
        """큐의 머리 프로세스를 꺼냄"""
        if not self.processes:
            raise EmptyQueueError(f"{self} 가 비어 있습니다")
        return self.processes.popleft()

    def peek(self) -> Process:
        """꺼내지 않고 머리 프로세스를 반환"""
        if not self.processes:
            raise EmptyQueueError(f"{self} 가 비어 있습니다")
        return self.processes[0]

    def do_cpu_work(self, time_slice: int) -> Turn:
        """
        머리 프로세스에게 CPU 시간을 할당

        남은 퀀텀과 time_slice 중 작은 값만큼 허용한다. 이번 레벨에서 퀀텀을
        모두 쓰고도 버스트가 끝나지 않은 프로세스만 강등 인터럽트를 받는다.

        Args:
            time_slice: 이번 틱에 흐른 시뮬레이션 시간

        Returns:
            작업 결과 (다른 큐로 옮겨야 하면 interrupt 포함)
        """
        if self._queue_type != QueueType.CPU_QUEUE:
            raise InvalidQueueOperationError("Blocking 큐에서는 CPU 작업을 할 수 없습니다")

        process = self.dequeue_front()
        granted = max(0, min(self._quantum - process.time_slice_used, time_slice))
        result = process.consume_cpu(granted)
        process.time_slice_used += result.consumed

        if result.burst_finished:
            process.time_slice_used = 0
            if result.sequence_exhausted:
                return Turn(self, process, granted, result.consumed, TurnOutcome.TERMINATED)
            return Turn(self, process, granted, result.consumed, TurnOutcome.BLOCKED,
                        Interrupt(SchedulerInterrupt.PROCESS_BLOCKED, self, process))

        if process.time_slice_used >= self._quantum:
            process.time_slice_used = 0
            return Turn(self, process, granted, result.consumed, TurnOutcome.DEMOTED,
                        Interrupt(SchedulerInterrupt.LOWER_PRIORITY, self, process))

        # 퀀텀이 남았으면 같은 레벨의 꼬리로
        self.processes.append(process)
        return Turn(self, process, granted, result.consumed, TurnOutcome.REQUEUED)

    def do_blocking_work(self, time_slice: int) -> Turn:
        """
        머리 프로세스의 I/O 버스트를 진행

        Blocking 큐의 퀀텀은 time_slice에 대한 추가 상한으로 쓰인다.
        I/O가 끝나지 않은 프로세스는 인터럽트 없이 같은 큐의 꼬리로 돌아간다.
        """
        if self._queue_type != QueueType.BLOCKING_QUEUE:
            raise InvalidQueueOperationError("CPU 큐에서는 Blocking 작업을 할 수 없습니다")

        process = self.dequeue_front()
        granted = max(0, min(self._quantum, time_slice))
        result = process.consume_io(granted)

        if not result.burst_finished:
            self.processes.append(process)
            return Turn(self, process, granted, result.consumed, TurnOutcome.REQUEUED)

        if result.sequence_exhausted:
            return Turn(self, process, granted, result.consumed, TurnOutcome.TERMINATED)
        return Turn(self, process, granted, result.consumed, TurnOutcome.READY,
                    Interrupt(SchedulerInterrupt.PROCESS_READY, self, process))

    def __repr__(self):
        if self._queue_type == QueueType.BLOCKING_QUEUE:
            return f"BlockingQueue(quantum={self._quantum}, size={len(self.processes)})"
        return f"Q{self._priority_level}(quantum={self._quantum}, size={len(self.processes)})"
