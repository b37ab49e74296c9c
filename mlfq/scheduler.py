"""
MLFQ (Multi-Level Feedback Queue) 스케줄러

하나의 Blocking 큐와 우선순위별 CPU 큐들을 가지고, 매 틱마다 흐른 시뮬레이션
시간을 Blocking 큐와 가장 높은 우선순위의 비어 있지 않은 CPU 큐에 나눠준다.
- 퀀텀을 모두 쓰고도 버스트가 끝나지 않으면 한 단계 강등
- I/O가 끝나면 항상 최상위(Q0)로 복귀하되, 같은 틱에서는 I/O가 끝난 뒤에만 CPU 사용
- 한 틱에 서비스되는 CPU 큐는 하나뿐
"""

from typing import List, Dict, Optional, Tuple
from .process import Process, ProcessState, create_process_copy
from .queue import Queue
from .errors import InvalidInterruptError
from .scheduler_base import (
    PRIORITY_LEVELS, BASE_QUANTUM, QUANTUM_STEP, BLOCKING_QUANTUM, MAX_ITERATIONS,
    QueueType, SchedulerInterrupt, TurnOutcome, Turn, GanttEntry, SchedulerStats,
    SimulatedClock,
)


class MLFQScheduler:
    """
    MLFQ 스케줄러

    CPU 큐 리스트의 인덱스가 곧 우선순위 레벨이다 (0이 가장 높음).
    """

    def __init__(self, processes: Optional[List[Process]] = None,
                 priority_levels: int = PRIORITY_LEVELS,
                 base_quantum: int = BASE_QUANTUM,
                 quantum_step: int = QUANTUM_STEP,
                 blocking_quantum: int = BLOCKING_QUANTUM,
                 clock=None,
                 max_iterations: int = MAX_ITERATIONS,
                 name: str = "MLFQ"):
        """
        스케줄러 초기화

        Args:
            processes: 도착 시간에 맞춰 투입할 프로세스들 (복사본을 사용)
            priority_levels: CPU 큐 개수
            base_quantum: Q0의 퀀텀
            quantum_step: 레벨마다 늘어나는 퀀텀
            blocking_quantum: Blocking 큐의 퀀텀 (I/O 진행량 상한)
            clock: time 속성과 advance()를 가진 시계 (기본값 SimulatedClock)
            max_iterations: 무한 루프 방지용 최대 틱 수
            name: 결과에 표시될 이름
        """
        if priority_levels < 1:
            raise ValueError(f"우선순위 레벨은 1 이상이어야 합니다: {priority_levels}")
        if quantum_step < 0:
            raise ValueError(f"퀀텀 증가량은 0 이상이어야 합니다: {quantum_step}")

        self.name = name
        self.time_source = clock if clock is not None else SimulatedClock()
        self.start_time = self.time_source.time
        self.clock = self.start_time  # 마지막으로 관측한 시간
        self.max_iterations = max_iterations
        self.iterations = 0
        self.timed_out = False

        self.blocking_queue = Queue(blocking_quantum, -1, QueueType.BLOCKING_QUEUE)
        self.running_queues: List[Queue] = [
            Queue(base_quantum + level * quantum_step, level, QueueType.CPU_QUEUE)
            for level in range(priority_levels)
        ]
        for level, queue in enumerate(self.running_queues):
            assert queue.get_priority_level() == level

        self.processes: List[Process] = []
        self.pending_arrivals: List[Process] = []
        self.terminated_processes: List[Process] = []
        self.previous_pid: Optional[int] = None

        # Gantt Chart, 통계, 이벤트 로그
        self.gantt_chart: List[GanttEntry] = []
        self.stats = SchedulerStats()
        self.event_log: List[str] = []
        self.level_history: Dict[int, List[Tuple[int, int]]] = {}
        self.last_turns: List[Turn] = []

        for process in processes or []:
            self.submit(create_process_copy(process))

    @property
    def max_level(self) -> int:
        return len(self.running_queues) - 1

    def log_event(self, message: str, time: Optional[int] = None):
        """이벤트 로그 기록"""
        if time is None:
            time = self.clock
        self.event_log.append(f"[T={time:3d}] {message}")

    def add_to_gantt_chart(self, pid: int, start: int, end: int, state: ProcessState, level: int):
        """Gantt Chart에 엔트리 추가"""
        if start < end:  # 유효한 시간 구간만 추가
            self.gantt_chart.append(GanttEntry(pid, start, end, state, level))

    def _record_level(self, process: Process):
        self.level_history.setdefault(process.pid, []).append((self.clock, process.queue_level))

    def get_cpu_queue(self, priority_level: int) -> Queue:
        return self.running_queues[priority_level]

    def get_blocking_queue(self) -> Queue:
        return self.blocking_queue

    def submit(self, process: Process):
        """도착 시간이 되면 Q0에 투입할 프로세스 등록"""
        self.processes.append(process)
        self.pending_arrivals.append(process)
        self.pending_arrivals.sort(key=lambda p: (p.arrival_time, p.pid))

    def add_new_process(self, process: Process):
        """새 프로세스는 항상 최상위 큐(Q0)로 들어간다"""
        self.running_queues[0].enqueue(process)
        if not any(p is process for p in self.processes):
            self.processes.append(process)
        process.time_slice_used = 0
        process.state = ProcessState.READY
        self._record_level(process)
        self.log_event(f"P{process.pid} arrived → Q0")

    def _admit_arrivals(self, time: int):
        while self.pending_arrivals and self.pending_arrivals[0].arrival_time <= time:
            self.add_new_process(self.pending_arrivals.pop(0))

    def all_queues_empty(self) -> bool:
        return all(queue.is_empty() for queue in self.running_queues) and self.blocking_queue.is_empty()

    def is_simulation_complete(self) -> bool:
        """시뮬레이션 완료 여부 확인"""
        return self.all_queues_empty() and not self.pending_arrivals

    def handle_interrupt(self, queue: Queue, process: Process, interrupt: SchedulerInterrupt):
        """
        인터럽트 처리: 큐 사이의 프로세스 이동은 여기서만 일어난다

        Args:
            queue: 인터럽트를 보낸 큐
            process: 이동할 프로세스 (이미 queue에서 빠진 상태)
            interrupt: 인터럽트 종류
        """
        if not isinstance(interrupt, SchedulerInterrupt):
            self.log_event(f"WARNING: invalid interrupt {interrupt!r} for P{process.pid}")
            raise InvalidInterruptError(f"알 수 없는 인터럽트입니다: {interrupt!r}")

        if interrupt == SchedulerInterrupt.PROCESS_BLOCKED:
            self.blocking_queue.enqueue(process)
            process.state = ProcessState.WAITING
            process.time_slice_used = 0
            self.stats.blocks += 1
            self.log_event(f"P{process.pid} → Blocking Queue (I/O={process.remaining_burst_time})")

        elif interrupt == SchedulerInterrupt.PROCESS_READY:
            self.running_queues[0].enqueue(process)
            process.state = ProcessState.READY
            process.time_slice_used = 0
            self.stats.promotions += 1
            self.log_event(f"P{process.pid} I/O completed → Q0")

        elif interrupt == SchedulerInterrupt.LOWER_PRIORITY:
            if queue.get_queue_type() != QueueType.CPU_QUEUE:
                self.log_event(f"WARNING: LOWER_PRIORITY from {queue} for P{process.pid}")
                raise InvalidInterruptError("LOWER_PRIORITY는 CPU 큐에서만 보낼 수 있습니다")

            current_level = queue.get_priority_level()
            level = min(self.max_level, current_level + 1)
            self.running_queues[level].enqueue(process)
            process.state = ProcessState.READY
            process.time_slice_used = 0
            if level != current_level:
                process.demotions += 1
                self.stats.demotions += 1
                self.log_event(f"P{process.pid} demoted Q{current_level} → Q{level}")
            else:
                self.log_event(f"P{process.pid} quantum expired, stays in Q{level}")

        self._record_level(process)

    def terminate_process(self, process: Process, finish_time: int):
        """프로세스 종료 처리"""
        process.state = ProcessState.TERMINATED
        process.finish_time = finish_time
        process.turnaround_time = finish_time - process.arrival_time
        process.waiting_time = max(0, process.turnaround_time
                                   - process.get_total_burst_time()
                                   - process.get_total_io_time())

        self.terminated_processes.append(process)
        self.log_event(f"P{process.pid} → Terminated (WT={process.waiting_time}, "
                       f"TT={process.turnaround_time})", finish_time)

    def _apply_turn(self, turn: Turn, start: int):
        """큐 작업 결과를 기록하고 인터럽트를 라우팅"""
        process = turn.process
        end = start + turn.consumed
        self.last_turns.append(turn)

        if turn.queue.get_queue_type() == QueueType.CPU_QUEUE:
            self.stats.cpu_busy_time += turn.consumed
            if self.previous_pid is not None and self.previous_pid != process.pid:
                self.stats.context_switches += 1
                self.log_event(f"Context Switch: P{self.previous_pid} → P{process.pid}", start)
            self.previous_pid = process.pid

            if process.start_time is None and turn.consumed > 0:
                process.start_time = start
                process.response_time = start - process.arrival_time

            self.add_to_gantt_chart(process.pid, start, end, ProcessState.RUNNING,
                                    turn.queue.get_priority_level())
            if turn.outcome == TurnOutcome.REQUEUED:
                process.state = ProcessState.READY
        else:
            self.stats.io_busy_time += turn.consumed
            self.add_to_gantt_chart(process.pid, start, end, ProcessState.WAITING, -1)

        if turn.outcome == TurnOutcome.TERMINATED:
            self.terminate_process(process, end)
        elif turn.interrupt is not None:
            interrupt = turn.interrupt
            self.handle_interrupt(interrupt.queue, interrupt.process, interrupt.kind)

    def execute_one_step(self) -> bool:
        """
        한 틱 실행

        Returns:
            시뮬레이션 완료 여부
        """
        if self.is_simulation_complete():
            return True

        tick_start = self.clock
        self._admit_arrivals(tick_start)

        now = self.time_source.advance()
        time_slice = now - tick_start
        self.clock = now
        self.iterations += 1
        self.last_turns = []

        io_process, io_end = None, tick_start
        if not self.blocking_queue.is_empty():
            io_turn = self.blocking_queue.do_blocking_work(time_slice)
            self._apply_turn(io_turn, tick_start)
            io_process, io_end = io_turn.process, tick_start + io_turn.consumed

        for queue in self.running_queues:
            if queue.is_empty():
                continue
            # 이번 틱에 I/O를 마친 프로세스는 I/O가 끝난 시점부터만 CPU를 쓴다
            start = io_end if queue.peek() is io_process else tick_start
            if start < now:
                self._apply_turn(queue.do_cpu_work(now - start), start)
                break
        else:
            # CPU 유휴 상태
            self.add_to_gantt_chart(-1, tick_start, now, ProcessState.READY, -1)

        if self.iterations >= self.max_iterations and not self.is_simulation_complete():
            self.timed_out = True
            self.log_event("WARNING: Simulation timeout")
            return True

        return self.is_simulation_complete()

    def run(self, verbose: bool = False) -> Dict:
        """
        모든 큐가 빌 때까지 스케줄링 시뮬레이션 실행

        Args:
            verbose: 상세 로그 출력 여부

        Returns:
            시뮬레이션 결과 딕셔너리
        """
        self.log_event(f"===== {self.name} Scheduling Started =====")

        while not self.execute_one_step():
            pass

        self.log_event(f"===== {self.name} Scheduling Completed =====")

        if verbose:
            for log in self.event_log:
                print(log)

        return self.get_results()

    def update_statistics(self):
        """최종 통계 업데이트"""
        self.stats.total_simulation_time = self.clock - self.start_time
        self.stats.process_count = len(self.terminated_processes)
        self.stats.total_waiting_time = sum(p.waiting_time for p in self.terminated_processes)
        self.stats.total_turnaround_time = sum(p.turnaround_time for p in self.terminated_processes)
        self.stats.total_response_time = sum(p.response_time for p in self.terminated_processes
                                             if p.response_time is not None)

    def get_current_snapshot(self) -> Dict:
        """
        현재 시뮬레이션 상태 스냅샷 반환 (실시간 뷰어용)
        """
        return {
            'time': self.clock,
            'cpu_queues': [list(queue) for queue in self.running_queues],
            'blocking_queue': list(self.blocking_queue),
            'pending': list(self.pending_arrivals),
            'terminated': list(self.terminated_processes),
            'context_switches': self.stats.context_switches,
            'cpu_busy_time': self.stats.cpu_busy_time,
            'latest_gantt_entry': self.gantt_chart[-1] if self.gantt_chart else None,
            'latest_log': self.event_log[-1] if self.event_log else ""
        }

    def get_config(self) -> Dict:
        return {
            'priority_levels': len(self.running_queues),
            'quanta': [queue.get_quantum() for queue in self.running_queues],
            'blocking_quantum': self.blocking_queue.get_quantum(),
        }

    def get_results(self) -> Dict:
        """
        시뮬레이션 결과 반환

        Returns:
            결과 딕셔너리 (통계, Gantt Chart, 로그 등)
        """
        self.update_statistics()

        return {
            'algorithm': self.name,
            'config': self.get_config(),
            'statistics': self.stats.calculate_averages(),
            'gantt_chart': self.gantt_chart,
            'event_log': self.event_log,
            'processes': self.terminated_processes,
            'level_history': self.level_history,
            'timed_out': self.timed_out
        }
