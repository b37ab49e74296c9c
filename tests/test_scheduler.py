import pytest

from mlfq.process import Process, ProcessState
from mlfq.scheduler import MLFQScheduler
from mlfq.errors import InvalidInterruptError, InvalidQueueOperationError
from mlfq.scheduler_base import QueueType, SchedulerInterrupt, TurnOutcome, SimulatedClock


def mixed_workload():
    return [
        Process(1, [25]),
        Process(2, [5, 20, 5]),
        Process(3, [80], arrival_time=10),
        Process(4, [8, 30, 8, 30, 8], arrival_time=20),
        Process(5, [45, 10, 15], arrival_time=40),
        Process(6, [3, 3, 3, 3, 3], arrival_time=5),
    ]


def cpu_turns(scheduler):
    return [t for t in scheduler.last_turns if t.queue.get_queue_type() == QueueType.CPU_QUEUE]


def lowest_non_empty_level(scheduler):
    for level, queue in enumerate(scheduler.running_queues):
        if not queue.is_empty():
            return level
    return None


def test_default_queue_configuration():
    s = MLFQScheduler()
    assert [s.get_cpu_queue(i).get_quantum() for i in range(3)] == [10, 30, 50]
    assert [s.get_cpu_queue(i).get_priority_level() for i in range(3)] == [0, 1, 2]
    assert s.get_blocking_queue().get_queue_type() == QueueType.BLOCKING_QUEUE
    assert s.get_blocking_queue().get_quantum() == 50
    assert s.all_queues_empty()


def test_custom_configuration():
    s = MLFQScheduler(priority_levels=4, base_quantum=5, quantum_step=5, blocking_quantum=20)
    assert s.get_config() == {
        'priority_levels': 4,
        'quanta': [5, 10, 15, 20],
        'blocking_quantum': 20,
    }


def test_invalid_configuration():
    with pytest.raises(ValueError):
        MLFQScheduler(priority_levels=0)
    with pytest.raises(ValueError):
        MLFQScheduler(base_quantum=0)


def test_new_process_enters_top_queue(make_scheduler):
    s = make_scheduler()
    p = Process(1, [25])
    s.add_new_process(p)

    assert list(s.get_cpu_queue(0)) == [p]
    assert p.state == ProcessState.READY
    assert not s.all_queues_empty()


def test_cpu_hog_demoted_once_then_finishes(make_scheduler):
    s = make_scheduler(tick=30)
    p = Process(1, [25])
    s.add_new_process(p)

    assert s.execute_one_step() is False
    assert list(s.get_cpu_queue(1)) == [p]
    assert p.remaining_burst_time == 15

    assert s.execute_one_step() is True
    assert s.all_queues_empty()
    assert p.state == ProcessState.TERMINATED
    assert p.finish_time == 45
    assert p.demotions == 1
    assert p.waiting_time == 20


def test_io_process_blocks_and_returns_to_top(make_scheduler):
    s = make_scheduler(tick=10)
    q = Process(2, [5, 20, 5])
    s.add_new_process(q)

    s.execute_one_step()
    assert list(s.get_blocking_queue()) == [q]
    assert q.state == ProcessState.WAITING

    s.execute_one_step()
    assert list(s.get_blocking_queue()) == [q]
    assert q.remaining_burst_time == 10

    # I/O가 틱 전체를 썼으므로 CPU는 다음 틱부터
    assert s.execute_one_step() is False
    assert list(s.get_cpu_queue(0)) == [q]
    assert q.remaining_burst_time == 5

    assert s.execute_one_step() is True
    assert q.finish_time == 35
    assert q.turnaround_time >= q.get_total_burst_time() + q.get_total_io_time()
    assert q.demotions == 0
    assert s.level_history[2] == [(0, 0), (10, -1), (30, 0)]
    assert s.stats.blocks == 1
    assert s.stats.promotions == 1
    assert [(e.pid, e.start_time, e.end_time) for e in s.gantt_chart if e.pid == 2] == [
        (2, 0, 5), (2, 10, 20), (2, 20, 30), (2, 30, 35)
    ]


def test_cpu_turn_after_io_uses_rest_of_tick(make_scheduler):
    s = make_scheduler(tick=10)
    p = Process(1, [5, 4, 20])
    s.add_new_process(p)

    s.execute_one_step()
    assert list(s.get_blocking_queue()) == [p]

    s.execute_one_step()
    turns = cpu_turns(s)
    assert len(turns) == 1
    assert turns[0].process is p
    assert turns[0].granted == 6
    assert [(e.start_time, e.end_time, e.state) for e in s.gantt_chart[-2:]] == [
        (10, 14, ProcessState.WAITING), (14, 20, ProcessState.RUNNING)
    ]


def test_io_completion_resets_priority_of_demoted_process(make_scheduler):
    s = make_scheduler(tick=10)
    r = Process(3, [15, 10, 5])
    s.add_new_process(r)

    s.execute_one_step()
    assert list(s.get_cpu_queue(1)) == [r]

    s.execute_one_step()
    assert list(s.get_blocking_queue()) == [r]

    s.execute_one_step()
    assert s.level_history[3] == [(0, 0), (10, 1), (20, -1), (30, 0)]
    assert list(s.get_cpu_queue(0)) == [r]

    s.execute_one_step()
    assert r.state == ProcessState.TERMINATED
    assert r.finish_time == 35


@pytest.mark.parametrize("tick", [3, 7, 10, 30])
def test_process_never_runs_cpu_and_io_at_once(make_scheduler, tick):
    s = make_scheduler(tick=tick, processes=mixed_workload())
    result = s.run()

    intervals = {}
    for entry in result['gantt_chart']:
        if entry.pid != -1:
            intervals.setdefault(entry.pid, []).append((entry.start_time, entry.end_time))
    for pid, spans in intervals.items():
        spans.sort()
        for (_, prev_end), (start, _) in zip(spans, spans[1:]):
            assert start >= prev_end, f"P{pid} overlaps at {start}"

    for p in result['processes']:
        assert p.turnaround_time >= p.get_total_burst_time() + p.get_total_io_time()


def test_only_highest_priority_queue_is_serviced(make_scheduler):
    s = make_scheduler(tick=10)
    low = Process(1, [100])
    high = Process(2, [100])
    s.get_cpu_queue(1).enqueue(low)
    s.add_new_process(high)

    s.execute_one_step()
    turns = cpu_turns(s)
    assert len(turns) == 1
    assert turns[0].process is high
    assert turns[0].queue.get_priority_level() == 0
    assert low.remaining_burst_time == 100

    s.execute_one_step()
    turns = cpu_turns(s)
    assert len(turns) == 1
    assert turns[0].process is low
    assert turns[0].queue.get_priority_level() == 1


def test_priority_scan_order_holds_every_tick(make_scheduler):
    s = make_scheduler(tick=10, processes=mixed_workload())

    done = False
    while not done:
        before = lowest_non_empty_level(s)
        done = s.execute_one_step()
        turns = cpu_turns(s)
        assert len(turns) <= 1
        if before is not None:
            assert len(turns) == 1
            assert turns[0].queue.get_priority_level() <= before


@pytest.mark.parametrize("tick", [3, 7, 10, 45])
def test_grant_never_exceeds_quantum_or_slice(make_scheduler, tick):
    s = make_scheduler(tick=tick, processes=mixed_workload())

    done = False
    while not done:
        done = s.execute_one_step()
        for turn in cpu_turns(s):
            assert turn.granted <= min(turn.queue.get_quantum(), tick)
            assert turn.consumed <= turn.granted


@pytest.mark.parametrize("tick", [7, 10, 30])
def test_demotion_only_after_full_grant(make_scheduler, tick):
    s = make_scheduler(tick=tick, processes=mixed_workload())

    done = False
    while not done:
        done = s.execute_one_step()
        for turn in cpu_turns(s):
            if turn.outcome == TurnOutcome.DEMOTED:
                assert turn.consumed == turn.granted
                assert turn.process.is_cpu_burst()
            if turn.consumed < turn.granted:
                assert turn.outcome != TurnOutcome.DEMOTED


def test_short_burst_never_demoted(make_scheduler):
    s = make_scheduler(tick=10)
    p = Process(1, [7, 5, 7])
    s.add_new_process(p)
    s.run()
    assert p.demotions == 0
    assert s.stats.demotions == 0


def test_no_process_lost_or_duplicated(make_scheduler):
    s = make_scheduler(tick=10, processes=mixed_workload())
    total = len(s.processes)

    done = False
    while not done:
        done = s.execute_one_step()
        held = [p for queue in s.running_queues for p in queue] + list(s.blocking_queue)
        assert len(held) == len(set(id(p) for p in held))
        assert len(held) + len(s.pending_arrivals) + len(s.terminated_processes) == total


def test_run_terminates_with_all_processes_finished(make_scheduler):
    s = make_scheduler(tick=10, processes=mixed_workload())
    result = s.run()

    assert s.all_queues_empty()
    assert not result['timed_out']
    assert len(result['processes']) == 6
    assert all(p.state == ProcessState.TERMINATED for p in result['processes'])
    assert all(p.cpu_time == p.get_total_burst_time() for p in result['processes'])
    assert "===== MLFQ Scheduling Completed =====" in result['event_log'][-1]


def test_constructor_copies_processes(make_scheduler):
    original = Process(1, [25])
    make_scheduler(processes=[original]).run()
    assert original.state == ProcessState.NEW
    assert original.remaining_burst_time == 25


def test_arrivals_wait_for_their_time(make_scheduler):
    s = make_scheduler(tick=10, processes=[Process(1, [5], arrival_time=25)])
    result = s.run()

    p = result['processes'][0]
    assert p.start_time == 30
    assert p.response_time == 5
    assert p.finish_time == 35
    assert p.turnaround_time == 10
    assert [e.pid for e in result['gantt_chart']].count(-1) == 3


def test_results_and_statistics(make_scheduler):
    s = make_scheduler(tick=10, processes=[Process(1, [20]), Process(2, [20])])
    result = s.run()

    assert [(e.pid, e.start_time, e.end_time, e.queue_level) for e in result['gantt_chart']] == [
        (1, 0, 10, 0), (2, 10, 20, 0), (1, 20, 30, 1), (2, 30, 40, 1)
    ]
    stats = result['statistics']
    assert stats['context_switches'] == 3
    assert stats['demotions'] == 2
    assert stats['avg_turnaround_time'] == 35
    assert stats['avg_response_time'] == 5
    assert stats['cpu_utilization'] == 100
    assert any("P1 demoted Q0 → Q1" in line for line in result['event_log'])


def test_run_with_no_processes():
    result = MLFQScheduler().run()
    assert result['processes'] == []
    assert result['statistics']['avg_waiting_time'] == 0


def test_timeout_guard_stops_stalled_clock():
    s = MLFQScheduler([Process(1, [5])], clock=SimulatedClock(tick=0), max_iterations=50)
    result = s.run()

    assert result['timed_out']
    assert s.iterations == 50
    assert any("WARNING: Simulation timeout" in line for line in result['event_log'])


def test_blocked_interrupt_routes_to_blocking_queue(make_scheduler):
    s = make_scheduler()
    p = Process(1, [5, 20, 5])
    p.consume_cpu(5)

    s.handle_interrupt(s.get_cpu_queue(1), p, SchedulerInterrupt.PROCESS_BLOCKED)

    assert list(s.get_blocking_queue()) == [p]
    assert p.queue_level == -1


def test_rejected_block_leaves_process_untouched(make_scheduler):
    s = make_scheduler()
    p = Process(1, [100, 20, 5])
    p.consume_cpu(4)
    p.state = ProcessState.RUNNING
    p.time_slice_used = 4

    with pytest.raises(InvalidQueueOperationError):
        s.handle_interrupt(s.get_cpu_queue(0), p, SchedulerInterrupt.PROCESS_BLOCKED)

    assert p.state == ProcessState.RUNNING
    assert p.time_slice_used == 4
    assert s.stats.blocks == 0
    assert s.all_queues_empty()


def test_rejected_ready_leaves_process_untouched(make_scheduler):
    s = make_scheduler()
    p = Process(1, [5, 20, 5])
    p.consume_cpu(5)
    p.state = ProcessState.WAITING

    with pytest.raises(InvalidQueueOperationError):
        s.handle_interrupt(s.get_blocking_queue(), p, SchedulerInterrupt.PROCESS_READY)

    assert p.state == ProcessState.WAITING
    assert s.stats.promotions == 0
    assert s.all_queues_empty()


def test_ready_interrupt_routes_to_top_queue(make_scheduler):
    s = make_scheduler()
    p = Process(1, [5, 20, 5])
    p.consume_cpu(5)
    p.consume_io(20)

    s.handle_interrupt(s.get_blocking_queue(), p, SchedulerInterrupt.PROCESS_READY)

    assert list(s.get_cpu_queue(0)) == [p]


def test_lower_priority_at_bottom_level_stays(make_scheduler):
    s = make_scheduler()
    p = Process(1, [100])

    s.handle_interrupt(s.get_cpu_queue(2), p, SchedulerInterrupt.LOWER_PRIORITY)

    assert list(s.get_cpu_queue(2)) == [p]
    assert s.stats.demotions == 0


def test_lower_priority_from_blocking_queue_rejected(make_scheduler):
    s = make_scheduler()
    p = Process(1, [100])

    with pytest.raises(InvalidInterruptError):
        s.handle_interrupt(s.get_blocking_queue(), p, SchedulerInterrupt.LOWER_PRIORITY)
    assert s.all_queues_empty()


def test_unknown_interrupt_rejected(make_scheduler):
    s = make_scheduler()
    p = Process(1, [100])

    with pytest.raises(InvalidInterruptError):
        s.handle_interrupt(s.get_cpu_queue(0), p, "PROCESS_BLOCKED")
    assert s.all_queues_empty()
    assert "WARNING" in s.event_log[-1]


def test_snapshot(make_scheduler):
    s = make_scheduler()
    p = Process(1, [100])
    s.add_new_process(p)

    snapshot = s.get_current_snapshot()
    assert snapshot['cpu_queues'][0] == [p]
    assert snapshot['blocking_queue'] == []
    assert snapshot['latest_log'].endswith("P1 arrived → Q0")
