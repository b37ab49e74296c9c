"""
MLFQ 스케줄러 시뮬레이터 - FastAPI 백엔드
"""

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import List, Optional, Dict, Any
import asyncio
import json

from mlfq.process import Process
from mlfq.errors import SchedulerError
from mlfq.scheduler import MLFQScheduler
from mlfq.scheduler_base import (PRIORITY_LEVELS, BASE_QUANTUM, QUANTUM_STEP,
                                 BLOCKING_QUANTUM, DEFAULT_TIME_SLICE, SimulatedClock)
from main import SCHEDULER_PRESETS

app = FastAPI(
    title="MLFQ Scheduler Simulator",
    description="다단계 피드백 큐(MLFQ) CPU 스케줄러 시뮬레이터",
    version="1.0.0"
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic 모델
class ProcessInput(BaseModel):
    pid: int
    arrival_time: int = 0
    execution_pattern: List[int]


class SimulationRequest(BaseModel):
    processes: List[ProcessInput]
    priority_levels: int = PRIORITY_LEVELS
    base_quantum: int = BASE_QUANTUM
    quantum_step: int = QUANTUM_STEP
    blocking_quantum: int = BLOCKING_QUANTUM
    time_slice: int = DEFAULT_TIME_SLICE


class CompareRequest(BaseModel):
    processes: List[ProcessInput]
    presets: List[str]
    time_slice: int = DEFAULT_TIME_SLICE


class GanttEntryModel(BaseModel):
    pid: int
    start_time: int
    end_time: int
    state: str
    queue_level: int


class ProcessResult(BaseModel):
    pid: int
    arrival_time: int
    burst_time: int
    io_time: int
    waiting_time: int
    turnaround_time: int
    response_time: Optional[int]
    demotions: int


class SimulationResult(BaseModel):
    algorithm: str
    config: Dict[str, Any]
    gantt_chart: List[GanttEntryModel]
    processes: List[ProcessResult]
    statistics: Dict[str, float]
    event_log: List[str]
    timed_out: bool


def create_process_objects(process_inputs: List[ProcessInput]) -> List[Process]:
    """ProcessInput을 Process 객체로 변환"""
    return [
        Process(pid=p.pid, execution_pattern=p.execution_pattern, arrival_time=p.arrival_time)
        for p in process_inputs
    ]


def serialize_gantt(entry) -> Dict:
    return {
        'pid': entry.pid,
        'start_time': entry.start_time,
        'end_time': entry.end_time,
        'state': entry.state.value,
        'queue_level': entry.queue_level
    }


def run_scheduler(processes: List[Process], params: Dict, time_slice: int,
                  name: str = "MLFQ") -> SimulationResult:
    """스케줄러 실행 및 결과 반환"""
    if time_slice <= 0:
        raise ValueError(f"time_slice는 양수여야 합니다: {time_slice}")

    scheduler = MLFQScheduler(processes, clock=SimulatedClock(tick=time_slice), name=name, **params)
    result = scheduler.run()

    return SimulationResult(
        algorithm=result['algorithm'],
        config=result['config'],
        gantt_chart=[serialize_gantt(entry) for entry in result['gantt_chart']],
        processes=[
            {
                'pid': p.pid,
                'arrival_time': p.arrival_time,
                'burst_time': p.get_total_burst_time(),
                'io_time': p.get_total_io_time(),
                'waiting_time': p.waiting_time,
                'turnaround_time': p.turnaround_time,
                'response_time': p.response_time,
                'demotions': p.demotions
            }
            for p in result['processes']
        ],
        statistics=result['statistics'],
        event_log=result['event_log'],
        timed_out=result['timed_out']
    )


@app.get("/")
async def root():
    return {"message": "MLFQ Scheduler Simulator API", "version": "1.0.0"}


@app.get("/presets")
async def get_presets():
    """사용 가능한 큐 설정 목록 반환"""
    return {
        "presets": [
            {"id": key, "name": preset['name'], **preset['params']}
            for key, preset in SCHEDULER_PRESETS.items() if key != 'all'
        ]
    }


@app.post("/simulate")
async def simulate(request: SimulationRequest):
    """MLFQ 시뮬레이션 실행"""
    params = {
        'priority_levels': request.priority_levels,
        'base_quantum': request.base_quantum,
        'quantum_step': request.quantum_step,
        'blocking_quantum': request.blocking_quantum
    }
    try:
        processes = create_process_objects(request.processes)
        result = run_scheduler(processes, params, request.time_slice)
    except (ValueError, SchedulerError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "result": result}


@app.post("/simulate/compare")
async def compare_presets(request: CompareRequest):
    """여러 큐 설정 비교 시뮬레이션"""
    results = []
    comparison = {
        'presets': [],
        'avg_waiting_time': [],
        'avg_turnaround_time': [],
        'avg_response_time': [],
        'cpu_utilization': [],
        'demotions': []
    }

    for key in request.presets:
        preset = SCHEDULER_PRESETS.get(key)
        if preset is None or key == 'all':
            raise HTTPException(status_code=400, detail=f"Unknown preset: {key}")

        try:
            processes = create_process_objects(request.processes)
            result = run_scheduler(processes, preset['params'], request.time_slice, preset['name'])
        except (ValueError, SchedulerError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        results.append(result)

        # 비교 데이터 수집
        comparison['presets'].append(preset['name'])
        for metric in ('avg_waiting_time', 'avg_turnaround_time', 'avg_response_time',
                       'cpu_utilization', 'demotions'):
            comparison[metric].append(result.statistics.get(metric, 0))

    return {"success": True, "results": results, "comparison": comparison}


# WebSocket을 통한 실시간 시뮬레이션
class RealtimeSimulator:
    def __init__(self, processes: List[Process], params: Dict, time_slice: int = DEFAULT_TIME_SLICE):
        if time_slice <= 0:
            raise ValueError(f"time_slice는 양수여야 합니다: {time_slice}")
        self.scheduler = MLFQScheduler(processes, clock=SimulatedClock(tick=time_slice), **params)
        self.is_complete = False
        self.last_gantt_index = 0
        self.last_log_index = 0

    def step(self) -> Dict:
        """한 틱 실행 및 상태 반환"""
        if self.is_complete:
            return {'complete': True}

        is_complete = self.scheduler.execute_one_step()

        new_gantt = [serialize_gantt(entry)
                     for entry in self.scheduler.gantt_chart[self.last_gantt_index:]]
        self.last_gantt_index = len(self.scheduler.gantt_chart)

        new_logs = self.scheduler.event_log[self.last_log_index:]
        self.last_log_index = len(self.scheduler.event_log)

        cpu_queues = [
            [{'pid': p.pid, 'remaining': p.remaining_burst_time, 'used': p.time_slice_used}
             for p in queue]
            for queue in self.scheduler.running_queues
        ]
        blocking_queue = [
            {'pid': p.pid, 'remaining': p.remaining_burst_time}
            for p in self.scheduler.blocking_queue
        ]

        stats = {
            'current_time': self.scheduler.clock,
            'context_switches': self.scheduler.stats.context_switches,
            'cpu_busy_time': self.scheduler.stats.cpu_busy_time,
            'completed': len(self.scheduler.terminated_processes),
            'total': len(self.scheduler.processes)
        }

        if is_complete:
            self.is_complete = True
            self.scheduler.update_statistics()
            stats['final'] = self.scheduler.stats.calculate_averages()

        return {
            'complete': is_complete,
            'cpu_queues': cpu_queues,
            'blocking_queue': blocking_queue,
            'new_gantt': new_gantt,
            'new_logs': new_logs,
            'stats': stats
        }


@app.websocket("/ws/realtime")
async def websocket_realtime(websocket: WebSocket):
    """실시간 시뮬레이션 WebSocket 엔드포인트"""
    await websocket.accept()
    simulator = None

    try:
        while True:
            message = json.loads(await websocket.receive_text())
            action = message.get('action')

            if action == 'init':
                request = SimulationRequest(**message)
                params = {
                    'priority_levels': request.priority_levels,
                    'base_quantum': request.base_quantum,
                    'quantum_step': request.quantum_step,
                    'blocking_quantum': request.blocking_quantum
                }
                simulator = RealtimeSimulator(create_process_objects(request.processes),
                                              params, request.time_slice)
                await websocket.send_json({
                    'type': 'initialized',
                    'process_count': len(request.processes)
                })

            elif action == 'step':
                if simulator:
                    await websocket.send_json({'type': 'step_result', **simulator.step()})

            elif action == 'run':
                # 자동 실행 (속도 조절 가능)
                if simulator:
                    speed = message.get('speed', 1.0)
                    if isinstance(speed, bool) or not isinstance(speed, (int, float)) or not speed > 0:
                        await websocket.send_json({'type': 'error',
                                                   'message': f"speed는 양수여야 합니다: {speed!r}"})
                        continue
                    delay = 1.0 / speed

                    while not simulator.is_complete:
                        result = simulator.step()
                        await websocket.send_json({'type': 'step_result', **result})
                        if result['complete']:
                            break
                        await asyncio.sleep(delay)

    except WebSocketDisconnect:
        pass
    except (ValueError, SchedulerError) as e:
        await websocket.send_json({'type': 'error', 'message': str(e)})


@app.get("/sample-processes")
async def get_sample_processes():
    """샘플 프로세스 데이터 반환"""
    return {
        "samples": [
            {
                "name": "CPU 중심 (강등 확인)",
                "processes": [
                    {"pid": 1, "arrival_time": 0, "execution_pattern": [25]},
                    {"pid": 2, "arrival_time": 0, "execution_pattern": [80]}
                ]
            },
            {
                "name": "I/O 포함 (Q0 복귀 확인)",
                "processes": [
                    {"pid": 1, "arrival_time": 0, "execution_pattern": [5, 20, 5]},
                    {"pid": 2, "arrival_time": 0, "execution_pattern": [60]},
                    {"pid": 3, "arrival_time": 10, "execution_pattern": [8, 30, 8, 30, 8]}
                ]
            }
        ]
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
