"""
스케줄러 예외 정의

모든 오류는 계약 위반(precondition violation)이며 복구 대상이 아니다.
큐 상태를 변경하기 전에 발생시켜 해당 연산만 중단한다.
"""


class SchedulerError(Exception):
    """스케줄러 예외의 기본 클래스"""


class EmptyQueueError(SchedulerError, IndexError):
    """비어 있는 큐에서 프로세스를 꺼내려 할 때"""


class InvalidQueueOperationError(SchedulerError, ValueError):
    """큐 타입에 맞지 않는 작업 (Blocking 큐에서 CPU 작업 등)"""


class InvalidInterruptError(SchedulerError, ValueError):
    """알 수 없는 인터럽트이거나 허용되지 않는 출처의 인터럽트"""
