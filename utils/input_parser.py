"""
입력 데이터 파서 및 프로세스 생성 모듈
"""

import random
from typing import List, Optional
from mlfq.process import Process


class InputParser:
    """입력 파일 파서"""

    @staticmethod
    def parse_file(filename: str) -> List[Process]:
        """
        파일에서 프로세스 정보 읽기

        파일 형식: PID,도착시간,실행패턴
        예: 1,0,"5,20,5"

        Args:
            filename: 입력 파일 경로

        Returns:
            프로세스 리스트
        """
        processes = []

        try:
            with open(filename, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()

                    # 주석 및 빈 줄 제거
                    if not line or line.startswith('#'):
                        continue

                    try:
                        parts = InputParser._parse_line(line)
                        if parts:
                            process = InputParser._create_process_from_parts(parts)
                            processes.append(process)
                    except ValueError as e:
                        print(f"경고: 라인 파싱 실패: {line}")
                        print(f"오류: {e}")
                        continue

            print(f"{filename}에서 {len(processes)}개의 프로세스를 성공적으로 로드했습니다")
            return processes

        except FileNotFoundError:
            print(f"오류: 파일 '{filename}'을 찾을 수 없습니다")
            return []

    @staticmethod
    def _parse_line(line: str) -> List[str]:
        """CSV 라인 파싱 (따옴표 처리 포함)"""
        parts = []
        current = ""
        in_quotes = False

        for char in line:
            if char == '"':
                in_quotes = not in_quotes
            elif char == ',' and not in_quotes:
                parts.append(current.strip())
                current = ""
            else:
                current += char

        if current:
            parts.append(current.strip())

        return parts

    @staticmethod
    def _create_process_from_parts(parts: List[str]) -> Process:
        """파싱된 부분에서 프로세스 객체 생성"""
        if len(parts) < 3:
            raise ValueError(f"잘못된 형식: 3개 필드가 필요하지만 {len(parts)}개만 있습니다")

        try:
            pid = int(parts[0])
            arrival_time = int(parts[1])
        except ValueError as e:
            raise ValueError(f"숫자 필드 변환 오류: {e}")

        if pid <= 0:
            raise ValueError(f"PID는 양수여야 합니다: {pid}")
        if arrival_time < 0:
            raise ValueError(f"도착 시간은 0 이상이어야 합니다: {arrival_time}")

        # 실행 패턴 파싱
        execution_pattern_str = parts[2].strip('"\'')
        try:
            execution_pattern = [int(x.strip()) for x in execution_pattern_str.split(',') if x.strip()]
        except ValueError as e:
            raise ValueError(f"실행 패턴 파싱 오류: {e}")

        if not execution_pattern:
            raise ValueError("실행 패턴이 비어있습니다")

        # 검증: 실행 패턴은 CPU 버스트로 시작하고 끝나야 함
        if len(execution_pattern) % 2 == 0:
            raise ValueError("실행 패턴은 CPU 버스트로 끝나야 합니다 (홀수 개)")

        if any(t <= 0 for t in execution_pattern):
            raise ValueError("모든 버스트 시간은 양수여야 합니다")

        return Process(pid, execution_pattern, arrival_time)

    @staticmethod
    def generate_random_processes(num_processes: int = 10,
                                  max_arrival: int = 50,
                                  max_burst: int = 60,
                                  max_io: int = 40,
                                  seed: Optional[int] = None) -> List[Process]:
        """
        랜덤 프로세스 생성

        Args:
            num_processes: 생성할 프로세스 수
            max_arrival: 최대 도착 시간
            max_burst: 최대 CPU 버스트 시간
            max_io: 최대 I/O 시간
            seed: 랜덤 시드

        Returns:
            프로세스 리스트
        """
        rng = random.Random(seed)
        processes = []

        for pid in range(1, num_processes + 1):
            arrival_time = rng.randint(0, max_arrival)

            # 실행 패턴 생성 (CPU-bound 또는 I/O-bound)
            is_io_bound = rng.random() < 0.4  # 40% 확률로 I/O bound

            execution_pattern = []
            if is_io_bound:
                # I/O bound: 짧은 CPU 버스트와 긴 I/O 버스트
                num_bursts = rng.randint(2, 4)
                for j in range(num_bursts):
                    execution_pattern.append(rng.randint(2, max(2, max_burst // 6)))
                    if j < num_bursts - 1:  # 마지막이 아니면 I/O 추가
                        execution_pattern.append(rng.randint(max(1, max_io // 4), max_io))
            else:
                # CPU bound: 긴 CPU 버스트
                num_bursts = rng.randint(1, 3)
                for j in range(num_bursts):
                    execution_pattern.append(rng.randint(max(1, max_burst // 2), max_burst))
                    if j < num_bursts - 1:
                        execution_pattern.append(rng.randint(1, max(1, max_io // 4)))

            processes.append(Process(pid, execution_pattern, arrival_time))

        print(f"{num_processes}개의 랜덤 프로세스를 생성했습니다")
        return processes

    @staticmethod
    def save_processes_to_file(processes: List[Process], filename: str):
        """
        프로세스 리스트를 파일로 저장

        Args:
            processes: 저장할 프로세스 리스트
            filename: 출력 파일 경로
        """
        with open(filename, 'w', encoding='utf-8') as f:
            f.write("# MLFQ Scheduler Input Data\n")
            f.write("# Format: PID,ArrivalTime,ExecutionPattern\n\n")

            for process in processes:
                pattern_str = ','.join(str(x) for x in process.execution_pattern)
                f.write(f'{process.pid},{process.arrival_time},"{pattern_str}"\n')

        print(f"{len(processes)}개의 프로세스를 {filename}에 성공적으로 저장했습니다")

    @staticmethod
    def print_process_summary(processes: List[Process]):
        """프로세스 요약 정보 출력"""
        print("\n" + "="*80)
        print("프로세스 요약")
        print("="*80)
        print(f"{'PID':<6} {'도착시간':>8} {'총 CPU':>10} {'총 I/O':>10} {'버스트 수':>10}")
        print("-"*80)

        for p in sorted(processes, key=lambda x: x.pid):
            print(f"{p.pid:<6} {p.arrival_time:>8} {p.get_total_burst_time():>10} "
                  f"{p.get_total_io_time():>10} {len(p.execution_pattern):>10}")

        print("="*80 + "\n")

        cpu_bound = sum(1 for p in processes if len(p.execution_pattern) == 1)
        print(f"전체 프로세스: {len(processes)}개")
        print(f"  - CPU 중심: {cpu_bound}개")
        print(f"  - I/O 포함: {len(processes) - cpu_bound}개")
        print()
