#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MLFQ 스케줄러 시뮬레이터 - 메인 실행 파일
큐 설정(프리셋) 선택 기능 포함
"""

import sys
import os
import re
import traceback

from mlfq.scheduler import MLFQScheduler
from utils.input_parser import InputParser
from utils.visualization import Visualizer


# 사용 가능한 큐 설정 정의
SCHEDULER_PRESETS = {
    '1': {
        'name': 'MLFQ Standard (3 levels)',
        'params': {'priority_levels': 3, 'base_quantum': 10, 'quantum_step': 20, 'blocking_quantum': 50}
    },
    '2': {
        'name': 'MLFQ Fine-grained (5 levels)',
        'params': {'priority_levels': 5, 'base_quantum': 5, 'quantum_step': 10, 'blocking_quantum': 50}
    },
    '3': {
        'name': 'MLFQ Two-level',
        'params': {'priority_levels': 2, 'base_quantum': 10, 'quantum_step': 40, 'blocking_quantum': 50}
    },
    '4': {
        'name': 'Single Queue (Round Robin)',
        'params': {'priority_levels': 1, 'base_quantum': 20, 'quantum_step': 0, 'blocking_quantum': 50}
    },
    'all': {
        'name': 'All Presets',
        'params': {}
    }
}


def print_banner():
    """배너 출력"""
    print("\n" + "="*80)
    print(" "*25 + "MLFQ 스케줄러 시뮬레이터")
    print("="*80 + "\n")


def print_preset_menu():
    """설정 선택 메뉴 출력"""
    print("\n" + "="*80)
    print("큐 설정 선택")
    print("="*80)
    for key, preset in SCHEDULER_PRESETS.items():
        if key == 'all':
            continue
        params = preset['params']
        quanta = [params['base_quantum'] + i * params['quantum_step']
                  for i in range(params['priority_levels'])]
        print(f"  {key}. {preset['name']} - quanta={quanta}")
    print("  all. 모든 설정 실행")
    print("  0. 종료")
    print("="*80)


def get_user_choice():
    """사용자 선택 입력"""
    while True:
        choice = input("\n선택하세요: ").strip()

        if choice == '0':
            print("\n프로그램을 종료합니다...")
            sys.exit(0)

        if choice in SCHEDULER_PRESETS:
            return choice

        print("[오류] 잘못된 선택입니다. 다시 시도하세요.")


def run_preset(preset_key, processes, verbose=True):
    """단일 설정으로 시뮬레이션 실행"""
    preset = SCHEDULER_PRESETS[preset_key]

    print(f"\n{'='*80}")
    print(f"실행 중: {preset['name']}")
    print(f"{'='*80}\n")

    try:
        scheduler = MLFQScheduler(processes, name=preset['name'], **preset['params'])
        return scheduler.run(verbose=verbose)
    except Exception as e:
        print(f"[오류] {preset['name']} 실행 실패: {e}")
        traceback.print_exc()
        return None


def run_all_presets(processes, verbose=False):
    """모든 설정 실행"""
    results = []
    keys = [key for key in SCHEDULER_PRESETS if key != 'all']

    for index, key in enumerate(keys, 1):
        print(f"[{index}/{len(keys)}] {SCHEDULER_PRESETS[key]['name']} 실행 중...")
        result = run_preset(key, processes, verbose=verbose)
        if result:
            results.append(result)
            print(f"[완료] {result['algorithm']} 완료\n")

    return results


def safe_filename(name):
    """결과 이름을 파일명으로 변환"""
    safe = re.sub(r'[\s/():=]+', '_', name)
    return re.sub(r'_+', '_', safe).strip('_')


def save_results(results, output_dir="simulation_results"):
    """결과 저장"""
    os.makedirs(output_dir, exist_ok=True)

    visualizer = Visualizer()

    print("\n" + "="*80)
    print("결과")
    print("="*80 + "\n")
    visualizer.print_statistics_table(results)

    print("차트 생성 중...")
    for result in results:
        safe_name = safe_filename(result['algorithm'])
        visualizer.draw_gantt_chart(result['gantt_chart'], result['algorithm'],
                                    save_path=os.path.join(output_dir, f"gantt_{safe_name}.png"),
                                    show=False)
        visualizer.draw_queue_levels(result['level_history'], result['algorithm'],
                                     save_path=os.path.join(output_dir, f"levels_{safe_name}.png"),
                                     show=False)
    print(f"[완료] 차트가 '{output_dir}/' 디렉토리에 저장되었습니다\n")

    # 비교 그래프 (2개 이상일 때만)
    if len(results) > 1:
        visualizer.compare_results(results, save_path=os.path.join(output_dir, "comparison.png"),
                                   show=False)

    save_results_to_file(results, os.path.join(output_dir, "results.txt"))

    print(f"\n결과가 '{output_dir}/' 디렉토리에 저장되었습니다:")
    print("  - Gantt 차트: gantt_*.png")
    print("  - 큐 레벨 차트: levels_*.png")
    if len(results) > 1:
        print("  - 비교 차트: comparison.png")
    print("  - 상세 결과: results.txt")
    print("="*80 + "\n")


def save_results_to_file(results, filename):
    """결과를 텍스트 파일로 저장"""
    with open(filename, 'w', encoding='utf-8') as f:
        f.write("="*110 + "\n")
        f.write("MLFQ 스케줄러 시뮬레이션 결과\n")
        f.write("="*110 + "\n\n")

        f.write("성능 비교\n")
        f.write("-"*110 + "\n")
        f.write(f"{'설정':<32} {'평균 대기':>12} {'평균 반환':>12} {'평균 응답':>12} "
                f"{'CPU 이용률(%)':>15} {'문맥 교환':>10} {'강등':>8}\n")
        f.write("-"*110 + "\n")

        for result in results:
            stats = result['statistics']
            f.write(f"{result['algorithm']:<32} "
                    f"{stats['avg_waiting_time']:>12.2f} "
                    f"{stats['avg_turnaround_time']:>12.2f} "
                    f"{stats['avg_response_time']:>12.2f} "
                    f"{stats['cpu_utilization']:>15.2f} "
                    f"{stats['context_switches']:>10} "
                    f"{stats['demotions']:>8}\n")

        f.write("="*110 + "\n\n")

        for result in results:
            f.write("\n" + "="*110 + "\n")
            f.write(f"설정: {result['algorithm']} {result['config']}\n")
            if result['timed_out']:
                f.write("경고: 최대 틱 수에 도달하여 시뮬레이션이 중단되었습니다\n")
            f.write("="*110 + "\n\n")

            f.write(f"{'PID':<6} {'도착시간':>8} {'시작':>8} {'완료':>8} "
                    f"{'대기':>8} {'반환':>8} {'응답':>10} {'강등':>8}\n")
            f.write("-"*90 + "\n")

            for process in sorted(result['processes'], key=lambda p: p.pid):
                response = process.response_time if process.response_time is not None else 'N/A'
                start = process.start_time if process.start_time is not None else 'N/A'
                f.write(f"{process.pid:<6} "
                        f"{process.arrival_time:>8} "
                        f"{start:>8} "
                        f"{process.finish_time:>8} "
                        f"{process.waiting_time:>8} "
                        f"{process.turnaround_time:>8} "
                        f"{response:>10} "
                        f"{process.demotions:>8}\n")

            f.write("\n")

    print(f"[완료] 결과가 {filename}에 저장되었습니다")


def select_input_file():
    """입력 파일 선택"""
    print("\n" + "="*80)
    print("입력 파일 선택")
    print("="*80)

    script_dir = os.path.dirname(os.path.abspath(__file__))
    data_dir = os.path.join(script_dir, "data")
    sample_data = os.path.join(data_dir, "sample_input.txt")

    print("\n[입력 옵션]")
    print("  0. 샘플 데이터 - sample_input.txt")
    print("  1. 랜덤 데이터 (자동 생성) - generated_input.txt")
    print("  2. 사용자 정의 데이터 (data/ 디렉토리에서 선택)")
    print("="*80)

    while True:
        choice = input("\n입력 옵션 선택 (0-2): ").strip()

        if choice == '0':
            if os.path.exists(sample_data):
                return sample_data
            print(f"[오류] 샘플 데이터를 찾을 수 없습니다: {sample_data}")

        elif choice == '1':
            return "GENERATE_RANDOM"

        elif choice == '2':
            if not os.path.isdir(data_dir):
                print("[오류] data/ 디렉토리를 찾을 수 없습니다.")
                continue

            files = sorted(f for f in os.listdir(data_dir) if f.endswith('.txt'))
            if not files:
                print("[오류] data/ 디렉토리에 .txt 파일이 없습니다.")
                continue

            print("\n" + "-"*80)
            print("data/ 디렉토리의 사용 가능한 파일:")
            for i, file in enumerate(files, 1):
                print(f"  {i}. {file}")
            print("-"*80)

            file_choice = input("파일 번호 선택: ").strip()
            if file_choice.isdigit() and 1 <= int(file_choice) <= len(files):
                return os.path.join(data_dir, files[int(file_choice) - 1])
            print("[오류] 잘못된 파일 번호입니다.")

        else:
            print("[오류] 잘못된 선택입니다. 0, 1, 또는 2를 입력하세요.")


def main():
    """메인 함수"""
    print_banner()

    input_file = select_input_file()

    if input_file == "GENERATE_RANDOM":
        print("\n[정보] 랜덤 프로세스 생성 중...")
        processes = InputParser.generate_random_processes(num_processes=10)
        script_dir = os.path.dirname(os.path.abspath(__file__))
        generated_file = os.path.join(script_dir, "data", "generated_input.txt")
        os.makedirs(os.path.dirname(generated_file), exist_ok=True)
        InputParser.save_processes_to_file(processes, generated_file)
    else:
        print(f"\n'{input_file}'에서 프로세스 로딩 중...")
        processes = InputParser.parse_file(input_file)

        if not processes:
            print("\n[오류] 프로세스 로드 실패 또는 파일이 비어있습니다.")
            sys.exit(1)

    InputParser.print_process_summary(processes)

    while True:
        print_preset_menu()
        choice = get_user_choice()

        if choice == 'all':
            results = run_all_presets(processes)
        else:
            result = run_preset(choice, processes, verbose=True)
            results = [result] if result else []

        if results:
            save_results(results)

        print("\n" + "="*80)
        continue_choice = input("다른 시뮬레이션을 실행하시겠습니까? (y/n): ").strip().lower()
        if continue_choice != 'y':
            print("\nMLFQ 스케줄러 시뮬레이터를 사용해 주셔서 감사합니다!")
            print("="*80 + "\n")
            break


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n사용자에 의해 시뮬레이션이 중단되었습니다.")
        print("="*80 + "\n")
        sys.exit(0)
