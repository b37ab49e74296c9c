"""
시각화 모듈: Gantt Chart, 큐 레벨 변화 및 통계 그래프 생성
"""

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from typing import List, Dict, Tuple, Optional
from mlfq.scheduler_base import GanttEntry
from mlfq.process import ProcessState


class Visualizer:
    """스케줄링 결과 시각화"""

    def __init__(self):
        # 큐 레벨별 색상 설정
        self.colors = plt.cm.Set3.colors
        self.idle_color = '#CCCCCC'
        self.waiting_color = '#FFE5E5'

    def draw_gantt_chart(self, gantt_data: List[GanttEntry], title: str,
                         save_path: Optional[str] = None, show: bool = True):
        """
        Gantt Chart 그리기 (CPU 실행은 큐 레벨별 색상, I/O는 대기 색상)

        Args:
            gantt_data: Gantt Chart 데이터
            title: 차트 제목
            save_path: 저장 경로 (None이면 저장 안 함)
            show: 화면에 표시할지 여부
        """
        if not gantt_data:
            print(f"{title}에 대한 Gantt 차트 데이터가 없습니다")
            return

        fig, ax = plt.subplots(figsize=(16, 6))

        # 프로세스 ID 추출 (유일한 값만)
        unique_pids = sorted(set(entry.pid for entry in gantt_data if entry.pid != -1))
        pid_to_y = {pid: idx for idx, pid in enumerate(unique_pids)}
        levels = sorted(set(entry.queue_level for entry in gantt_data
                            if entry.state == ProcessState.RUNNING))

        for entry in gantt_data:
            if entry.pid == -1:
                # CPU 유휴 시간
                continue

            duration = entry.end_time - entry.start_time
            y_pos = pid_to_y[entry.pid]

            if entry.state == ProcessState.RUNNING:
                color = self.colors[entry.queue_level % len(self.colors)]
                alpha = 1.0
            else:
                color = self.waiting_color
                alpha = 0.7

            ax.barh(y_pos, duration, left=entry.start_time, height=0.8,
                    color=color, alpha=alpha, edgecolor='black', linewidth=0.5)

            if entry.state == ProcessState.RUNNING and duration > 1:
                ax.text(entry.start_time + duration/2, y_pos, f'Q{entry.queue_level}',
                        ha='center', va='center', fontsize=8, fontweight='bold')

        ax.set_yticks(range(len(unique_pids)))
        ax.set_yticklabels([f'P{pid}' for pid in unique_pids])
        ax.set_xlabel('Time', fontsize=12)
        ax.set_ylabel('Process', fontsize=12)
        ax.set_title(f'Gantt Chart - {title}', fontsize=14, fontweight='bold')
        ax.grid(axis='x', alpha=0.3)

        legend_elements = [
            mpatches.Patch(color=self.colors[level % len(self.colors)], label=f'Running (Q{level})')
            for level in levels
        ]
        legend_elements.append(mpatches.Patch(color=self.waiting_color, alpha=0.7, label='I/O (Blocking)'))
        ax.legend(handles=legend_elements, loc='upper right')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Gantt 차트가 {save_path}에 저장되었습니다")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def draw_queue_levels(self, level_history: Dict[int, List[Tuple[int, int]]], title: str,
                          save_path: Optional[str] = None, show: bool = True):
        """
        프로세스별 큐 레벨 변화 (강등/복귀) 계단 그래프

        Args:
            level_history: pid -> [(시간, 레벨), ...], 레벨 -1은 Blocking 큐
        """
        if not level_history:
            print(f"{title}에 대한 큐 레벨 데이터가 없습니다")
            return

        fig, ax = plt.subplots(figsize=(16, 6))

        for pid in sorted(level_history):
            history = level_history[pid]
            times = [t for t, _ in history]
            levels = [level for _, level in history]
            ax.step(times, levels, where='post', label=f'P{pid}', linewidth=1.5)

        max_level = max(level for history in level_history.values() for _, level in history)
        ax.set_yticks(range(-1, max_level + 1))
        ax.set_yticklabels(['Blocking'] + [f'Q{level}' for level in range(max_level + 1)])
        ax.invert_yaxis()
        ax.set_xlabel('Time', fontsize=12)
        ax.set_ylabel('Queue', fontsize=12)
        ax.set_title(f'Queue Levels - {title}', fontsize=14, fontweight='bold')
        ax.grid(alpha=0.3)
        ax.legend(loc='upper right', fontsize=8, ncol=2)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"큐 레벨 차트가 {save_path}에 저장되었습니다")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def compare_results(self, results: List[Dict], save_path: Optional[str] = None, show: bool = True):
        """
        여러 설정(프리셋)의 성능 비교 그래프

        Args:
            results: 각 실행의 결과 리스트
            save_path: 저장 경로
            show: 화면에 표시할지 여부
        """
        if not results:
            print("비교할 결과가 없습니다")
            return

        names = [r['algorithm'] for r in results]
        metrics = [
            ('avg_waiting_time', 'Average Waiting Time', 'skyblue', '{:.2f}'),
            ('avg_turnaround_time', 'Average Turnaround Time', 'lightcoral', '{:.2f}'),
            ('cpu_utilization', 'CPU Utilization (%)', 'lightgreen', '{:.1f}%'),
            ('demotions', 'Demotions', 'plum', '{:.0f}'),
        ]

        fig, axes = plt.subplots(2, 2, figsize=(16, 12))
        fig.suptitle('MLFQ Configuration Comparison', fontsize=16, fontweight='bold')

        for ax, (key, label, color, fmt) in zip(axes.flat, metrics):
            values = [r['statistics'][key] for r in results]
            bars = ax.bar(range(len(names)), values, color=color, edgecolor='black')
            ax.set_xticks(range(len(names)))
            ax.set_xticklabels(names, rotation=45, ha='right', fontsize=9)
            ax.set_ylabel(label, fontsize=11)
            ax.set_title(f'{label} Comparison', fontsize=12, fontweight='bold')
            ax.grid(axis='y', alpha=0.3)
            if key == 'cpu_utilization':
                ax.set_ylim(0, 100)

            # 값 표시
            for bar, value in zip(bars, values):
                ax.text(bar.get_x() + bar.get_width()/2., bar.get_height(),
                        fmt.format(value), ha='center', va='bottom', fontsize=9)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"비교 차트가 {save_path}에 저장되었습니다")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def print_statistics_table(self, results: List[Dict]):
        """
        통계를 표 형식으로 출력

        Args:
            results: 각 실행의 결과 리스트
        """
        print("\n" + "="*120)
        print("MLFQ 성능 비교")
        print("="*120)
        print(f"{'설정':<30} {'평균 대기':>12} {'평균 반환':>12} {'평균 응답':>12} "
              f"{'CPU 이용률(%)':>15} {'문맥전환':>10} {'강등':>8} {'복귀':>8}")
        print("-"*120)

        for result in results:
            stats = result['statistics']
            print(f"{result['algorithm']:<30} "
                  f"{stats['avg_waiting_time']:>12.2f} "
                  f"{stats['avg_turnaround_time']:>12.2f} "
                  f"{stats['avg_response_time']:>12.2f} "
                  f"{stats['cpu_utilization']:>15.2f} "
                  f"{stats['context_switches']:>10} "
                  f"{stats['demotions']:>8} "
                  f"{stats['promotions']:>8}")

        print("="*120 + "\n")

    def print_process_details(self, results: Dict):
        """
        개별 프로세스의 상세 정보 출력

        Args:
            results: 실행 결과
        """
        print(f"\n{'='*90}")
        print(f"프로세스 상세 - {results['algorithm']}")
        print(f"{'='*90}")
        print(f"{'PID':<6} {'도착':>8} {'시작':>8} {'종료':>8} "
              f"{'대기':>8} {'반환':>8} {'응답':>10} {'강등':>8} {'최종 큐':>8}")
        print(f"{'-'*90}")

        for process in sorted(results['processes'], key=lambda p: p.pid):
            start = process.start_time if process.start_time is not None else 'N/A'
            response = process.response_time if process.response_time is not None else 'N/A'
            print(f"{process.pid:<6} "
                  f"{process.arrival_time:>8} "
                  f"{start:>8} "
                  f"{process.finish_time:>8} "
                  f"{process.waiting_time:>8} "
                  f"{process.turnaround_time:>8} "
                  f"{response:>10} "
                  f"{process.demotions:>8} "
                  f"{process.queue_level:>8}")

        print(f"{'='*90}\n")
