from mlfq.process import Process
from main import SCHEDULER_PRESETS, run_preset, run_all_presets, safe_filename, save_results


def workload():
    return [Process(1, [25]), Process(2, [5, 20, 5]), Process(3, [80], arrival_time=10)]


def test_run_preset_uses_preset_configuration():
    result = run_preset('2', workload(), verbose=False)

    assert result['algorithm'] == SCHEDULER_PRESETS['2']['name']
    assert result['config']['quanta'] == [5, 15, 25, 35, 45]
    assert len(result['processes']) == 3


def test_single_queue_preset_never_demotes():
    result = run_preset('4', workload(), verbose=False)
    assert result['statistics']['demotions'] == 0


def test_run_all_presets():
    results = run_all_presets(workload())
    assert len(results) == len(SCHEDULER_PRESETS) - 1


def test_safe_filename():
    assert safe_filename("MLFQ Standard (3 levels)") == "MLFQ_Standard_3_levels"
    assert safe_filename("Single Queue (Round Robin)") == "Single_Queue_Round_Robin"


def test_save_results_writes_charts_and_report(tmp_path):
    results = run_all_presets(workload())
    output_dir = tmp_path / "out"

    save_results(results, output_dir=str(output_dir))

    assert (output_dir / "results.txt").exists()
    assert (output_dir / "comparison.png").exists()
    assert (output_dir / "gantt_MLFQ_Standard_3_levels.png").exists()
    assert (output_dir / "levels_MLFQ_Two-level.png").exists()
    report = (output_dir / "results.txt").read_text(encoding="utf-8")
    assert "MLFQ Fine-grained (5 levels)" in report
