"""
Utilities for the Anonymous Voting Toolkit
Logging setup, operation timing and result export
"""

import json
import logging
import platform
import time
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import psutil

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


@dataclass
class PerformanceMetrics:
    operation: str
    duration_seconds: float
    cpu_percent: float
    memory_mb: float
    timestamp: float
    additional_data: Dict[str, Any] = field(default_factory=dict)


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None, log_dir: Path = Path("logs")):
    """Send every toolkit logger to one run log file and to stderr.

    Replaces whatever handlers the root logger already had, so calling it
    twice does not duplicate output.
    """
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    if log_file is None:
        log_file = Path(log_dir) / f"anon_vote_{datetime.now():%Y%m%d_%H%M%S}.log"
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.FileHandler(log_file), logging.StreamHandler()]

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging to {log_file} at {logging.getLevelName(level)}")
    return logger


class PerformanceMonitor:
    """Collects per-operation timing, CPU and memory samples"""

    def __init__(self):
        self.metrics: List[PerformanceMetrics] = []
        self.process = psutil.Process()

    def start_operation(self, operation_name: str) -> 'OperationContext':
        """Start monitoring an operation - returns context manager"""
        return OperationContext(self, operation_name)

    def record_metric(self, metric: PerformanceMetrics):
        self.metrics.append(metric)

    def get_summary(self) -> Dict[str, Any]:
        """Aggregate recorded metrics per operation name"""
        if not self.metrics:
            return {
                'total_operations': 0,
                'total_duration': 0.0,
                'operations': {}
            }

        groups: Dict[str, List[PerformanceMetrics]] = {}
        for metric in self.metrics:
            groups.setdefault(metric.operation, []).append(metric)

        operations = {}
        for op_name, metrics in groups.items():
            durations = np.array([m.duration_seconds for m in metrics])
            memory = np.array([m.memory_mb for m in metrics])
            total = float(durations.sum())

            operations[op_name] = {
                'count': len(metrics),
                'total_duration': total,
                'avg_duration': float(durations.mean()),
                'max_duration': float(durations.max()),
                'peak_memory_mb': float(memory.max()),
                'throughput_ops_per_sec': len(metrics) / total if total > 0 else 0.0
            }

        return {
            'total_operations': len(self.metrics),
            'total_duration': sum(op['total_duration'] for op in operations.values()),
            'operations': operations
        }

    def save_metrics(self, filepath: Path):
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        metrics_data = {
            'metrics': [asdict(m) for m in self.metrics],
            'summary': self.get_summary(),
            'system_info': get_system_info(),
            'timestamp': datetime.now().isoformat()
        }

        with open(filepath, 'w') as f:
            json.dump(metrics_data, f, indent=2, default=str)

    def reset(self):
        self.metrics.clear()


class OperationContext:
    """Context manager recording one PerformanceMetrics sample"""

    def __init__(self, monitor: PerformanceMonitor, operation_name: str):
        self.monitor = monitor
        self.operation_name = operation_name
        self.start_time = None
        self.start_memory = 0.0

    def __enter__(self):
        # primes psutil's cpu_percent so the exit reading covers this interval
        self.monitor.process.cpu_percent()
        self.start_memory = self.monitor.process.memory_info().rss / 1024 / 1024
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - self.start_time
        cpu_percent = self.monitor.process.cpu_percent()
        end_memory = self.monitor.process.memory_info().rss / 1024 / 1024

        self.monitor.record_metric(PerformanceMetrics(
            operation=self.operation_name,
            duration_seconds=duration,
            cpu_percent=cpu_percent,
            memory_mb=max(self.start_memory, end_memory),
            timestamp=time.time(),
            additional_data={'exception': exc_type is not None}
        ))
        return False


def get_system_info() -> Dict[str, Any]:
    """Platform and resource details for reproducible reports"""
    vm = psutil.virtual_memory()
    return {
        'platform': platform.platform(),
        'processor': platform.processor(),
        'python_version': platform.python_version(),
        'machine': platform.machine(),
        'cpu_count_physical': psutil.cpu_count(logical=False),
        'cpu_count_logical': psutil.cpu_count(logical=True),
        'total_memory_gb': round(vm.total / 1024 / 1024 / 1024, 2),
        'available_memory_gb': round(vm.available / 1024 / 1024 / 1024, 2),
        'timestamp': datetime.now().isoformat()
    }


def convert_to_serializable(obj: Any) -> Any:
    """Turn toolkit values into JSON-friendly structures.

    Scalars, nullifiers and commitments all expose ``to_bytes`` and are
    rendered as hex; other dataclasses are expanded field by field.
    """
    if hasattr(obj, 'to_bytes') and callable(obj.to_bytes) and not isinstance(obj, int):
        return obj.to_bytes().hex()
    if is_dataclass(obj) and not isinstance(obj, type):
        return {k: convert_to_serializable(getattr(obj, k)) for k in obj.__dataclass_fields__}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): convert_to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [convert_to_serializable(item) for item in obj]
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).hex()
    if isinstance(obj, (np.integer, np.floating)):
        return obj.item()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj


def save_results(results: Dict[str, Any], filepath: Path):
    """Write results as JSON plus a plain-text summary next to it"""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    document = {
        'metadata': {
            'generated_at': datetime.now().isoformat(),
            'system_info': get_system_info(),
            'file_path': str(filepath)
        },
        'data': convert_to_serializable(results)
    }

    with open(filepath, 'w') as f:
        json.dump(document, f, indent=2, default=str)

    summary_path = filepath.parent / f"{filepath.stem}_summary.txt"
    with open(summary_path, 'w') as f:
        f.write(create_results_summary(results))

    logging.info(f"Results saved to {filepath}")
    logging.info(f"Summary saved to {summary_path}")


def create_results_summary(results: Dict[str, Any]) -> str:
    """Human-readable summary of an election run"""
    summary = []
    summary.append("=" * 80)
    summary.append("ANONYMOUS VOTING TOOLKIT - RESULTS SUMMARY")
    summary.append("=" * 80)
    summary.append(
        f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    summary.append("")

    election = results.get('election')
    if isinstance(election, dict):
        summary.append("ELECTION:")
        for key in ('election_id', 'eligible_voters', 'accepted_votes', 'status', 'eligibility_root'):
            if key in election:
                summary.append(f"  {key}: {convert_to_serializable(election[key])}")
        summary.append("")

    if 'tally' in results:
        tally = results['tally']
        summary.append("TALLY:")
        if isinstance(tally, dict):
            summary.append(f"  Opened: {tally.get('opened')}")
            summary.append(f"  Expected: {tally.get('expected')}")
        summary.append("")

    if 'performance_metrics' in results:
        summary.append("PERFORMANCE METRICS:")
        for metric, value in results['performance_metrics'].items():
            if isinstance(value, float):
                summary.append(f"  {metric}: {value:.4f}")
            else:
                summary.append(f"  {metric}: {value}")
        summary.append("")

    if 'integrity_checks' in results:
        summary.append("INTEGRITY CHECKS:")
        for check, passed in results['integrity_checks'].items():
            status = " PASSED" if passed else " FAILED"
            summary.append(f"  {check}: {status}")
        summary.append("")

    summary.append("=" * 80)
    return "\n".join(summary)


def create_performance_report(monitor: PerformanceMonitor) -> str:
    """One row per timed operation, in the order operations first ran"""
    summary = monitor.get_summary()
    operations = summary['operations']

    lines = [
        "ANONYMOUS VOTING TOOLKIT - PERFORMANCE REPORT",
        f"{summary['total_operations']} operations in {format_duration(summary['total_duration'])}",
        "",
    ]
    if not operations:
        lines.append("No performance data available.")
        return "\n".join(lines)

    header = f"{'operation':<18}{'runs':>6}{'mean':>11}{'max':>11}{'ops/s':>10}{'peak MB':>10}"
    lines.append(header)
    lines.append("-" * len(header))
    for op_name, op in operations.items():
        lines.append(
            f"{op_name:<18}{op['count']:>6}"
            f"{format_duration(op['avg_duration']):>11}"
            f"{format_duration(op['max_duration']):>11}"
            f"{op['throughput_ops_per_sec']:>10.1f}"
            f"{op['peak_memory_mb']:>10.1f}")
    return "\n".join(lines)


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes)}m {secs:.1f}s"


__all__ = [
    'PerformanceMetrics',
    'PerformanceMonitor',
    'OperationContext',
    'setup_logging',
    'get_system_info',
    'convert_to_serializable',
    'save_results',
    'create_results_summary',
    'create_performance_report',
    'format_duration',
]
