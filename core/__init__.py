"""
httpver Core — Public API

from core import ProtocolProbeEngine, BatchScheduler, compute_grade
"""
from core.target_normalizer import (
    TargetNormalizer, NormalizedTarget, TargetValidationError, normalize_target,
)
from core.grading        import compute_grade
from core.probes         import (
    VersionResult, ProbeSession, VersionProbe,
    Http10Probe, Http11Probe, Http2Probe, Http3Probe, default_probes,
)
from core.probe_engine   import CheckResult, ProtocolProbeEngine
from core.scheduler      import BatchScheduler, worker_count_for_targets

__all__ = [
    "TargetNormalizer", "NormalizedTarget", "TargetValidationError", "normalize_target",
    "compute_grade",
    "VersionResult", "ProbeSession", "VersionProbe",
    "Http10Probe", "Http11Probe", "Http2Probe", "Http3Probe", "default_probes",
    "CheckResult", "ProtocolProbeEngine",
    "BatchScheduler", "worker_count_for_targets",
]
