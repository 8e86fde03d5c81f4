"""Prometheus metrics for document analysis."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

NAMESPACE = "filescope"
STAGE_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
_SUMMARY_SUFFIXES = ("_total", "_count", "_sum")


class PipelineMetrics:
    """Counters and stage timings for one orchestrator, kept in a private registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self.documents_processed = Counter(
            name="documents_processed",
            documentation="Documents submitted for analysis",
            namespace=NAMESPACE,
            labelnames=["status", "file_type"],
            registry=self.registry,
        )
        self.batches_processed = Counter(
            name="batches_processed",
            documentation="Batches analyzed and merged",
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self.ai_fallbacks = Counter(
            name="ai_fallbacks",
            documentation="AI analyses that fell back to regex analysis",
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self.stage_seconds = Histogram(
            name="stage_seconds",
            documentation="Time spent in each pipeline stage",
            namespace=NAMESPACE,
            labelnames=["stage"],
            buckets=STAGE_BUCKETS,
            registry=self.registry,
        )

    def record_document(self, status: str, file_type: str) -> None:
        self.documents_processed.labels(status=status, file_type=file_type or "unknown").inc()

    def record_stages(self, durations: Mapping[str, float]) -> None:
        for stage, seconds in durations.items():
            self.stage_seconds.labels(stage=stage).observe(seconds)

    def record_batch(self) -> None:
        self.batches_processed.inc()

    def record_ai_fallback(self) -> None:
        self.ai_fallbacks.inc()

    def value(self, name: str, **labels: str) -> float:
        """Return a sample value such as ``documents_processed_total``, or 0.0 if unset."""
        sample = self.registry.get_sample_value(f"{NAMESPACE}_{name}", labels or None)
        return sample or 0.0

    def summary(self) -> Dict[str, float]:
        """Flatten counter totals and histogram counts/sums into a JSON-friendly mapping."""
        data: Dict[str, float] = {}
        for family in self.registry.collect():
            for sample in family.samples:
                if not sample.name.endswith(_SUMMARY_SUFFIXES):
                    continue
                key = sample.name[len(NAMESPACE) + 1 :]
                if sample.labels:
                    labels = ",".join(f"{k}={v}" for k, v in sorted(sample.labels.items()))
                    key = f"{key}{{{labels}}}"
                data[key] = sample.value
        return data

    def render_latest(self) -> bytes:
        return generate_latest(self.registry)
