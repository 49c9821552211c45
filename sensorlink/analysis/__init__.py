from sensorlink.analysis.metrics import compute_metrics, load_events

__all__ = ["compute_metrics", "load_events"]
