from .normalize import coerce_1d, normalize_counts, normalize_labels, normalize_samples, normalize_xy

__all__ = ["coerce_1d", "normalize_counts", "normalize_labels", "normalize_samples", "normalize_xy"]
