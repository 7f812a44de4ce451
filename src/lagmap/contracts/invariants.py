"""Formal pipeline invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "filter": [
        "Masks are boolean and aligned with the chunk length",
        "Filtering never reorders observations",
    ],

    "mapping": [
        "row/col are 1-D integer arrays aligned with the observations",
        "row = floor(row_scale * x0 + row_offset), col = floor(col_scale * x1 + col_offset)",
        "No clamping: out-of-range indices are legal output",
    ],

    "aggregation": [
        "sums has shape (nrow * ncol, K), counts has shape (nrow * ncol,)",
        "Cell q = row * ncol + col; only in-bounds observations contribute",
        "Sum of counts equals the number of in-bounds observations",
        "Zero-count cells have NaN means",
    ],

    "standardization": [
        "Count-weighted mean over populated cells is zero",
        "Count-weighted variance per feature over populated cells is one",
        "Zero scale yields NaN/Inf, never a substituted default",
    ],

    "heatmap": [
        "rate has shape (nrow * ncol,), values in [0, 1] or the sentinel",
        "Sentinel wherever denom <= min_count (strict > for a rate)",
        "hit + missed equals the number of observations",
    ],

    "local_probability": [
        "Stable ascending sort by score; NaN scores trail and propagate",
        "Output trimmed to N - 2w points, probabilities in [0, 1]",
        "Non-integer w, w < 1 or 2w >= N is a precondition violation",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "filter": "OPTIONAL",         # Only if filters are configured
    "mapping": "REQUIRED",
    "aggregation": "REQUIRED",
    "standardization": "REQUIRED",
    "heatmap": "REQUIRED",
    "local_probability": "OPTIONAL",  # Only if scores are configured
}
