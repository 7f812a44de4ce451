"""Analysis orchestrator.

Sets up logging from the runtime configuration, builds the processor for
the column layout of the first chunk, and runs it over all chunks.
"""

import itertools
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from lagmap.contracts import PreconditionViolation, require
from lagmap.pipeline.processor import GridAnalysisProcessor, AnalysisResult

if TYPE_CHECKING:
    from lagmap.schemas import InternalConfig

__all__ = ['AnalysisOrchestrator']

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """Entry point for one analysis run.

    Example usage::

        config = resolve_config(ParamConfig(), UserConfig(MIN_COUNT=20))
        orchestrator = AnalysisOrchestrator(config)
        result = orchestrator.run(chunks)
    """

    def __init__(self, config: "InternalConfig", configure_logging: bool = True):
        self.config = config
        self.processor: Optional[GridAnalysisProcessor] = None
        if configure_logging:
            self._setup_logging()

    def _setup_logging(self):
        """Configure the root logger with a console and optional file handler.

        Level and file come from ``config.logging``.
        """
        log_level = getattr(logging, self.config.logging.level, logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        log_file = self.config.logging.log_file
        if log_file is not None:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_path)
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)

        logger.info("Logging: level=%s, file=%s", self.config.logging.level, log_file)

    def run(self, chunks: Union[pd.DataFrame, np.ndarray, Iterable[pd.DataFrame]],
            columns: Optional[Sequence[str]] = None) -> AnalysisResult:
        """Analyze all chunks and return the result.

        Parameters
        ----------
        chunks : DataFrame or iterable of DataFrame or 2-D arrays
            Observation chunks sharing one column layout.
        columns : sequence of str, optional
            Column layout to resolve against. Defaults to the columns of
            the first chunk; required when the chunks are arrays.

        Raises
        ------
        PreconditionViolation
            If there are no chunks, or array chunks come without columns.
        """
        if isinstance(chunks, (pd.DataFrame, np.ndarray)):
            chunks = [chunks]
        chunks = iter(chunks)
        first = next(chunks, None)
        require(first is not None, "No chunks to analyze", PreconditionViolation)

        if columns is None:
            require(
                isinstance(first, pd.DataFrame),
                "columns must be given when chunks are not DataFrames",
                PreconditionViolation,
            )
            columns = list(first.columns)
        self.processor = GridAnalysisProcessor(self.config, columns)

        start = time.perf_counter()
        result = self.processor.process(itertools.chain([first], chunks))
        elapsed = time.perf_counter() - start

        populated = int(result.cell_stats.populated().sum())
        rated = int((~result.heatmap.insufficient()).sum())
        logger.info(
            "Analysis complete in %.2fs: %d/%d observations kept, %d populated cells, "
            "%d cells rated, %d probability curves",
            elapsed, result.n_kept, result.n_obs, populated, rated, len(result.curves),
        )
        return result
