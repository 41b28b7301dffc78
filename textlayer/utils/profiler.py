# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TextLayer Profiling

Optional cProfile instrumentation for a conversion job, enabled from the
command line with ``--profile``. Everything the profiler prints goes to
stderr, since stdout may be carrying an SVG document.

Usage:
    textlayer --profile document.pdf
    textlayer --profile --profile-output=run.prof document.pdf

    profiler = initialize_profiler("run.prof", enabled=True)
    with profiler.profile_context():
        convert()
    profiler.save_results()
    profiler.print_summary()
"""

from __future__ import annotations

import cProfile
import pstats
import sys
import time
from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager

# Modules worth a separate section in the reports
_TEXT_LAYER_MODULES = 'text_layer|page_trace|writer|sfnt_metrics'


class ProfilerBackend(ABC):
    """Collects timing data between start() and stop()."""

    def __init__(self, output_path: str | None = None) -> None:
        self.output_path = output_path

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @abstractmethod
    def save(self) -> None: ...


class CProfileBackend(ProfilerBackend):

    def __init__(self, output_path: str | None = None) -> None:
        super().__init__(output_path)
        self.profiler = cProfile.Profile()
        self.stats: pstats.Stats | None = None

    def start(self) -> None:
        self.profiler.enable()

    def stop(self) -> None:
        self.profiler.disable()
        self.stats = pstats.Stats(self.profiler, stream=sys.stderr)

    def save(self) -> None:
        """Dump the raw stats and write a text report beside them."""
        if self.stats is None or not self.output_path:
            return
        self.stats.dump_stats(self.output_path)

        base = self.output_path
        if base.endswith('.prof'):
            base = base[:-len('.prof')]
        with open(base + '_report.txt', 'w', encoding='utf-8') as report:
            stats = pstats.Stats(self.profiler, stream=report)
            report.write("TextLayer profiling report\n\n")
            report.write("By cumulative time (top 30)\n")
            stats.sort_stats('cumulative').print_stats(30)
            report.write("\nText layer modules\n")
            stats.print_stats(_TEXT_LAYER_MODULES)


class NoOpBackend(ProfilerBackend):

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def save(self) -> None:
        pass


class TextLayerProfiler:
    """Front end over a backend; a no-op unless enabled."""

    def __init__(self, output_path: str | None = None,
                 enabled: bool = False) -> None:
        self.output_path = output_path
        self.enabled = enabled
        backend_class = CProfileBackend if enabled else NoOpBackend
        self.backend: ProfilerBackend = backend_class(output_path)

    @contextmanager
    def profile_context(self) -> Generator[TextLayerProfiler, None, None]:
        self.backend.start()
        try:
            yield self
        finally:
            self.backend.stop()

    def save_results(self) -> None:
        if not self.enabled:
            return
        self.backend.save()
        if self.output_path:
            print(f"Profiling results saved to: {self.output_path}",
                  file=sys.stderr)

    def print_summary(self) -> None:
        stats = getattr(self.backend, 'stats', None)
        if not self.enabled or stats is None:
            return
        print("\nProfiler Summary:", file=sys.stderr)
        print(f"  function calls: {stats.total_calls:,}", file=sys.stderr)
        print(f"  total time:     {stats.total_tt:.3f} s", file=sys.stderr)
        stats.sort_stats('cumulative').print_stats(_TEXT_LAYER_MODULES, 5)


def initialize_profiler(output_path: str | None = None,
                        enabled: bool = False) -> TextLayerProfiler:
    return TextLayerProfiler(output_path=output_path, enabled=enabled)


def generate_default_output_path() -> str:
    """Timestamped ``.prof`` file name in the current directory."""
    return time.strftime("textlayer_profile_%Y%m%d_%H%M%S.prof")
