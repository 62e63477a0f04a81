"""
Processing counters for the filter engines.
"""

from dataclasses import dataclass

@dataclass
class ProcessingStats:
    """Running counters; block calls are timed, single samples only counted"""
    samples_processed: int = 0
    blocks_processed: int = 0
    total_block_time: float = 0.0

    def record_block(self, sample_count: int, elapsed: float) -> None:
        self.samples_processed += sample_count
        self.blocks_processed += 1
        self.total_block_time += elapsed

    def as_dict(self) -> dict:
        average_block_time = (
            self.total_block_time / self.blocks_processed
            if self.blocks_processed > 0 else 0.0
        )

        return {
            'samples_processed': self.samples_processed,
            'blocks_processed': self.blocks_processed,
            'average_block_time_ms': average_block_time * 1000,
            'total_block_time_ms': self.total_block_time * 1000,
        }
