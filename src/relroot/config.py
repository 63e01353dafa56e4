"""Configuration dataclass for corpus normalization."""

from dataclasses import dataclass
from pathlib import Path

CORPORA = ("abc", "rolling_stone", "tavern", "billboard")


@dataclass
class NormalizeConfig:
    """For reading one corpus and writing its normalized sequences."""

    corpus: str = "abc"

    # Paths
    data_raw: Path = Path("ABC/data")
    data_processed: Path = Path("relroot_data")

    # Pieces are independent; >1 normalizes them in a process pool.
    workers: int = 1
    # Also store each piece's raw chord texts next to the normalized tokens.
    keep_raw: bool = True

    @property
    def output_path(self) -> Path:
        """Path to the normalized sequences of this corpus."""
        return self.data_processed / f"{self.corpus}.json"

    @property
    def vocab_path(self) -> Path:
        """Path to this corpus's token vocabulary."""
        return self.data_processed / f"vocab_{self.corpus}.json"
